from fastapi import APIRouter, Depends, HTTPException, Request

from app.api.auth import get_current_principal
from app.errors import InvalidSymbolError, UpstreamFetchFailed
from app.schemas.favorite import FavoriteRequest
from app.services.quote_resolver import SymbolResolution

router = APIRouter(dependencies=[Depends(get_current_principal)])


def _batch_body(results: list[SymbolResolution]) -> dict:
    return {
        'stocks': [r.record.model_dump(mode='json', by_alias=True) for r in results if r.ok],
        'failed_symbols': [r.symbol for r in results if not r.ok],
    }


@router.get('/stocks')
def list_popular_stocks(request: Request):
    resolver = request.app.state.quote_resolver
    results = resolver.resolve_many(request.app.state.popular_symbols)
    return _batch_body(results)


@router.get('/stocks/{symbol}')
def get_stock(symbol: str, request: Request):
    resolver = request.app.state.quote_resolver
    try:
        record = resolver.resolve_one(symbol)
    except InvalidSymbolError as exc:
        raise HTTPException(status_code=400, detail='Symbol is required') from exc
    except UpstreamFetchFailed as exc:
        # unknown symbol and unavailable provider are reported the same way
        raise HTTPException(
            status_code=404,
            detail=f'Stock data for {symbol.strip().upper()} not found',
        ) from exc
    return record.model_dump(mode='json', by_alias=True)


@router.get('/quotes')
def get_quotes(symbols: str, request: Request):
    resolver = request.app.state.quote_resolver
    req = [s.strip() for s in symbols.split(',') if s.strip()]
    if not req:
        raise HTTPException(status_code=400, detail='Symbol is required')
    return _batch_body(resolver.resolve_many(req, dedupe=True))


@router.get('/favorites')
def list_favorites(request: Request, principal: str = Depends(get_current_principal)):
    favorites = request.app.state.favorites_service.list_favorites(principal)
    return {'favorites': [f.model_dump(mode='json', by_alias=True) for f in favorites]}


@router.post('/favorites', status_code=201)
def add_favorite(
    body: FavoriteRequest,
    request: Request,
    principal: str = Depends(get_current_principal),
):
    service = request.app.state.favorites_service
    try:
        service.add_favorite(principal, body.symbol, body.company_name)
    except InvalidSymbolError as exc:
        raise HTTPException(status_code=400, detail='Symbol is required') from exc
    return {'message': 'Favorite added successfully'}


@router.delete('/favorites/{symbol}')
def remove_favorite(symbol: str, request: Request, principal: str = Depends(get_current_principal)):
    service = request.app.state.favorites_service
    try:
        service.remove_favorite(principal, symbol)
    except InvalidSymbolError as exc:
        raise HTTPException(status_code=400, detail='Symbol is required') from exc
    return {'message': 'Favorite removed successfully'}


@router.get('/metrics/quote')
def quote_metrics(request: Request):
    return request.app.state.quote_resolver.metrics()
