from __future__ import annotations

from datetime import timedelta

from fastapi import FastAPI

from app.api.routes import router
from app.config.settings import Settings, get_settings
from app.integrations.alpha_vantage import AlphaVantageClient
from app.integrations.cognito import CognitoTokenValidator
from app.integrations.dynamodb import DynamoFavoriteStore, DynamoQuoteStore
from app.services.favorites import FavoritesService, InMemoryFavoriteStore
from app.services.quote_resolver import CacheAsideResolver
from app.services.quote_store import InMemoryQuoteStore


def _bind_runtime_clients(app: FastAPI, settings: Settings) -> None:
    """Wire stores, upstream client and token validator onto ``app.state``.

    Empty table names select the in-memory stores; an unset Cognito pool leaves
    the API without a token validator (authenticated routes answer 503).
    """
    if settings.STOCKS_TABLE:
        quote_store = DynamoQuoteStore(settings.STOCKS_TABLE, region=settings.AWS_REGION)
    else:
        quote_store = InMemoryQuoteStore()

    if settings.USER_FAVORITES_TABLE:
        favorite_store = DynamoFavoriteStore(settings.USER_FAVORITES_TABLE, region=settings.AWS_REGION)
    else:
        favorite_store = InMemoryFavoriteStore()

    market_data_client = AlphaVantageClient(
        settings.ALPHA_VANTAGE_API_KEY,
        base_url=settings.ALPHA_VANTAGE_BASE_URL,
        timeout_sec=settings.UPSTREAM_TIMEOUT_SEC,
    )

    app.state.quote_resolver = CacheAsideResolver(
        quote_store=quote_store,
        market_data_client=market_data_client,
        ttl=timedelta(seconds=settings.CACHE_TTL_SEC),
        max_workers=settings.BATCH_MAX_WORKERS,
    )
    app.state.favorites_service = FavoritesService(favorite_store)
    app.state.popular_symbols = list(settings.POPULAR_SYMBOLS)

    if settings.COGNITO_USER_POOL_ID and settings.COGNITO_CLIENT_ID:
        app.state.token_validator = CognitoTokenValidator(
            user_pool_id=settings.COGNITO_USER_POOL_ID,
            client_id=settings.COGNITO_CLIENT_ID,
            region=settings.AWS_REGION,
        )
    else:
        app.state.token_validator = None


app = FastAPI(title="Stock Quote Service", version="0.1.0")
app.include_router(router, prefix="/v1")

_bind_runtime_clients(app, get_settings())


@app.get("/health")
def health():
    return {"status": "ok"}
