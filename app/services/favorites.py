from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable

from app.errors import InvalidSymbolError
from app.schemas.favorite import Favorite
from app.services.quote_aggregator import utcnow


class FavoriteStore(ABC):
    @abstractmethod
    def list_by_user(self, user_id: str) -> list[Favorite]: ...

    @abstractmethod
    def add(self, favorite: Favorite) -> None: ...

    @abstractmethod
    def remove(self, user_id: str, symbol: str) -> None: ...


class InMemoryFavoriteStore(FavoriteStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[tuple[str, str], Favorite] = {}

    def list_by_user(self, user_id: str) -> list[Favorite]:
        with self._lock:
            rows = [f for (uid, _), f in self._rows.items() if uid == user_id]
        return sorted(rows, key=lambda f: f.symbol)

    def add(self, favorite: Favorite) -> None:
        with self._lock:
            self._rows[(favorite.user_id, favorite.symbol)] = favorite

    def remove(self, user_id: str, symbol: str) -> None:
        with self._lock:
            self._rows.pop((user_id, symbol), None)


class FavoritesService:
    """Favorite symbols per principal. Re-adding a symbol overwrites the previous entry."""

    def __init__(
        self,
        favorite_store: FavoriteStore,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.favorite_store = favorite_store
        self.clock = clock or utcnow

    @staticmethod
    def _require_symbol(symbol: str | None) -> str:
        value = (symbol or "").strip().upper()
        if not value:
            raise InvalidSymbolError("Symbol is required")
        return value

    def list_favorites(self, user_id: str) -> list[Favorite]:
        return self.favorite_store.list_by_user(user_id)

    def add_favorite(self, user_id: str, symbol: str | None, company_name: str | None = None) -> Favorite:
        favorite = Favorite(
            user_id=user_id,
            symbol=self._require_symbol(symbol),
            company_name=company_name or "",
            created_at=self.clock(),
        )
        self.favorite_store.add(favorite)
        print(f"[FAVORITES][favorite_added] user={user_id} symbol={favorite.symbol}", flush=True)
        return favorite

    def remove_favorite(self, user_id: str, symbol: str | None) -> None:
        value = self._require_symbol(symbol)
        self.favorite_store.remove(user_id, value)
        print(f"[FAVORITES][favorite_removed] user={user_id} symbol={value}", flush=True)
