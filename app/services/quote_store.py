from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from app.schemas.quote import QuoteRecord


class QuoteStore(ABC):
    """Per-symbol record persistence. Implementations raise CacheReadFailed / CacheWriteFailed."""

    @abstractmethod
    def get(self, symbol: str) -> QuoteRecord | None: ...

    @abstractmethod
    def put(self, record: QuoteRecord) -> None: ...


class InMemoryQuoteStore(QuoteStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: dict[str, QuoteRecord] = {}

    def get(self, symbol: str) -> QuoteRecord | None:
        with self._lock:
            return self._rows.get(symbol)

    def put(self, record: QuoteRecord) -> None:
        with self._lock:
            self._rows[record.symbol] = record

    def list_all(self) -> list[QuoteRecord]:
        with self._lock:
            return list(self._rows.values())
