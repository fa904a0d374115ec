from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable

from app.errors import (
    InvalidSymbolError,
    OverviewFetchFailed,
    QuoteFetchFailed,
    UpstreamFetchFailed,
)
from app.schemas.quote import QuoteRecord
from app.services.freshness import CACHE_TTL, is_fresh
from app.services.quote_aggregator import QuoteAggregator, utcnow
from app.services.quote_store import QuoteStore


@dataclass(frozen=True)
class SymbolResolution:
    symbol: str
    record: QuoteRecord | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def normalize_symbol(symbol: str | None) -> str:
    return str(symbol or "").strip().upper()


class CacheAsideResolver:
    """Read-through quote resolution: cache check, upstream fetch, merge, write-back.

    Cache errors fail open (treated as a miss on read, ignored on write).
    Upstream errors surface as UpstreamFetchFailed: raised from ``resolve_one``,
    confined to the symbol's slot in ``resolve_many``.
    """

    def __init__(
        self,
        *,
        quote_store: QuoteStore,
        market_data_client,
        aggregator: QuoteAggregator | None = None,
        ttl: timedelta = CACHE_TTL,
        clock: Callable[[], datetime] | None = None,
        max_workers: int = 8,
    ) -> None:
        self.quote_store = quote_store
        self.market_data_client = market_data_client
        self.aggregator = aggregator or QuoteAggregator()
        self.ttl = ttl
        self.clock = clock or utcnow
        self.max_workers = max_workers
        self._lock = threading.Lock()
        self._counters = {
            "cache_hits": 0,
            "cache_misses": 0,
            "cache_read_errors": 0,
            "cache_write_errors": 0,
            "upstream_calls": 0,
            "upstream_failures": 0,
        }
        self.last_batch_target = 0
        self.last_batch_success = 0
        self.last_batch_failed = 0

    def _inc(self, key: str, value: int = 1) -> None:
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + value

    @staticmethod
    def _require_symbol(symbol: str) -> str:
        value = normalize_symbol(symbol)
        if not value:
            raise InvalidSymbolError("symbol must be a non-empty string")
        return value

    def _read_cache(self, symbol: str) -> QuoteRecord | None:
        try:
            return self.quote_store.get(symbol)
        except Exception as exc:
            self._inc("cache_read_errors")
            print(f"[CACHE][cache_read_failed] symbol={symbol} error={exc}", flush=True)
            return None

    def _cached_if_fresh(self, symbol: str) -> QuoteRecord | None:
        cached = self._read_cache(symbol)
        if cached is not None and is_fresh(cached.last_updated, self.clock(), self.ttl):
            self._inc("cache_hits")
            return cached
        self._inc("cache_misses")
        return None

    def _write_back(self, record: QuoteRecord) -> None:
        try:
            self.quote_store.put(record)
        except Exception as exc:
            self._inc("cache_write_errors")
            print(f"[CACHE][cache_write_failed] symbol={record.symbol} error={exc}", flush=True)

    def _fetch(
        self,
        fetch: Callable[[str], dict],
        symbol: str,
        error_cls: type[UpstreamFetchFailed],
    ) -> dict:
        self._inc("upstream_calls")
        try:
            return fetch(symbol)
        except Exception as exc:
            self._inc("upstream_failures")
            failure = exc if isinstance(exc, UpstreamFetchFailed) else error_cls(symbol, str(exc))
            print(
                f"[UPSTREAM][upstream_fetch_failed] symbol={symbol} "
                f"kind={type(failure).__name__} reason={failure.reason}",
                flush=True,
            )
            if failure is exc:
                raise
            raise failure from exc

    def resolve_one(self, symbol: str) -> QuoteRecord:
        """Return a full record (quote + overview) for *symbol*.

        Raises:
            InvalidSymbolError: if *symbol* is blank.
            QuoteFetchFailed / OverviewFetchFailed: if either upstream call fails.
        """
        symbol = self._require_symbol(symbol)
        cached = self._cached_if_fresh(symbol)
        if cached is not None:
            return cached

        raw_quote = self._fetch(self.market_data_client.fetch_quote, symbol, QuoteFetchFailed)
        raw_overview = self._fetch(
            self.market_data_client.fetch_overview, symbol, OverviewFetchFailed
        )
        record = self.aggregator.merge(symbol, raw_quote, raw_overview, now=self.clock())
        self._write_back(record)
        return record

    def _resolve_partial(self, symbol: str) -> QuoteRecord:
        symbol = self._require_symbol(symbol)
        cached = self._cached_if_fresh(symbol)
        if cached is not None:
            return cached

        raw_quote = self._fetch(self.market_data_client.fetch_quote, symbol, QuoteFetchFailed)
        record = self.aggregator.merge(symbol, raw_quote, None, now=self.clock())
        self._write_back(record)
        return record

    def _resolve_slot(self, symbol: str) -> SymbolResolution:
        try:
            return SymbolResolution(symbol=symbol, record=self._resolve_partial(symbol))
        except (UpstreamFetchFailed, InvalidSymbolError) as exc:
            return SymbolResolution(symbol=symbol, error=exc)
        except Exception as exc:
            print(f"[QUOTE][batch_symbol_error] symbol={symbol} error={exc}", flush=True)
            return SymbolResolution(symbol=symbol, error=exc)

    @staticmethod
    def _unique_symbols(symbols: Iterable[str]) -> list[str]:
        unique_symbols: list[str] = []
        seen: set[str] = set()
        for symbol in symbols:
            value = normalize_symbol(symbol)
            if not value or value in seen:
                continue
            seen.add(value)
            unique_symbols.append(value)
        return unique_symbols

    def resolve_many(self, symbols: Iterable[str], dedupe: bool = False) -> list[SymbolResolution]:
        """Resolve quote-only records for *symbols*, one result per symbol in input order.

        Overview data is never fetched here; records produced on a miss are partial.
        """
        if dedupe:
            targets = self._unique_symbols(symbols)
        else:
            targets = [normalize_symbol(s) for s in symbols]
        if not targets:
            return []

        workers = max(1, min(self.max_workers, len(targets)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="quote-batch") as pool:
            results = list(pool.map(self._resolve_slot, targets))

        success_count = sum(1 for r in results if r.ok)
        with self._lock:
            self.last_batch_target = len(targets)
            self.last_batch_success = success_count
            self.last_batch_failed = len(targets) - success_count

        print(
            "[QUOTE][batch_resolve] "
            f"target_count={len(targets)} success_count={success_count} "
            f"failed_count={len(targets) - success_count} workers={workers}",
            flush=True,
        )
        return results

    def metrics(self) -> dict[str, int]:
        with self._lock:
            snapshot = {
                **self._counters,
                "batch_target_count": self.last_batch_target,
                "batch_success_count": self.last_batch_success,
                "batch_failed_count": self.last_batch_failed,
            }
        snapshot["merge_defaulted"] = self.aggregator.defaulted_count
        return snapshot
