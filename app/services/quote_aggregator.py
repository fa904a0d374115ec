from __future__ import annotations

import threading
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from app.schemas.quote import QuoteRecord, RawOverview, RawQuote

_ZERO = Decimal(0)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not parsed.is_finite():
        return None
    return parsed


def _text(value: Any, default: str = "") -> str:
    if _is_blank(value):
        return default
    return str(value)


def _parse_payload(model: type, payload: Any):
    if isinstance(payload, model):
        return payload
    if isinstance(payload, Mapping):
        return model.model_validate(dict(payload))
    return model()


class QuoteAggregator:
    """Merge raw quote and overview payloads into a normalized QuoteRecord.

    Data-shape problems never fail a merge: unusable numeric values fall back to 0
    and missing text falls back to its empty default. A present but unparseable
    numeric value is logged as ``merge_defaulted`` and counted in
    ``defaulted_count``.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self.clock = clock or utcnow
        self.defaulted_count = 0
        self._lock = threading.Lock()

    def _numeric(self, symbol: str, field_name: str, value: Any) -> Decimal:
        if _is_blank(value):
            return _ZERO
        parsed = _to_decimal(value)
        if parsed is None:
            with self._lock:
                self.defaulted_count += 1
            print(
                f"[QUOTE][merge_defaulted] symbol={symbol} field={field_name} value={value!r}",
                flush=True,
            )
            return _ZERO
        return parsed

    def merge(
        self,
        symbol: str,
        raw_quote: Mapping | RawQuote | None,
        raw_overview: Mapping | RawOverview | None = None,
        *,
        now: datetime | None = None,
    ) -> QuoteRecord:
        quote = _parse_payload(RawQuote, raw_quote)
        fields: dict[str, Any] = {
            "symbol": symbol,
            "price": self._numeric(symbol, "price", quote.price),
            "change": self._numeric(symbol, "change", quote.change),
            "change_percent": _text(quote.change_percent, "0%"),
            "last_updated": now or self.clock(),
        }

        if raw_overview is not None:
            overview = _parse_payload(RawOverview, raw_overview)
            fields.update(
                company_name=_text(overview.name),
                industry=_text(overview.industry),
                description=_text(overview.description),
                pe_ratio=self._numeric(symbol, "peRatio", overview.pe_ratio),
                market_cap=_text(overview.market_cap, "0"),
            )

        return QuoteRecord(**fields)
