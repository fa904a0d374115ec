from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from app.errors import OverviewFetchFailed, QuoteFetchFailed, UpstreamFetchFailed


class AlphaVantageClient:
    """Alpha Vantage quote and company overview client. One request per call, no retries."""

    _BASE_URL = "https://www.alphavantage.co"
    # provider answers HTTP 200 with one of these keys instead of data
    _ERROR_KEYS = ("Error Message", "Information", "Note")

    def __init__(
        self,
        api_key: str,
        *,
        session: Optional[Any] = None,
        base_url: Optional[str] = None,
        timeout_sec: float = 5.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = (base_url or self._BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout_sec = timeout_sec

    def _query(
        self,
        function: str,
        symbol: str,
        error_cls: type[UpstreamFetchFailed],
    ) -> Dict[str, Any]:
        try:
            response = self.session.get(
                f"{self.base_url}/query",
                params={"function": function, "symbol": symbol, "apikey": self.api_key},
                timeout=self.timeout_sec,
            )
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, OSError, ValueError) as exc:
            raise error_cls(symbol, f"{function} request failed: {exc}") from exc

        if not isinstance(payload, dict):
            raise error_cls(symbol, f"{function} returned a non-object payload")

        for key in self._ERROR_KEYS:
            if payload.get(key):
                raise error_cls(symbol, f"{function} provider error: {payload[key]}")
        return payload

    def fetch_quote(self, symbol: str) -> Dict[str, Any]:
        payload = self._query("GLOBAL_QUOTE", symbol, QuoteFetchFailed)
        quote = payload.get("Global Quote")
        if not isinstance(quote, dict) or not quote:
            raise QuoteFetchFailed(symbol, "missing Global Quote section")
        if "05. price" not in quote:
            raise QuoteFetchFailed(symbol, "missing price field")
        return quote

    def fetch_overview(self, symbol: str) -> Dict[str, Any]:
        payload = self._query("OVERVIEW", symbol, OverviewFetchFailed)
        if not payload:
            raise OverviewFetchFailed(symbol, "empty overview payload")
        return payload
