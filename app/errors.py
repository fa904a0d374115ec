from __future__ import annotations


class UpstreamFetchFailed(Exception):
    """Quote or overview data could not be fetched for a symbol."""

    def __init__(self, symbol: str, reason: str = "") -> None:
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"{symbol}: {reason}" if reason else symbol)


class QuoteFetchFailed(UpstreamFetchFailed):
    pass


class OverviewFetchFailed(UpstreamFetchFailed):
    pass


class CacheReadFailed(Exception):
    pass


class CacheWriteFailed(Exception):
    pass


class InvalidSymbolError(ValueError):
    pass


class InvalidTokenError(ValueError):
    pass
