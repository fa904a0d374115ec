from __future__ import annotations

from datetime import datetime, timedelta

CACHE_TTL = timedelta(minutes=15)


def is_fresh(last_updated: datetime, now: datetime, ttl: timedelta = CACHE_TTL) -> bool:
    """Return whether a record produced at ``last_updated`` may still be served at ``now``.

    A ``last_updated`` ahead of ``now`` (clock skew) yields a negative age and counts as fresh.
    """
    return now - last_updated < ttl
