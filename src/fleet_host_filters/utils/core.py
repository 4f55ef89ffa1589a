"""Time helpers shared by the query cache."""
import time
from typing import Optional


def epoch_now() -> float:
    return time.time()


def is_stale(fetched_at: Optional[float], stale_time: float, now: Optional[float] = None) -> bool:
    """Whether a result fetched at ``fetched_at`` is older than ``stale_time`` seconds.

    A result with no fetch time is always stale.
    """
    if fetched_at is None:
        return True
    if now is None:
        now = epoch_now()
    return now - fetched_at > stale_time
