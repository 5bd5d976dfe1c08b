"""Date manipulation utilities"""

from datetime import datetime
from typing import Callable, Iterable, List, Optional, TypeVar

T = TypeVar("T")

SECONDS_PER_DAY = 24 * 60 * 60


def newest_first(items: Iterable[T], timestamp_of: Callable[[T], datetime], limit: Optional[int] = None) -> List[T]:
    """Order items by timestamp, newest first, keeping input order for equal timestamps"""
    ordered = sorted(items, key=timestamp_of, reverse=True)
    return ordered if limit is None else ordered[:limit]


def days_between(start: datetime, end: datetime) -> float:
    """Fractional days from start to end (negative if end is earlier)"""
    return (end - start).total_seconds() / SECONDS_PER_DAY
