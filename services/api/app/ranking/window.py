"""
Calendar windows for like rankings.

"This week" means the civil week of the audience (KST by default), not the
UTC week, so boundaries are cut in the civil zone and handed back in UTC,
which is what the likes table stores.

  week   │ Monday 00:00 (ISO week, Sunday = 7)  → now
  month  │ 1st of the month 00:00               → now
  year   │ January 1st 00:00                    → now
  total  │ unbounded
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Optional
from zoneinfo import ZoneInfo

from app.ranking.errors import InvalidRankingQuery

KST = ZoneInfo("Asia/Seoul")


class RankType(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    TOTAL = "total"
    RANDOM = "random"


@dataclass(frozen=True)
class TimeWindow:
    """Like-edge filter. ``start`` and ``end`` are UTC; ``end`` is inclusive."""

    rank_type: RankType
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def bounded(self) -> bool:
        return self.start is not None


def resolve_window(rank_type: RankType, now: datetime, tz: tzinfo = KST) -> TimeWindow:
    """
    Resolve a calendar rank type into a UTC window ending at ``now``.

    ``now`` is required so callers (and tests) pin the boundaries; a naive
    ``now`` is taken to be UTC.
    """
    if rank_type is RankType.TOTAL:
        return TimeWindow(rank_type)
    if rank_type is RankType.RANDOM:
        raise InvalidRankingQuery("random rankings have no time window")

    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local_now = now.astimezone(tz)
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)

    if rank_type is RankType.WEEK:
        start = midnight - timedelta(days=local_now.isoweekday() - 1)
    elif rank_type is RankType.MONTH:
        start = midnight.replace(day=1)
    elif rank_type is RankType.YEAR:
        start = midnight.replace(month=1, day=1)
    else:
        raise InvalidRankingQuery(f"Unknown rank type: {rank_type!r}")

    return TimeWindow(
        rank_type,
        start=start.astimezone(timezone.utc),
        end=now.astimezone(timezone.utc),
    )
