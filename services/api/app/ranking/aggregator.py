"""Windowed like counts per system, ordered for stable pagination."""
from typing import Optional

from app.ranking.repositories import SystemRepository
from app.ranking.types import Candidate
from app.ranking.window import TimeWindow


class CountAggregator:
    """
    Ranks every system by the number of likes it received inside a window.

    Ordering is total so that pages never overlap or skip between requests
    over an unchanged data set:

      like_count DESC → created_at DESC (newer first on ties) → id ASC
    """

    def __init__(self, systems: SystemRepository) -> None:
        self._systems = systems

    async def aggregate(
        self, window: Optional[TimeWindow], offset: int, limit: int
    ) -> tuple[list[Candidate], int]:
        """Return `limit` candidates from `offset` and the size of the ranked population."""
        total = await self._systems.count()
        if total == 0:
            return [], 0
        if offset >= total:
            return [], total

        candidates = await self._systems.list_ranked(window, offset=offset, limit=limit)
        return candidates, total
