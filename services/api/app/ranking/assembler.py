"""Turns ranked candidates into a RankingPage."""
import logging
from typing import Mapping, Optional, Sequence

from app.ranking.query import RankingQuery
from app.ranking.types import Candidate, PageMeta, RankingEntry, RankingPage, SystemSummary
from app.ranking.window import RankType
from app.telemetry import RANKING_STALE_ENTRIES_TOTAL

logger = logging.getLogger(__name__)


class PageAssembler:
    """
    Joins candidates with system metadata and viewer flags.

    ``anonymous_liked`` is what ``is_liked`` becomes when nobody is looking:
    False to always fill the flag, None to leave it out.

    A random page is always a single page of its own: ranks run 1..n over
    what was returned and the meta reports page 1 whatever was requested.
    """

    def __init__(self, anonymous_liked: Optional[bool] = False) -> None:
        self._anonymous_liked = anonymous_liked

    def assemble(
        self,
        candidates: Sequence[Candidate],
        population_total: int,
        query: RankingQuery,
        summaries: Mapping[str, SystemSummary],
        viewer_flags: Optional[Mapping[str, bool]] = None,
    ) -> RankingPage:
        random_mode = query.rank_type is RankType.RANDOM
        entries: list[RankingEntry] = []

        for idx, candidate in enumerate(candidates):
            summary = summaries.get(candidate.system_id)
            if summary is None:
                # Deleted between aggregation and metadata fetch
                RANKING_STALE_ENTRIES_TOTAL.inc()
                logger.debug("Dropping vanished system %s from ranking", candidate.system_id)
                continue

            if random_mode:
                rank = len(entries) + 1
            else:
                rank = query.offset + idx + 1

            if viewer_flags is None:
                is_liked = self._anonymous_liked
            else:
                is_liked = viewer_flags.get(candidate.system_id, False)

            entries.append(
                RankingEntry(
                    system=summary,
                    like_count=candidate.like_count,
                    rank=rank,
                    is_liked=is_liked,
                )
            )

        if random_mode:
            meta = PageMeta(page=1, limit=query.limit, total=len(entries))
        else:
            meta = PageMeta(page=query.page, limit=query.limit, total=population_total)
        return RankingPage(entries=entries, meta=meta)
