"""Validation of incoming ranking requests."""
import logging
from dataclasses import dataclass
from typing import Optional, Union

from app.ranking.errors import InvalidRankingQuery
from app.ranking.window import RankType

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


@dataclass(frozen=True)
class RankingQuery:
    rank_type: RankType
    page: int = 1
    limit: int = DEFAULT_LIMIT
    viewer_id: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def build_ranking_query(
    rank_type: Union[RankType, str],
    page: Optional[int] = None,
    limit: Optional[int] = None,
    viewer_id: Optional[str] = None,
    default_limit: int = DEFAULT_LIMIT,
    max_limit: int = MAX_LIMIT,
) -> RankingQuery:
    """
    Build a RankingQuery, rejecting what can't be ranked.

    page < 1, limit < 1 and unknown rank types raise InvalidRankingQuery.
    A limit above ``max_limit`` is clamped to ``max_limit``: the caller
    still gets the top of the same ordering, just a shorter page.
    """
    try:
        rank_type = RankType(rank_type)
    except ValueError:
        allowed = ", ".join(t.value for t in RankType)
        raise InvalidRankingQuery(
            f"Unknown rank type {rank_type!r} (expected one of: {allowed})"
        ) from None

    page = 1 if page is None else page
    limit = default_limit if limit is None else limit

    if page < 1:
        raise InvalidRankingQuery(f"page must be >= 1, got {page}")
    if limit < 1:
        raise InvalidRankingQuery(f"limit must be >= 1, got {limit}")
    if limit > max_limit:
        logger.warning("Clamping ranking limit %d to %d", limit, max_limit)
        limit = max_limit

    return RankingQuery(
        rank_type=rank_type,
        page=page,
        limit=limit,
        viewer_id=viewer_id or None,
    )
