"""
Like leaderboard endpoints (anonymous callers allowed):
  GET /likes/rankings      — week | month | year | total | random
  GET /likes/rankings/top  — all-time leaderboard
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.pagination import build_pagination_meta
from app.ranking.errors import InvalidRankingQuery, UpstreamUnavailable
from app.ranking.query import build_ranking_query
from app.ranking.service import RankingService
from app.ranking.types import RankingPage
from app.ranking.window import RankType
from app.schemas import RankedSystem, RankingResponse, SystemSummary
from app.telemetry import RANKING_REQUESTS_TOTAL

logger = logging.getLogger(__name__)
router = APIRouter()


def get_ranking_service(db: AsyncSession = Depends(get_db)) -> RankingService:
    return RankingService.from_settings(db, settings)


def _build_ranking_response(rank_type: RankType, page: RankingPage) -> RankingResponse:
    data = [
        RankedSystem(
            system=SystemSummary(
                id=e.system.id,
                title=e.system.title,
                galaxy_id=e.system.galaxy_id,
                owner_id=e.system.owner_id,
                created_at=e.system.created_at,
                updated_at=e.system.updated_at,
            ),
            planet_count=e.system.planet_count,
            like_count=e.like_count,
            rank=e.rank,
            is_liked=e.is_liked,
        )
        for e in page.entries
    ]
    return RankingResponse(
        rank_type=rank_type.value,
        data=data,
        meta=build_pagination_meta(page.meta.total, page.meta.page, page.meta.limit),
    )


async def _rank(
    service: RankingService,
    rank_type: str,
    page: int,
    limit: int,
    viewer_id: Optional[str],
) -> RankingResponse:
    try:
        query = build_ranking_query(
            rank_type,
            page=page,
            limit=limit,
            viewer_id=viewer_id,
            default_limit=settings.ranking_default_limit,
            max_limit=settings.ranking_max_limit,
        )
    except InvalidRankingQuery as exc:
        label = rank_type if rank_type in {t.value for t in RankType} else "unknown"
        RANKING_REQUESTS_TOTAL.labels(rank_type=label, status="invalid").inc()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    try:
        ranking = await service.rank(query)
    except InvalidRankingQuery as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except UpstreamUnavailable as exc:
        logger.warning("Ranking %s failed: %s", query.rank_type.value, exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Rankings are temporarily unavailable",
        )

    return _build_ranking_response(query.rank_type, ranking)


@router.get("/rankings", response_model=RankingResponse, response_model_exclude_none=True)
async def get_like_rankings(
    rank_type: str = Query(RankType.WEEK.value, description="week | month | year | total | random"),
    page: int = Query(1, description="1-based page number"),
    limit: int = Query(settings.ranking_default_limit, description="Page size (max 100)"),
    viewer_id: Optional[str] = Query(None, description="Annotates is_liked for this user"),
    service: RankingService = Depends(get_ranking_service),
):
    """
    Like leaderboard over a calendar window in the configured civil timezone.

    `random` returns a random selection of systems with lifetime like counts;
    its rank is the position within the returned page only.
    """
    return await _rank(service, rank_type, page, limit, viewer_id)


@router.get("/rankings/top", response_model=RankingResponse, response_model_exclude_none=True)
async def get_top_liked(
    page: int = Query(1),
    limit: int = Query(settings.ranking_default_limit),
    viewer_id: Optional[str] = Query(None),
    service: RankingService = Depends(get_ranking_service),
):
    return await _rank(service, RankType.TOTAL.value, page, limit, viewer_id)
