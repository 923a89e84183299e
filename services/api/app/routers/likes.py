"""
Like endpoints:
  POST   /likes                       — like a system
  DELETE /likes                       — remove a like
  GET    /likes/users/{id}            — systems a user liked, newest like first
  GET    /likes/users/{id}/count      — how many systems a user liked
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from opentelemetry import trace
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import Like, Planet, StellarSystem, User
from app.pagination import build_pagination_meta
from app.schemas import (
    LikeCreatedResponse,
    LikeRecord,
    LikeRequest,
    LikedSystem,
    LikedSystemsResponse,
    MessageResponse,
    SystemSummary,
)
from app.telemetry import LIKE_EVENTS_TOTAL

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


async def _ensure_system_exists(db: AsyncSession, system_id: str) -> None:
    if not await db.get(StellarSystem, system_id):
        raise HTTPException(status_code=404, detail="System not found")


@router.post("", response_model=LikeCreatedResponse, status_code=status.HTTP_201_CREATED)
async def like_system(body: LikeRequest, db: AsyncSession = Depends(get_db)):
    """Like a system. A user can like a given system at most once."""
    with tracer.start_as_current_span("like_system") as span:
        span.set_attribute("like.user_id", body.user_id)
        span.set_attribute("like.system_id", body.system_id)

        if not await db.get(User, body.user_id):
            raise HTTPException(status_code=404, detail="User not found")
        await _ensure_system_exists(db, body.system_id)

        existing = await db.execute(
            select(Like).where(Like.user_id == body.user_id, Like.system_id == body.system_id)
        )
        if existing.scalar_one_or_none():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already liked")

        like = Like(user_id=body.user_id, system_id=body.system_id)
        db.add(like)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent like from the same user
            await db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already liked")

        LIKE_EVENTS_TOTAL.labels(action="like").inc()
        logger.info("%s liked system %s", body.user_id, body.system_id)
        return LikeCreatedResponse(
            message="Like created",
            like=LikeRecord.model_validate(like),
        )


@router.delete("", response_model=MessageResponse)
async def unlike_system(body: LikeRequest, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("unlike_system"):
        await _ensure_system_exists(db, body.system_id)

        result = await db.execute(
            delete(Like).where(Like.user_id == body.user_id, Like.system_id == body.system_id)
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Like not found")

        LIKE_EVENTS_TOTAL.labels(action="unlike").inc()
        logger.info("%s unliked system %s", body.user_id, body.system_id)
        return MessageResponse(message="Like removed")


@router.get("/users/{user_id}", response_model=LikedSystemsResponse)
async def list_liked_systems(
    user_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    planet_count = (
        select(func.count(Planet.id))
        .where(Planet.system_id == StellarSystem.id)
        .correlate(StellarSystem)
        .scalar_subquery()
    )
    rows = await db.execute(
        select(StellarSystem, Like.created_at.label("liked_at"), planet_count.label("planet_count"))
        .join(Like, Like.system_id == StellarSystem.id)
        .where(Like.user_id == user_id)
        .order_by(Like.created_at.desc(), StellarSystem.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    total = await db.scalar(select(func.count()).select_from(Like).where(Like.user_id == user_id))

    data = [
        LikedSystem(
            system=SystemSummary.model_validate(row.StellarSystem),
            planet_count=row.planet_count or 0,
            liked_at=row.liked_at,
        )
        for row in rows.all()
    ]
    return LikedSystemsResponse(data=data, meta=build_pagination_meta(total or 0, page, limit))


@router.get("/users/{user_id}/count", response_model=int)
async def count_liked_systems(user_id: str, db: AsyncSession = Depends(get_db)):
    total = await db.scalar(select(func.count()).select_from(Like).where(Like.user_id == user_id))
    return total or 0
