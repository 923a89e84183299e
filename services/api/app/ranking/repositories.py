"""
Read-only store access for the like ranking engine.

Every query here is bounded: a page of at most ``limit`` rows, a batch
keyed by at most ``limit`` ids, or a single COUNT. Store failures surface
as UpstreamUnavailable; nothing is retried here.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Like, Planet, StellarSystem
from app.ranking.errors import UpstreamUnavailable
from app.ranking.types import Candidate, SystemSummary
from app.ranking.window import TimeWindow

logger = logging.getLogger(__name__)


def _to_storage(ts: datetime) -> datetime:
    """Columns hold naive UTC."""
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def _window_clauses(window: Optional[TimeWindow]) -> list:
    if window is None or not window.bounded:
        return []
    clauses = [Like.created_at >= _to_storage(window.start)]
    if window.end is not None:
        clauses.append(Like.created_at <= _to_storage(window.end))
    return clauses


class _Repository:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def _execute(self, stmt):
        try:
            return await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.warning("Ranking store query failed: %s", exc)
            raise UpstreamUnavailable("Like ranking store is unavailable") from exc


class SystemRepository(_Repository):
    async def count(self) -> int:
        result = await self._execute(select(func.count()).select_from(StellarSystem))
        return int(result.scalar_one())

    async def list_ranked(
        self, window: Optional[TimeWindow], offset: int, limit: int
    ) -> list[Candidate]:
        """
        One page of systems by like count inside ``window``, zero counts included.

        The window predicate sits in the LEFT JOIN condition; in a WHERE clause
        it would turn the join back into an inner one and drop unliked systems.
        """
        like_count = func.count(Like.user_id).label("like_count")
        join_on = and_(Like.system_id == StellarSystem.id, *_window_clauses(window))
        stmt = (
            select(StellarSystem.id, like_count)
            .outerjoin(Like, join_on)
            .group_by(StellarSystem.id, StellarSystem.created_at)
            .order_by(
                like_count.desc(),
                StellarSystem.created_at.desc(),
                StellarSystem.id.asc(),
            )
            .offset(offset)
            .limit(limit)
        )
        rows = await self._execute(stmt)
        return [Candidate(system_id=r.id, like_count=int(r.like_count)) for r in rows.all()]

    async def list_ids_stable(self, offset: int, limit: int) -> list[str]:
        """``limit`` ids starting at ``offset`` in creation order."""
        stmt = (
            select(StellarSystem.id)
            .order_by(StellarSystem.created_at.asc(), StellarSystem.id.asc())
            .offset(offset)
            .limit(limit)
        )
        rows = await self._execute(stmt)
        return list(rows.scalars().all())

    async def list_all_ids(self) -> list[str]:
        stmt = select(StellarSystem.id).order_by(
            StellarSystem.created_at.asc(), StellarSystem.id.asc()
        )
        rows = await self._execute(stmt)
        return list(rows.scalars().all())

    async def get_summaries(self, system_ids: Iterable[str]) -> dict[str, SystemSummary]:
        ids = list(system_ids)
        if not ids:
            return {}

        planet_count = (
            select(func.count(Planet.id))
            .where(Planet.system_id == StellarSystem.id)
            .correlate(StellarSystem)
            .scalar_subquery()
        )
        stmt = select(
            StellarSystem.id,
            StellarSystem.title,
            StellarSystem.galaxy_id,
            StellarSystem.owner_id,
            StellarSystem.created_at,
            StellarSystem.updated_at,
            planet_count.label("planet_count"),
        ).where(StellarSystem.id.in_(ids))

        rows = await self._execute(stmt)
        return {
            r.id: SystemSummary(
                id=r.id,
                title=r.title,
                galaxy_id=r.galaxy_id,
                owner_id=r.owner_id,
                created_at=r.created_at,
                updated_at=r.updated_at,
                planet_count=int(r.planet_count or 0),
            )
            for r in rows.all()
        }


class LikeRepository(_Repository):
    async def counts_by_system(
        self, system_ids: Iterable[str], window: Optional[TimeWindow] = None
    ) -> dict[str, int]:
        """Like counts for ``system_ids``; systems without likes are absent."""
        ids = list(system_ids)
        if not ids:
            return {}
        stmt = (
            select(Like.system_id, func.count().label("like_count"))
            .where(Like.system_id.in_(ids), *_window_clauses(window))
            .group_by(Like.system_id)
        )
        rows = await self._execute(stmt)
        return {r.system_id: int(r.like_count) for r in rows.all()}

    async def find_liked_system_ids(
        self, viewer_id: str, system_ids: Iterable[str]
    ) -> set[str]:
        ids = list(system_ids)
        if not ids:
            return set()
        stmt = select(Like.system_id).where(
            Like.user_id == viewer_id, Like.system_id.in_(ids)
        )
        rows = await self._execute(stmt)
        return set(rows.scalars().all())
