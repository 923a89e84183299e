"""
Like ranking façade — one call per GET /likes/rankings.

Stages run strictly in order, each in its own span:

  Stage 1 │ Resolve window     rank type + now → UTC [start, now]
  Stage 2 │ Aggregate / sample windowed page + population, or random sample
  Stage 3 │ Fetch metadata     one batch query for the page's systems
  Stage 4 │ Annotate           one batch query for the viewer's likes
  Stage 5 │ Assemble           ranks, stale-entry drop, pagination meta

Any exception before Stage 5 completes aborts the request; no partial page
is ever returned. Nothing is cached between requests.
"""
import logging
import random
import time
from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.ranking.aggregator import CountAggregator
from app.ranking.annotator import ViewerAnnotator
from app.ranking.assembler import PageAssembler
from app.ranking.errors import InvalidRankingQuery, UpstreamUnavailable
from app.ranking.query import RankingQuery
from app.ranking.repositories import LikeRepository, SystemRepository
from app.ranking.sampler import DEFAULT_SHUFFLE_THRESHOLD, RandomSampler
from app.ranking.types import RankingPage
from app.ranking.window import KST, RankType, resolve_window
from app.telemetry import RANKING_LATENCY, RANKING_REQUESTS_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RankingService:
    def __init__(
        self,
        db: AsyncSession,
        tz: tzinfo = KST,
        clock: Callable[[], datetime] = _utcnow,
        rng: Optional[random.Random] = None,
        shuffle_threshold: int = DEFAULT_SHUFFLE_THRESHOLD,
        anonymous_liked: Optional[bool] = False,
    ) -> None:
        systems = SystemRepository(db)
        likes = LikeRepository(db)
        self._tz = tz
        self._clock = clock
        self._systems = systems
        self._aggregator = CountAggregator(systems)
        self._sampler = RandomSampler(systems, likes, rng=rng, shuffle_threshold=shuffle_threshold)
        self._annotator = ViewerAnnotator(likes)
        self._assembler = PageAssembler(anonymous_liked=anonymous_liked)

    @classmethod
    def from_settings(cls, db: AsyncSession, settings: Settings) -> "RankingService":
        return cls(
            db,
            tz=ZoneInfo(settings.ranking_timezone),
            shuffle_threshold=settings.ranking_random_shuffle_threshold,
            anonymous_liked=None if settings.ranking_anonymous_liked == "omit" else False,
        )

    async def rank(self, query: RankingQuery) -> RankingPage:
        t0 = time.perf_counter()
        rank_type = query.rank_type.value

        with tracer.start_as_current_span("rank_systems") as span:
            span.set_attribute("ranking.rank_type", rank_type)
            span.set_attribute("ranking.page", query.page)
            span.set_attribute("ranking.limit", query.limit)
            span.set_attribute("ranking.has_viewer", query.viewer_id is not None)

            try:
                page = await self._run(query)
            except InvalidRankingQuery:
                RANKING_REQUESTS_TOTAL.labels(rank_type=rank_type, status="invalid").inc()
                raise
            except UpstreamUnavailable:
                RANKING_REQUESTS_TOTAL.labels(rank_type=rank_type, status="upstream_error").inc()
                raise

            span.set_attribute("ranking.entries", len(page.entries))
            span.set_attribute("ranking.total", page.meta.total)

        latency = time.perf_counter() - t0
        RANKING_LATENCY.labels(rank_type=rank_type).observe(latency)
        RANKING_REQUESTS_TOTAL.labels(rank_type=rank_type, status="ok").inc()
        logger.info(
            "Ranked %s page=%d limit=%d → %d entries (total=%d) in %.1fms",
            rank_type,
            query.page,
            query.limit,
            len(page.entries),
            page.meta.total,
            latency * 1000,
        )
        return page

    async def _run(self, query: RankingQuery) -> RankingPage:
        random_mode = query.rank_type is RankType.RANDOM

        # ── Stage 1 — resolve window ──────────────────────────────────────
        window = None
        if not random_mode:
            with tracer.start_as_current_span("resolve_window"):
                window = resolve_window(query.rank_type, self._clock(), self._tz)

        # ── Stage 2 — aggregate or sample ─────────────────────────────────
        with tracer.start_as_current_span("aggregate") as span:
            if random_mode:
                candidates = await self._sampler.sample(query.limit)
                population = len(candidates)
            else:
                candidates, population = await self._aggregator.aggregate(
                    window, query.offset, query.limit
                )
            span.set_attribute("ranking.candidates", len(candidates))

        if not candidates:
            return self._assembler.assemble([], population, query, {})

        system_ids = [c.system_id for c in candidates]

        # ── Stage 3 — fetch metadata ──────────────────────────────────────
        with tracer.start_as_current_span("fetch_metadata"):
            summaries = await self._systems.get_summaries(system_ids)

        # ── Stage 4 — annotate ────────────────────────────────────────────
        viewer_flags = None
        if query.viewer_id is not None:
            with tracer.start_as_current_span("annotate_viewer"):
                live_ids = [sid for sid in system_ids if sid in summaries]
                viewer_flags = await self._annotator.annotate(live_ids, query.viewer_id)

        # ── Stage 5 — assemble ────────────────────────────────────────────
        return self._assembler.assemble(
            candidates,
            population,
            query,
            summaries,
            viewer_flags=viewer_flags,
        )
