"""
Value types at the ranking engine's boundary.

Storage naming (owner vs creator vs author columns, planet relationships)
stops at the repositories; everything past them speaks SystemSummary.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Candidate:
    system_id: str
    like_count: int


@dataclass(frozen=True)
class SystemSummary:
    id: str
    title: str
    galaxy_id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime
    planet_count: int = 0


@dataclass(frozen=True)
class RankingEntry:
    system: SystemSummary
    like_count: int
    rank: int
    # None means "not annotated" (anonymous caller under the omit policy)
    is_liked: Optional[bool] = None


@dataclass(frozen=True)
class PageMeta:
    page: int
    limit: int
    total: int


@dataclass
class RankingPage:
    entries: list[RankingEntry] = field(default_factory=list)
    meta: PageMeta = field(default_factory=lambda: PageMeta(page=1, limit=20, total=0))
