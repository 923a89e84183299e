"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


# ──────────────────────────── Common ──────────────────────────────────────

class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class MessageResponse(BaseModel):
    message: str


# ──────────────────────────── Systems ─────────────────────────────────────

class SystemSummary(BaseModel):
    """Ranking-facing view of a stellar system."""
    id: str
    title: str
    galaxy_id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ──────────────────────────── Likes ───────────────────────────────────────

class LikeRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    system_id: str = Field(..., min_length=1)


class LikeRecord(BaseModel):
    user_id: str
    system_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class LikeCreatedResponse(BaseModel):
    message: str
    like: LikeRecord


class LikedSystem(BaseModel):
    system: SystemSummary
    planet_count: int
    liked_at: datetime


class LikedSystemsResponse(BaseModel):
    data: list[LikedSystem]
    meta: PaginationMeta


# ──────────────────────────── Rankings ────────────────────────────────────

class RankedSystem(BaseModel):
    """One row of a like leaderboard."""
    system: SystemSummary
    planet_count: int
    like_count: int
    rank: int
    # Absent for anonymous callers when the omit policy is configured
    is_liked: Optional[bool] = None


class RankingResponse(BaseModel):
    rank_type: str
    data: list[RankedSystem]
    meta: PaginationMeta
