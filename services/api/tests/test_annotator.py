"""Tests for viewer like annotation."""

import pytest

from app.ranking.annotator import ViewerAnnotator
from app.ranking.repositories import LikeRepository


class CountingLikeRepository:
    """Records how often the store is hit."""

    def __init__(self, liked):
        self.liked = set(liked)
        self.calls = 0

    async def find_liked_system_ids(self, viewer_id, system_ids):
        self.calls += 1
        return self.liked & set(system_ids)


@pytest.mark.asyncio
async def test_flags_match_viewer_likes(db_session, seed):
    for sid in ("A", "B", "C", "D"):
        await seed.system(sid)
    await seed.like("viewer", "A")
    await seed.like("viewer", "C")
    await seed.like("someone_else", "B")

    flags = await ViewerAnnotator(LikeRepository(db_session)).annotate(
        ["A", "B", "C", "D"], "viewer"
    )

    assert flags == {"A": True, "B": False, "C": True, "D": False}


@pytest.mark.asyncio
async def test_anonymous_viewer_gets_empty_map():
    likes = CountingLikeRepository(["A"])

    assert await ViewerAnnotator(likes).annotate(["A", "B"], None) == {}
    assert likes.calls == 0


@pytest.mark.asyncio
async def test_no_ids_no_query():
    likes = CountingLikeRepository([])

    assert await ViewerAnnotator(likes).annotate([], "viewer") == {}
    assert likes.calls == 0


@pytest.mark.asyncio
async def test_one_lookup_for_a_full_page():
    ids = [f"s{i}" for i in range(100)]
    likes = CountingLikeRepository(ids[::3])

    flags = await ViewerAnnotator(likes).annotate(ids, "viewer")

    assert likes.calls == 1
    assert sum(flags.values()) == 34
    assert len(flags) == 100
