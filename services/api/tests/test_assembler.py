"""Tests for page assembly: ranks, stale entries and viewer flags."""

from datetime import datetime

from app.ranking.assembler import PageAssembler
from app.ranking.query import build_ranking_query
from app.ranking.types import Candidate, SystemSummary

NOW = datetime(2025, 9, 17)


def _summary(system_id: str, planets: int = 0) -> SystemSummary:
    return SystemSummary(
        id=system_id,
        title=f"System {system_id}",
        galaxy_id="gal_001",
        owner_id="owner",
        created_at=NOW,
        updated_at=NOW,
        planet_count=planets,
    )


def _candidates(*pairs):
    return [Candidate(system_id=sid, like_count=n) for sid, n in pairs]


class TestRanks:
    def test_ranks_are_global_positions(self):
        candidates = _candidates(("a", 5), ("b", 4), ("c", 1))
        summaries = {sid: _summary(sid) for sid in "abc"}
        query = build_ranking_query("week", page=3, limit=10)

        page = PageAssembler().assemble(candidates, 30, query, summaries)

        assert [e.rank for e in page.entries] == [21, 22, 23]
        assert [e.like_count for e in page.entries] == [5, 4, 1]
        assert page.meta.total == 30
        assert page.meta.page == 3
        assert page.meta.limit == 10

    def test_vanished_system_is_dropped_without_renumbering(self):
        candidates = _candidates(("a", 5), ("gone", 4), ("c", 1))
        summaries = {"a": _summary("a"), "c": _summary("c")}
        query = build_ranking_query("month", limit=3)

        page = PageAssembler().assemble(candidates, 3, query, summaries)

        assert [e.system.id for e in page.entries] == ["a", "c"]
        assert [e.rank for e in page.entries] == [1, 3]
        assert page.meta.total == 3

    def test_random_mode_ranks_within_page(self):
        candidates = _candidates(("x", 0), ("gone", 9), ("y", 2), ("z", 1))
        summaries = {sid: _summary(sid) for sid in "xyz"}
        query = build_ranking_query("random", page=4, limit=4)

        page = PageAssembler().assemble(candidates, 500, query, summaries)

        assert [e.rank for e in page.entries] == [1, 2, 3]
        assert page.meta.total == 3
        assert page.meta.page == 1
        assert page.meta.limit == 4

    def test_empty(self):
        page = PageAssembler().assemble([], 0, build_ranking_query("total"), {})

        assert page.entries == []
        assert page.meta.total == 0


class TestViewerFlags:
    def test_flags_follow_viewer_map(self):
        candidates = _candidates(("a", 3), ("b", 2), ("c", 1), ("d", 0))
        summaries = {sid: _summary(sid) for sid in "abcd"}
        flags = {"a": True, "b": False, "c": True, "d": False}
        query = build_ranking_query("week", limit=4, viewer_id="viewer")

        page = PageAssembler().assemble(candidates, 4, query, summaries, viewer_flags=flags)

        assert {e.system.id: e.is_liked for e in page.entries} == flags

    def test_anonymous_defaults_to_false(self):
        page = PageAssembler().assemble(
            _candidates(("a", 1)), 1, build_ranking_query("total", limit=1), {"a": _summary("a")}
        )

        assert page.entries[0].is_liked is False

    def test_anonymous_omit_policy(self):
        page = PageAssembler(anonymous_liked=None).assemble(
            _candidates(("a", 1)), 1, build_ranking_query("total", limit=1), {"a": _summary("a")}
        )

        assert page.entries[0].is_liked is None
