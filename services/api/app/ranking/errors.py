"""Errors raised by the like ranking engine."""


class RankingError(Exception):
    """Base class for ranking failures."""


class InvalidRankingQuery(RankingError):
    """The request can't be ranked: bad page, limit or rank type."""


class UpstreamUnavailable(RankingError):
    """The system or like store failed; the whole request is aborted."""
