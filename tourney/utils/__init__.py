"""Utility modules."""

from tourney.utils.errors import ErrorCode, TournamentError

__all__ = [
    "ErrorCode",
    "TournamentError",
]
