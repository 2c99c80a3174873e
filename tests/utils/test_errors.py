"""Tests for tournament error classes."""

import pytest

from tourney.utils.errors import (
    ErrorCode,
    InsufficientTablesError,
    InvalidSeatError,
    InvalidTransitionError,
    NotFoundError,
    PlayerNotActiveError,
    PlayerNotFoundError,
    RebuyClosedError,
    TableNotFoundError,
    TournamentError,
)


class TestTournamentError:
    def test_to_dict(self):
        error = InvalidSeatError("Table 1", 12, 9)
        assert error.to_dict() == {
            "errorCode": "INVALID_SEAT",
            "errorMessage": "Invalid seat number 12. Must be between 1 and 9",
            "details": {"tableId": "Table 1", "seatNumber": 12, "maxSeats": 9},
            "recoverable": True,
        }

    def test_code_accepts_enum_or_string(self):
        assert TournamentError(ErrorCode.REBUY_CLOSED, "closed").code == "REBUY_CLOSED"
        assert TournamentError("CUSTOM", "custom").code == "CUSTOM"

    def test_message_is_exception_text(self):
        error = InvalidTransitionError("pause", "setup")
        assert str(error) == "Cannot pause while tournament is setup"

    @pytest.mark.parametrize(
        "error",
        [PlayerNotFoundError("42"), TableNotFoundError("Table 9")],
    )
    def test_lookup_errors_share_base(self, error):
        assert isinstance(error, NotFoundError)
        assert isinstance(error, TournamentError)

    def test_details(self):
        assert RebuyClosedError(7, 6).details == {"currentLevel": 7, "maxRebuyLevel": 6}
        assert InsufficientTablesError(1).details == {"tableCount": 1, "required": 2}
        assert PlayerNotActiveError("3", "eliminated").code == "PLAYER_NOT_ACTIVE"
