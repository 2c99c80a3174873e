"""Custom exception classes for tournament errors.

Provides structured error handling with error codes and operator-friendly
messages. Every error leaves the tournament in its pre-call state.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standard error codes for tournament errors."""

    # Lookup errors
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    TABLE_NOT_FOUND = "TABLE_NOT_FOUND"
    DUPLICATE_TABLE = "DUPLICATE_TABLE"

    # Seating errors
    INVALID_SEAT = "INVALID_SEAT"
    SEAT_OCCUPIED = "SEAT_OCCUPIED"
    NO_AVAILABLE_SEATS = "NO_AVAILABLE_SEATS"
    INSUFFICIENT_TABLES = "INSUFFICIENT_TABLES"

    # Clock errors
    NO_LEVELS_DEFINED = "NO_LEVELS_DEFINED"
    NO_MORE_LEVELS = "NO_MORE_LEVELS"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # Chip purchase errors
    REBUY_CLOSED = "REBUY_CLOSED"
    ADDON_CLOSED = "ADDON_CLOSED"

    # Validation errors
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_LEVEL = "INVALID_LEVEL"
    INVALID_CHIP_COUNT = "INVALID_CHIP_COUNT"
    PLAYER_NOT_ACTIVE = "PLAYER_NOT_ACTIVE"


class TournamentError(Exception):
    """Base exception for tournament errors.

    Attributes:
        code: Error code for programmatic handling
        message: Operator-facing error message
        details: Additional error details
        recoverable: Whether the tournament remains usable
    """

    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        self.code = code if isinstance(code, str) else code.value
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "errorCode": self.code,
            "errorMessage": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# Lookup Errors
# =============================================================================


class NotFoundError(TournamentError):
    """Raised when a player or table identifier is unknown."""


class PlayerNotFoundError(NotFoundError):
    """Raised when a player is not found."""

    def __init__(self, player_id: str):
        super().__init__(
            code=ErrorCode.PLAYER_NOT_FOUND,
            message=f"Player not found: {player_id}",
            details={"playerId": player_id},
        )


class TableNotFoundError(NotFoundError):
    """Raised when a table is not found."""

    def __init__(self, table_id: str):
        super().__init__(
            code=ErrorCode.TABLE_NOT_FOUND,
            message=f"Table not found: {table_id}",
            details={"tableId": table_id},
        )


class DuplicateTableError(TournamentError):
    """Raised when creating a table whose id is already in use."""

    def __init__(self, table_id: str):
        super().__init__(
            code=ErrorCode.DUPLICATE_TABLE,
            message=f"Table already exists: {table_id}",
            details={"tableId": table_id},
        )


# =============================================================================
# Seating Errors
# =============================================================================


class InvalidSeatError(TournamentError):
    """Raised when a seat number is outside the table's range."""

    def __init__(self, table_id: str, seat_number: int, max_seats: int):
        super().__init__(
            code=ErrorCode.INVALID_SEAT,
            message=(
                f"Invalid seat number {seat_number}. "
                f"Must be between 1 and {max_seats}"
            ),
            details={
                "tableId": table_id,
                "seatNumber": seat_number,
                "maxSeats": max_seats,
            },
        )


class SeatOccupiedError(TournamentError):
    """Raised when the requested seat already holds another player."""

    def __init__(self, table_id: str, seat_number: int, occupant_id: str):
        super().__init__(
            code=ErrorCode.SEAT_OCCUPIED,
            message=f"Seat {seat_number} at {table_id} is already occupied",
            details={
                "tableId": table_id,
                "seatNumber": seat_number,
                "occupantId": occupant_id,
            },
        )


class NoAvailableSeatsError(TournamentError):
    """Raised when a table has no free seat."""

    def __init__(self, table_id: str):
        super().__init__(
            code=ErrorCode.NO_AVAILABLE_SEATS,
            message=f"No available seats at {table_id}",
            details={"tableId": table_id},
        )


class InsufficientTablesError(TournamentError):
    """Raised when balancing is requested with fewer than two tables."""

    def __init__(self, table_count: int, required: int = 2):
        super().__init__(
            code=ErrorCode.INSUFFICIENT_TABLES,
            message=f"Need at least {required} tables to balance, have {table_count}",
            details={"tableCount": table_count, "required": required},
        )


# =============================================================================
# Clock Errors
# =============================================================================


class NoLevelsDefinedError(TournamentError):
    """Raised when starting a tournament without blind levels."""

    def __init__(self):
        super().__init__(
            code=ErrorCode.NO_LEVELS_DEFINED,
            message="No levels defined for the tournament",
        )


class NoMoreLevelsError(TournamentError):
    """Raised when advancing past the last blind level."""

    def __init__(self, current_level: int):
        super().__init__(
            code=ErrorCode.NO_MORE_LEVELS,
            message="No more levels defined",
            details={"currentLevel": current_level},
        )


class InvalidTransitionError(TournamentError):
    """Raised when a clock operation is not allowed in the current state."""

    def __init__(self, operation: str, status: str):
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot {operation} while tournament is {status}",
            details={"operation": operation, "status": status},
        )


# =============================================================================
# Chip Purchase Errors
# =============================================================================


class RebuyClosedError(TournamentError):
    """Raised when a rebuy is attempted after the rebuy cutoff level."""

    def __init__(self, current_level: int, max_level: int):
        super().__init__(
            code=ErrorCode.REBUY_CLOSED,
            message="Rebuys are no longer allowed at this level",
            details={"currentLevel": current_level, "maxRebuyLevel": max_level},
        )


class AddonClosedError(TournamentError):
    """Raised when an add-on is attempted after the add-on cutoff level."""

    def __init__(self, current_level: int, max_level: int):
        super().__init__(
            code=ErrorCode.ADDON_CLOSED,
            message="Add-ons are no longer allowed at this level",
            details={"currentLevel": current_level, "maxAddonLevel": max_level},
        )


# =============================================================================
# Validation Errors
# =============================================================================


class InvalidConfigError(TournamentError):
    """Raised when a tournament parameter is out of range."""

    def __init__(self, field_name: str, value: Any, reason: str = "must be >= 0"):
        super().__init__(
            code=ErrorCode.INVALID_CONFIG,
            message=f"Invalid value for {field_name}: {value} ({reason})",
            details={"field": field_name, "value": value},
        )


class InvalidLevelError(TournamentError):
    """Raised when a blind level definition is malformed."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            code=ErrorCode.INVALID_LEVEL,
            message=message,
            details=details,
        )


class InvalidChipCountError(TournamentError):
    """Raised when a chip count would become negative."""

    def __init__(self, player_id: str, chips: int):
        super().__init__(
            code=ErrorCode.INVALID_CHIP_COUNT,
            message=f"Invalid chip count for {player_id}: {chips}",
            details={"playerId": player_id, "chips": chips},
        )


class PlayerNotActiveError(TournamentError):
    """Raised when chips are changed for an eliminated player."""

    def __init__(self, player_id: str, status: str):
        super().__init__(
            code=ErrorCode.PLAYER_NOT_ACTIVE,
            message=f"Player {player_id} is {status}; reinstate before changing chips",
            details={"playerId": player_id, "status": status},
        )
