"""
Tournament Data Models.

Mutable state representations for tournament entities.
All mutations go through the Tournament aggregate and the SeatingAllocator.
"""

from enum import Enum
from dataclasses import dataclass, field, fields
from itertools import count
from typing import Optional, List, Dict, Any, Callable

from tourney.utils.errors import InvalidConfigError, InvalidLevelError


DEFAULT_TABLE_SEATS = 9
DEFAULT_LEVEL_MINUTES = 20


class TournamentStatus(Enum):
    """Tournament lifecycle states."""

    SETUP = "setup"  # 설정 중
    RUNNING = "running"  # 진행 중
    BREAK = "break"  # 휴식
    PAUSED = "paused"  # 일시정지
    FINISHED = "finished"  # 종료


class PlayerStatus(Enum):
    """Player standing in the tournament."""

    ACTIVE = "active"
    ELIMINATED = "eliminated"


def sequential_ids(prefix: str = "") -> Callable[[], str]:
    """Return an id factory producing ``prefix1``, ``prefix2``, ..."""
    counter = count(1)
    return lambda: f"{prefix}{next(counter)}"


@dataclass(frozen=True)
class BlindLevel:
    """Blind level configuration."""

    level: int
    small_blind: int
    big_blind: int
    ante: int = 0
    duration_minutes: int = DEFAULT_LEVEL_MINUTES

    def __post_init__(self) -> None:
        if self.level < 1:
            raise InvalidLevelError(
                f"Level number must be >= 1, got {self.level}",
                {"level": self.level},
            )
        if self.small_blind < 0 or self.big_blind < 0 or self.ante < 0:
            raise InvalidLevelError(
                "Blinds and ante must be >= 0",
                {
                    "smallBlind": self.small_blind,
                    "bigBlind": self.big_blind,
                    "ante": self.ante,
                },
            )
        if self.big_blind < self.small_blind:
            raise InvalidLevelError(
                "Big blind must not be smaller than small blind",
                {"smallBlind": self.small_blind, "bigBlind": self.big_blind},
            )
        if self.duration_minutes <= 0:
            raise InvalidLevelError(
                f"Level duration must be > 0, got {self.duration_minutes}",
                {"durationMinutes": self.duration_minutes},
            )

    @property
    def duration_seconds(self) -> int:
        return self.duration_minutes * 60

    @property
    def blinds_display(self) -> str:
        return f"{self.small_blind}/{self.big_blind}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "ante": self.ante,
            "duration_minutes": self.duration_minutes,
        }


@dataclass(frozen=True)
class TournamentConfig:
    """
    Tournament configuration.

    Replaced as a whole by Tournament.configure(); amounts are integer
    currency units, chip values are integer chips.
    """

    # 바이인 설정
    buy_in: int = 0
    starting_chips: int = 0

    # 리바이
    rebuy_amount: int = 0
    rebuy_chips: int = 0
    max_rebuy_level: int = 0

    # 애드온
    addon_amount: int = 0
    addon_chips: int = 0
    max_addon_level: int = 0

    # 휴식 (break_interval 레벨마다)
    break_interval: int = 0
    break_duration_minutes: int = 0

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidConfigError(f.name, value, "must be an integer")
            if value < 0:
                raise InvalidConfigError(f.name, value)

    @classmethod
    def from_settings(cls, settings: Any) -> "TournamentConfig":
        """Build the default configuration from application settings."""
        return cls(**{f.name: getattr(settings, f.name) for f in fields(cls)})

    @property
    def break_duration_seconds(self) -> int:
        return self.break_duration_minutes * 60

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class Player:
    """
    Tournament player record.

    ``table_id`` and ``seat_number`` are either both set or both None.
    """

    player_id: str
    name: str
    chips: int = 0
    table_id: Optional[str] = None
    seat_number: Optional[int] = None
    status: PlayerStatus = PlayerStatus.ACTIVE
    rebuys: int = 0
    addons: int = 0

    @property
    def is_active(self) -> bool:
        return self.status is PlayerStatus.ACTIVE

    @property
    def is_seated(self) -> bool:
        return self.table_id is not None

    def rebuy(self, chips: int) -> "Player":
        self.chips += chips
        self.rebuys += 1
        return self

    def addon(self, chips: int) -> "Player":
        self.chips += chips
        self.addons += 1
        return self

    def eliminate(self) -> "Player":
        self.status = PlayerStatus.ELIMINATED
        self.chips = 0
        return self

    def reinstate(self) -> "Player":
        self.status = PlayerStatus.ACTIVE
        return self

    def seat_at(self, table_id: str, seat_number: int) -> "Player":
        self.table_id = table_id
        self.seat_number = seat_number
        return self

    def unseat(self) -> "Player":
        self.table_id = None
        self.seat_number = None
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "chips": self.chips,
            "table_id": self.table_id,
            "seat_number": self.seat_number,
            "status": self.status.value,
            "rebuys": self.rebuys,
            "addons": self.addons,
        }


@dataclass
class Table:
    """
    Tournament table.

    Seats are numbered 1..max_seats; ``seats[n - 1]`` holds the player id
    sitting in seat ``n`` or None.
    """

    table_id: str
    max_seats: int = DEFAULT_TABLE_SEATS
    seats: List[Optional[str]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.max_seats < 1:
            raise InvalidConfigError("max_seats", self.max_seats, "must be >= 1")
        if not self.seats:
            self.seats = [None] * self.max_seats
        elif len(self.seats) != self.max_seats:
            raise InvalidConfigError(
                "seats", len(self.seats), f"must hold exactly {self.max_seats} seats"
            )

    @property
    def player_count(self) -> int:
        """Current player count."""
        return sum(1 for s in self.seats if s is not None)

    @property
    def is_full(self) -> bool:
        return None not in self.seats

    @property
    def is_empty(self) -> bool:
        return all(s is None for s in self.seats)

    def is_valid_seat(self, seat_number: int) -> bool:
        return 1 <= seat_number <= self.max_seats

    def available_seats(self) -> List[int]:
        """Empty seat numbers, ascending."""
        return [i + 1 for i, s in enumerate(self.seats) if s is None]

    def occupied_seats(self) -> List[int]:
        return [i + 1 for i, s in enumerate(self.seats) if s is not None]

    def player_at(self, seat_number: int) -> Optional[str]:
        return self.seats[seat_number - 1]

    def seat_of(self, player_id: str) -> Optional[int]:
        for i, s in enumerate(self.seats):
            if s == player_id:
                return i + 1
        return None

    def clear(self) -> None:
        self.seats = [None] * self.max_seats

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table_id": self.table_id,
            "max_seats": self.max_seats,
            "player_count": self.player_count,
            "seats": list(self.seats),
        }


@dataclass(frozen=True)
class TournamentStats:
    """Read-only snapshot returned by Tournament.get_tournament_stats()."""

    total_players: int
    active_players: int
    eliminated_players: int
    total_buy_ins: int
    total_rebuys: int
    total_addons: int
    total_prize_pool: int
    total_chips: int
    average_stack: int
    current_level: int
    current_blind_level: str
    current_ante: int
    time_remaining: int
    time_display: str
    status: TournamentStatus
    table_count: int = 0
    seated_players: int = 0
    unseated_players: int = 0
    chip_leader: Optional[str] = None
    short_stack: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_players": self.total_players,
            "active_players": self.active_players,
            "eliminated_players": self.eliminated_players,
            "total_buy_ins": self.total_buy_ins,
            "total_rebuys": self.total_rebuys,
            "total_addons": self.total_addons,
            "total_prize_pool": self.total_prize_pool,
            "total_chips": self.total_chips,
            "average_stack": self.average_stack,
            "current_level": self.current_level,
            "current_blind_level": self.current_blind_level,
            "current_ante": self.current_ante,
            "time_remaining": self.time_remaining,
            "time_display": self.time_display,
            "status": self.status.value,
            "table_count": self.table_count,
            "seated_players": self.seated_players,
            "unseated_players": self.unseated_players,
            "chip_leader": self.chip_leader,
            "short_stack": self.short_stack,
        }
