"""
Seat Allocation & Table Balancing Algorithm.

플레이어 좌석 배정, 랜덤 시팅, 테이블 인원 밸런싱.

핵심 설계 원칙:
1. 좌석 유일성 (한 플레이어는 최대 한 좌석, 한 좌석은 최대 한 플레이어)
2. 테이블 간 인원 차이 최소화 (±1 이내 유지)
3. 모든 검증은 변경 전에 수행 (부분 적용 없음)
4. 밸런싱 불가 상황은 예외가 아닌 결과로 보고
"""

import math
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from tourney.logging_config import get_logger
from tourney.utils.errors import (
    InsufficientTablesError,
    InvalidSeatError,
    NoAvailableSeatsError,
    PlayerNotFoundError,
    SeatOccupiedError,
    TableNotFoundError,
)
from .models import DEFAULT_TABLE_SEATS, Player, Table

logger = get_logger(__name__)


# 새 테이블 생성 콜백 (auto-create 정책)
TableFactory = Callable[[], Table]


@dataclass(frozen=True)
class PlayerMove:
    """Single player move performed by balancing."""

    player_id: str
    from_table_id: str
    from_seat: int
    to_table_id: str
    to_seat: int

    def to_dict(self) -> Dict:
        return {
            "player_id": self.player_id,
            "from_table_id": self.from_table_id,
            "from_seat": self.from_seat,
            "to_table_id": self.to_table_id,
            "to_seat": self.to_seat,
        }


@dataclass
class BalanceResult:
    """Outcome of a balancing pass."""

    moves: List[PlayerMove] = field(default_factory=list)
    balanced: bool = True
    table_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def total_moves(self) -> int:
        return len(self.moves)

    @property
    def message(self) -> str:
        if not self.balanced:
            return "Could not balance tables further"
        if self.moves:
            return "Tables balanced successfully"
        return "Tables are already balanced"

    def to_dict(self) -> Dict:
        return {
            "balanced": self.balanced,
            "message": self.message,
            "total_moves": self.total_moves,
            "table_counts": dict(self.table_counts),
            "moves": [m.to_dict() for m in self.moves],
        }


@dataclass
class RandomizeResult:
    """Outcome of a random seating draw."""

    seated: Dict[str, Dict[str, int]] = field(default_factory=dict)  # table -> {player: seat}
    unseated: List[str] = field(default_factory=list)
    tables_needed: int = 0
    tables_used: List[str] = field(default_factory=list)
    tables_created: List[str] = field(default_factory=list)

    @property
    def seated_count(self) -> int:
        return sum(len(s) for s in self.seated.values())

    def to_dict(self) -> Dict:
        return {
            "seated_count": self.seated_count,
            "unseated": list(self.unseated),
            "tables_needed": self.tables_needed,
            "tables_used": list(self.tables_used),
            "tables_created": list(self.tables_created),
        }


class SeatingAllocator:
    """
    Seat assignment and table balancing engine.

    The allocator holds no tournament state: each call receives the
    aggregate's player and table maps and mutates them in place.

    랜덤 시팅 알고리즘:
    ─────────────────────────────────────────────────────────────────

    1. 필요한 테이블 수 계산: ceil(active / seats_per_table)
    2. 모든 좌석/플레이어 배정 초기화
    3. 활성 플레이어 셔플
    4. 라운드 로빈 배치 (player[i] → table[i mod tables_used])
    5. 각 테이블 내 좌석은 빈 좌석 중 랜덤

    밸런싱 알고리즘:
    ─────────────────────────────────────────────────────────────────

    가장 많은 테이블 → 가장 적은 테이블로 한 명씩 이동,
    (최대 - 최소) ≤ 1 이 될 때까지 반복.
    매 이동마다 인원 제곱합이 감소하므로 반드시 종료.

    ─────────────────────────────────────────────────────────────────
    """

    def __init__(
        self,
        seats_per_table: int = DEFAULT_TABLE_SEATS,
        rng: Optional[random.Random] = None,
    ):
        self.seats_per_table = seats_per_table
        self.rng = rng or random.Random()

    # =========================================================================
    # Single Seat Operations
    # =========================================================================

    def assign(
        self,
        players: Dict[str, Player],
        tables: Dict[str, Table],
        player_id: str,
        table_id: str,
        seat_number: Optional[int] = None,
    ) -> int:
        """
        Seat a player, moving them if they already hold a seat.

        Args:
            players: Player map (player_id -> Player)
            tables: Table map (table_id -> Table)
            player_id: Player to seat
            table_id: Destination table
            seat_number: Explicit seat, or None for the lowest free seat

        Returns:
            The seat number the player now occupies
        """
        player = players.get(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        table = tables.get(table_id)
        if table is None:
            raise TableNotFoundError(table_id)

        already_here = player.table_id == table_id

        if seat_number is None:
            if already_here and player.seat_number is not None:
                return player.seat_number
            available = table.available_seats()
            if not available:
                raise NoAvailableSeatsError(table_id)
            seat_number = available[0]
        else:
            if not table.is_valid_seat(seat_number):
                raise InvalidSeatError(table_id, seat_number, table.max_seats)
            occupant = table.player_at(seat_number)
            if occupant == player_id:
                return seat_number
            if occupant is not None:
                raise SeatOccupiedError(table_id, seat_number, occupant)

        self._vacate(players, tables, player)
        table.seats[seat_number - 1] = player_id
        player.seat_at(table_id, seat_number)

        logger.debug(
            "player_seated",
            player_id=player_id,
            table_id=table_id,
            seat=seat_number,
        )
        return seat_number

    def remove(
        self,
        players: Dict[str, Player],
        tables: Dict[str, Table],
        table_id: str,
        seat_number: int,
    ) -> Optional[str]:
        """
        Vacate a seat.

        Returns:
            The id of the player who held the seat, or None if it was empty
        """
        table = tables.get(table_id)
        if table is None:
            raise TableNotFoundError(table_id)
        if not table.is_valid_seat(seat_number):
            raise InvalidSeatError(table_id, seat_number, table.max_seats)

        occupant = table.player_at(seat_number)
        if occupant is None:
            return None

        table.seats[seat_number - 1] = None
        player = players.get(occupant)
        if player is not None:
            player.unseat()

        logger.debug("seat_vacated", player_id=occupant, table_id=table_id, seat=seat_number)
        return occupant

    def vacate_player(
        self,
        players: Dict[str, Player],
        tables: Dict[str, Table],
        player_id: str,
    ) -> None:
        """Release whatever seat the player holds."""
        player = players.get(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        self._vacate(players, tables, player)

    def clear_table(self, players: Dict[str, Player], table: Table) -> List[str]:
        """Unseat everyone at ``table``; returns the released player ids."""
        released = [pid for pid in table.seats if pid is not None]
        for pid in released:
            player = players.get(pid)
            if player is not None and player.table_id == table.table_id:
                player.unseat()
        table.clear()
        return released

    def _vacate(
        self,
        players: Dict[str, Player],
        tables: Dict[str, Table],
        player: Player,
    ) -> None:
        if not player.is_seated:
            return
        current = tables.get(player.table_id)
        if current is not None and player.seat_number is not None:
            if current.player_at(player.seat_number) == player.player_id:
                current.seats[player.seat_number - 1] = None
        player.unseat()

    # =========================================================================
    # Random Seating
    # =========================================================================

    def tables_needed(self, active_count: int) -> int:
        return math.ceil(active_count / self.seats_per_table)

    def randomize_all(
        self,
        players: Dict[str, Player],
        tables: Dict[str, Table],
        create_table: Optional[TableFactory] = None,
    ) -> RandomizeResult:
        """
        Clear all seats and deal active players randomly across tables.

        When ``create_table`` is given, missing tables are created through
        it; otherwise seating is capped at the existing tables and players
        who do not fit are reported as unseated.
        """
        active = [p for p in players.values() if p.is_active]
        needed = self.tables_needed(len(active))
        result = RandomizeResult(tables_needed=needed)

        if create_table is not None:
            while len(tables) < needed:
                table = create_table()
                tables[table.table_id] = table
                result.tables_created.append(table.table_id)
        elif len(tables) < needed:
            logger.warning(
                "insufficient_tables_for_seating",
                needed=needed,
                available=len(tables),
                active_players=len(active),
            )

        for table in tables.values():
            table.clear()
        for player in players.values():
            player.unseat()

        usable = list(tables.values())[:needed]
        result.tables_used = [t.table_id for t in usable]

        if not usable:
            result.unseated = [p.player_id for p in active]
            return result

        shuffled = list(active)
        self.rng.shuffle(shuffled)

        for idx, player in enumerate(shuffled):
            table = usable[idx % len(usable)]
            available = table.available_seats()
            if not available:
                result.unseated.append(player.player_id)
                continue

            seat = self.rng.choice(available)
            table.seats[seat - 1] = player.player_id
            player.seat_at(table.table_id, seat)
            result.seated.setdefault(table.table_id, {})[player.player_id] = seat

        if result.unseated:
            logger.warning(
                "players_left_unseated",
                count=len(result.unseated),
                player_ids=result.unseated,
            )
        logger.info(
            "players_randomized",
            seated=result.seated_count,
            tables_used=len(usable),
            tables_created=len(result.tables_created),
        )
        return result

    # =========================================================================
    # Balancing
    # =========================================================================

    def balance(
        self,
        tables: Dict[str, Table],
        players: Dict[str, Player],
    ) -> BalanceResult:
        """
        Move players from the fullest to the emptiest table until every
        table is within one player of every other.

        Returns:
            BalanceResult; ``balanced`` is False when a move was needed but
            impossible (e.g. the emptiest table has no free seat)
        """
        if len(tables) < 2:
            raise InsufficientTablesError(len(tables))

        result = BalanceResult()
        table_list = list(tables.values())

        while True:
            fullest = max(table_list, key=lambda t: t.player_count)
            emptiest = min(table_list, key=lambda t: t.player_count)

            if fullest.player_count - emptiest.player_count <= 1:
                break

            player_id, from_seat = self._select_player_to_move(fullest)
            to_seat = self._select_destination_seat(emptiest)
            if player_id is None or to_seat is None:
                result.balanced = False
                break

            fullest.seats[from_seat - 1] = None
            emptiest.seats[to_seat - 1] = player_id
            player = players.get(player_id)
            if player is not None:
                player.seat_at(emptiest.table_id, to_seat)

            move = PlayerMove(
                player_id=player_id,
                from_table_id=fullest.table_id,
                from_seat=from_seat,
                to_table_id=emptiest.table_id,
                to_seat=to_seat,
            )
            result.moves.append(move)
            logger.debug("player_moved", **move.to_dict())

        result.table_counts = {t.table_id: t.player_count for t in table_list}

        if result.balanced:
            logger.info(
                "tables_balanced",
                moves=result.total_moves,
                table_counts=result.table_counts,
            )
        else:
            logger.warning(
                "tables_not_balanced",
                moves=result.total_moves,
                table_counts=result.table_counts,
            )
        return result

    def _select_player_to_move(self, table: Table) -> tuple:
        """Pick the player in the highest occupied seat."""
        occupied = table.occupied_seats()
        if not occupied:
            return None, None
        seat = occupied[-1]
        return table.player_at(seat), seat

    def _select_destination_seat(self, table: Table) -> Optional[int]:
        """Lowest empty seat, for consistency."""
        available = table.available_seats()
        if not available:
            return None
        return available[0]
