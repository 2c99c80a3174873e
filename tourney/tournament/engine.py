"""
Tournament Engine - Aggregate Root.

단일 토너먼트의 모든 플레이어, 테이블, 레벨을 소유하고
모든 명령을 직렬화하여 처리.

- 시팅/밸런싱 → SeatingAllocator
- 상금 계산 → PrizeDistributor
- 레벨/휴식 진행 → TournamentClock
"""

import dataclasses
import random
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from tourney.config import Settings, get_settings
from tourney.logging_config import get_logger
from tourney.utils.errors import (
    AddonClosedError,
    DuplicateTableError,
    InvalidChipCountError,
    InvalidConfigError,
    InvalidTransitionError,
    PlayerNotActiveError,
    PlayerNotFoundError,
    RebuyClosedError,
    TableNotFoundError,
)
from .balancer import BalanceResult, RandomizeResult, SeatingAllocator
from .blind_clock import ClockEvent, TournamentClock
from .models import (
    DEFAULT_LEVEL_MINUTES,
    BlindLevel,
    Player,
    PlayerStatus,
    Table,
    TournamentConfig,
    TournamentStats,
    TournamentStatus,
    sequential_ids,
)
from .payouts import Payout, PrizeDistributor
from .settlement import SettlementSummary, SettleUpEntry, settle

logger = get_logger(__name__)


class Tournament:
    """
    토너먼트 애그리거트 루트.

    핵심 기능:
    ─────────────────────────────────────────────────────────────────

    1. 설정: 바이인/리바이/애드온/휴식 파라미터, 블라인드 레벨
    2. 플레이어: 등록, 삭제, 탈락, 복귀, 리바이, 애드온
    3. 테이블: 생성, 삭제, 좌석 배정, 랜덤 시팅, 밸런싱
    4. 시계: 시작, 일시정지, 재개, 수동 레벨업, 틱
    5. 정산: 상금 분배, 통계, 현금 정산

    모든 명령은 완전히 적용되거나 완전히 실패 (부분 적용 없음).
    상금 풀은 기여금이 바뀔 때마다 재계산:
        total_prize_pool = buy_ins·buy_in + rebuys·rebuy_amount + addons·addon_amount

    ─────────────────────────────────────────────────────────────────
    """

    def __init__(
        self,
        name: str,
        config: Optional[TournamentConfig] = None,
        settings: Optional[Settings] = None,
        id_factory: Optional[Callable[[], str]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.name = name
        self.settings = settings or get_settings()
        self.config = config or TournamentConfig.from_settings(self.settings)

        # Owned state (insertion-ordered)
        self.players: Dict[str, Player] = {}
        self.tables: Dict[str, Table] = {}
        self.levels: List[BlindLevel] = []

        # Running totals
        self.total_buy_ins = 0
        self.total_rebuys = 0
        self.total_addons = 0
        self.total_prize_pool = 0

        # Collaborators
        self.clock = TournamentClock(
            self.levels,
            break_interval=self.config.break_interval,
            break_duration_minutes=self.config.break_duration_minutes,
        )
        self.allocator = SeatingAllocator(
            seats_per_table=self.settings.default_table_seats,
            rng=rng,
        )
        self.distributor = PrizeDistributor(payout_ratio=self.settings.payout_ratio)

        self._next_player_id = id_factory or sequential_ids()

        self._update_prize_pool()

    # =========================================================================
    # Clock State Access
    # =========================================================================

    @property
    def status(self) -> TournamentStatus:
        return self.clock.status

    @property
    def current_level(self) -> int:
        return self.clock.current_level

    @property
    def time_remaining(self) -> int:
        return self.clock.time_remaining

    # =========================================================================
    # Setup
    # =========================================================================

    def configure(
        self,
        config: Optional[TournamentConfig] = None,
        **overrides: Any,
    ) -> TournamentConfig:
        """
        Replace tournament parameters.

        Args:
            config: Complete configuration (defaults to the current one)
            **overrides: Individual fields to change, e.g. ``buy_in=100``

        Returns:
            The configuration now in effect
        """
        base = config or self.config
        try:
            new_config = dataclasses.replace(base, **overrides)
        except TypeError as e:
            raise InvalidConfigError(", ".join(sorted(overrides)), overrides, str(e)) from e

        self.config = new_config
        self.clock.configure_breaks(
            new_config.break_interval, new_config.break_duration_minutes
        )
        self._update_prize_pool()

        logger.info("tournament_configured", tournament=self.name, **new_config.to_dict())
        return new_config

    def add_level(
        self,
        small_blind: int,
        big_blind: int,
        ante: int = 0,
        duration_minutes: int = DEFAULT_LEVEL_MINUTES,
    ) -> BlindLevel:
        """Append a level with the next sequence number."""
        if self.status is TournamentStatus.FINISHED:
            raise InvalidTransitionError("add level", self.status.value)

        level = BlindLevel(
            level=len(self.levels) + 1,
            small_blind=small_blind,
            big_blind=big_blind,
            ante=ante,
            duration_minutes=duration_minutes,
        )
        self.levels.append(level)

        logger.debug(
            "level_added",
            tournament=self.name,
            blind_level=level.level,
            blinds=level.blinds_display,
            ante=level.ante,
            duration_minutes=level.duration_minutes,
        )
        return level

    # =========================================================================
    # Players
    # =========================================================================

    def get_player(self, player_id: str) -> Player:
        player = self.players.get(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id)
        return player

    def _get_active_player(self, player_id: str) -> Player:
        player = self.get_player(player_id)
        if not player.is_active:
            raise PlayerNotActiveError(player_id, player.status.value)
        return player

    def add_player(self, name: str) -> Player:
        """Register a player with the configured starting chips."""
        player = Player(
            player_id=self._next_player_id(),
            name=name.strip(),
            chips=self.config.starting_chips,
        )
        self.players[player.player_id] = player
        self.total_buy_ins += 1
        self._update_prize_pool()

        logger.info(
            "player_added",
            tournament=self.name,
            player_id=player.player_id,
            name=player.name,
            total_players=len(self.players),
        )
        return player

    def remove_player(self, player_id: str) -> bool:
        """Vacate any held seat and drop the player; False if unknown."""
        if player_id not in self.players:
            return False

        self.allocator.vacate_player(self.players, self.tables, player_id)
        del self.players[player_id]

        logger.info("player_removed", tournament=self.name, player_id=player_id)
        return True

    def eliminate_player(self, player_id: str) -> Player:
        """Mark eliminated, zero the stack and release the seat."""
        player = self.get_player(player_id)
        self.allocator.vacate_player(self.players, self.tables, player_id)
        player.eliminate()

        logger.info(
            "player_eliminated",
            tournament=self.name,
            player_id=player_id,
            remaining=self.active_player_count,
        )
        return player

    def reinstate_player(self, player_id: str) -> Player:
        """Return an eliminated player to active status."""
        player = self.get_player(player_id)
        player.reinstate()
        logger.info("player_reinstated", tournament=self.name, player_id=player_id)
        return player

    def update_chips(self, player_id: str, chips: int) -> Player:
        """Set an active player's chip count after a hand or a correction."""
        player = self._get_active_player(player_id)
        if chips < 0:
            raise InvalidChipCountError(player_id, chips)

        player.chips = chips
        logger.debug("chips_updated", player_id=player_id, chips=chips)
        return player

    def rebuy_player(self, player_id: str) -> Player:
        if self.current_level > self.config.max_rebuy_level:
            raise RebuyClosedError(self.current_level, self.config.max_rebuy_level)

        player = self._get_active_player(player_id)
        player.rebuy(self.config.rebuy_chips)
        self.total_rebuys += 1
        self._update_prize_pool()

        logger.info(
            "player_rebuy",
            tournament=self.name,
            player_id=player_id,
            rebuys=player.rebuys,
            prize_pool=self.total_prize_pool,
        )
        return player

    def addon_player(self, player_id: str) -> Player:
        if self.current_level > self.config.max_addon_level:
            raise AddonClosedError(self.current_level, self.config.max_addon_level)

        player = self._get_active_player(player_id)
        player.addon(self.config.addon_chips)
        self.total_addons += 1
        self._update_prize_pool()

        logger.info(
            "player_addon",
            tournament=self.name,
            player_id=player_id,
            addons=player.addons,
            prize_pool=self.total_prize_pool,
        )
        return player

    @property
    def active_player_count(self) -> int:
        return sum(1 for p in self.players.values() if p.is_active)

    # =========================================================================
    # Tables & Seating
    # =========================================================================

    def get_table(self, table_id: str) -> Table:
        table = self.tables.get(table_id)
        if table is None:
            raise TableNotFoundError(table_id)
        return table

    def create_table(self, table_id: str, max_seats: Optional[int] = None) -> Table:
        """Append an empty table."""
        if table_id in self.tables:
            raise DuplicateTableError(table_id)

        table = Table(
            table_id=table_id,
            max_seats=max_seats if max_seats is not None else self.settings.default_table_seats,
        )
        self.tables[table_id] = table

        logger.info("table_created", tournament=self.name, table_id=table_id)
        return table

    def remove_table(self, table_id: str) -> List[str]:
        """Unseat everyone at the table and drop it; returns released ids."""
        table = self.get_table(table_id)
        released = self.allocator.clear_table(self.players, table)
        del self.tables[table_id]

        logger.info(
            "table_removed",
            tournament=self.name,
            table_id=table_id,
            released=len(released),
        )
        return released

    def assign_player_to_table(
        self,
        player_id: str,
        table_id: str,
        seat_number: Optional[int] = None,
    ) -> int:
        return self.allocator.assign(
            self.players, self.tables, player_id, table_id, seat_number
        )

    def remove_player_from_seat(self, table_id: str, seat_number: int) -> Optional[str]:
        return self.allocator.remove(self.players, self.tables, table_id, seat_number)

    def randomly_assign_players(self) -> RandomizeResult:
        """Redraw all seats, creating tables as needed."""
        return self.allocator.randomize_all(
            self.players, self.tables, create_table=self._auto_create_table
        )

    def balance_tables(self) -> BalanceResult:
        return self.allocator.balance(self.tables, self.players)

    def _auto_create_table(self) -> Table:
        number = len(self.tables) + 1
        while f"Table {number}" in self.tables:
            number += 1
        table = Table(
            table_id=f"Table {number}",
            max_seats=self.settings.default_table_seats,
        )
        logger.info("table_auto_created", tournament=self.name, table_id=table.table_id)
        return table

    # =========================================================================
    # Clock
    # =========================================================================

    def start_tournament(self) -> None:
        self.clock.start()
        logger.info(
            "tournament_started",
            tournament=self.name,
            players=len(self.players),
            tables=len(self.tables),
            levels=len(self.levels),
        )

    def pause_clock(self) -> None:
        self.clock.pause()

    def resume_clock(self) -> None:
        self.clock.resume()

    def next_level(self) -> ClockEvent:
        return self.clock.advance_level()

    def finish_tournament(self) -> None:
        self.clock.finish()

    def tick(self) -> ClockEvent:
        """One-second clock signal from the host timer."""
        return self.clock.tick()

    # =========================================================================
    # Prizes & Statistics
    # =========================================================================

    def _update_prize_pool(self) -> int:
        self.total_prize_pool = (
            self.total_buy_ins * self.config.buy_in
            + self.total_rebuys * self.config.rebuy_amount
            + self.total_addons * self.config.addon_amount
        )
        return self.total_prize_pool

    def calculate_prizes(self) -> List[Payout]:
        """Payouts for the current field; does not mutate state."""
        return self.distributor.calculate(self.total_prize_pool, len(self.players))

    def get_tournament_stats(self) -> TournamentStats:
        active = self.players_with_status(PlayerStatus.ACTIVE)
        total_chips = sum(p.chips for p in self.players.values())
        seated = sum(1 for p in active if p.is_seated)
        blind = self.clock.current_blind

        chip_leader = max(active, key=lambda p: p.chips, default=None)
        short_stack = min(active, key=lambda p: p.chips, default=None)

        return TournamentStats(
            total_players=len(self.players),
            active_players=len(active),
            eliminated_players=len(self.players) - len(active),
            total_buy_ins=self.total_buy_ins,
            total_rebuys=self.total_rebuys,
            total_addons=self.total_addons,
            total_prize_pool=self.total_prize_pool,
            total_chips=total_chips,
            average_stack=total_chips // len(active) if active else 0,
            current_level=self.current_level,
            current_blind_level=blind.blinds_display if blind else "N/A",
            current_ante=blind.ante if blind else 0,
            time_remaining=self.time_remaining,
            time_display=self.clock.time_display,
            status=self.status,
            table_count=len(self.tables),
            seated_players=seated,
            unseated_players=len(active) - seated,
            chip_leader=chip_leader.player_id if chip_leader else None,
            short_stack=short_stack.player_id if short_stack else None,
        )

    def settle_up(self, chip_ratio: Any) -> SettlementSummary:
        """
        Cash out every player's stack at ``chip_ratio`` chips per currency
        unit against everything they paid in.
        """
        entries = [
            SettleUpEntry(
                name=p.name,
                chips=p.chips,
                total_buy_in=Decimal(
                    self.config.buy_in
                    + p.rebuys * self.config.rebuy_amount
                    + p.addons * self.config.addon_amount
                ),
            )
            for p in self.players.values()
        ]
        return settle(entries, chip_ratio)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "config": self.config.to_dict(),
            "status": self.status.value,
            "current_level": self.current_level,
            "time_remaining": self.time_remaining,
            "levels": [lv.to_dict() for lv in self.levels],
            "players": [p.to_dict() for p in self.players.values()],
            "tables": [t.to_dict() for t in self.tables.values()],
            "total_buy_ins": self.total_buy_ins,
            "total_rebuys": self.total_rebuys,
            "total_addons": self.total_addons,
            "total_prize_pool": self.total_prize_pool,
        }

    def players_with_status(self, status: PlayerStatus) -> List[Player]:
        return [p for p in self.players.values() if p.status is status]
