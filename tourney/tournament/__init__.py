"""
Tournament Director Engine.

This module provides:
- Blind level / break clock state machine
- Seat assignment, random seating and table balancing
- Exact-sum prize distribution
- Settle-up of chip stacks against buy-ins
"""

from .engine import Tournament
from .models import (
    BlindLevel,
    Player,
    PlayerStatus,
    Table,
    TournamentConfig,
    TournamentStats,
    TournamentStatus,
    sequential_ids,
)
from .blind_clock import ClockEvent, TournamentClock, format_time
from .balancer import BalanceResult, PlayerMove, RandomizeResult, SeatingAllocator
from .payouts import Payout, PrizeDistributor
from .settlement import SettlementSummary, SettleUpEntry, settle
from .ticker import ClockTicker

__all__ = [
    "Tournament",
    "BlindLevel",
    "Player",
    "PlayerStatus",
    "Table",
    "TournamentConfig",
    "TournamentStats",
    "TournamentStatus",
    "sequential_ids",
    "ClockEvent",
    "TournamentClock",
    "format_time",
    "BalanceResult",
    "PlayerMove",
    "RandomizeResult",
    "SeatingAllocator",
    "Payout",
    "PrizeDistributor",
    "SettlementSummary",
    "SettleUpEntry",
    "settle",
    "ClockTicker",
]
