"""
Tournament 테스트 공통 Fixture
"""

import logging
import random

import pytest
import structlog

from tourney.config import Settings
from tourney.logging_config import clear_context
from tourney.tournament import Tournament, TournamentConfig


SATURDAY_CONFIG = TournamentConfig(
    buy_in=100,
    starting_chips=10000,
    rebuy_amount=100,
    rebuy_chips=10000,
    max_rebuy_level=6,
    addon_amount=100,
    addon_chips=10000,
    max_addon_level=6,
    break_interval=4,
    break_duration_minutes=15,
)

# (small_blind, big_blind, ante, duration_minutes)
SATURDAY_LEVELS = [
    (25, 50, 0, 20),
    (50, 100, 0, 20),
    (75, 150, 0, 20),
    (100, 200, 25, 20),
    (150, 300, 25, 20),
    (200, 400, 50, 20),
    (300, 600, 75, 20),
    (400, 800, 100, 20),
]


@pytest.fixture
def settings() -> Settings:
    """환경변수와 무관한 기본 설정."""
    return Settings(_env_file=None)


@pytest.fixture
def tournament(settings: Settings) -> Tournament:
    """설정과 레벨이 입력된 빈 토너먼트."""
    t = Tournament(
        "Saturday Night Special",
        config=SATURDAY_CONFIG,
        settings=settings,
        rng=random.Random(1234),
    )
    for small, big, ante, minutes in SATURDAY_LEVELS:
        t.add_level(small, big, ante, minutes)
    return t


@pytest.fixture
def ten_player_tournament(tournament: Tournament) -> Tournament:
    """10명 등록, 테이블 2개."""
    for i in range(10):
        tournament.add_player(f"Player {i + 1}")
    tournament.create_table("Table 1")
    tournament.create_table("Table 2")
    return tournament


def assert_seating_consistent(tournament: Tournament) -> None:
    """Every occupied seat and every seated player point at each other."""
    seen = set()
    for table in tournament.tables.values():
        assert len(table.seats) == table.max_seats
        for idx, player_id in enumerate(table.seats):
            if player_id is None:
                continue
            assert player_id not in seen, f"{player_id} holds more than one seat"
            seen.add(player_id)
            player = tournament.players[player_id]
            assert player.table_id == table.table_id
            assert player.seat_number == idx + 1

    for player in tournament.players.values():
        assert (player.table_id is None) == (player.seat_number is None)
        if player.is_seated:
            assert player.player_id in seen


@pytest.fixture
def check_seating():
    """Seat bijection checker."""
    return assert_seating_consistent


@pytest.fixture
def restore_logging():
    """로깅 설정을 테스트 후 원복."""
    yield
    clear_context()
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()
