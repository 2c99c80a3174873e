"""
Seating Allocator Tests.

좌석 배정 / 랜덤 시팅 / 밸런싱 테스트.
"""

import random
from typing import Dict, List

import pytest
from hypothesis import given, settings, strategies as st

from tourney.tournament.balancer import SeatingAllocator
from tourney.tournament.models import Player, Table
from tourney.utils.errors import (
    InsufficientTablesError,
    InvalidSeatError,
    NoAvailableSeatsError,
    PlayerNotFoundError,
    SeatOccupiedError,
    TableNotFoundError,
)


# =============================================================================
# Helpers
# =============================================================================


def make_players(count: int) -> Dict[str, Player]:
    return {f"p{i}": Player(player_id=f"p{i}", name=f"Player {i}") for i in range(1, count + 1)}


def make_tables(*capacities: int) -> Dict[str, Table]:
    return {
        f"T{i}": Table(table_id=f"T{i}", max_seats=cap)
        for i, cap in enumerate(capacities, 1)
    }


def fill(allocator, players, tables, table_id: str, player_ids: List[str]) -> None:
    for pid in player_ids:
        allocator.assign(players, tables, pid, table_id)


def assert_bijection(players: Dict[str, Player], tables: Dict[str, Table]) -> None:
    seen = set()
    for table in tables.values():
        for idx, pid in enumerate(table.seats):
            if pid is None:
                continue
            assert pid not in seen
            seen.add(pid)
            assert players[pid].table_id == table.table_id
            assert players[pid].seat_number == idx + 1
    for player in players.values():
        if player.is_seated:
            assert player.player_id in seen


@pytest.fixture
def allocator() -> SeatingAllocator:
    return SeatingAllocator(rng=random.Random(42))


# =============================================================================
# assign / remove
# =============================================================================


class TestAssign:
    def test_lowest_free_seat(self, allocator):
        players, tables = make_players(2), make_tables(9)
        assert allocator.assign(players, tables, "p1", "T1") == 1
        assert allocator.assign(players, tables, "p2", "T1") == 2
        assert tables["T1"].seats[:2] == ["p1", "p2"]

    def test_explicit_seat(self, allocator):
        players, tables = make_players(1), make_tables(9)
        assert allocator.assign(players, tables, "p1", "T1", 5) == 5
        assert players["p1"].seat_number == 5
        assert tables["T1"].player_at(5) == "p1"

    def test_move_vacates_previous_seat(self, allocator):
        players, tables = make_players(1), make_tables(9, 9)
        allocator.assign(players, tables, "p1", "T1", 3)
        allocator.assign(players, tables, "p1", "T2", 7)

        assert tables["T1"].player_at(3) is None
        assert tables["T2"].player_at(7) == "p1"
        assert players["p1"].table_id == "T2"
        assert_bijection(players, tables)

    def test_move_within_same_table(self, allocator):
        players, tables = make_players(1), make_tables(9)
        allocator.assign(players, tables, "p1", "T1", 2)
        allocator.assign(players, tables, "p1", "T1", 8)
        assert tables["T1"].occupied_seats() == [8]

    def test_reassign_same_seat_is_noop(self, allocator):
        players, tables = make_players(1), make_tables(9)
        allocator.assign(players, tables, "p1", "T1", 4)
        assert allocator.assign(players, tables, "p1", "T1", 4) == 4
        assert allocator.assign(players, tables, "p1", "T1") == 4
        assert tables["T1"].occupied_seats() == [4]

    def test_occupied_seat_rejected(self, allocator):
        players, tables = make_players(2), make_tables(9, 9)
        allocator.assign(players, tables, "p1", "T1", 1)
        allocator.assign(players, tables, "p2", "T2", 1)

        with pytest.raises(SeatOccupiedError) as exc_info:
            allocator.assign(players, tables, "p2", "T1", 1)
        assert exc_info.value.details["occupantId"] == "p1"

        # 실패 시 기존 좌석 유지
        assert players["p2"].table_id == "T2"
        assert tables["T2"].player_at(1) == "p2"

    @pytest.mark.parametrize("seat", [0, 10, -1])
    def test_seat_out_of_range(self, allocator, seat):
        players, tables = make_players(1), make_tables(9)
        with pytest.raises(InvalidSeatError):
            allocator.assign(players, tables, "p1", "T1", seat)
        assert not players["p1"].is_seated

    def test_full_table(self, allocator):
        players, tables = make_players(3), make_tables(2, 9)
        fill(allocator, players, tables, "T1", ["p1", "p2"])
        allocator.assign(players, tables, "p3", "T2")

        with pytest.raises(NoAvailableSeatsError):
            allocator.assign(players, tables, "p3", "T1")
        assert players["p3"].table_id == "T2"

    def test_unknown_player_or_table(self, allocator):
        players, tables = make_players(1), make_tables(9)
        with pytest.raises(PlayerNotFoundError):
            allocator.assign(players, tables, "ghost", "T1")
        with pytest.raises(TableNotFoundError):
            allocator.assign(players, tables, "p1", "T9")


class TestRemove:
    def test_remove_returns_occupant(self, allocator):
        players, tables = make_players(1), make_tables(9)
        allocator.assign(players, tables, "p1", "T1", 6)

        assert allocator.remove(players, tables, "T1", 6) == "p1"
        assert not players["p1"].is_seated
        assert tables["T1"].is_empty

    def test_remove_empty_seat_is_noop(self, allocator):
        players, tables = make_players(0), make_tables(9)
        assert allocator.remove(players, tables, "T1", 3) is None

    def test_remove_invalid_seat(self, allocator):
        players, tables = make_players(0), make_tables(9)
        with pytest.raises(InvalidSeatError):
            allocator.remove(players, tables, "T1", 12)
        with pytest.raises(TableNotFoundError):
            allocator.remove(players, tables, "T5", 1)

    def test_clear_table(self, allocator):
        players, tables = make_players(3), make_tables(9)
        fill(allocator, players, tables, "T1", ["p1", "p2", "p3"])

        released = allocator.clear_table(players, tables["T1"])
        assert released == ["p1", "p2", "p3"]
        assert all(not p.is_seated for p in players.values())


# =============================================================================
# Random seating
# =============================================================================


class TestRandomize:
    def test_round_robin_split(self, allocator):
        players, tables = make_players(10), make_tables(9, 9)
        result = allocator.randomize_all(players, tables)

        assert result.tables_needed == 2
        assert result.seated_count == 10
        assert result.unseated == []
        assert tables["T1"].player_count == 5
        assert tables["T2"].player_count == 5
        assert_bijection(players, tables)

    def test_uses_only_needed_tables(self, allocator):
        players, tables = make_players(6), make_tables(9, 9, 9)
        result = allocator.randomize_all(players, tables)

        assert result.tables_used == ["T1"]
        assert tables["T1"].player_count == 6
        assert tables["T2"].is_empty
        assert tables["T3"].is_empty

    def test_eliminated_players_are_not_seated(self, allocator):
        players, tables = make_players(4), make_tables(9)
        players["p2"].eliminate()

        allocator.randomize_all(players, tables)
        assert not players["p2"].is_seated
        assert tables["T1"].player_count == 3

    def test_clears_previous_seating(self, allocator):
        players, tables = make_players(3), make_tables(9, 9)
        fill(allocator, players, tables, "T2", ["p1", "p2", "p3"])

        allocator.randomize_all(players, tables)
        assert tables["T2"].is_empty
        assert tables["T1"].player_count == 3

    def test_creates_missing_tables_through_factory(self, allocator):
        players, tables = make_players(20), make_tables(9)
        created = iter(range(2, 10))

        def factory():
            n = next(created)
            return Table(table_id=f"T{n}")

        result = allocator.randomize_all(players, tables, create_table=factory)

        assert result.tables_created == ["T2", "T3"]
        assert len(tables) == 3
        assert result.seated_count == 20
        counts = sorted(t.player_count for t in tables.values())
        assert counts == [6, 7, 7]
        assert_bijection(players, tables)

    def test_without_factory_overflow_is_reported(self, allocator):
        players, tables = make_players(20), make_tables(9)
        result = allocator.randomize_all(players, tables)

        assert result.tables_created == []
        assert result.seated_count == 9
        assert len(result.unseated) == 11
        assert tables["T1"].is_full
        assert_bijection(players, tables)

    def test_no_tables_no_factory(self, allocator):
        players, tables = make_players(3), {}
        result = allocator.randomize_all(players, tables)
        assert result.seated_count == 0
        assert sorted(result.unseated) == ["p1", "p2", "p3"]

    def test_no_active_players(self, allocator):
        players, tables = make_players(0), make_tables(9)
        result = allocator.randomize_all(players, tables)
        assert result.tables_needed == 0
        assert result.seated_count == 0

    def test_same_seed_same_draw(self):
        draws = []
        for _ in range(2):
            players, tables = make_players(12), make_tables(9, 9)
            SeatingAllocator(rng=random.Random(7)).randomize_all(players, tables)
            draws.append([list(t.seats) for t in tables.values()])
        assert draws[0] == draws[1]


# =============================================================================
# Balancing
# =============================================================================


class TestBalance:
    def test_nine_and_three_become_six_and_six(self, allocator):
        players, tables = make_players(12), make_tables(9, 9)
        fill(allocator, players, tables, "T1", [f"p{i}" for i in range(1, 10)])
        fill(allocator, players, tables, "T2", ["p10", "p11", "p12"])

        result = allocator.balance(tables, players)

        assert result.balanced
        assert result.total_moves == 3
        assert result.table_counts == {"T1": 6, "T2": 6}
        assert result.message == "Tables balanced successfully"
        # 가장 높은 좌석 번호부터 이동
        assert [m.from_seat for m in result.moves] == [9, 8, 7]
        assert [m.to_seat for m in result.moves] == [4, 5, 6]
        assert_bijection(players, tables)

    def test_already_balanced(self, allocator):
        players, tables = make_players(5), make_tables(9, 9)
        fill(allocator, players, tables, "T1", ["p1", "p2", "p3"])
        fill(allocator, players, tables, "T2", ["p4", "p5"])

        result = allocator.balance(tables, players)
        assert result.balanced
        assert result.moves == []
        assert result.message == "Tables are already balanced"

    def test_requires_two_tables(self, allocator):
        players, tables = make_players(3), make_tables(9)
        with pytest.raises(InsufficientTablesError):
            allocator.balance(tables, players)

    def test_cannot_balance_into_full_table(self, allocator):
        players, tables = make_players(11), make_tables(9, 2)
        fill(allocator, players, tables, "T1", [f"p{i}" for i in range(1, 10)])
        fill(allocator, players, tables, "T2", ["p10", "p11"])

        result = allocator.balance(tables, players)
        assert not result.balanced
        assert result.moves == []
        assert result.message == "Could not balance tables further"

    def test_three_tables(self, allocator):
        players, tables = make_players(14), make_tables(9, 9, 9)
        fill(allocator, players, tables, "T1", [f"p{i}" for i in range(1, 10)])
        fill(allocator, players, tables, "T2", [f"p{i}" for i in range(10, 15)])

        result = allocator.balance(tables, players)
        counts = sorted(result.table_counts.values())
        assert counts[-1] - counts[0] <= 1
        assert sum(counts) == 14
        assert_bijection(players, tables)


class TestSeatingProperties:
    """Property tests: seat uniqueness and balance convergence."""

    @given(counts=st.lists(st.integers(min_value=0, max_value=9), min_size=2, max_size=6))
    @settings(max_examples=100, deadline=None)
    def test_balance_converges(self, counts):
        allocator = SeatingAllocator(rng=random.Random(0))
        players = make_players(sum(counts))
        tables = make_tables(*([9] * len(counts)))

        ids = iter(players)
        for table_id, count in zip(tables, counts):
            fill(allocator, players, tables, table_id, [next(ids) for _ in range(count)])

        result = allocator.balance(tables, players)

        assert result.balanced
        seated = [t.player_count for t in tables.values()]
        assert max(seated) - min(seated) <= 1
        assert sum(seated) == sum(counts)
        assert_bijection(players, tables)

    @given(
        ops=st.lists(
            st.tuples(
                st.integers(min_value=1, max_value=12),
                st.sampled_from(["T1", "T2"]),
                st.one_of(st.none(), st.integers(min_value=0, max_value=7)),
            ),
            max_size=40,
        )
    )
    @settings(max_examples=100, deadline=None)
    def test_assign_keeps_seats_unique(self, ops):
        allocator = SeatingAllocator(rng=random.Random(0))
        players, tables = make_players(12), make_tables(6, 6)

        for player_no, table_id, seat in ops:
            try:
                allocator.assign(players, tables, f"p{player_no}", table_id, seat)
            except (SeatOccupiedError, InvalidSeatError, NoAvailableSeatsError):
                pass
            assert_bijection(players, tables)
