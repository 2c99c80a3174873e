"""
Settle-Up Calculation.

칩을 현금으로 환산해 플레이어별 손익과 송금 목록을 계산.

Features:
- chips / chip_ratio = 환산 금액
- 손익 = 환산 금액 - 총 바이인
- 채권자/채무자 그리디 매칭으로 송금 목록 생성
- 최대 손실자(biggest loser)는 저장하지 않고 매번 계산

Usage:
    summary = settle(
        [SettleUpEntry("Alice", chips=15000, total_buy_in=Decimal("100"))],
        chip_ratio=Decimal("100"),
    )
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Union

from tourney.logging_config import get_logger
from tourney.utils.errors import InvalidConfigError

logger = get_logger(__name__)

CENT = Decimal("0.01")

Number = Union[int, str, Decimal]


def to_money(value: Number) -> Decimal:
    """Round to cents, half-up."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SettleUpEntry:
    """Input row: what a player holds and what they paid in."""

    name: str
    chips: int
    total_buy_in: Decimal


@dataclass(frozen=True)
class PlayerResult:
    """Cash-out result for one player."""

    name: str
    chips: int
    money: Decimal
    total_buy_in: Decimal
    balance: Decimal

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "chips": self.chips,
            "money": str(self.money),
            "total_buy_in": str(self.total_buy_in),
            "balance": str(self.balance),
        }


@dataclass(frozen=True)
class Transfer:
    """Single payment from a debtor to a creditor."""

    from_name: str
    to_name: str
    amount: Decimal

    def to_dict(self) -> dict:
        return {"from": self.from_name, "to": self.to_name, "amount": str(self.amount)}


@dataclass
class SettlementSummary:
    """정산 요약."""

    results: List[PlayerResult] = field(default_factory=list)
    transfers: List[Transfer] = field(default_factory=list)

    @property
    def biggest_loser(self) -> Optional[PlayerResult]:
        return biggest_loser(self.results)

    def to_dict(self) -> dict:
        loser = self.biggest_loser
        return {
            "results": [r.to_dict() for r in self.results],
            "transfers": [t.to_dict() for t in self.transfers],
            "biggest_loser": loser.name if loser else None,
        }


def home_game_entries(
    rows: Iterable[tuple],
    buy_in: Number,
) -> List[SettleUpEntry]:
    """Build entries from ``(name, buy_ins, chips)`` rows at a flat buy-in."""
    price = Decimal(buy_in)
    return [
        SettleUpEntry(name=name, chips=chips, total_buy_in=to_money(buy_ins * price))
        for name, buy_ins, chips in rows
    ]


def calculate_results(
    entries: Iterable[SettleUpEntry],
    chip_ratio: Number,
) -> List[PlayerResult]:
    """Convert chip counts to money and compute each player's balance."""
    ratio = Decimal(chip_ratio)
    if ratio <= 0:
        raise InvalidConfigError("chip_ratio", chip_ratio, "must be > 0")

    results = []
    for entry in entries:
        money = to_money(Decimal(entry.chips) / ratio)
        total_buy_in = to_money(entry.total_buy_in)
        results.append(
            PlayerResult(
                name=entry.name,
                chips=entry.chips,
                money=money,
                total_buy_in=total_buy_in,
                balance=money - total_buy_in,
            )
        )
    return results


def calculate_transfers(results: Iterable[PlayerResult]) -> List[Transfer]:
    """
    Greedy settle-up: the largest debtor pays the largest creditor until
    one side is exhausted.
    """
    creditors = sorted(
        ([r.name, r.balance] for r in results if r.balance > 0),
        key=lambda c: c[1],
        reverse=True,
    )
    debtors = sorted(
        ([r.name, r.balance] for r in results if r.balance < 0),
        key=lambda d: d[1],
    )

    transfers: List[Transfer] = []
    while creditors and debtors:
        creditor, debtor = creditors[0], debtors[0]
        amount = min(creditor[1], -debtor[1])

        transfers.append(Transfer(from_name=debtor[0], to_name=creditor[0], amount=amount))

        creditor[1] -= amount
        debtor[1] += amount

        if creditor[1] <= 0:
            creditors.pop(0)
        if debtor[1] >= 0:
            debtors.pop(0)

    return transfers


def biggest_loser(results: Iterable[PlayerResult]) -> Optional[PlayerResult]:
    """Player with the lowest balance (first one wins ties)."""
    loser: Optional[PlayerResult] = None
    for result in results:
        if loser is None or result.balance < loser.balance:
            loser = result
    return loser


def settle(entries: Iterable[SettleUpEntry], chip_ratio: Number) -> SettlementSummary:
    """Compute results and transfers in one pass."""
    results = calculate_results(entries, chip_ratio)
    summary = SettlementSummary(results=results, transfers=calculate_transfers(results))

    loser = summary.biggest_loser
    logger.info(
        "settle_up_calculated",
        players=len(results),
        transfers=len(summary.transfers),
        biggest_loser=loser.name if loser else None,
    )
    return summary
