"""
Prize Distribution.

순위별 상금 계산. 총 상금과 정확히 일치 (잔여 단위 없음).

Features:
- 입상 인원 = ceil(참가자 * 40%)
- 1~3명 고정 비율, 4명 이상 가중치 분배
- 절사 후 잔여 금액은 1위에 합산

Usage:
    distributor = PrizeDistributor()
    payouts = distributor.distribute(prize_pool=1000, eligible=4)
"""

import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Dict, List, Sequence

from tourney.logging_config import get_logger

logger = get_logger(__name__)


# 고정 분배 비율 (입상 1~3명)
FIXED_STRUCTURES: Dict[int, Sequence[Fraction]] = {
    1: (Fraction(1),),
    2: (Fraction(65, 100), Fraction(35, 100)),
    3: (Fraction(50, 100), Fraction(30, 100), Fraction(20, 100)),
}

# 4명 이상일 때 1위 비율
FIRST_PLACE_SHARE = Fraction(35, 100)

DEFAULT_PAYOUT_RATIO = 0.4


@dataclass(frozen=True)
class Payout:
    """Prize for one finishing position."""

    position: int
    amount: int
    percentage: float = 0.0

    def to_dict(self) -> dict:
        return {
            "position": self.position,
            "amount": self.amount,
            "percentage": self.percentage,
        }


class PrizeDistributor:
    """
    Prize pool distribution.

    분배 규칙:
    ─────────────────────────────────────────────────────────────────

    - 0명: 없음
    - 1명: 100%
    - 2명: 65% / 35%
    - 3명: 50% / 30% / 20%
    - 4명 이상 (N):
        1위 35%, 나머지 65%를 2..N위에 가중치 w_i = 1 / (i · ln N)로 분배
        (가중치 합이 1이 되도록 정규화, 각 금액 절사)

    모든 경우 절사 오차(총상금 - 지급 합계)는 1위에 더함.

    ─────────────────────────────────────────────────────────────────
    """

    def __init__(self, payout_ratio: float = DEFAULT_PAYOUT_RATIO):
        self.payout_ratio = Fraction(str(payout_ratio))

    def eligible_count(self, total_players: int) -> int:
        """Number of paid positions: ceil(total_players * payout_ratio)."""
        if total_players <= 0:
            return 0
        return math.ceil(total_players * self.payout_ratio)

    def calculate(self, prize_pool: int, total_players: int) -> List[Payout]:
        """Payouts for a field of ``total_players`` entrants."""
        return self.distribute(prize_pool, self.eligible_count(total_players))

    def distribute(self, prize_pool: int, eligible: int) -> List[Payout]:
        """
        Split ``prize_pool`` across ``eligible`` positions.

        Args:
            prize_pool: Total pool in integer currency units
            eligible: Number of paid positions

        Returns:
            Payouts ordered by position; amounts sum to ``prize_pool``
        """
        if eligible <= 0:
            return []

        shares = self.shares(eligible)
        amounts = [math.floor(prize_pool * share) for share in shares]

        # 절사 오차는 1위에 합산
        remainder = prize_pool - sum(amounts)
        amounts[0] += remainder

        payouts = [
            Payout(
                position=position,
                amount=amount,
                percentage=round(amount * 100 / prize_pool, 2) if prize_pool else 0.0,
            )
            for position, amount in enumerate(amounts, 1)
        ]

        logger.debug(
            "prizes_calculated",
            prize_pool=prize_pool,
            eligible=eligible,
            remainder_to_first=remainder,
        )
        return payouts

    def shares(self, eligible: int) -> List[Fraction]:
        """Exact fraction of the pool owed to each position."""
        if eligible in FIXED_STRUCTURES:
            return list(FIXED_STRUCTURES[eligible])

        # w_i = 1 / (i · ln N); ln N is common to every weight and cancels
        # out in the normalization, so exact 1/i weights give the same split.
        weights = [Fraction(1, i) for i in range(2, eligible + 1)]
        total_weight = sum(weights)
        remaining = 1 - FIRST_PLACE_SHARE

        return [FIRST_PLACE_SHARE] + [remaining * w / total_weight for w in weights]
