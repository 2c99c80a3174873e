"""
Tournament Clock - Blind Level / Break State Machine.

틱(1초) 기반 카운트다운으로 블라인드 레벨과 휴식을 관리.

핵심 설계:
─────────────────────────────────────────────────────────────────────────────────

1. 상태 전이:
   setup → running ⇄ paused
   running → break → running
   running / break / paused → finished (종료 상태)

2. 외부 틱 구동:
   - 호스트(ClockTicker 등)가 1초마다 tick() 호출
   - tick() 한 번 = 원자적 상태 전이 한 번
   - paused 상태에서는 tick()이 아무 효과 없음

3. 휴식 타이밍:
   - 새 레벨 번호 % break_interval == 0 이면 그 레벨 시작 전에 휴식
   - 레벨 인덱스만으로 결정 (수동 레벨 스킵과 무관하게 결정적)

─────────────────────────────────────────────────────────────────────────────────
"""

from enum import Enum, auto
from typing import Any, Dict, List, Optional

from tourney.logging_config import get_logger
from tourney.utils.errors import (
    InvalidTransitionError,
    NoLevelsDefinedError,
    NoMoreLevelsError,
)
from .models import BlindLevel, TournamentStatus

logger = get_logger(__name__)


class ClockEvent(Enum):
    """Outcome of a single clock step."""

    IDLE = auto()  # 틱 무시 (setup / paused / finished)
    TICK = auto()  # 1초 감소
    LEVEL_UP = auto()
    BREAK_STARTED = auto()
    BREAK_ENDED = auto()
    FINISHED = auto()


def format_time(seconds: int) -> str:
    """Render seconds as ``M:SS``."""
    minutes, remaining = divmod(max(0, seconds), 60)
    return f"{minutes}:{remaining:02d}"


class TournamentClock:
    """Countdown clock driving level and break transitions.

    The clock reads the level list it is given by reference, so levels
    appended to the tournament after construction are visible here.
    """

    def __init__(
        self,
        levels: List[BlindLevel],
        break_interval: int = 0,
        break_duration_minutes: int = 0,
    ):
        self.levels = levels
        self.break_interval = break_interval
        self.break_duration_minutes = break_duration_minutes

        self.status = TournamentStatus.SETUP
        self.current_level = 0  # 0 = 시작 전
        self.time_remaining = 0  # 초

        # pause 직전 상태 (running 또는 break)
        self._resume_status: Optional[TournamentStatus] = None

    # ─────────────────────────────────────────────────────────────────────────
    # Configuration
    # ─────────────────────────────────────────────────────────────────────────

    def configure_breaks(self, break_interval: int, break_duration_minutes: int) -> None:
        self.break_interval = break_interval
        self.break_duration_minutes = break_duration_minutes

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def current_blind(self) -> Optional[BlindLevel]:
        if 1 <= self.current_level <= len(self.levels):
            return self.levels[self.current_level - 1]
        return None

    @property
    def next_blind(self) -> Optional[BlindLevel]:
        if self.current_level < len(self.levels):
            return self.levels[self.current_level]
        return None

    @property
    def is_last_level(self) -> bool:
        return self.current_level >= len(self.levels)

    @property
    def time_display(self) -> str:
        return format_time(self.time_remaining)

    @property
    def is_counting(self) -> bool:
        return self.status in (TournamentStatus.RUNNING, TournamentStatus.BREAK)

    def break_due_at(self, level: int) -> bool:
        """Whether a break precedes the start of ``level``."""
        return (
            self.break_interval > 0
            and self.break_duration_minutes > 0
            and level % self.break_interval == 0
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────────────

    def start(self) -> None:
        """Start level 1."""
        if self.status is not TournamentStatus.SETUP:
            raise InvalidTransitionError("start", self.status.value)
        if not self.levels:
            raise NoLevelsDefinedError()

        self.current_level = 1
        self.time_remaining = self.levels[0].duration_seconds
        self.status = TournamentStatus.RUNNING

        logger.info(
            "clock_started",
            blind_level=1,
            blinds=self.levels[0].blinds_display,
            time_remaining=self.time_remaining,
        )

    def tick(self) -> ClockEvent:
        """Advance the countdown by one second."""
        if not self.is_counting:
            return ClockEvent.IDLE

        self.time_remaining -= 1
        if self.time_remaining > 0:
            return ClockEvent.TICK

        self.time_remaining = 0
        if self.status is TournamentStatus.BREAK:
            return self._end_break()
        return self._expire_level()

    def pause(self) -> None:
        if not self.is_counting:
            raise InvalidTransitionError("pause", self.status.value)

        self._resume_status = self.status
        self.status = TournamentStatus.PAUSED
        logger.info(
            "clock_paused",
            phase=self._resume_status.value,
            time_remaining=self.time_remaining,
        )

    def resume(self) -> None:
        if self.status is not TournamentStatus.PAUSED:
            raise InvalidTransitionError("resume", self.status.value)

        self.status = self._resume_status or TournamentStatus.RUNNING
        self._resume_status = None
        logger.info(
            "clock_resumed",
            phase=self.status.value,
            time_remaining=self.time_remaining,
        )

    def advance_level(self) -> ClockEvent:
        """Manually expire the current level."""
        if self.status is not TournamentStatus.RUNNING:
            raise InvalidTransitionError("advance level", self.status.value)
        if self.is_last_level:
            raise NoMoreLevelsError(self.current_level)

        return self._expire_level()

    def finish(self) -> None:
        if self.status not in (
            TournamentStatus.RUNNING,
            TournamentStatus.BREAK,
            TournamentStatus.PAUSED,
        ):
            raise InvalidTransitionError("finish", self.status.value)

        self._finish()

    def _expire_level(self) -> ClockEvent:
        """Level ``current_level`` is over: break, next level, or finish."""
        finished_level = self.current_level

        if self.is_last_level:
            self._finish()
            return ClockEvent.FINISHED

        self.current_level = finished_level + 1

        if self.break_due_at(self.current_level):
            self.status = TournamentStatus.BREAK
            self.time_remaining = self.break_duration_minutes * 60
            logger.info(
                "break_started",
                after_level=finished_level,
                resumes_at_level=self.current_level,
                time_remaining=self.time_remaining,
            )
            return ClockEvent.BREAK_STARTED

        blind = self.levels[self.current_level - 1]
        self.status = TournamentStatus.RUNNING
        self.time_remaining = blind.duration_seconds
        logger.info(
            "level_advanced",
            blind_level=self.current_level,
            blinds=blind.blinds_display,
            ante=blind.ante,
        )
        return ClockEvent.LEVEL_UP

    def _end_break(self) -> ClockEvent:
        blind = self.levels[self.current_level - 1]
        self.status = TournamentStatus.RUNNING
        self.time_remaining = blind.duration_seconds
        logger.info("break_ended", blind_level=self.current_level, blinds=blind.blinds_display)
        return ClockEvent.BREAK_ENDED

    def _finish(self) -> None:
        self.status = TournamentStatus.FINISHED
        self.time_remaining = 0
        self._resume_status = None
        logger.info("clock_finished", blind_level=self.current_level)

    def to_dict(self) -> Dict[str, Any]:
        """직렬화용 딕셔너리 변환."""
        current = self.current_blind
        return {
            "status": self.status.value,
            "current_level": self.current_level,
            "small_blind": current.small_blind if current else 0,
            "big_blind": current.big_blind if current else 0,
            "ante": current.ante if current else 0,
            "time_remaining": self.time_remaining,
            "time_display": self.time_display,
            "break_interval": self.break_interval,
        }
