"""
Clock Ticker - asyncio tick source for the tournament clock.

호스트 이벤트 루프에서 1초마다 Tournament.tick()을 호출.

- time.monotonic() 기준 타겟 시각으로 대기 (누적 드리프트 방지)
- 틱마다 선택적 on_tick 콜백 호출 (화면 갱신용)
- 토너먼트 종료 시 자동 정지
"""

import asyncio
import inspect
import time
from typing import Awaitable, Callable, Optional, Union

from tourney.logging_config import get_logger, tournament_context
from .blind_clock import ClockEvent
from .engine import Tournament
from .models import TournamentStats, TournamentStatus

logger = get_logger(__name__)

# 드리프트 경고 임계값 (초)
DRIFT_WARNING_SECONDS = 0.05

TickHandler = Callable[
    [ClockEvent, TournamentStats], Union[None, Awaitable[None]]
]


class ClockTicker:
    """Drives a Tournament clock from an asyncio loop.

    Usage:
    ```python
    ticker = ClockTicker(tournament, on_tick=render)
    ticker.start()
    ...
    await ticker.stop()
    ```
    """

    def __init__(
        self,
        tournament: Tournament,
        interval: Optional[float] = None,
        on_tick: Optional[TickHandler] = None,
    ):
        self.tournament = tournament
        self.interval = interval or tournament.settings.tick_interval_seconds
        self._on_tick = on_tick
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background tick loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._loop(), name=f"clock_ticker_{self.tournament.name}")
        logger.info("ticker_started", tournament=self.tournament.name, interval=self.interval)

    async def stop(self) -> None:
        """Cancel the tick loop and wait for it to exit."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("ticker_stopped", tournament=self.tournament.name)

    async def wait(self) -> None:
        """Wait until the loop exits on its own (tournament finished)."""
        if self._task is not None:
            await self._task

    async def _loop(self) -> None:
        with tournament_context(self.tournament.name):
            await self._run()

    async def _run(self) -> None:
        target = time.monotonic() + self.interval

        while self.tournament.status is not TournamentStatus.FINISHED:
            await asyncio.sleep(max(0.0, target - time.monotonic()))

            drift = time.monotonic() - target
            if drift > DRIFT_WARNING_SECONDS:
                logger.warning(
                    "ticker_drift",
                    drift_ms=round(drift * 1000, 1),
                )
            if drift > self.interval:
                # 밀린 틱은 재생하지 않음
                target = time.monotonic()

            event = self.tournament.tick()
            target += self.interval

            if self._on_tick is not None and event is not ClockEvent.IDLE:
                await self._notify(event)

        logger.info("ticker_finished", current_level=self.tournament.current_level)

    async def _notify(self, event: ClockEvent) -> None:
        try:
            result = self._on_tick(event, self.tournament.get_tournament_stats())
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("tick_handler_failed", clock_event=event.name)
