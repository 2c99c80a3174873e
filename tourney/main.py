"""
Host entry point.

시작 순서: 설정 로드 → 로깅 구성 → 토너먼트 생성 → 시계 구동.

Usage:
    tournament = create_tournament("Saturday Night Special")
    tournament.add_level(25, 50)
    tournament.start_tournament()
    await run_clock(tournament, on_tick=render)
"""

import random
from typing import Callable, Optional

from tourney.config import Settings, get_settings
from tourney.logging_config import configure_logging_from_settings, get_logger
from tourney.tournament import ClockTicker, Tournament, TournamentConfig
from tourney.tournament.ticker import TickHandler


def create_tournament(
    name: str,
    config: Optional[TournamentConfig] = None,
    settings: Optional[Settings] = None,
    id_factory: Optional[Callable[[], str]] = None,
    rng: Optional[random.Random] = None,
) -> Tournament:
    """Configure logging from settings and build a tournament."""
    settings = settings or get_settings()
    configure_logging_from_settings(settings)

    tournament = Tournament(
        name,
        config=config,
        settings=settings,
        id_factory=id_factory,
        rng=rng,
    )

    get_logger(__name__).info(
        "tournament_created",
        tournament=name,
        app_env=settings.app_env,
        log_level=settings.log_level,
        **tournament.config.to_dict(),
    )
    return tournament


async def run_clock(
    tournament: Tournament,
    on_tick: Optional[TickHandler] = None,
    interval: Optional[float] = None,
) -> None:
    """Drive the clock until the tournament finishes.

    Cancelling the awaiting task stops the ticker.
    """
    ticker = ClockTicker(tournament, interval=interval, on_tick=on_tick)
    ticker.start()
    try:
        await ticker.wait()
    finally:
        await ticker.stop()
