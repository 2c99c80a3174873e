"""Structured logging for the tournament engine.

Engine modules log through ``get_logger(__name__)``; the host configures
output once at startup with ``configure_logging_from_settings()``.

Output:
- JSON lines in production (or when ``json_logs`` is set)
- Console rendering in development
- ``tournament`` bound per clock task via ``tournament_context()``
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from tourney.config import Settings, get_settings

# 엔진 외부 로거 (노이즈 억제)
QUIET_LOGGERS = ("asyncio",)


def _add_app_env(app_env: str) -> Processor:
    def processor(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app_env", app_env)
        return event_dict

    return processor


def _shared_processors(app_env: str, use_json: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if use_json:
        # JSON 출력에만 app_env 포함
        processors.append(_add_app_env(app_env))
        processors.append(structlog.processors.format_exc_info)
    else:
        processors.append(structlog.dev.set_exc_info)
    return processors


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    app_env: str = "development",
) -> None:
    """Configure structlog and the root handler.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_logs: Force JSON output outside production
        app_env: Application environment; ``production`` implies JSON
    """
    use_json = json_logs or app_env == "production"
    shared = _shared_processors(app_env, use_json)

    renderer: Processor
    if use_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper()))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging_from_settings(settings: Optional[Settings] = None) -> None:
    """Apply ``log_level``, ``json_logs`` and ``app_env`` from Settings."""
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        app_env=settings.app_env,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("player_seated", table_id="Table 1", seat=4)
    """
    return structlog.get_logger(name)


@contextmanager
def tournament_context(name: str, **extra: Any) -> Iterator[None]:
    """Bind ``tournament`` (and ``extra``) for the enclosed block only.

    Bindings are contextvars, so each asyncio task keeps its own.
    """
    with structlog.contextvars.bound_contextvars(tournament=name, **extra):
        yield


def bind_context(**kwargs: Any) -> None:
    """Bind context variables to all subsequent log calls."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)
