"""Logging configuration with structlog integration.

Two logging channels are used:
1. loguru: operational and debug logs
2. structlog: structured repository events (failures, lookup misses)
"""

import sys
from typing import Any

import structlog
from loguru import logger

from mappedrepo.core.config import Settings, settings


def setup_logging(config: Settings | None = None) -> None:
    """Configure application logging with structlog and loguru."""
    config = config or settings

    _configure_structlog(config)
    _configure_loguru(config)

    logger.info(f"Logging configured with level: {config.LOG_LEVEL}")


def _configure_structlog(config: Settings) -> None:
    """Configure the structlog processor chain."""
    if config.ENVIRONMENT == "local":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level_number(config.LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru(config: Settings) -> None:
    """Configure loguru sinks."""
    logger.remove()

    logger.add(
        sys.stderr,
        level=config.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if config.ENVIRONMENT != "local":
        logger.add(
            f"{config.LOG_DIR}/mappedrepo_{{time:YYYY-MM-DD}}.log",
            rotation="00:00",
            retention="30 days",
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


def _get_log_level_number(level: str) -> int:
    """Map a level name to its numeric value."""
    levels = {
        "TRACE": 5,
        "DEBUG": 10,
        "INFO": 20,
        "SUCCESS": 25,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


# ============================================================================
# Repository event logger
# ============================================================================


class RepositoryEvents:
    """Structured log records for repository events.

    Usage:
        from mappedrepo.core.infrastructure.logging import RepositoryEvents

        RepositoryEvents.call_failed(
            repository="MappedRepository", operation="save", error=exc, wrapped=True
        )
    """

    _log = structlog.get_logger("mappedrepo.events")

    @classmethod
    def call_failed(
        cls,
        repository: str,
        operation: str,
        error: BaseException,
        wrapped: bool,
        **extra: Any,
    ) -> None:
        """Record a failed repository call."""
        cls._log.warning(
            "repository_call_failed",
            event_type="repository",
            repository=repository,
            operation=operation,
            error_type=type(error).__name__,
            error=str(error),
            wrapped=wrapped,
            **extra,
        )

    @classmethod
    def entity_not_found(
        cls,
        repository: str,
        entity_type: str,
        entity_id: Any,
        **extra: Any,
    ) -> None:
        """Record a lookup that required an entity which does not exist."""
        cls._log.info(
            "entity_not_found",
            event_type="repository",
            repository=repository,
            entity_type=entity_type,
            entity_id=str(entity_id),
            **extra,
        )
