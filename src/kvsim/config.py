"""
Configuration settings and logging setup for kvsim.
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Optional

import structlog


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


@dataclass
class Settings:
    """Settings read from the environment when instantiated."""

    # Logging settings
    LOG_LEVEL: str = field(default_factory=lambda: os.environ.get("KVSIM_LOG_LEVEL", "WARNING"))
    LOG_JSON: bool = field(default_factory=lambda: _env_flag("KVSIM_LOG_JSON"))


# Global settings instance
settings = Settings()


def configure_logging(level: Optional[str] = None, json: Optional[bool] = None) -> None:
    """
    Configure structlog to log through the ``kvsim`` stdlib logger.

    Importing kvsim never calls this. Applications and test suites that
    want kvsim's events opt in by calling it once at startup. Note that
    ``structlog.configure`` is process-wide. The root logger and its
    handlers are left to the application.

    Args:
        level: Log level name. Defaults to ``settings.LOG_LEVEL``.
        json: Render JSON lines instead of console output. Defaults to
            ``settings.LOG_JSON``.

    Raises:
        ValueError: If the level is not a stdlib logging level name
    """
    level = (level or settings.LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level {level!r}. Set KVSIM_LOG_LEVEL to DEBUG, INFO, WARNING, ERROR or CRITICAL.")
    json = settings.LOG_JSON if json is None else json

    package_logger = logging.getLogger("kvsim")
    package_logger.setLevel(level)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
