"""Logging configuration for the calendar service."""

import logging
import os
import sys

from pydantic import BaseModel, Field

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LogConfig(BaseModel):
    """Logging configuration.

    ``quiet_loggers`` are third-party loggers held at WARNING: the backend
    client logs its own requests, and uvicorn's access log duplicates the
    endpoint logs.
    """

    level: str = "INFO"
    format: str = DEFAULT_FORMAT
    date_format: str = "%Y-%m-%d %H:%M:%S"
    quiet_loggers: list[str] = Field(default_factory=lambda: ["httpx", "httpcore", "uvicorn.access"])

    @classmethod
    def from_env(cls) -> "LogConfig":
        """Read ``LOG_LEVEL`` and ``LOG_FORMAT`` from the environment."""
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            format=os.getenv("LOG_FORMAT", DEFAULT_FORMAT),
        )


def setup_logging(config: LogConfig | None = None) -> None:
    """Configure the root logger for the calendar service."""
    config = config or LogConfig.from_env()

    logging.basicConfig(
        level=getattr(logging, config.level.upper()),
        format=config.format,
        datefmt=config.date_format,
        stream=sys.stdout,
        force=True,
    )

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Get a logger for a calendar service module.

    Args:
        name: Module name (typically __name__)
        level: Optional level override, defaults to the LOG_LEVEL env var

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    return logger
