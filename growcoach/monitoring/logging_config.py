"""Logging configuration."""

import logging
import sys

import structlog

NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "sqlalchemy.engine", "aiosqlite")


def setup_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Setup structured logging."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stderr keeps the chat transcript on stdout readable
    logging.basicConfig(
        format="%(message)s" if json_format else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
