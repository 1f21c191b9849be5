"""
logging_config.py — Loguru Setup for Connect B2B

One backend for every log line: our modules, SQLAlchemy, uvicorn and
slowapi all log through the stdlib, and an intercept handler hands those
records to Loguru so they share sinks, levels and the request id bound by
the request-id middleware.

Business Rules:
- Production (APP_URL on the live host) writes JSON lines: stdout for the
  container runtime plus a rotating file under LOG_DIR (50 MB, kept 7 days)
- Anywhere else writes one coloured line per record to stdout
- Records logged outside a request carry request_id "-"
- SQLAlchemy engine/pool chatter and uvicorn access lines are held at WARNING

Called by: connectb2b/main.py (on startup)
Depends on: LOG_LEVEL, APP_URL, LOG_DIR environment variables
"""

import logging
import os
import sys

from loguru import logger

LIVE_HOST = "knowforth.online"
DEFAULT_LOG_DIR = "/var/log/connectb2b"
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "sqlalchemy.pool")

DEV_FORMAT = (
    "<green>{time:HH:mm:ss}</green> <level>{level: <8}</level> "
    "[{extra[request_id]}] <cyan>{name}:{line}</cyan> {message}"
)


def _sinks(level: str, live: bool) -> list[tuple]:
    """(sink, options) pairs for the current environment."""
    if not live:
        return [(sys.stdout, {"level": level, "format": DEV_FORMAT, "colorize": True})]

    log_file = os.path.join(os.getenv("LOG_DIR", DEFAULT_LOG_DIR), "connectb2b.log")
    json_lines = {"level": level, "serialize": True}
    return [
        (sys.stdout, {**json_lines, "format": "{message}"}),
        (log_file, {**json_lines, "rotation": "50 MB", "retention": "7 days", "compression": "gz"}),
    ]


def setup_logging() -> None:
    """Replace Loguru's default sink and route stdlib logging into it. Call once at startup."""
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    live = LIVE_HOST in os.getenv("APP_URL", "")

    logger.remove()
    for sink, options in _sinks(level, live):
        logger.add(sink, **options)
    logger.configure(extra={"request_id": "-"})

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging configured", level=level, production=live)


def _loguru_level(record: logging.LogRecord):
    try:
        return logger.level(record.levelname).name
    except ValueError:
        return record.levelno


class _InterceptHandler(logging.Handler):
    """Hand stdlib records to Loguru, attributed to the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        frame, depth = sys._getframe(1), 1
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(
            _loguru_level(record), record.getMessage()
        )
