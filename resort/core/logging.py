import logging
import sys

from pythonjsonlogger import jsonlogger

from resort.core.config import settings

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging() -> None:
    """Root logger to stdout, console or JSON depending on LOG_FORMAT"""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format.lower() == "json":
        handler.setFormatter(
            jsonlogger.JsonFormatter(JSON_FORMAT, json_ensure_ascii=False)
        )
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Re-running setup (reload, tests) must not stack handlers
    root_logger.handlers = [handler]

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "apscheduler"):
        logging.getLogger(name).setLevel(level)

    # SQL echo and driver chatter only when explicitly debugging
    for name in ("sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
