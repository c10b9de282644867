"""
Logging setup for the short links service.

Everything is logged through Loguru. Records written with the standard
library (services, repositories, uvicorn, SQLAlchemy) are forwarded to
the same sinks, and every record carries the ID of the request that
produced it.
"""

import logging
import os
import sys
from contextvars import ContextVar

from loguru import logger

from shortlinks.core.config import settings

REQUEST_LEVEL = "REQUEST"

# Set by the request logging middleware for the lifetime of a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

FORWARDED_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "shortlinks")


class InterceptHandler(logging.Handler):
    """Forward standard library records to Loguru, keeping the caller's frame."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip the logging module's own frames
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _add_request_id(record) -> None:
    record["extra"].setdefault("request_id", request_id_var.get())


def _register_request_level() -> None:
    try:
        logger.level(REQUEST_LEVEL)
    except ValueError:
        logger.level(REQUEST_LEVEL, no=25, color="<green>")


def _file_sink_options() -> dict:
    options = {
        "level": settings.LOG_LEVEL.upper(),
        "rotation": settings.LOG_ROTATION,
        "retention": settings.LOG_RETENTION,
        "compression": "gz",
    }
    if settings.LOG_JSON:
        options["serialize"] = True
    else:
        options["format"] = settings.LOG_FORMAT
    return options


def setup_logging():
    """
    Configure Loguru sinks and route standard library logging into them.

    A stderr sink is added in debug mode; the rotating file sink under
    ``LOG_DIR`` is always present. Safe to call more than once.
    """
    os.makedirs(settings.LOG_DIR, exist_ok=True)

    logger.remove()
    logger.configure(patcher=_add_request_id)
    _register_request_level()

    if settings.DEBUG:
        logger.add(
            sys.stderr,
            level=settings.LOG_LEVEL.upper(),
            format=settings.LOG_FORMAT,
            backtrace=True,
            diagnose=True,
        )

    logger.add(os.path.join(settings.LOG_DIR, settings.LOG_FILENAME), **_file_sink_options())

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in FORWARDED_LOGGERS:
        forwarded = logging.getLogger(name)
        forwarded.handlers = [InterceptHandler()]
        forwarded.propagate = False

    # SQL statements only when echo is asked for
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DB_ECHO else logging.WARNING
    )

    return logger
