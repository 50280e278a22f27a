import logging
import sys
import uuid
from contextvars import ContextVar
from logging.config import dictConfig

from aeinfo.core.config import settings

# set per request by RequestContextMiddleware
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get("-")
        return True


def setup_logging() -> None:
    """Configure logging for the process. Call once at startup."""
    level = settings.LOG_LEVEL.upper()
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {
                "()": RequestIdFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | req=%(request_id)s | %(message)s"
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "filters": ["request_id"],
                "formatter": "default",
                "level": level,
            },
        },
        "loggers": {
            "aeinfo": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["console"], "level": level, "propagate": False},
        },
        "root": {"handlers": ["console"], "level": level},
    })


def get_logger(name: str) -> logging.Logger:
    if not name.startswith("aeinfo"):
        name = f"aeinfo.{name}"
    return logging.getLogger(name)


def new_request_id() -> str:
    return uuid.uuid4().hex[:16]
