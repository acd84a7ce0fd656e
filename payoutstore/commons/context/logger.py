"""
Logging of the storage layer.

structlog events are rendered into keyword arguments of the stdlib root logger,
whose only handler writes one json document per line to stdout:

    {"name": "database", "message": "connected", "database": "storage_db",
     "level": "INFO", "timestamp": "2020-01-01T00:00:00.000000Z", "pid": 42,
     "hostname": "...", "app": {"name": "payoutstore", "env": "testing"}}
"""
import logging
import os
import platform
import sys
from datetime import datetime, timezone
from typing import Any, Callable, Dict

import structlog
from pythonjsonlogger.json import JsonFormatter
from typing_extensions import Protocol

APP_NAME = "payoutstore"

# LogRecord attributes copied into every json document
LOG_RECORD_FIELDS = "%(name)s %(message)s"

DEBUG_ENVIRONMENTS = ("local", "testing")


def _environment() -> str:
    return os.environ.get("ENVIRONMENT", "unknown")


def app_info() -> Dict[str, Any]:
    return {
        "pid": os.getpid(),
        "hostname": platform.node(),
        "app": {"name": APP_NAME, "env": _environment()},
    }


class StorageJsonFormatter(JsonFormatter):
    """
    Fills in what a record logged through plain `logging` (e.g. by sqlalchemy) lacks
    compared to one coming from structlog.
    """

    def add_fields(
        self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict
    ):
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault(
            "timestamp",
            datetime.fromtimestamp(record.created, timezone.utc).strftime(
                "%Y-%m-%dT%H:%M:%S.%fZ"
            ),
        )
        log_record["level"] = (log_record.get("level") or record.levelname).upper()
        for key, value in app_info().items():
            log_record.setdefault(key, value)
        if record.threadName != "MainThread":
            log_record["thread"] = record.threadName


def add_app_info(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    event_dict.update(app_info())
    return event_dict


def add_err_info(logger: Any, method_name: str, event_dict: Dict) -> Dict:
    """
    Replace exc_info by an "error" object holding type, message and formatted stack
    """
    exc_info = event_dict.pop("exc_info", None)
    if exc_info is True:
        exc_info = sys.exc_info()[1]
    if not exc_info:
        return event_dict

    error = exc_info[1] if isinstance(exc_info, tuple) else exc_info
    stack = structlog.processors.format_exc_info(
        logger, method_name, {"exc_info": exc_info}
    ).get("exception")
    event_dict["error"] = {
        "type": type(error).__name__,
        "msg": str(error),
        "stack": stack,
    }
    return event_dict


def install_root_handler(debug: bool) -> logging.Handler:
    """
    Route the stdlib root logger to stdout as json, at most one such handler is installed
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    for handler in root.handlers:
        if isinstance(handler.formatter, StorageJsonFormatter):
            return handler

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StorageJsonFormatter(LOG_RECORD_FIELDS))
    root.addHandler(handler)
    return handler


install_root_handler(debug=_environment() in DEBUG_ENVIRONMENTS)

structlog.configure_once(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.add_log_level,
        add_app_info,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        add_err_info,
        structlog.processors.UnicodeDecoder(),
        # hand over to StorageJsonFormatter
        structlog.stdlib.render_to_log_kwargs,
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)


class Log(Protocol):
    """
    Static type of the lazy proxies returned by structlog.get_logger
    """

    def debug(self, event=None, *args, **kw):
        pass

    def info(self, event=None, *args, **kw):
        pass

    def warning(self, event=None, *args, **kw):
        pass

    def error(self, event=None, *args, **kw):
        pass

    def exception(self, event=None, *args, **kw):
        pass


# used while setting up storage
init_logger: Log = structlog.get_logger("initialization")
# get or create a named logger
get_logger: Callable[..., Log] = structlog.get_logger
