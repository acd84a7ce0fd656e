import json
import logging

from payoutstore.commons.context.logger import (
    APP_NAME,
    LOG_RECORD_FIELDS,
    StorageJsonFormatter,
    add_err_info,
    install_root_handler,
)


def make_record(msg: str = "connected") -> logging.LogRecord:
    return logging.LogRecord(
        name="database",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=None,
        exc_info=None,
    )


def test_json_formatter_adds_app_fields():
    output = json.loads(StorageJsonFormatter(LOG_RECORD_FIELDS).format(make_record()))

    assert output["name"] == "database"
    assert output["message"] == "connected"
    assert output["level"] == "INFO"
    assert output["app"] == {"name": APP_NAME, "env": "testing"}
    assert output["timestamp"].endswith("Z")
    assert "pid" in output
    assert "thread" not in output


def test_json_formatter_keeps_structlog_fields():
    record = make_record()
    record.level = "warning"
    record.timestamp = "2020-01-01T00:00:00Z"
    output = json.loads(StorageJsonFormatter(LOG_RECORD_FIELDS).format(record))

    assert output["level"] == "WARNING"
    assert output["timestamp"] == "2020-01-01T00:00:00Z"


def test_root_handler_installed_once():
    root = logging.getLogger()
    handler = install_root_handler(debug=True)

    assert handler in root.handlers
    assert install_root_handler(debug=True) is handler
    assert (
        len([h for h in root.handlers if isinstance(h.formatter, StorageJsonFormatter)])
        == 1
    )


def test_add_err_info():
    try:
        raise KeyError("missing")
    except KeyError as e:
        event_dict = add_err_info(None, "error", {"event": "failed", "exc_info": e})

    assert "exc_info" not in event_dict
    assert event_dict["error"]["type"] == "KeyError"
    assert "missing" in event_dict["error"]["msg"]
    assert "Traceback" in event_dict["error"]["stack"]


def test_add_err_info_from_current_exception():
    try:
        raise ValueError("bad value")
    except ValueError:
        event_dict = add_err_info(None, "exception", {"event": "failed", "exc_info": True})

    assert event_dict["error"]["type"] == "ValueError"
    assert event_dict["error"]["msg"] == "bad value"


def test_add_err_info_without_error():
    assert add_err_info(None, "info", {"event": "ok"}) == {"event": "ok"}
