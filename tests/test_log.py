import json
import logging
import sys

from guestbook.log import JsonFormatter, configure_logging


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord(
            "guestbook.test", logging.ERROR, __file__, 1, "failed %s", ("op",), sys.exc_info()
        )
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "ERROR"
    assert payload["logger"] == "guestbook.test"
    assert payload["message"] == "failed op"
    assert "ValueError: boom" in payload["exception"]


def test_configure_logging_replaces_handlers():
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        configure_logging("debug", json_output=False)
        configure_logging("warning", json_output=True)
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
