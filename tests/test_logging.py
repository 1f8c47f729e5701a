"""
Tests for the JSON log formatter
"""

import json
import logging
import sys

import httpx

from app.errors import database_unavailable
from app.logging_config import JSONFormatter


def test_plain_record():
    record = logging.LogRecord("services.x", logging.INFO, __file__, 12, "hello %s", ("box",), None)
    line = json.loads(JSONFormatter().format(record))
    assert line["message"] == "hello box"
    assert line["level"] == "INFO"
    assert line["logger"] == "services.x"
    assert line["location"].endswith(":12")


def test_extra_fields_become_keys(caplog):
    with caplog.at_level(logging.ERROR, logger="app.errors"):
        database_unavailable(httpx.ConnectError("db down"), "workout", "w1", "fetch")

    line = json.loads(JSONFormatter().format(caplog.records[-1]))
    assert line["resource"] == "workout"
    assert line["action"] == "fetch"
    assert line["level"] == "ERROR"
    assert "db down" in line["message"]


def test_exceptions_are_included():
    try:
        raise ValueError("bad weight")
    except ValueError:
        record = logging.LogRecord(
            "main", logging.ERROR, __file__, 1, "failed", None, sys.exc_info()
        )
    line = json.loads(JSONFormatter().format(record))
    assert "ValueError: bad weight" in line["exception"]
