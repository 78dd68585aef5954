"""Logging configuration tests: formatters and request context tagging."""

import json
import logging

from flask import g

from showcase.middleware.logging_config import JSONFormatter, ReadableFormatter, RequestContextFilter


def _record(msg="Submission saved", **extra):
    record = logging.LogRecord("showcase.services.submission_store", logging.INFO, __file__, 10, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_nests_context():
    line = JSONFormatter().format(_record(user_id=3, submission_id=7))
    entry = json.loads(line)
    assert entry["msg"] == "Submission saved"
    assert entry["level"] == "INFO"
    assert entry["context"] == {"user_id": 3, "submission_id": 7}


def test_json_formatter_without_context():
    assert "context" not in json.loads(JSONFormatter().format(_record()))


def test_readable_formatter_tags():
    line = ReadableFormatter().format(_record(submission_id=7, duration_ms=12.4))
    assert "Submission saved" in line
    assert "sub=7" in line
    assert "12ms" in line


def test_filter_stamps_request_context(app):
    record = _record()
    with app.test_request_context("/api/v1/submissions/current"):
        g.request_id = "req-1"
        g.jwt_user_id = 42
        assert RequestContextFilter().filter(record)
    assert record.request_id == "req-1"
    assert record.user_id == 42


def test_filter_outside_request_is_noop():
    record = _record()
    assert RequestContextFilter().filter(record)
    assert getattr(record, "request_id", None) is None
