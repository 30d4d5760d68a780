"""
Tests for log formatting and masking
"""
import json
import logging

from budget_app.core.logging_config import (ContextualFormatter,
                                            LoggingConfig,
                                            SensitiveDataFilter)


def make_record(msg, *args, **extra):
    record = logging.LogRecord("budget_app.test", logging.INFO, __file__, 10, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_sensitive_values_are_masked():
    record = make_record("calling with api_key=sk-123 and Bearer abc.def")
    SensitiveDataFilter().filter(record)

    assert "sk-123" not in record.msg
    assert "abc.def" not in record.msg


def test_masking_can_be_disabled():
    record = make_record("token=xyz")
    SensitiveDataFilter(enabled=False).filter(record)
    assert record.msg == "token=xyz"


def test_json_formatter_includes_context_and_extra():
    LoggingConfig.set_context(request_id="req-1")
    try:
        line = ContextualFormatter().format(make_record("Budget stored", store="chapter"))
    finally:
        LoggingConfig.clear_context()

    data = json.loads(line)
    assert data["message"] == "Budget stored"
    assert data["level"] == "INFO"
    assert data["request_id"] == "req-1"
    assert data["store"] == "chapter"
