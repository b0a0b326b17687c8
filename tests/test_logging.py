"""
Tests for structured logging helpers.
"""

import logging

import pytest
from unittest.mock import patch

from util.logging import StructuredLogger, audit_event, logger, sanitize_payload


@pytest.fixture
def structured_logger():
    return StructuredLogger("language_resources.test")


class TestStructuredLogger:
    """Message formats of the domain helpers."""

    def test_log_operation_format(self, structured_logger, caplog):
        with caplog.at_level(logging.INFO, logger="language_resources.test"):
            structured_logger.log_operation("resource.insert", "success", {"resource_id": 3})

        assert "Operation: resource.insert, Status: success, Details: {'resource_id': 3}" in caplog.text

    def test_log_search_truncates_query_and_drops_empty_filters(self, structured_logger):
        with patch.object(structured_logger, "log_operation") as mock_log:
            structured_logger.log_search("x" * 80, {"locale": "ko-KR", "product": None}, 4)

        operation, status, details = mock_log.call_args.args
        assert operation == "search"
        assert len(details["query"]) == 50
        assert details["locale"] == "ko-KR"
        assert "product" not in details
        assert details["total"] == 4

    def test_log_suggestion_degraded_status(self, structured_logger):
        with patch.object(structured_logger, "log_operation") as mock_log:
            structured_logger.log_suggestion("template", 0.3, degraded=True)

        mock_log.assert_called_once_with("suggest", "degraded", {"source": "template", "confidence": 0.3})

    def test_validation_error_redacts_values(self, structured_logger, caplog):
        with caplog.at_level(logging.WARNING, logger="language_resources.test"):
            structured_logger.log_validation_error(
                "insert_resource",
                [{"field": "translations", "value": "비밀 텍스트"}],
                {"key": "auth.login", "translations": {"ko-KR": "비밀 텍스트"}},
            )

        assert "[REDACTED]" in caplog.text
        assert "비밀 텍스트" not in caplog.text
        assert "auth.login" in caplog.text

    def test_auth_failure_is_warning(self, structured_logger, caplog):
        with caplog.at_level(logging.WARNING, logger="language_resources.test"):
            structured_logger.log_auth_failure("missing", "/resources")

        assert caplog.records[-1].levelno == logging.WARNING
        assert "/resources" in caplog.text


class TestSanitizePayload:

    def test_sensitive_fields_redacted(self):
        payload = {"x-secret": "s3cret", "nested": {"password": "pw", "text": "ok"}}

        assert sanitize_payload(payload) == {"x-secret": "[REDACTED]", "nested": {"password": "[REDACTED]", "text": "ok"}}

    def test_long_strings_truncated(self):
        result = sanitize_payload(["가" * 150])

        assert len(result[0]) == 100
        assert result[0].endswith("...")

    def test_reveal_sensitive(self):
        assert sanitize_payload({"secret": "s"}, reveal_sensitive=True) == {"secret": "s"}


def test_audit_event_sanitizes_payload():
    with patch.object(logger, "log_operation") as mock_log:
        audit_event("resource.created", {"id": 1}, payload={"secret": "s", "key": "common.ok"})

    operation, status, details = mock_log.call_args.args
    assert operation == "resource_created"
    assert status == "audit"
    assert details == {"id": 1, "payload": {"secret": "[REDACTED]", "key": "common.ok"}}
