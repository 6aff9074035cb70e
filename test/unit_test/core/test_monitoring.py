"""Unit tests for the Logfire monitoring module.

``logfire`` is replaced with a mock through ``sys.modules`` so that no test
ever talks to the Logfire backend.
"""

import sys
from unittest.mock import MagicMock, patch

import pytest

from transparent_trust.core.monitoring import (
    initialize_logfire,
    log_api_request,
    log_error,
    log_git_sync,
    log_llm_call,
)


@pytest.fixture
def fake_logfire():
    mock = MagicMock()
    with patch.dict(sys.modules, {"logfire": mock}):
        yield mock


class TestInitializeLogfire:
    @patch("transparent_trust.core.monitoring.LOGFIRE_ENABLED", False)
    @patch("transparent_trust.core.monitoring.logger")
    def test_disabled(self, mock_logger, fake_logfire):
        initialize_logfire()

        fake_logfire.configure.assert_not_called()
        assert "disabled" in mock_logger.info.call_args[0][0]

    @patch("transparent_trust.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TOKEN", "")
    @patch("transparent_trust.core.monitoring.logger")
    def test_enabled_without_token(self, mock_logger, fake_logfire):
        initialize_logfire()

        fake_logfire.configure.assert_not_called()
        mock_logger.warning.assert_called_once()

    @patch("transparent_trust.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("transparent_trust.core.monitoring.LOGFIRE_SERVICE_NAME", "tt-test")
    @patch("transparent_trust.core.monitoring.LOGFIRE_SERVICE_VERSION", "1.2.3")
    @patch("transparent_trust.core.monitoring.LOGFIRE_ENVIRONMENT", "test")
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_PYDANTIC_AI", True)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_SQLALCHEMY", True)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_HTTPX", True)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_FASTAPI", True)
    def test_configures_and_instruments(self, fake_logfire):
        app = MagicMock()

        initialize_logfire(app)

        fake_logfire.configure.assert_called_once_with(
            token="test-token", service_name="tt-test", service_version="1.2.3", environment="test"
        )
        fake_logfire.instrument_pydantic_ai.assert_called_once()
        fake_logfire.instrument_sqlalchemy.assert_called_once()
        fake_logfire.instrument_httpx.assert_called_once()
        fake_logfire.instrument_fastapi.assert_called_once_with(app=app)

    @patch("transparent_trust.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_PYDANTIC_AI", False)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_SQLALCHEMY", False)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_HTTPX", False)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_FASTAPI", True)
    def test_skips_fastapi_without_app(self, fake_logfire):
        initialize_logfire()

        fake_logfire.configure.assert_called_once()
        fake_logfire.instrument_fastapi.assert_not_called()
        fake_logfire.instrument_pydantic_ai.assert_not_called()

    @patch("transparent_trust.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_PYDANTIC_AI", False)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_SQLALCHEMY", True)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_HTTPX", True)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TRACE_FASTAPI", False)
    @patch("transparent_trust.core.monitoring.logger")
    def test_instrumentation_failure_is_a_warning(self, mock_logger, fake_logfire):
        fake_logfire.instrument_sqlalchemy.side_effect = RuntimeError("no engine")

        initialize_logfire()

        fake_logfire.instrument_httpx.assert_called_once()
        assert any("SQLAlchemy" in c.args[0] for c in mock_logger.warning.call_args_list)

    @patch("transparent_trust.core.monitoring.LOGFIRE_ENABLED", True)
    @patch("transparent_trust.core.monitoring.LOGFIRE_TOKEN", "test-token")
    @patch("transparent_trust.core.monitoring.logger")
    def test_configure_failure_is_logged(self, mock_logger, fake_logfire):
        fake_logfire.configure.side_effect = RuntimeError("bad token")

        initialize_logfire()

        mock_logger.error.assert_called_once()
        assert "bad token" in mock_logger.error.call_args[0][0]


class TestLogHelpers:
    def test_log_api_request(self, fake_logfire):
        log_api_request("GET", "/api/v1/templates", 200, 12.5)

        fake_logfire.info.assert_called_once_with(
            "API request completed", method="GET", path="/api/v1/templates", status_code=200, duration_ms=12.5
        )

    def test_log_llm_call_totals_tokens(self, fake_logfire):
        log_llm_call("template-fill", "claude-sonnet", 100, 40)

        kwargs = fake_logfire.info.call_args.kwargs
        assert kwargs["feature"] == "template-fill"
        assert kwargs["total_tokens"] == 140

    def test_log_git_sync(self, fake_logfire):
        log_git_sync("skill", "sso", "save", True, "abc123")

        fake_logfire.info.assert_called_once_with(
            "Git mirror operation", entity="skill", slug="sso", operation="save", success=True, commit_sha="abc123"
        )

    def test_log_error_spreads_context(self, fake_logfire):
        log_error("ValueError", "broken", {"request_id": "r-1"})

        fake_logfire.error.assert_called_once_with(
            "Error occurred", error_type="ValueError", error_message="broken", request_id="r-1"
        )

    @patch("transparent_trust.core.monitoring.logger")
    def test_helpers_never_raise(self, mock_logger, fake_logfire):
        fake_logfire.info.side_effect = RuntimeError("offline")
        fake_logfire.error.side_effect = RuntimeError("offline")

        log_api_request("GET", "/", 500, 1.0)
        log_llm_call("chat", "m", 1, 1)
        log_git_sync("template", "t", "delete", False)
        log_error("E", "m")

        assert mock_logger.debug.call_count == 4
