"""Tests for stepwise.core.logging."""

import json

import pytest
import structlog
from structlog.testing import capture_logs

from stepwise.core.errors import ConfigError
from stepwise.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


def _json_lines(text: str) -> list[dict]:
    return [json.loads(line) for line in text.splitlines() if line.strip()]


class TestConfigureLogging:
    def test_json_output_to_stderr(self, capsys):
        configure_logging(level="INFO", json_format=True)

        get_logger("tests.logging").info("hello_world", answer=42)

        [entry] = _json_lines(capsys.readouterr().err)
        assert entry["event"] == "hello_world"
        assert entry["answer"] == 42
        assert entry["level"] == "info"
        assert entry["logger_name"] == "tests.logging"
        assert entry["service.name"] == "stepwise"
        assert "timestamp" in entry

    def test_level_filters_lower_events(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        log = get_logger("tests.logging")

        log.info("dropped")
        log.warning("kept")

        events = [e["event"] for e in _json_lines(capsys.readouterr().err)]
        assert events == ["kept"]

    def test_level_is_case_insensitive(self, capsys):
        configure_logging(level="debug", json_format=True)
        get_logger().debug("verbose")
        assert _json_lines(capsys.readouterr().err)[0]["event"] == "verbose"

    def test_unknown_level_raises_config_error(self):
        with pytest.raises(ConfigError) as exc_info:
            configure_logging(level="LOUD")
        assert exc_info.value.context.setting == "log_level"

    def test_defaults_come_from_settings(self, monkeypatch, capsys):
        monkeypatch.setenv("STEPWISE_LOG_FORMAT", "json")
        monkeypatch.setenv("STEPWISE_SERVICE_NAME", "deploy-runner")

        configure_logging()
        get_logger().info("configured")

        [entry] = _json_lines(capsys.readouterr().err)
        assert entry["service.name"] == "deploy-runner"

    def test_explicit_service_wins(self, capsys):
        configure_logging(json_format=True, service="nightly")
        get_logger().info("configured")
        assert _json_lines(capsys.readouterr().err)[0]["service.name"] == "nightly"

    def test_without_timestamp(self, capsys):
        configure_logging(json_format=True, add_timestamp=False)
        get_logger().info("no_time")
        assert "timestamp" not in _json_lines(capsys.readouterr().err)[0]

    def test_console_format(self, capsys):
        configure_logging(json_format=False)
        get_logger().info("readable_event", key="value")
        err = capsys.readouterr().err
        assert "readable_event" in err
        assert "key" in err


class TestContextBinding:
    def test_bind_and_unbind(self):
        bind_context(run_id="abc", step="load")
        assert structlog.contextvars.get_contextvars() == {"run_id": "abc", "step": "load"}

        unbind_context("run_id")
        assert structlog.contextvars.get_contextvars() == {"step": "load"}

    def test_clear_context(self):
        bind_context(run_id="abc", step="load")
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_bound_context_reaches_output(self, capsys):
        configure_logging(json_format=True)
        with LogContext(run_id="r1"):
            get_logger().info("inside")
        get_logger().info("outside")

        inside, outside = _json_lines(capsys.readouterr().err)
        assert inside["run_id"] == "r1"
        assert "run_id" not in outside

    def test_log_context_nesting_keeps_outer_keys(self):
        with LogContext(run_id="r1"):
            with LogContext(step="load"):
                assert structlog.contextvars.get_contextvars() == {"run_id": "r1", "step": "load"}
            assert structlog.contextvars.get_contextvars() == {"run_id": "r1"}
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context_restores_caller_bindings(self):
        bind_context(run_id="host-request-42", step="deploy")

        with LogContext(run_id="inner", step_index=0):
            assert structlog.contextvars.get_contextvars() == {
                "run_id": "inner",
                "step": "deploy",
                "step_index": 0,
            }

        assert structlog.contextvars.get_contextvars() == {"run_id": "host-request-42", "step": "deploy"}

    def test_log_context_restores_on_error(self):
        bind_context(run_id="outer")
        with pytest.raises(RuntimeError):
            with LogContext(run_id="inner"):
                raise RuntimeError("boom")
        assert structlog.contextvars.get_contextvars() == {"run_id": "outer"}


class TestGetLogger:
    def test_named_logger_binds_name(self):
        with capture_logs() as logs:
            get_logger("stepwise.orchestration.stepper").info("named")
            get_logger().info("anonymous")

        assert logs[0]["logger_name"] == "stepwise.orchestration.stepper"
        assert "logger_name" not in logs[1]
