"""Tests for structlog configuration and log context binding."""

import json

import pytest
import structlog

from jobsignal.core.errors import InvalidConfigError
from jobsignal.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


class TestContextBinding:
    def test_bind_and_unbind(self):
        bind_context(job_class="OrderJob", job_id="abc")
        assert structlog.contextvars.get_contextvars() == {"job_class": "OrderJob", "job_id": "abc"}

        unbind_context("job_id")
        assert structlog.contextvars.get_contextvars() == {"job_class": "OrderJob"}

    def test_clear(self):
        bind_context(job_id="abc")
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context_scopes_values(self):
        with LogContext(job_id="abc"):
            assert structlog.contextvars.get_contextvars()["job_id"] == "abc"
        assert "job_id" not in structlog.contextvars.get_contextvars()

    def test_nested_log_context_restores_outer_values(self):
        with LogContext(job_class="OuterWorker", queue="default"):
            with LogContext(job_class="OrderJob"):
                assert structlog.contextvars.get_contextvars()["job_class"] == "OrderJob"
            assert structlog.contextvars.get_contextvars() == {
                "job_class": "OuterWorker",
                "queue": "default",
            }


class TestConfigureLogging:
    def teardown_method(self):
        structlog.reset_defaults()

    def test_json_output(self, capsys):
        configure_logging(level="DEBUG", json_format=True, service="billing-worker")
        bind_context(job_id="abc")

        get_logger("jobsignal.test").info("job_transaction_created", correlation_key="xyz")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        data = json.loads(line)
        assert data["event"] == "job_transaction_created"
        assert data["correlation_key"] == "xyz"
        assert data["job_id"] == "abc"
        assert data["service.name"] == "billing-worker"
        assert data["log.level"] == "info"
        assert data["log.logger"] == "jobsignal.test"
        assert "@timestamp" in data

    def test_level_filtering(self, capsys):
        configure_logging(level="WARNING", json_format=True)

        get_logger("jobsignal.test").info("hidden")
        get_logger("jobsignal.test").warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out

    def test_unnamed_logger(self, capsys):
        configure_logging(level="INFO", json_format=True)

        get_logger().info("started")

        data = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert data["event"] == "started"
        assert "log.logger" not in data

    def test_unknown_level(self):
        with pytest.raises(InvalidConfigError) as exc_info:
            configure_logging(level="LOUD")
        assert exc_info.value.key == "log_level"
