"""
Shared pytest fixtures for jobsignal tests.

This module provides:
- A fresh in-memory backend, transaction context and recorder per test
- Settings / environment isolation
- Hook registry snapshot and restore
- Structlog context cleanup
"""

import sys
from pathlib import Path
from typing import Any, Generator

import pytest
import structlog

# Ensure jobsignal package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from jobsignal.core.logging import clear_context, configure_logging
from jobsignal.core.settings import reset_settings
from jobsignal.hooks import JobExecutionInterceptor, registry as hook_registry
from jobsignal.observability import InMemoryBackend, MetricsRecorder
from jobsignal.transaction import TransactionContext, set_transaction_context


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Drop JOBSIGNAL_* variables and cached settings around every test."""
    import os

    for key in list(os.environ):
        if key.startswith("JOBSIGNAL_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(Path(__file__).parent)
    reset_settings()
    set_transaction_context(None)
    yield
    reset_settings()
    set_transaction_context(None)


@pytest.fixture(autouse=True)
def clean_log_context() -> Generator[None, None, None]:
    clear_context()
    yield
    clear_context()


@pytest.fixture
def configured_logging() -> Generator[None, None, None]:
    """JSON logging at DEBUG, the way start() configures it, on stdout.

    Loggers are not cached so module-level loggers pick up the test's stdout
    and are back on structlog defaults after teardown.
    """
    configure_logging(level="DEBUG", json_format=True, cache_logger_on_first_use=False)
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def restore_hook_registry() -> Generator[None, None, None]:
    """Tests may register throwaway hooks; put the registry back afterwards."""
    saved = dict(hook_registry._registry)
    yield
    hook_registry._registry.clear()
    hook_registry._registry.update(saved)


# =============================================================================
# Instrumentation fixtures
# =============================================================================


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def context(backend: InMemoryBackend) -> TransactionContext:
    return TransactionContext(backend)


@pytest.fixture
def recorder(backend: InMemoryBackend) -> MetricsRecorder:
    return MetricsRecorder(backend, prefix="active_job_")


@pytest.fixture
def interceptor(context: TransactionContext, recorder: MetricsRecorder) -> JobExecutionInterceptor:
    return JobExecutionInterceptor(
        context=context,
        recorder=recorder,
        filter_parameters=["password"],
    )


@pytest.fixture
def job() -> dict[str, Any]:
    """A fully populated framework job mapping."""
    return {
        "job_class": "OrderJob",
        "job_id": "b7d3c1a0-framework",
        "provider_job_id": "sidekiq-9f2e",
        "queue_name": "default",
        "priority": 10,
        "enqueued_at": "2024-01-01T00:00:00Z",
        "arguments": [{"order_id": 42, "password": "hunter2"}, "express"],
    }
