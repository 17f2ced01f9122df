"""Shared pytest configuration and fixtures.

This module provides test fixtures that:
1. Clear every LANGFUSE_* and OTEL_EXPORTER_OTLP_* variable before each test
2. Reset OpenTelemetry global state between tests for isolation
3. Use InMemorySpanExporter to avoid network calls
4. Provide typed fakes instead of MagicMock
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Generator

import pytest
from opentelemetry import trace as trace_api
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from tests.fakes import FakeSession

if TYPE_CHECKING:
    from pathlib import Path

_ENV_PREFIXES = ("LANGFUSE_", "OTEL_EXPORTER_OTLP_")


def _reset_trace_globals() -> None:
    """Reset OpenTelemetry trace globals for test isolation.

    WARNING: Only use this in tests. This accesses internal OTel APIs.
    """
    from opentelemetry.util._once import Once

    trace_api._TRACER_PROVIDER_SET_ONCE = Once()
    trace_api._TRACER_PROVIDER = None
    trace_api._PROXY_TRACER_PROVIDER = trace_api.ProxyTracerProvider()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove exporter-related variables so the host environment cannot leak in."""
    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_otel_state() -> Generator[None, None, None]:
    """Reset OpenTelemetry global state before and after each test."""
    _reset_trace_globals()
    yield
    _reset_trace_globals()


@pytest.fixture
def in_memory_exporter() -> Generator[InMemorySpanExporter, None, None]:
    """Provide an InMemorySpanExporter for capturing spans in tests."""
    exporter = InMemorySpanExporter()
    yield exporter
    exporter.clear()


@pytest.fixture
def fake_session() -> FakeSession:
    """Provide a requests.Session that records posts instead of sending them."""
    return FakeSession()


@pytest.fixture
def langfuse_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set the three LANGFUSE_* variables and return them."""
    values = {
        "LANGFUSE_HOST": "https://example.com",
        "LANGFUSE_PUBLIC_KEY": "pk",
        "LANGFUSE_SECRET_KEY": "sk",
    }
    for name, value in values.items():
        monkeypatch.setenv(name, value)
    return values


@pytest.fixture
def valid_config_content() -> str:
    """Return valid YAML exporter config content for tests."""
    return """host: https://langfuse.example.com
public_key: pk-lf-file
secret_key: sk-lf-file
timeout: 30
compression: gzip
headers:
  x-langfuse-sdk-name: tests
"""


@pytest.fixture
def valid_config_file(tmp_path: "Path", valid_config_content: str) -> "Path":
    """Create a valid config file and return its path."""
    config_path = tmp_path / "langfuse.yaml"
    config_path.write_text(valid_config_content)
    return config_path
