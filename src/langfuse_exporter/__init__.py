"""Langfuse OTLP/HTTP span exporter.

Builds an OpenTelemetry span exporter pointed at a Langfuse project. The
one-call helper ``langfuse_exporter.exporter.exporter(host, public_key,
secret_key)`` covers the common case; the builder covers the rest:

    from langfuse_exporter import ExporterBuilder, create_tracer_provider

    exporter = ExporterBuilder.from_environment().build()
    provider = create_tracer_provider(exporter)
"""

from __future__ import annotations

from langfuse_exporter._internal.logging import logger as _logger  # noqa: F401
from langfuse_exporter.api.types import RawConfig, ResolvedConfig
from langfuse_exporter.attributes import GenAIAttributes, LangfuseAttributes
from langfuse_exporter.builder import ExporterBuilder
from langfuse_exporter.context import TraceAttributeContext
from langfuse_exporter.exceptions import (
    ConfigurationError,
    InvalidEndpoint,
    InvalidTimeout,
    MissingCredentials,
    NoHttpClient,
    UnsupportedCompression,
)
from langfuse_exporter.exporter import LangfuseSpanExporter, exporter_from_env
from langfuse_exporter.mapper import (
    AttributeMapper,
    GenAIAttributeMapper,
    MappingSpanExporter,
    PassThroughMapper,
)
from langfuse_exporter.processor import TraceContextSpanProcessor
from langfuse_exporter.runtime import RuntimeGuardedExporter, run_guarded
from langfuse_exporter.tracer import BatchConfig, create_tracer_provider

__version__ = "0.1.0"

__all__ = [
    "AttributeMapper",
    "BatchConfig",
    "ConfigurationError",
    "ExporterBuilder",
    "GenAIAttributeMapper",
    "GenAIAttributes",
    "InvalidEndpoint",
    "InvalidTimeout",
    "LangfuseAttributes",
    "LangfuseSpanExporter",
    "MappingSpanExporter",
    "MissingCredentials",
    "NoHttpClient",
    "PassThroughMapper",
    "RawConfig",
    "ResolvedConfig",
    "RuntimeGuardedExporter",
    "TraceAttributeContext",
    "TraceContextSpanProcessor",
    "UnsupportedCompression",
    "__version__",
    "create_tracer_provider",
    "exporter_from_env",
    "run_guarded",
]
