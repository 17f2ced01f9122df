"""Single-read snapshot of the environment variables the exporter consumes."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

from opentelemetry.util.re import parse_env_headers

from langfuse_exporter.constants import (
    ENV_LANGFUSE_HOST,
    ENV_LANGFUSE_PUBLIC_KEY,
    ENV_LANGFUSE_SECRET_KEY,
    ENV_OTLP_COMPRESSION,
    ENV_OTLP_ENDPOINT,
    ENV_OTLP_HEADERS,
    ENV_OTLP_TIMEOUT,
    ENV_OTLP_TRACES_ENDPOINT,
    ENV_OTLP_TRACES_HEADERS,
)

logger = logging.getLogger(__name__)


def _read(environ: Mapping[str, str], name: str) -> str | None:
    """Read one variable, trimmed. Empty or whitespace-only values count as unset."""
    value = environ.get(name)
    if value is None:
        return None
    trimmed = value.strip()
    if trimmed != value:
        logger.debug("Trimmed surrounding whitespace from %s", name)
    return trimmed or None


def _headers(raw: str | None) -> dict[str, str]:
    if raw is None:
        return {}
    return dict(parse_env_headers(raw, liberal=True))


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Trimmed values of every variable the resolver consults.

    Header variables are parsed from the OpenTelemetry ``key=value,...``
    format; their keys are lower-cased.
    """

    langfuse_public_key: str | None = None
    langfuse_secret_key: str | None = None
    langfuse_host: str | None = None
    otlp_endpoint: str | None = None
    otlp_traces_endpoint: str | None = None
    otlp_headers: dict[str, str] = field(default_factory=dict)
    otlp_traces_headers: dict[str, str] = field(default_factory=dict)
    otlp_timeout: str | None = None
    otlp_compression: str | None = None

    @classmethod
    def capture(cls, environ: Mapping[str, str] | None = None) -> EnvironmentSnapshot:
        """Read each variable exactly once.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.
        """
        source = os.environ if environ is None else environ
        return cls(
            langfuse_public_key=_read(source, ENV_LANGFUSE_PUBLIC_KEY),
            langfuse_secret_key=_read(source, ENV_LANGFUSE_SECRET_KEY),
            langfuse_host=_read(source, ENV_LANGFUSE_HOST),
            otlp_endpoint=_read(source, ENV_OTLP_ENDPOINT),
            otlp_traces_endpoint=_read(source, ENV_OTLP_TRACES_ENDPOINT),
            otlp_headers=_headers(_read(source, ENV_OTLP_HEADERS)),
            otlp_traces_headers=_headers(_read(source, ENV_OTLP_TRACES_HEADERS)),
            otlp_timeout=_read(source, ENV_OTLP_TIMEOUT),
            otlp_compression=_read(source, ENV_OTLP_COMPRESSION),
        )
