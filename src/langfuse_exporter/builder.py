"""Fluent builder for Langfuse span exporters.

Setters only record values; nothing is validated until ``resolve()`` or
``build()``, where every configuration error is raised at once at the call
site instead of later during export.

Example:
    >>> exporter = (
    ...     ExporterBuilder()
    ...     .with_host("https://cloud.langfuse.com")
    ...     .with_credentials("pk-lf-...", "sk-lf-...")
    ...     .with_timeout(30)
    ...     .build()
    ... )
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Mapping

import requests

from langfuse_exporter.api.types import RawConfig
from langfuse_exporter.exporter import LangfuseSpanExporter
from langfuse_exporter.sdk.config.env import EnvironmentSnapshot
from langfuse_exporter.sdk.config.load import load_config
from langfuse_exporter.sdk.resolver import resolve_config

if TYPE_CHECKING:
    from langfuse_exporter.api.types import (
        CompressionValue,
        ResolvedConfig,
        TimeoutValue,
    )

logger = logging.getLogger(__name__)


class ExporterBuilder:
    """Accumulates explicit settings and builds a LangfuseSpanExporter.

    Anything left unset is resolved from ``LANGFUSE_*`` variables, then from
    ``OTEL_EXPORTER_OTLP_*`` variables, then from defaults.

    Args:
        environ: Environment mapping read at resolution time. Defaults to
            ``os.environ``.
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._raw = RawConfig()
        self._environ = environ
        self._snapshot: EnvironmentSnapshot | None = None

    @classmethod
    def from_environment(
        cls, environ: Mapping[str, str] | None = None
    ) -> ExporterBuilder:
        """Create a builder seeded from the environment as it is now.

        The environment is captured immediately; later changes to it do not
        affect this builder. Explicit setters still take precedence.
        """
        builder = cls(environ)
        builder._snapshot = EnvironmentSnapshot.capture(environ)
        return builder

    @classmethod
    def from_config_file(
        cls,
        path: str | Path,
        strict: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> ExporterBuilder:
        """Create a builder whose explicit settings come from a YAML file.

        ``${VAR}`` references in the file are substituted from ``environ``
        (``os.environ`` when not given), the same mapping used to resolve
        unset fields.

        Raises:
            ConfigurationError: If the file is missing or not valid YAML.
        """
        builder = cls(environ)
        builder._raw = load_config(path, strict=strict, environ=environ)
        return builder

    @property
    def raw_config(self) -> RawConfig:
        """A copy of the explicit settings recorded so far."""
        return dataclasses.replace(self._raw, headers=dict(self._raw.headers))

    def with_host(self, host: str) -> ExporterBuilder:
        """Set the Langfuse host (e.g. ``https://cloud.langfuse.com``).

        The Langfuse OTLP path is appended when missing. Replaces any value
        set with ``with_endpoint()``.
        """
        self._raw.host = host
        self._raw.endpoint = None
        return self

    def with_endpoint(self, endpoint: str) -> ExporterBuilder:
        """Set the complete traces URL of a custom collector or proxy.

        The URL is used as given, with no Langfuse path appended. Replaces any
        value set with ``with_host()``.
        """
        self._raw.endpoint = endpoint
        self._raw.host = None
        return self

    def with_credentials(self, public_key: str, secret_key: str) -> ExporterBuilder:
        """Set the Langfuse key pair used for Basic auth."""
        self._raw.public_key = public_key
        self._raw.secret_key = secret_key
        return self

    # Alias matching the name used in the Langfuse docs
    with_basic_auth = with_credentials

    def with_public_key(self, public_key: str) -> ExporterBuilder:
        self._raw.public_key = public_key
        return self

    def with_secret_key(self, secret_key: str) -> ExporterBuilder:
        self._raw.secret_key = secret_key
        return self

    def with_header(self, name: str, value: str) -> ExporterBuilder:
        """Add an HTTP header. An ``Authorization`` header counts as a credential."""
        self._raw.headers[name] = value
        return self

    def with_headers(self, headers: Mapping[str, str]) -> ExporterBuilder:
        self._raw.headers.update(headers)
        return self

    def with_timeout(self, timeout: TimeoutValue) -> ExporterBuilder:
        """Set the export timeout in seconds, or as a timedelta."""
        self._raw.timeout = timeout
        return self

    def with_compression(self, compression: CompressionValue) -> ExporterBuilder:
        """Set request compression: ``"none"``, ``"gzip"`` or ``"deflate"``."""
        self._raw.compression = compression
        return self

    def with_http_client(self, session: requests.Session) -> ExporterBuilder:
        """Use a custom requests.Session (proxies, retries, TLS settings)."""
        self._raw.session = session
        return self

    def resolve(self) -> ResolvedConfig:
        """Resolve the configuration without building an exporter.

        Raises:
            ConfigurationError: If the configuration is invalid or incomplete.
        """
        snapshot = self._snapshot or EnvironmentSnapshot.capture(self._environ)
        return resolve_config(self._raw, snapshot)

    def build(self) -> LangfuseSpanExporter:
        """Resolve the configuration and build the exporter.

        A default ``requests.Session`` is provisioned when no HTTP client was
        set, so a valid configuration always yields an exporter.

        Raises:
            ConfigurationError: If the configuration is invalid or incomplete.
        """
        config = self.resolve()
        if config.session is None:
            logger.debug("No HTTP client set, using a default requests.Session")
            config = dataclasses.replace(config, session=requests.Session())
        return LangfuseSpanExporter(config)
