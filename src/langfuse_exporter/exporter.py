"""Langfuse OTLP/HTTP span exporter."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping

from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

from langfuse_exporter.exceptions import NoHttpClient

if TYPE_CHECKING:
    from langfuse_exporter.api.types import ResolvedConfig

logger = logging.getLogger(__name__)


class LangfuseSpanExporter(OTLPSpanExporter):
    """OTLP/HTTP span exporter bound to a resolved Langfuse configuration.

    Every transport setting is passed explicitly, so the underlying exporter
    never falls back to reading ``OTEL_EXPORTER_OTLP_*`` variables itself.
    The configuration is immutable and the exporter is safe to share across
    concurrent export calls.
    """

    def __init__(self, config: ResolvedConfig) -> None:
        if config.session is None:
            raise NoHttpClient(
                "LangfuseSpanExporter requires an HTTP client. Build it through "
                "ExporterBuilder, which provisions a default requests.Session."
            )

        self.config = config
        super().__init__(
            endpoint=config.endpoint,
            headers=dict(config.headers),
            timeout=config.timeout,
            compression=config.compression,
            session=config.session,
        )

        logger.debug("Langfuse exporter created for %s", config.endpoint)

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    @property
    def headers(self) -> Mapping[str, str]:
        return self.config.headers


def exporter(host: str, public_key: str, secret_key: str) -> LangfuseSpanExporter:
    """Create a Langfuse exporter from an explicit host and key pair.

    Unset settings still fall back to the environment and defaults.

    Args:
        host: The base Langfuse URL (e.g. ``https://cloud.langfuse.com``).
        public_key: Your Langfuse public key.
        secret_key: Your Langfuse secret key.
    """
    from langfuse_exporter.builder import ExporterBuilder

    return ExporterBuilder().with_host(host).with_credentials(public_key, secret_key).build()


def exporter_from_env(environ: Mapping[str, str] | None = None) -> LangfuseSpanExporter:
    """Create a Langfuse exporter configured entirely from the environment.

    Reads ``LANGFUSE_HOST``, ``LANGFUSE_PUBLIC_KEY`` and ``LANGFUSE_SECRET_KEY``,
    falling back to the standard ``OTEL_EXPORTER_OTLP_*`` variables.
    """
    from langfuse_exporter.builder import ExporterBuilder

    return ExporterBuilder.from_environment(environ).build()
