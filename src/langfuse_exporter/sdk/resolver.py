"""Configuration resolution: explicit settings, then environment, then defaults.

Precedence for each field, highest first:

- endpoint: explicit endpoint, explicit host, ``LANGFUSE_HOST``,
  ``OTEL_EXPORTER_OTLP_TRACES_ENDPOINT``, ``OTEL_EXPORTER_OTLP_ENDPOINT``, the
  Langfuse cloud host
- authorization: explicit key pair, explicit ``Authorization`` header,
  ``LANGFUSE_PUBLIC_KEY``/``LANGFUSE_SECRET_KEY``, ``OTEL_EXPORTER_OTLP_TRACES_HEADERS``,
  ``OTEL_EXPORTER_OTLP_HEADERS``
- timeout: explicit value, ``OTEL_EXPORTER_OTLP_TIMEOUT`` (seconds), 10 seconds
- compression: explicit value, none
"""

from __future__ import annotations

import logging
import math
from datetime import timedelta
from typing import TYPE_CHECKING

from opentelemetry.exporter.otlp.proto.http import Compression

from langfuse_exporter.api.types import ResolvedConfig
from langfuse_exporter.auth import (
    CredentialCandidate,
    CredentialSource,
    compose_authorization,
    find_authorization,
)
from langfuse_exporter.constants import (
    AUTHORIZATION_HEADER,
    DEFAULT_TIMEOUT_SECONDS,
    ENV_OTLP_COMPRESSION,
    ENV_OTLP_TIMEOUT,
)
from langfuse_exporter.endpoint import EndpointSource, compose_endpoint
from langfuse_exporter.exceptions import InvalidTimeout, UnsupportedCompression

if TYPE_CHECKING:
    from langfuse_exporter.api.types import CompressionValue, RawConfig, TimeoutValue
    from langfuse_exporter.sdk.config.env import EnvironmentSnapshot

logger = logging.getLogger(__name__)


def _present(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def select_endpoint(
    raw: RawConfig, env: EnvironmentSnapshot
) -> tuple[str | None, EndpointSource]:
    """Return the highest-precedence endpoint value and its source."""
    endpoint = _present(raw.endpoint)
    if endpoint:
        return endpoint, EndpointSource.EXPLICIT_ENDPOINT
    host = _present(raw.host)
    if host:
        return host, EndpointSource.EXPLICIT_HOST
    if env.langfuse_host:
        return env.langfuse_host, EndpointSource.BACKEND_ENV_HOST
    if env.otlp_traces_endpoint:
        return env.otlp_traces_endpoint, EndpointSource.GENERIC_ENV_TRACES_ENDPOINT
    if env.otlp_endpoint:
        return env.otlp_endpoint, EndpointSource.GENERIC_ENV_BASE_ENDPOINT
    return None, EndpointSource.DEFAULT


def credential_candidates(
    raw: RawConfig, env: EnvironmentSnapshot
) -> list[CredentialCandidate]:
    """Collect credential material from every source that has any."""
    offered = [
        CredentialCandidate(
            CredentialSource.EXPLICIT_KEY_PAIR,
            public_key=raw.public_key,
            secret_key=raw.secret_key,
        ),
        CredentialCandidate(
            CredentialSource.EXPLICIT_HEADER,
            header=find_authorization(raw.headers),
        ),
        CredentialCandidate(
            CredentialSource.BACKEND_ENV_KEY_PAIR,
            public_key=env.langfuse_public_key,
            secret_key=env.langfuse_secret_key,
        ),
        CredentialCandidate(
            CredentialSource.GENERIC_ENV_TRACES_HEADER,
            header=find_authorization(env.otlp_traces_headers),
        ),
        CredentialCandidate(
            CredentialSource.GENERIC_ENV_HEADER,
            header=find_authorization(env.otlp_headers),
        ),
    ]
    return [
        c
        for c in offered
        if _present(c.public_key) or _present(c.secret_key) or _present(c.header)
    ]


def _merge_headers(
    raw: RawConfig, env: EnvironmentSnapshot, authorization: str
) -> dict[str, str]:
    """Merge extra headers; later sources replace earlier ones case-insensitively."""
    merged: dict[str, str] = {}

    def put(name: str, value: str) -> None:
        for existing in [k for k in merged if k.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value

    for source in (env.otlp_headers, env.otlp_traces_headers, raw.headers):
        for name, value in source.items():
            name = name.strip()
            if name.lower() == "authorization":
                continue
            put(name, value)

    put(AUTHORIZATION_HEADER, authorization)
    return merged


def coerce_timeout(value: TimeoutValue | str, origin: str) -> float:
    """Convert a timeout value to positive seconds.

    Raises:
        InvalidTimeout: If the value is non-numeric, not finite, or not positive.
    """
    if isinstance(value, timedelta):
        seconds = value.total_seconds()
    elif isinstance(value, bool):
        raise InvalidTimeout(f"Timeout from {origin} must be a number, got {value!r}")
    else:
        try:
            seconds = float(value)
        except (TypeError, ValueError) as e:
            raise InvalidTimeout(
                f"Timeout from {origin} must be a number of seconds, got {value!r}"
            ) from e

    if not math.isfinite(seconds) or seconds <= 0:
        raise InvalidTimeout(f"Timeout from {origin} must be positive, got {value!r}")
    return seconds


def _resolve_timeout(raw: RawConfig, env: EnvironmentSnapshot) -> float:
    if raw.timeout is not None:
        return coerce_timeout(raw.timeout, "with_timeout()")
    if env.otlp_timeout is not None:
        return coerce_timeout(env.otlp_timeout, ENV_OTLP_TIMEOUT)
    return DEFAULT_TIMEOUT_SECONDS


def coerce_compression(value: CompressionValue) -> Compression:
    """Map a compression kind to the transport's Compression member.

    Raises:
        UnsupportedCompression: If the kind is not one the transport supports.
    """
    if isinstance(value, Compression):
        return value
    kind = str(value).strip().lower()
    try:
        return Compression(kind)
    except ValueError:
        supported = ", ".join(c.value for c in Compression)
        raise UnsupportedCompression(
            f"Unsupported compression {value!r}. Supported: {supported}"
        ) from None


def _resolve_compression(raw: RawConfig, env: EnvironmentSnapshot) -> Compression:
    if env.otlp_compression is not None:
        logger.warning(
            "%s=%r is ignored; set compression with with_compression()",
            ENV_OTLP_COMPRESSION,
            env.otlp_compression,
        )
    if raw.compression is None:
        return Compression.NoCompression
    return coerce_compression(raw.compression)


def resolve_config(raw: RawConfig, env: EnvironmentSnapshot) -> ResolvedConfig:
    """Merge explicit settings with the environment into a ResolvedConfig.

    Args:
        raw: Explicit settings, possibly all unset.
        env: Environment snapshot to fall back on.

    Returns:
        The resolved configuration. ``session`` is only set when one was
        given explicitly.

    Raises:
        InvalidEndpoint: If the chosen endpoint is not an absolute http(s) URL.
        MissingCredentials: If no source yields an Authorization header.
        InvalidTimeout: If the chosen timeout is non-numeric or not positive.
        UnsupportedCompression: If an unknown compression kind was requested.
    """
    base, endpoint_source = select_endpoint(raw, env)
    endpoint = compose_endpoint(base, endpoint_source)

    authorization, credential_source = compose_authorization(
        credential_candidates(raw, env)
    )

    resolved = ResolvedConfig(
        endpoint=endpoint,
        authorization=authorization,
        headers=_merge_headers(raw, env, authorization),
        timeout=_resolve_timeout(raw, env),
        compression=_resolve_compression(raw, env),
        session=raw.session,
    )

    logger.debug(
        "Resolved exporter config (endpoint from %s, credentials from %s): %s",
        endpoint_source.value,
        credential_source.value,
        resolved.redacted(),
    )
    return resolved
