"""Endpoint URL composition for the Langfuse OTLP traces endpoint.

Five inputs can name the endpoint. Each is composed by its own rule:

- an explicit endpoint: the full traces URL of a custom collector, used verbatim
- an explicit host, or ``LANGFUSE_HOST``: a Langfuse root that receives
  the ``/api/public/otel/v1/traces`` suffix unless it already ends with it
- ``OTEL_EXPORTER_OTLP_TRACES_ENDPOINT``: the full traces URL, used verbatim
- ``OTEL_EXPORTER_OTLP_ENDPOINT``: an OTLP base URL that receives ``/v1/traces``

Exactly one rule applies to a given value, so a base endpoint that already
contains the Langfuse root never receives both suffixes.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from urllib.parse import SplitResult, urlsplit, urlunsplit

from langfuse_exporter.constants import (
    DEFAULT_LANGFUSE_HOST,
    LANGFUSE_OTEL_PATH,
    LANGFUSE_TRACES_PATH,
    OTLP_TRACES_PATH,
)
from langfuse_exporter.exceptions import InvalidEndpoint

logger = logging.getLogger(__name__)

_DUPLICATE_SLASHES = re.compile(r"/{2,}")


class EndpointSource(str, Enum):
    """Where the endpoint value came from, highest precedence first."""

    EXPLICIT_ENDPOINT = "explicit_endpoint"
    EXPLICIT_HOST = "explicit_host"
    BACKEND_ENV_HOST = "backend_env_host"
    GENERIC_ENV_TRACES_ENDPOINT = "generic_env_traces_endpoint"
    GENERIC_ENV_BASE_ENDPOINT = "generic_env_base_endpoint"
    DEFAULT = "default"


def _split(url: str) -> SplitResult:
    """Parse and validate an absolute http(s) URL, collapsing duplicate slashes.

    Raises:
        InvalidEndpoint: If the value cannot be parsed as an absolute URL.
    """
    try:
        parts = urlsplit(url)
        # Accessing .port validates it
        parts.port
    except ValueError as e:
        raise InvalidEndpoint(f"Cannot parse endpoint URL {url!r}: {e}") from e

    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidEndpoint(
            f"Endpoint must be an absolute http(s) URL, got {url!r}"
        )

    return parts._replace(path=_DUPLICATE_SLASHES.sub("/", parts.path))


def _trimmed_path(parts: SplitResult) -> str:
    path = parts.path
    return path[:-1] if path.endswith("/") else path


def _verbatim_endpoint(url: str) -> str:
    """Validate a full traces URL and return it as given.

    Only surrounding whitespace is removed and duplicate slashes in the path
    are collapsed. Query strings and fragments, empty ones included, are kept.
    """
    url = url.strip()
    parts = _split(url)
    original_path = urlsplit(url).path
    if parts.path != original_path:
        start = len(parts.scheme) + len("://") + len(parts.netloc)
        url = url[:start] + parts.path + url[start + len(original_path):]

    if not parts.path.rstrip("/").endswith(OTLP_TRACES_PATH):
        logger.warning(
            "Traces endpoint %r does not end with %r; using it as given",
            url,
            OTLP_TRACES_PATH,
        )
    return url


def build_otlp_endpoint(host: str) -> str:
    """Build the Langfuse traces endpoint from a Langfuse host root.

    Args:
        host: Base Langfuse URL (e.g. ``https://cloud.langfuse.com``).

    Returns:
        The host with ``/api/public/otel/v1/traces`` appended, unless already
        present.

    Raises:
        InvalidEndpoint: If ``host`` is not an absolute http(s) URL.
    """
    parts = _split(host)
    path = _trimmed_path(parts)

    if path.endswith(LANGFUSE_TRACES_PATH):
        pass
    elif path.endswith(LANGFUSE_OTEL_PATH):
        logger.warning(
            "Host %r ends with the historical Langfuse endpoint %r; "
            "completing it to %r",
            host,
            LANGFUSE_OTEL_PATH,
            LANGFUSE_TRACES_PATH,
        )
        path += OTLP_TRACES_PATH
    else:
        path += LANGFUSE_TRACES_PATH

    return urlunsplit(parts._replace(path=path))


def build_traces_endpoint(base_endpoint: str) -> str:
    """Build a traces endpoint from a generic OTLP base endpoint.

    Appends ``/v1/traces`` after trimming one trailing slash, unless the
    path already ends with it.
    """
    parts = _split(base_endpoint)
    path = _trimmed_path(parts)
    if not path.endswith(OTLP_TRACES_PATH):
        path += OTLP_TRACES_PATH
    return urlunsplit(parts._replace(path=path))


def compose_endpoint(base: str | None, source: EndpointSource) -> str:
    """Compose the final traces endpoint for a value from the given source.

    Args:
        base: Raw endpoint or host value. Ignored for ``EndpointSource.DEFAULT``.
        source: Which configuration source supplied ``base``.

    Returns:
        An absolute URL string with no duplicated path separators.

    Raises:
        InvalidEndpoint: If the value cannot be parsed as an absolute URL.
    """
    if source is EndpointSource.DEFAULT:
        return build_otlp_endpoint(DEFAULT_LANGFUSE_HOST)

    if base is None:
        raise InvalidEndpoint(f"No endpoint value supplied for source {source.value}")

    if source in (EndpointSource.EXPLICIT_HOST, EndpointSource.BACKEND_ENV_HOST):
        return build_otlp_endpoint(base)

    if source is EndpointSource.GENERIC_ENV_BASE_ENDPOINT:
        return build_traces_endpoint(base)

    # Explicit and traces endpoints already carry the full path
    return _verbatim_endpoint(base)
