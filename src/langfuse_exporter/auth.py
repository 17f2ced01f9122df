"""Authorization header derivation for Langfuse.

Langfuse authenticates OTLP requests with HTTP Basic auth built from the
project's public and secret keys. Credentials may also arrive as a ready-made
``Authorization`` header, either set explicitly or through the generic
``OTEL_EXPORTER_OTLP_*HEADERS`` variables.
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping

from langfuse_exporter.exceptions import MissingCredentials

logger = logging.getLogger(__name__)


class CredentialSource(str, Enum):
    """Where credential material came from, highest precedence first."""

    EXPLICIT_KEY_PAIR = "explicit_key_pair"
    EXPLICIT_HEADER = "explicit_header"
    BACKEND_ENV_KEY_PAIR = "backend_env_key_pair"
    GENERIC_ENV_TRACES_HEADER = "generic_env_traces_header"
    GENERIC_ENV_HEADER = "generic_env_header"


# Lower rank wins. Key pairs sit above raw headers of the same origin.
_PRECEDENCE = {source: rank for rank, source in enumerate(CredentialSource)}

_KEY_PAIR_SOURCES = {
    CredentialSource.EXPLICIT_KEY_PAIR,
    CredentialSource.BACKEND_ENV_KEY_PAIR,
}


@dataclass(frozen=True)
class CredentialCandidate:
    """Credential material offered by one source.

    Key-pair sources set ``public_key`` and ``secret_key``; header sources
    set ``header``.
    """

    source: CredentialSource
    public_key: str | None = None
    secret_key: str | None = None
    header: str | None = None

    @property
    def is_usable(self) -> bool:
        if self.source in _KEY_PAIR_SOURCES:
            return bool(_clean(self.public_key)) and bool(_clean(self.secret_key))
        return bool(_clean(self.header))


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def build_auth_header(public_key: str, secret_key: str) -> str:
    """Build a Basic auth header value from a Langfuse key pair.

    Args:
        public_key: The Langfuse public key (``pk-lf-...``).
        secret_key: The Langfuse secret key (``sk-lf-...``).

    Returns:
        ``"Basic " + base64("public_key:secret_key")``.
    """
    token = base64.b64encode(f"{public_key}:{secret_key}".encode("utf-8"))
    return f"Basic {token.decode('ascii')}"


def find_authorization(headers: Mapping[str, str] | None) -> str | None:
    """Return the Authorization value from a header map, matching case-insensitively."""
    if not headers:
        return None
    for name, value in headers.items():
        if name.strip().lower() == "authorization":
            return _clean(value)
    return None


def compose_authorization(
    candidates: Iterable[CredentialCandidate],
) -> tuple[str, CredentialSource]:
    """Pick the effective Authorization header from the offered credentials.

    Args:
        candidates: Credential material from any number of sources, in any order.

    Returns:
        The header value and the source it was derived from.

    Raises:
        MissingCredentials: If no candidate carries a complete key pair or a
            non-empty header.
    """
    offered = sorted(candidates, key=lambda c: _PRECEDENCE[c.source])

    for candidate in offered:
        if not candidate.is_usable:
            if candidate.source in _KEY_PAIR_SOURCES and (
                candidate.public_key or candidate.secret_key
            ):
                logger.warning(
                    "Ignoring incomplete key pair from %s: both public and "
                    "secret key are required",
                    candidate.source.value,
                )
            continue

        if candidate.source in _KEY_PAIR_SOURCES:
            header = build_auth_header(
                str(candidate.public_key).strip(),
                str(candidate.secret_key).strip(),
            )
        else:
            header = str(candidate.header).strip()

        logger.debug("Authorization derived from %s", candidate.source.value)
        return header, candidate.source

    tried = ", ".join(c.source.value for c in offered) or "none"
    raise MissingCredentials(
        "No Langfuse credentials found. Call with_credentials(), set "
        "LANGFUSE_PUBLIC_KEY and LANGFUSE_SECRET_KEY, or provide an "
        f"Authorization header (sources offered: {tried})"
    )
