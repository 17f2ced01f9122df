"""Public configuration types for the langfuse-exporter package.

These types are part of the stable public API and follow semver guarantees.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Union

from opentelemetry.exporter.otlp.proto.http import Compression

from langfuse_exporter._internal.logging import mask_credential

if TYPE_CHECKING:
    import requests

# Timeouts are accepted as seconds or as a timedelta
TimeoutValue = Union[float, int, timedelta]
CompressionValue = Union[str, Compression]


@dataclass
class RawConfig:
    """Explicit settings collected by a builder before resolution.

    Every field is optional. Unset fields are filled from the environment or
    from defaults when the configuration is resolved.
    """

    endpoint: str | None = None
    host: str | None = None
    public_key: str | None = None
    secret_key: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    timeout: TimeoutValue | None = None
    compression: CompressionValue | None = None
    session: requests.Session | None = None


@dataclass(frozen=True)
class ResolvedConfig:
    """Fully resolved exporter configuration.

    ``headers`` always contains the effective ``Authorization`` header next to
    any extra headers. The mapping is read-only.
    """

    endpoint: str
    authorization: str
    headers: Mapping[str, str]
    timeout: float
    compression: Compression = Compression.NoCompression
    session: requests.Session | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def redacted(self) -> dict[str, Any]:
        """Return a log-safe view with secret header values masked."""
        return {
            "endpoint": self.endpoint,
            "authorization": mask_credential(self.authorization),
            "headers": {
                name: mask_credential(value) if name.lower() == "authorization" else value
                for name, value in self.headers.items()
            },
            "timeout": self.timeout,
            "compression": self.compression.value,
            "session": type(self.session).__name__ if self.session else None,
        }
