"""Public configuration types.

- RawConfig - explicit settings collected by a builder
- ResolvedConfig - the validated configuration an exporter is built from
"""

from __future__ import annotations

from langfuse_exporter.api.types import (
    CompressionValue,
    RawConfig,
    ResolvedConfig,
    TimeoutValue,
)

__all__ = [
    "RawConfig",
    "ResolvedConfig",
    "TimeoutValue",
    "CompressionValue",
]
