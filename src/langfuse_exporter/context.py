"""Per-trace attribute holder for Langfuse trace-level fields.

A TraceAttributeContext belongs to one logical trace or request. It is never
shared between concurrent callers; use ``child()`` to derive an independent
copy.
"""

from __future__ import annotations

import copy
import json
from typing import Any, List, Optional, Tuple, Union

from langfuse_exporter.attributes import GenAIAttributes, LangfuseAttributes

AttributeValue = Union[str, bool, int, float, Tuple[str, ...]]

_SCALAR_FIELDS = ("name", "session_id", "user_id", "model", "temperature", "max_tokens")


def _to_attribute_value(value: Any) -> AttributeValue:
    """Convert a metadata value into a span attribute value.

    Primitives pass through; anything else is JSON-encoded.
    """
    if isinstance(value, (str, bool, int, float)):
        return value
    return json.dumps(value, sort_keys=True, default=str)


class TraceAttributeContext:
    """Holds session id, user id, tags, model settings and metadata for one trace.

    Setters return ``self`` so calls can be chained. ``emit()`` does not
    consume the context and returns the same ordered pairs on every call
    until the context is changed.

    Example:
        >>> ctx = (
        ...     TraceAttributeContext()
        ...     .with_session("session-123")
        ...     .with_user("user-456")
        ...     .add_tags("chat", "beta")
        ...     .with_metadata("environment", "staging")
        ... )
        >>> ctx.emit()[0]
        ('session.id', 'session-123')
    """

    def __init__(self) -> None:
        self.name: Optional[str] = None
        self.session_id: Optional[str] = None
        self.user_id: Optional[str] = None
        self.tags: List[str] = []
        self.model: Optional[str] = None
        self.temperature: Optional[float] = None
        self.max_tokens: Optional[int] = None
        self.metadata: dict[str, Any] = {}

    def with_name(self, name: str) -> TraceAttributeContext:
        self.name = name
        return self

    def with_session(self, session_id: str) -> TraceAttributeContext:
        self.session_id = session_id
        return self

    def with_user(self, user_id: str) -> TraceAttributeContext:
        self.user_id = user_id
        return self

    def add_tags(self, *tags: str) -> TraceAttributeContext:
        """Append tags in order. Duplicates are kept."""
        self.tags.extend(tags)
        return self

    def with_metadata(self, key: str, value: Any) -> TraceAttributeContext:
        self.metadata[key] = value
        return self

    def with_model(self, model: str) -> TraceAttributeContext:
        """Set the requested model name (``gen_ai.request.model``)."""
        self.model = model
        return self

    def with_temperature(self, temperature: float) -> TraceAttributeContext:
        self.temperature = temperature
        return self

    def with_max_tokens(self, max_tokens: int) -> TraceAttributeContext:
        self.max_tokens = max_tokens
        return self

    def merge(self, other: TraceAttributeContext) -> TraceAttributeContext:
        """Copy every field set on ``other`` into this context.

        Scalar fields set on ``other`` replace this context's values. Tags
        are appended and metadata entries added or replaced. ``other`` is
        not changed.
        """
        for name in _SCALAR_FIELDS:
            value = getattr(other, name)
            if value is not None:
                setattr(self, name, value)
        self.tags.extend(other.tags)
        self.metadata.update(copy.deepcopy(other.metadata))
        return self

    def child(self) -> TraceAttributeContext:
        """Return an independent copy for a nested unit of work."""
        return copy.deepcopy(self)

    def emit(self) -> List[Tuple[str, AttributeValue]]:
        """Return the attributes for every field that is set.

        Order: trace name, session id, user id, tags, model, temperature,
        max tokens, then metadata entries sorted by key.
        """
        pairs: List[Tuple[str, AttributeValue]] = []
        if self.name is not None:
            pairs.append((LangfuseAttributes.TRACE_NAME, self.name))
        if self.session_id is not None:
            pairs.append((LangfuseAttributes.TRACE_SESSION_ID, self.session_id))
        if self.user_id is not None:
            pairs.append((LangfuseAttributes.TRACE_USER_ID, self.user_id))
        if self.tags:
            pairs.append((LangfuseAttributes.TRACE_TAGS, tuple(self.tags)))
        if self.model is not None:
            pairs.append((GenAIAttributes.REQUEST_MODEL, self.model))
        if self.temperature is not None:
            pairs.append((GenAIAttributes.REQUEST_TEMPERATURE, float(self.temperature)))
        if self.max_tokens is not None:
            pairs.append((GenAIAttributes.REQUEST_MAX_TOKENS, int(self.max_tokens)))
        for key in sorted(self.metadata):
            pairs.append(
                (
                    f"{LangfuseAttributes.TRACE_METADATA}.{key}",
                    _to_attribute_value(self.metadata[key]),
                )
            )
        return pairs

    def as_attributes(self) -> dict[str, AttributeValue]:
        """Return ``emit()`` as a dict, suitable for ``span.set_attributes``."""
        return dict(self.emit())

    def __repr__(self) -> str:
        return (
            f"TraceAttributeContext(name={self.name!r}, session_id={self.session_id!r}, "
            f"user_id={self.user_id!r}, tags={self.tags!r}, model={self.model!r}, "
            f"metadata_keys={sorted(self.metadata)!r})"
        )
