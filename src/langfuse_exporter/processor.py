"""Span processor that stamps trace-level Langfuse attributes onto spans."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from opentelemetry.sdk.trace import SpanProcessor

if TYPE_CHECKING:
    from opentelemetry.context import Context
    from opentelemetry.sdk.trace import ReadableSpan, Span

    from langfuse_exporter.context import TraceAttributeContext


class TraceContextSpanProcessor(SpanProcessor):
    """SpanProcessor that injects a TraceAttributeContext into every span.

    Langfuse groups spans into sessions and users through span attributes,
    so the context's attributes are set on each span as it starts, then the
    span is forwarded to the delegate.

    The context's attributes are captured when the processor is created.
    Later changes to the context do not affect it.

    Args:
        delegate: The SpanProcessor to forward spans to.
        context: The trace context whose attributes are injected.

    Example:
        >>> from opentelemetry.sdk.trace.export import BatchSpanProcessor
        >>> ctx = TraceAttributeContext().with_session("session-123")
        >>> processor = TraceContextSpanProcessor(BatchSpanProcessor(exporter), ctx)
        >>> provider.add_span_processor(processor)
    """

    def __init__(self, delegate: SpanProcessor, context: TraceAttributeContext) -> None:
        self._delegate = delegate
        self._attributes = context.as_attributes()

    def on_start(
        self,
        span: "Span",
        parent_context: Optional["Context"] = None,
    ) -> None:
        """Set the context attributes, then forward to the delegate.

        Args:
            span: The span that was started.
            parent_context: The parent context of the span.
        """
        if self._attributes:
            span.set_attributes(self._attributes)
        self._delegate.on_start(span, parent_context)

    def on_end(self, span: "ReadableSpan") -> None:
        self._delegate.on_end(span)

    def shutdown(self) -> None:
        """Shutdown the delegate processor."""
        self._delegate.shutdown()

    def force_flush(self, timeout_millis: Optional[int] = None) -> bool:
        """Force flush the delegate processor.

        Args:
            timeout_millis: Maximum time to wait for flush in milliseconds.

        Returns:
            True if flush completed successfully, False otherwise.
        """
        if timeout_millis is None:
            return self._delegate.force_flush()
        return self._delegate.force_flush(timeout_millis)
