"""Run exporter operations with a guaranteed asyncio event loop.

Exporters handed to a span processor are called synchronously, from the
processor's worker thread or from the thread that ended the span. An
exporter that needs an event loop, whether its operations are coroutines or
plain methods that look up the running loop, fails at dispatch time when
called without one.

``run_guarded`` turns that into a precondition: if no loop is running, the
operation itself runs inside a loop that exists only for the duration of the
call. No state is shared between calls, so concurrent callers each get their
own loop.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional, Sequence

from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan

logger = logging.getLogger(__name__)


def _get_running_event_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


async def _call(
    operation: Callable[..., Any], args: Sequence[Any], kwargs: Mapping[str, Any]
) -> Any:
    result = operation(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def _run_on_private_loop(coro_factory: Callable[[], Awaitable[Any]]) -> Any:
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro_factory())
    finally:
        try:
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            loop.close()


def run_guarded(operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call ``operation`` with an event loop in place and return its result.

    With no loop running in the calling thread, a private loop is created,
    the operation is called inside it, any awaitable it returns is driven to
    completion, and the loop is closed before this function returns.

    With a loop already running, the operation is called directly. That
    loop cannot be blocked on, so an awaitable result is driven on a private
    loop in a one-shot helper thread.
    """
    if _get_running_event_loop() is None:
        return _run_on_private_loop(lambda: _call(operation, args, kwargs))

    result = operation(*args, **kwargs)
    if not inspect.isawaitable(result):
        return result

    logger.debug(
        "Event loop already running in this thread; awaiting %s on a helper thread",
        getattr(operation, "__qualname__", operation),
    )
    with ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(_run_on_private_loop, lambda: _await(result)).result()


async def run_guarded_async(
    operation: Callable[..., Any], *args: Any, **kwargs: Any
) -> Any:
    """Async counterpart of run_guarded for callers already inside a loop."""
    result = operation(*args, **kwargs)
    if inspect.isawaitable(result):
        return await result
    return result


class RuntimeGuardedExporter(SpanExporter):
    """SpanExporter wrapper that runs every delegate call through run_guarded.

    The delegate's ``export``, ``shutdown`` and ``force_flush`` may be plain
    methods or coroutine functions.

    Example:
        >>> from opentelemetry.sdk.trace.export import BatchSpanProcessor
        >>> guarded = RuntimeGuardedExporter(exporter)
        >>> provider.add_span_processor(BatchSpanProcessor(guarded))
    """

    def __init__(self, delegate: Any) -> None:
        self._delegate = delegate

    @property
    def delegate(self) -> Any:
        return self._delegate

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        return run_guarded(self._delegate.export, spans)

    def shutdown(self) -> None:
        run_guarded(self._delegate.shutdown)

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        if not hasattr(self._delegate, "force_flush"):
            return True
        return bool(run_guarded(self._delegate.force_flush, timeout_millis))
