"""TracerProvider creation around a Langfuse exporter."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Optional

from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor

from langfuse_exporter.exceptions import ConfigurationError
from langfuse_exporter.mapper import MappingSpanExporter
from langfuse_exporter.processor import TraceContextSpanProcessor
from langfuse_exporter.runtime import RuntimeGuardedExporter

if TYPE_CHECKING:
    from opentelemetry.sdk.trace.sampling import Sampler

    from langfuse_exporter.context import TraceAttributeContext
    from langfuse_exporter.mapper import AttributeMapper

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_NAME = "langfuse-otel"


@dataclass(frozen=True)
class BatchConfig:
    """Settings for the BatchSpanProcessor.

    Defaults match the OpenTelemetry SDK's own batch defaults.

    Raises:
        ConfigurationError: If a value is not a positive integer, or the
            export batch is larger than the queue.
    """

    max_queue_size: int = 2048
    max_export_batch_size: int = 512
    schedule_delay_millis: int = 5000
    export_timeout_millis: int = 30000

    def __post_init__(self) -> None:
        for name in (
            "max_queue_size",
            "max_export_batch_size",
            "schedule_delay_millis",
            "export_timeout_millis",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(
                    f"BatchConfig.{name} must be a positive integer, got {value!r}"
                )
        if self.max_export_batch_size > self.max_queue_size:
            raise ConfigurationError(
                "BatchConfig.max_export_batch_size must not exceed max_queue_size "
                f"({self.max_export_batch_size} > {self.max_queue_size})"
            )


def create_tracer_provider(
    exporter: Any,
    service_name: str = DEFAULT_SERVICE_NAME,
    service_version: str | None = None,
    context: TraceAttributeContext | None = None,
    batch: bool = True,
    resource_attributes: Mapping[str, Any] | None = None,
    sampler: Optional[Sampler] = None,
    batch_config: BatchConfig | None = None,
    mapper: AttributeMapper | None = None,
) -> TracerProvider:
    """Create a TracerProvider that exports through ``exporter``.

    The exporter is wrapped in a RuntimeGuardedExporter so that exporters
    with coroutine methods work from the processor's threads. The provider
    is returned but never registered globally; call
    ``opentelemetry.trace.set_tracer_provider`` yourself if needed.

    Args:
        exporter: The span exporter, typically from ``ExporterBuilder.build()``.
        service_name: Value of the ``service.name`` resource attribute.
        service_version: Value of the ``service.version`` resource attribute.
        context: Trace attributes stamped onto every span.
        batch: Use a BatchSpanProcessor, else a SimpleSpanProcessor.
        resource_attributes: Extra resource attributes, e.g.
            ``{"deployment.environment": "prod"}``. ``service_name`` and
            ``service_version`` take precedence over the same keys here.
        sampler: Sampler for the provider. Defaults to the SDK default
            (parent-based, always on).
        batch_config: Batch processor settings. Ignored when ``batch`` is False.
        mapper: If given, span attributes are mapped with it before export
            (see ``MappingSpanExporter``).

    Returns:
        The configured TracerProvider.

    Raises:
        ConfigurationError: If ``batch_config`` is invalid.
    """
    resource_attrs: dict[str, Any] = dict(resource_attributes or {})
    resource_attrs[SERVICE_NAME] = service_name
    if service_version:
        resource_attrs[SERVICE_VERSION] = service_version

    provider_kwargs: dict[str, Any] = {"resource": Resource.create(resource_attrs)}
    if sampler is not None:
        provider_kwargs["sampler"] = sampler
    provider = TracerProvider(**provider_kwargs)

    if mapper is not None:
        exporter = MappingSpanExporter(exporter, mapper)
    guarded = RuntimeGuardedExporter(exporter)

    processor: SpanProcessor
    if batch:
        settings = batch_config or BatchConfig()
        processor = BatchSpanProcessor(
            guarded,
            max_queue_size=settings.max_queue_size,
            schedule_delay_millis=settings.schedule_delay_millis,
            max_export_batch_size=settings.max_export_batch_size,
            export_timeout_millis=settings.export_timeout_millis,
        )
    else:
        processor = SimpleSpanProcessor(guarded)

    if context is not None:
        processor = TraceContextSpanProcessor(processor, context)

    provider.add_span_processor(processor)

    logger.debug(
        "TracerProvider configured for service %s (batch=%s, context=%s, mapper=%s)",
        service_name,
        batch,
        context is not None,
        type(mapper).__name__ if mapper else None,
    )
    return provider
