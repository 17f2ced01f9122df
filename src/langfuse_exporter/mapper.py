"""Mapping between GenAI semantic convention attributes and Langfuse attributes.

Langfuse reads model, usage and input/output from its own ``langfuse.*``
attributes. Instrumentations emit ``gen_ai.*`` names instead, so a mapper
translates between the two and ``MappingSpanExporter`` applies it to spans
on their way out.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Sequence

from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from langfuse_exporter.attributes import GenAIAttributes, LangfuseAttributes

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan

logger = logging.getLogger(__name__)

Attributes = Dict[str, Any]


class AttributeMapper(ABC):
    """Translates span attributes between naming conventions.

    Implementations return new dicts and never modify their input.
    """

    @abstractmethod
    def map_to_langfuse(self, attributes: Mapping[str, Any]) -> Attributes:
        """Map GenAI semantic convention attributes to Langfuse names."""

    @abstractmethod
    def map_to_otel(self, attributes: Mapping[str, Any]) -> Attributes:
        """Map Langfuse attributes back to GenAI semantic convention names."""

    @abstractmethod
    def enrich_attributes(self, attributes: Mapping[str, Any]) -> Attributes:
        """Add attributes derived from the ones present."""


class PassThroughMapper(AttributeMapper):
    """Mapper that returns copies of its input unchanged."""

    def map_to_langfuse(self, attributes: Mapping[str, Any]) -> Attributes:
        return dict(attributes)

    def map_to_otel(self, attributes: Mapping[str, Any]) -> Attributes:
        return dict(attributes)

    def enrich_attributes(self, attributes: Mapping[str, Any]) -> Attributes:
        return dict(attributes)


def _token_count(attributes: Mapping[str, Any], *keys: str) -> Optional[int]:
    for key in keys:
        value = attributes.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _to_attribute_value(value: Any) -> Any:
    if isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (list, tuple)) and all(
        isinstance(v, (str, bool, int, float)) for v in value
    ):
        return tuple(value)
    return json.dumps(value, sort_keys=True, default=str)


class GenAIAttributeMapper(AttributeMapper):
    """Maps ``gen_ai.*`` attributes onto Langfuse observation attributes.

    Renames follow a table of rules (source name to target name) that can
    be changed with ``add_rule`` and ``remove_rule``. Beyond the table:

    - other ``gen_ai.request.*`` attributes are collected into one JSON
      object under ``langfuse.observation.model.parameters``
    - ``gen_ai.prompt.<n>.content`` becomes the observation input and
      ``gen_ai.completion.<n>.content`` the observation output; other
      prompt and completion attributes are dropped
    - everything else passes through unchanged

    Example:
        >>> mapper = GenAIAttributeMapper()
        >>> mapper.map_to_langfuse({"gen_ai.request.model": "gpt-4o"})
        {'langfuse.observation.model.name': 'gpt-4o'}
    """

    DEFAULT_RULES: Mapping[str, str] = {
        GenAIAttributes.REQUEST_MODEL: LangfuseAttributes.OBSERVATION_MODEL,
        GenAIAttributes.USAGE_INPUT_TOKENS: LangfuseAttributes.OBSERVATION_USAGE_INPUT,
        GenAIAttributes.USAGE_OUTPUT_TOKENS: LangfuseAttributes.OBSERVATION_USAGE_OUTPUT,
        GenAIAttributes.USAGE_PROMPT_TOKENS: LangfuseAttributes.OBSERVATION_USAGE_INPUT,
        GenAIAttributes.USAGE_COMPLETION_TOKENS: LangfuseAttributes.OBSERVATION_USAGE_OUTPUT,
        GenAIAttributes.USAGE_TOTAL_TOKENS: LangfuseAttributes.OBSERVATION_USAGE_TOTAL,
    }

    def __init__(self) -> None:
        self._rules: Dict[str, str] = dict(self.DEFAULT_RULES)

    @property
    def rules(self) -> Mapping[str, str]:
        return dict(self._rules)

    def add_rule(self, source: str, target: str) -> None:
        """Rename ``source`` to ``target`` when mapping to Langfuse."""
        self._rules[source] = target

    def remove_rule(self, source: str) -> Optional[str]:
        """Remove the rule for ``source`` and return its target, if any."""
        return self._rules.pop(source, None)

    def map_to_langfuse(self, attributes: Mapping[str, Any]) -> Attributes:
        result: Attributes = {}
        parameters: Attributes = {}

        for key, value in attributes.items():
            if key in self._rules:
                result[self._rules[key]] = value
            elif key.startswith(GenAIAttributes.REQUEST_PREFIX):
                parameters[key[len(GenAIAttributes.REQUEST_PREFIX):]] = value
            elif key.startswith(GenAIAttributes.PROMPT_PREFIX):
                if key.endswith(".content"):
                    result[LangfuseAttributes.OBSERVATION_INPUT] = value
            elif key.startswith(GenAIAttributes.COMPLETION_PREFIX):
                if key.endswith(".content"):
                    result[LangfuseAttributes.OBSERVATION_OUTPUT] = value
            else:
                result[key] = value

        if parameters:
            result[LangfuseAttributes.OBSERVATION_MODEL_PARAMETERS] = json.dumps(
                parameters, sort_keys=True, default=str
            )
        return result

    def map_to_otel(self, attributes: Mapping[str, Any]) -> Attributes:
        # First rule wins when several sources share a target
        reverse: Dict[str, str] = {}
        for source, target in self._rules.items():
            reverse.setdefault(target, source)

        result: Attributes = {}
        for key, value in attributes.items():
            if key == LangfuseAttributes.OBSERVATION_MODEL_PARAMETERS:
                result.update(self._expand_parameters(value))
            elif key in reverse:
                result[reverse[key]] = value
            elif key == LangfuseAttributes.OBSERVATION_INPUT:
                result[GenAIAttributes.PROMPT_0_CONTENT] = value
            elif key == LangfuseAttributes.OBSERVATION_OUTPUT:
                result[GenAIAttributes.COMPLETION_0_CONTENT] = value
            else:
                result[key] = value
        return result

    def _expand_parameters(self, value: Any) -> Attributes:
        """Turn the model parameters JSON object into ``gen_ai.request.*`` pairs."""
        try:
            parameters = json.loads(value) if isinstance(value, str) else value
        except ValueError:
            parameters = None
        if not isinstance(parameters, dict):
            logger.debug("Model parameters are not a JSON object, keeping as is")
            return {LangfuseAttributes.OBSERVATION_MODEL_PARAMETERS: value}
        return {
            f"{GenAIAttributes.REQUEST_PREFIX}{name}": _to_attribute_value(param)
            for name, param in parameters.items()
        }

    def enrich_attributes(self, attributes: Mapping[str, Any]) -> Attributes:
        """Add token totals when input and output counts are both known.

        Existing totals are never overwritten.
        """
        enriched = dict(attributes)
        input_tokens = _token_count(
            attributes,
            GenAIAttributes.USAGE_PROMPT_TOKENS,
            GenAIAttributes.USAGE_INPUT_TOKENS,
            LangfuseAttributes.OBSERVATION_USAGE_INPUT,
        )
        output_tokens = _token_count(
            attributes,
            GenAIAttributes.USAGE_COMPLETION_TOKENS,
            GenAIAttributes.USAGE_OUTPUT_TOKENS,
            LangfuseAttributes.OBSERVATION_USAGE_OUTPUT,
        )
        if input_tokens is None or output_tokens is None:
            return enriched

        total = input_tokens + output_tokens
        enriched.setdefault(GenAIAttributes.USAGE_TOTAL_TOKENS, total)
        enriched.setdefault(LangfuseAttributes.OBSERVATION_USAGE_TOTAL, total)
        return enriched


class MappingSpanExporter(SpanExporter):
    """SpanExporter that maps span attributes before delegating.

    Each span's attributes are mapped to Langfuse names and enriched. The
    original attributes are kept next to the mapped ones, and where both
    name the same attribute the span's own value wins.

    Whatever the wrapped exporter returns is passed back unchanged, so the
    coroutines of an async exporter can still be driven by a
    RuntimeGuardedExporter placed around this one.

    Args:
        wrapped: The exporter that receives the mapped spans.
        mapper: The mapper to apply. Defaults to GenAIAttributeMapper.
    """

    def __init__(self, wrapped: Any, mapper: Optional[AttributeMapper] = None) -> None:
        self._wrapped = wrapped
        self._mapper = mapper or GenAIAttributeMapper()

    @property
    def mapper(self) -> AttributeMapper:
        return self._mapper

    def _map_span(self, span: "ReadableSpan") -> "ReadableSpan":
        original = dict(span.attributes) if span.attributes else {}
        mapped = self._mapper.map_to_langfuse(original)
        mapped.update(original)
        return _MappedReadableSpan(span, self._mapper.enrich_attributes(mapped))  # type: ignore[return-value]

    @property
    def wrapped(self) -> Any:
        return self._wrapped

    def export(self, spans: Sequence["ReadableSpan"]) -> SpanExportResult:
        return self._wrapped.export([self._map_span(span) for span in spans])

    def shutdown(self) -> Any:
        return self._wrapped.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> Any:
        if not hasattr(self._wrapped, "force_flush"):
            return True
        return self._wrapped.force_flush(timeout_millis)


class _MappedReadableSpan:
    """Presents a ReadableSpan with replaced attributes.

    ReadableSpan is immutable, so the attributes property is overridden and
    everything else is read from the original span.
    """

    def __init__(self, original_span: "ReadableSpan", attributes: Attributes) -> None:
        self._original = original_span
        self._attributes = attributes

    @property
    def attributes(self) -> Attributes:
        return self._attributes

    @property
    def name(self):
        return self._original.name

    @property
    def context(self):
        return self._original.context

    @property
    def parent(self):
        return self._original.parent

    @property
    def start_time(self):
        return self._original.start_time

    @property
    def end_time(self):
        return self._original.end_time

    @property
    def status(self):
        return self._original.status

    @property
    def kind(self):
        return self._original.kind

    @property
    def events(self):
        return self._original.events

    @property
    def links(self):
        return self._original.links

    @property
    def resource(self):
        return self._original.resource

    @property
    def instrumentation_scope(self):
        return self._original.instrumentation_scope

    @property
    def dropped_attributes(self):
        return self._original.dropped_attributes

    @property
    def dropped_events(self):
        return self._original.dropped_events

    @property
    def dropped_links(self):
        return self._original.dropped_links

    def get_span_context(self):
        return self._original.get_span_context()

    def to_json(self, indent: int = 4) -> str:
        return self._original.to_json(indent)
