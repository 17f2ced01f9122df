"""Span attribute names understood by Langfuse.

Langfuse maps these attributes directly onto its trace and observation model.
They take precedence over the generic GenAI semantic conventions.
"""

from __future__ import annotations


class LangfuseAttributes:
    """Langfuse-specific attribute names."""

    # Trace attributes
    TRACE_NAME = "langfuse.trace.name"
    TRACE_USER_ID = "user.id"
    TRACE_SESSION_ID = "session.id"
    TRACE_TAGS = "langfuse.trace.tags"
    TRACE_PUBLIC = "langfuse.trace.public"
    TRACE_METADATA = "langfuse.trace.metadata"
    TRACE_INPUT = "langfuse.trace.input"
    TRACE_OUTPUT = "langfuse.trace.output"

    # Observation attributes
    OBSERVATION_TYPE = "langfuse.observation.type"
    OBSERVATION_METADATA = "langfuse.observation.metadata"
    OBSERVATION_MODEL = "langfuse.observation.model.name"
    OBSERVATION_MODEL_PARAMETERS = "langfuse.observation.model.parameters"
    OBSERVATION_INPUT = "langfuse.observation.input"
    OBSERVATION_OUTPUT = "langfuse.observation.output"
    OBSERVATION_USAGE_INPUT = "langfuse.observation.usage.input"
    OBSERVATION_USAGE_OUTPUT = "langfuse.observation.usage.output"
    OBSERVATION_USAGE_TOTAL = "langfuse.observation.usage.total"


class GenAIAttributes:
    """OpenTelemetry GenAI semantic convention attribute names.

    See: https://opentelemetry.io/docs/specs/semconv/gen-ai/
    """

    SYSTEM = "gen_ai.system"
    OPERATION_NAME = "gen_ai.operation.name"
    REQUEST_MODEL = "gen_ai.request.model"
    REQUEST_TEMPERATURE = "gen_ai.request.temperature"
    REQUEST_MAX_TOKENS = "gen_ai.request.max_tokens"
    REQUEST_TOP_P = "gen_ai.request.top_p"
    RESPONSE_ID = "gen_ai.response.id"
    RESPONSE_MODEL = "gen_ai.response.model"
    RESPONSE_FINISH_REASONS = "gen_ai.response.finish_reasons"
    USAGE_INPUT_TOKENS = "gen_ai.usage.input_tokens"
    USAGE_OUTPUT_TOKENS = "gen_ai.usage.output_tokens"

    # Older names still emitted by many instrumentations
    USAGE_PROMPT_TOKENS = "gen_ai.usage.prompt_tokens"
    USAGE_COMPLETION_TOKENS = "gen_ai.usage.completion_tokens"
    USAGE_TOTAL_TOKENS = "gen_ai.usage.total_tokens"

    REQUEST_PREFIX = "gen_ai.request."
    PROMPT_PREFIX = "gen_ai.prompt."
    COMPLETION_PREFIX = "gen_ai.completion."
    PROMPT_0_CONTENT = "gen_ai.prompt.0.content"
    COMPLETION_0_CONTENT = "gen_ai.completion.0.content"
