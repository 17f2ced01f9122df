"""Environment variable names and defaults."""

# Langfuse-specific variables
ENV_LANGFUSE_PUBLIC_KEY = "LANGFUSE_PUBLIC_KEY"
ENV_LANGFUSE_SECRET_KEY = "LANGFUSE_SECRET_KEY"
ENV_LANGFUSE_HOST = "LANGFUSE_HOST"

# Generic OTLP exporter variables
ENV_OTLP_ENDPOINT = "OTEL_EXPORTER_OTLP_ENDPOINT"
ENV_OTLP_TRACES_ENDPOINT = "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT"
ENV_OTLP_HEADERS = "OTEL_EXPORTER_OTLP_HEADERS"
ENV_OTLP_TRACES_HEADERS = "OTEL_EXPORTER_OTLP_TRACES_HEADERS"
ENV_OTLP_TIMEOUT = "OTEL_EXPORTER_OTLP_TIMEOUT"
ENV_OTLP_COMPRESSION = "OTEL_EXPORTER_OTLP_COMPRESSION"

DEFAULT_LANGFUSE_HOST = "https://cloud.langfuse.com"

# Langfuse serves OTLP under this root; the canonical traces path adds /v1/traces.
# Older releases documented the root itself as the endpoint.
LANGFUSE_OTEL_PATH = "/api/public/otel"
OTLP_TRACES_PATH = "/v1/traces"
LANGFUSE_TRACES_PATH = LANGFUSE_OTEL_PATH + OTLP_TRACES_PATH

DEFAULT_TIMEOUT_SECONDS = 10.0

AUTHORIZATION_HEADER = "Authorization"
