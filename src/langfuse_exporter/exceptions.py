"""Exception classes for the langfuse-exporter package."""


class ConfigurationError(Exception):
    """Raised when exporter configuration is invalid.

    Configuration errors are raised only when a builder resolves or builds
    its configuration, never later during export.
    """


class InvalidEndpoint(ConfigurationError):
    """Raised when the composed endpoint is not an absolute http(s) URL."""


class MissingCredentials(ConfigurationError):
    """Raised when no credential source yields an Authorization header."""


class InvalidTimeout(ConfigurationError):
    """Raised when a timeout is non-numeric or not positive."""


class UnsupportedCompression(ConfigurationError):
    """Raised when an explicitly requested compression kind is unknown."""


class NoHttpClient(ConfigurationError):
    """Raised when the transport is constructed without an HTTP client.

    The builder always provisions a default client, so this only surfaces
    when an exporter is created directly from an incomplete config.
    """
