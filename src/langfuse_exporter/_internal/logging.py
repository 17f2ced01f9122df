"""Package logger setup."""

import logging

logger = logging.getLogger("langfuse_exporter")

# Default to WARNING to avoid noise
logger.setLevel(logging.WARNING)


def mask_credential(value: str) -> str:
    """Mask a header value for logging, keeping only the auth scheme."""
    scheme, _, token = value.partition(" ")
    if not token:
        return "***"
    return f"{scheme} ***"
