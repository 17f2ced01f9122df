"""Configuration sources: YAML files and the process environment."""

from langfuse_exporter.sdk.config.env import EnvironmentSnapshot
from langfuse_exporter.sdk.config.load import load_config

__all__ = ["EnvironmentSnapshot", "load_config"]
