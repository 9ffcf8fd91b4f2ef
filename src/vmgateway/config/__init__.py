"""Configuration management for vmgateway.

Loads the JSON (or YAML) settings file and resolves it against the
process environment, with environment values taking precedence.
"""

from vmgateway.config.settings import GovcSettings, Settings, load_settings

__all__ = ["GovcSettings", "Settings", "load_settings"]
