"""
Shared constants for rekindle.

This module provides a single source of truth for layer names and
property keys that are used across multiple modules.
"""

# Standard substrate layers
SYSTEM_PROPERTIES_LAYER_NAME = "systemProperties"
"""Process-level properties set programmatically at startup."""

SYSTEM_ENVIRONMENT_LAYER_NAME = "systemEnvironment"
"""Process environment variables."""

JNDI_LAYER_NAME = "jndiProperties"
"""Directory-service properties supplied by a hosting container."""

SERVLET_CONFIG_LAYER_NAME = "servletConfigInitParams"
"""Per-servlet init parameters supplied by a hosting container."""

SERVLET_CONTEXT_LAYER_NAME = "servletContextInitParams"
"""Per-application init parameters supplied by a hosting container."""

STANDARD_LAYER_NAMES: frozenset[str] = frozenset(
    {
        SYSTEM_PROPERTIES_LAYER_NAME,
        SYSTEM_ENVIRONMENT_LAYER_NAME,
        JNDI_LAYER_NAME,
        SERVLET_CONFIG_LAYER_NAME,
        SERVLET_CONTEXT_LAYER_NAME,
    }
)
"""Layers that are never merged on refresh and never diffed.

Their values are either re-read live on every lookup or fixed for the
lifetime of the process, so refreshing them is meaningless.
"""

# Anchors and transient layers
DEFAULT_PROPERTIES_LAYER_NAME = "defaultProperties"
"""Lowest-precedence catch-all layer; new layers are inserted above it."""

REFRESH_ARGS_LAYER_NAME = "refreshArgs"
"""Transient override layer that only exists during a bootstrap call."""

APPLICATION_CONFIG_LAYER_NAME = "applicationConfigurationProperties"
"""Composite layer holding every loaded configuration file."""

APPLICATION_CONFIG_FILE_PREFIX = "applicationConfig"
"""Prefix for per-file layer names: ``applicationConfig: [<path>]``."""

# Property keys understood during bootstrap
JMX_ENABLED_KEY = "rekindle.jmx.enabled"
"""Disables side-effecting management subsystems while bootstrapping."""

MAIN_SOURCES_KEY = "rekindle.main.sources"
"""Extra component sources for a bootstrap; empty means none."""

CONFIG_NAME_KEY = "rekindle.config.name"
"""Base name of configuration files (without extension)."""

CONFIG_LOCATION_KEY = "rekindle.config.location"
"""Comma-separated directories searched for configuration files."""

DEFAULT_CONFIG_NAME = "application"
"""Default base name of configuration files."""

DEFAULT_PROFILE = "default"
"""Profile used when no profile is explicitly active."""

CONFIG_FILE_EXTENSIONS = (".yaml", ".yml")
"""File extensions tried, in order, for each configuration file."""
