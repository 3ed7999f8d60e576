"""
Settings configuration using pydantic-settings.

Loads refresher configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with REKINDLE_ prefix
3. .env file named by REKINDLE_ENV_FILE (if it exists)
4. Field defaults (lowest)

List settings accept comma-separated strings in the environment:
  REKINDLE_ACTIVE_PROFILES=dev,local
  REKINDLE_CONFIG_LOCATIONS=/etc/app,./config
"""

import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import rekindle.bootstrap.files as files
import rekindle.constants as constants
import rekindle.context.events as events
import rekindle.context.scope as scope
import rekindle.core.refresher as refresher
import rekindle.layers.environment as layers_environment
import rekindle.layers.types as types


def _get_env_file() -> str | None:
    """Return REKINDLE_ENV_FILE if it names an existing file."""
    if env_file := _os.environ.get("REKINDLE_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


def _split_csv(value: _typing.Any) -> _typing.Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class RefreshSettings(_pydantic_settings.BaseSettings):
    """
    Refresher settings.

    All settings can be overridden via environment variables with the
    REKINDLE_ prefix, e.g. REKINDLE_CONFIG_NAME=service.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="REKINDLE_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    config_name: str = _pydantic.Field(
        default=constants.DEFAULT_CONFIG_NAME,
        description="Base name of configuration files, without extension",
    )

    config_locations: _typing.Annotated[
        list[_pathlib.Path], _pydantic_settings.NoDecode
    ] = _pydantic.Field(
        default_factory=lambda: [_pathlib.Path("config"), _pathlib.Path(".")],
        description="Directories searched for configuration files, lowest precedence first",
    )

    active_profiles: _typing.Annotated[list[str], _pydantic_settings.NoDecode] = _pydantic.Field(
        default_factory=list,
        description="Explicitly active profiles, lowest precedence first",
    )

    default_profiles: _typing.Annotated[list[str], _pydantic_settings.NoDecode] = _pydantic.Field(
        default_factory=lambda: [constants.DEFAULT_PROFILE],
        description="Profiles used when no profile is active",
    )

    extra_standard_layers: _typing.Annotated[
        list[str], _pydantic_settings.NoDecode
    ] = _pydantic.Field(
        default_factory=list,
        description="Additional layer names never merged or diffed on refresh",
    )

    log_level: str = _pydantic.Field(
        default="WARNING",
        description="Log level applied by the command line interface",
    )

    @_pydantic.field_validator(
        "config_locations",
        "active_profiles",
        "default_profiles",
        "extra_standard_layers",
        mode="before",
    )
    @classmethod
    def _parse_csv(cls, value: _typing.Any) -> _typing.Any:
        return _split_csv(value)

    @_pydantic.field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(_logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    def standard_layers(self) -> frozenset[str]:
        """Layer names excluded from refresh: the standard set plus extras."""
        return constants.STANDARD_LAYER_NAMES | frozenset(self.extra_standard_layers)

    def bootstrapper(self) -> files.FileBootstrapper:
        """Build a file bootstrapper for these settings."""
        return files.FileBootstrapper(self.config_locations, config_name=self.config_name)

    def context_refresher(
        self,
        environment: layers_environment.Environment,
        refresh_scope: scope.RefreshScope,
        publisher: events.EventPublisher | None = None,
    ) -> refresher.ContextRefresher:
        """Create a refresher that re-reads the configuration files named by these settings."""
        return refresher.ContextRefresher(
            environment,
            refresh_scope,
            self.bootstrapper(),
            publisher,
            standard_layers=self.standard_layers(),
        )

    def build_environment(
        self,
        *,
        environ: _typing.Mapping[str, str] | None = None,
    ) -> layers_environment.Environment:
        """
        Create the boot environment.

        Layers, highest precedence first:
        1. systemProperties (empty, for programmatic overrides)
        2. systemEnvironment (process environment)
        3. applicationConfigurationProperties (configuration files)
        4. defaultProperties (empty catch-all)

        Raises:
            ConfigFileError: If a configuration file cannot be loaded.
        """
        env = layers_environment.Environment.standard(
            environ=environ,
            active_profiles=self.active_profiles,
            default_profiles=self.default_profiles,
        )
        env.layers.add_last(types.MappingLayer(constants.DEFAULT_PROPERTIES_LAYER_NAME, {}))
        files.install_layer(env.layers, self.bootstrapper().load_layer(env))
        return env
