"""
Environment: the live layered configuration of a process.

An Environment owns one LayerSources list plus the active and default
profile names used to pick profile-specific configuration. Property
lookups walk the layers in precedence order and return the first value
found; they take no locks (see ContextRefresher for the consequences).
"""

from __future__ import annotations

import os as _os
import typing as _typing

import rekindle.constants as constants
import rekindle.layers.sources as sources
import rekindle.layers.types as types

_MISSING = object()


class Environment:
    """
    Layered configuration plus profile markers.

    Example:
        >>> env = Environment([
        ...     types.MappingLayer("app", {"port": 8080}),
        ...     types.MappingLayer("defaultProperties", {"port": 80, "host": "0.0.0.0"}),
        ... ])
        >>> env.get_property("port")
        8080
        >>> env.get_property("host")
        '0.0.0.0'
    """

    def __init__(
        self,
        layers: _typing.Iterable[types.Layer] | sources.LayerSources = (),
        *,
        active_profiles: _typing.Iterable[str] = (),
        default_profiles: _typing.Iterable[str] = (constants.DEFAULT_PROFILE,),
    ) -> None:
        """
        Initialize the environment.

        Args:
            layers: Layers in precedence order (highest first), or an existing
                LayerSources to adopt by reference.
            active_profiles: Explicitly activated profile names.
            default_profiles: Profiles used when none are active.
        """
        if isinstance(layers, sources.LayerSources):
            self._layers = layers
        else:
            self._layers = sources.LayerSources(layers)
        self.active_profiles: list[str] = list(active_profiles)
        self.default_profiles: list[str] = list(default_profiles)

    @classmethod
    def standard(
        cls,
        *,
        environ: _typing.Mapping[str, str] | None = None,
        active_profiles: _typing.Iterable[str] = (),
        default_profiles: _typing.Iterable[str] = (constants.DEFAULT_PROFILE,),
    ) -> Environment:
        """
        Create an environment holding the standard process layers.

        An empty ``systemProperties`` layer for programmatic overrides comes
        first, followed by the process environment as ``systemEnvironment``.
        """
        env_vars = dict(_os.environ if environ is None else environ)
        return cls(
            [
                types.MappingLayer(constants.SYSTEM_PROPERTIES_LAYER_NAME, {}),
                types.MappingLayer(constants.SYSTEM_ENVIRONMENT_LAYER_NAME, env_vars),
            ],
            active_profiles=active_profiles,
            default_profiles=default_profiles,
        )

    @property
    def layers(self) -> sources.LayerSources:
        """The live layer list. Mutated in place, never replaced."""
        return self._layers

    def get_property(self, key: str, default: _typing.Any = None) -> _typing.Any:
        """Return the value of ``key`` from the highest-precedence layer holding it."""
        for layer in self._layers.snapshot():
            value = layer.get(key, _MISSING)
            if value is not _MISSING:
                return value
        return default

    def contains_property(self, key: str) -> bool:
        return self.get_property(key, _MISSING) is not _MISSING

    def effective_profiles(self) -> list[str]:
        """Return the active profiles, or the default profiles if none are active."""
        return list(self.active_profiles) if self.active_profiles else list(self.default_profiles)

    def __repr__(self) -> str:
        return (
            f"Environment(layers={self._layers.names()!r}, "
            f"active_profiles={self.active_profiles!r})"
        )
