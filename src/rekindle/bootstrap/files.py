"""
Bootstrapper that rebuilds configuration from YAML files.

Files are looked up by base name in a list of search locations:

    <location>/<name>.yaml              base configuration
    <location>/<name>-<profile>.yaml    profile-specific configuration

``.yml`` is accepted when no ``.yaml`` file exists. Every file becomes a
MappingLayer named ``applicationConfig: [<path>]`` with nested mappings
flattened to dotted keys (``server.port``) and lists to indexed keys
(``hosts[0]``). All file layers are grouped into a single composite layer,
highest precedence first:

1. Profile-specific files (later profiles win over earlier ones)
2. Base files
Within each group, later locations win over earlier ones.

The base name and locations can be overridden from the environment
itself through ``rekindle.config.name`` and ``rekindle.config.location``
(comma-separated), so a refresh honours the same settings the process
booted with.
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import yaml as _yaml

import rekindle.bootstrap.base as base
import rekindle.constants as constants
import rekindle.layers.environment as layers_environment
import rekindle.layers.sources as sources
import rekindle.layers.types as types

_logger = _logging.getLogger(__name__)


class ConfigFileError(Exception):
    """Error loading or parsing a configuration file."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Error in config file {path}: {message}")


def flatten(
    data: _abc.Mapping[_typing.Any, _typing.Any],
    prefix: str = "",
) -> dict[str, _typing.Any]:
    """
    Flatten nested mappings and lists into dotted / indexed keys.

    Example:
        >>> flatten({"server": {"port": 80, "hosts": ["a", "b"]}})
        {'server.port': 80, 'server.hosts[0]': 'a', 'server.hosts[1]': 'b'}

    Empty mappings and lists are kept as values so the key is not lost.
    """
    result: dict[str, _typing.Any] = {}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        _flatten_value(path, value, result)
    return result


def _flatten_value(path: str, value: _typing.Any, result: dict[str, _typing.Any]) -> None:
    if isinstance(value, _abc.Mapping) and value:
        result.update(flatten(value, path))
    elif isinstance(value, list) and value:
        for index, item in enumerate(value):
            _flatten_value(f"{path}[{index}]", item, result)
    else:
        result[path] = value


def load_config_file(path: _pathlib.Path) -> dict[str, _typing.Any]:
    """
    Load a YAML file and return its flattened contents.

    Args:
        path: Path to the YAML file.

    Returns:
        Flattened key → value dict; empty for an empty file.

    Raises:
        ConfigFileError: If the file cannot be read, is malformed YAML,
            or contains non-dict content at the top level.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError as e:
        raise ConfigFileError(path, f"permission denied: {e}") from e
    except OSError as e:
        raise ConfigFileError(path, f"cannot read file: {e}") from e

    try:
        parsed = _yaml.safe_load(content)
    except _yaml.YAMLError as e:
        raise ConfigFileError(path, f"invalid YAML: {e}") from e

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        type_name = type(parsed).__name__
        raise ConfigFileError(
            path,
            f"config must be a YAML mapping (dict), got {type_name}",
        )

    return flatten(parsed)


def file_layer_name(path: _pathlib.Path) -> str:
    """Name of the layer holding the contents of ``path``."""
    return f"{constants.APPLICATION_CONFIG_FILE_PREFIX}: [{path}]"


def find_config_files(
    locations: _abc.Sequence[_pathlib.Path],
    name: str,
    profiles: _abc.Sequence[str],
) -> list[_pathlib.Path]:
    """
    Find existing configuration files, highest precedence first.

    Args:
        locations: Directories to search, lowest precedence first.
        name: Base file name without extension.
        profiles: Profiles to load, lowest precedence first.

    Returns:
        Paths of files that exist, ordered highest precedence first.
    """
    stems = [f"{name}-{profile}" for profile in reversed(profiles)]
    stems.append(name)

    found: list[_pathlib.Path] = []
    for stem in stems:
        for location in reversed(locations):
            path = _find_with_extension(location, stem)
            if path is not None and path not in found:
                found.append(path)
    return found


def _find_with_extension(location: _pathlib.Path, stem: str) -> _pathlib.Path | None:
    for extension in constants.CONFIG_FILE_EXTENSIONS:
        candidate = location / f"{stem}{extension}"
        if candidate.is_file():
            return candidate
    return None


def install_layer(layers: sources.LayerSources, layer: types.Layer) -> None:
    """
    Put ``layer`` into ``layers``: in place of a namesake, else above the
    default anchor, else last.
    """
    if layer.name in layers:
        layers.replace(layer.name, layer)
    elif constants.DEFAULT_PROPERTIES_LAYER_NAME in layers:
        layers.add_before(constants.DEFAULT_PROPERTIES_LAYER_NAME, layer)
    else:
        layers.add_last(layer)


class FileBootstrapper:
    """
    Rebuild an environment by re-reading YAML configuration files.

    Satisfies the Bootstrapper protocol. Each call allocates a
    ``bootstrap`` context with an ``application`` child context; both are
    tracked on the request so they are released even if loading fails.
    """

    def __init__(
        self,
        locations: _abc.Sequence[_pathlib.Path] = (_pathlib.Path("config"), _pathlib.Path(".")),
        *,
        config_name: str = constants.DEFAULT_CONFIG_NAME,
    ) -> None:
        """
        Initialize the bootstrapper.

        Args:
            locations: Directories searched when the environment does not
                set ``rekindle.config.location``, lowest precedence first.
            config_name: Base file name used when the environment does not
                set ``rekindle.config.name``.
        """
        self._locations = [_pathlib.Path(location) for location in locations]
        self._config_name = config_name

    def resolve_locations(self, env: layers_environment.Environment) -> list[_pathlib.Path]:
        """Return search locations, honouring ``rekindle.config.location``."""
        configured = env.get_property(constants.CONFIG_LOCATION_KEY)
        if configured is None or configured == "":
            return list(self._locations)
        if isinstance(configured, str):
            configured = [part.strip() for part in configured.split(",")]
        return [_pathlib.Path(part) for part in configured if part]

    def resolve_name(self, env: layers_environment.Environment) -> str:
        """Return the base file name, honouring ``rekindle.config.name``."""
        configured = env.get_property(constants.CONFIG_NAME_KEY)
        return str(configured) if configured else self._config_name

    def load_layer(self, env: layers_environment.Environment) -> types.CompositeLayer:
        """
        Load all configuration files visible to ``env`` into one composite layer.

        Raises:
            ConfigFileError: If any file cannot be loaded.
        """
        paths = find_config_files(
            self.resolve_locations(env),
            self.resolve_name(env),
            env.effective_profiles(),
        )
        children = [
            types.MappingLayer(file_layer_name(path), load_config_file(path))
            for path in paths
        ]
        _logger.debug("Loaded %d configuration file(s): %s", len(paths), paths)
        return types.CompositeLayer(constants.APPLICATION_CONFIG_LAYER_NAME, tuple(children))

    def __call__(self, request: base.BootstrapRequest) -> base.BootstrapResult:
        parent = request.track(base.BootstrapContext("bootstrap"))
        context = request.track(base.BootstrapContext("application", parent=parent))

        env = request.to_environment()
        install_layer(env.layers, self.load_layer(env))
        return base.BootstrapResult(env, context)
