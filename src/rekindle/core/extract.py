"""
Flatten a layered configuration into a single key → value snapshot.

Layers are walked lowest precedence first, so a plain dict assignment lets
higher-precedence layers overwrite lower ones. Composite layers are
flattened the same way, recursively, before their parent moves on.

Extraction is best effort: layers that cannot list their keys are skipped
and a failing composite stops contributing at the point of failure. A
change hidden in such a layer is therefore not reported.
"""

from __future__ import annotations

import collections.abc as _abc
import logging as _logging
import typing as _typing

import rekindle.constants as constants
import rekindle.layers.types as types

_logger = _logging.getLogger(__name__)


def extract(
    layers: _abc.Iterable[types.Layer],
    *,
    excluded: _abc.Collection[str] = constants.STANDARD_LAYER_NAMES,
) -> dict[str, _typing.Any]:
    """
    Build a flat snapshot of the given layers.

    Args:
        layers: Layers in precedence order (highest first). A LayerSources
            works directly.
        excluded: Top-level layer names left out of the snapshot entirely.

    Returns:
        Dict mapping every enumerable key to its effective value.
    """
    result: dict[str, _typing.Any] = {}
    for layer in reversed(list(layers)):
        if layer.name in excluded:
            continue
        if isinstance(layer, types.CompositeLayer):
            _extract_composite(layer, result)
        elif isinstance(layer, types.MappingLayer):
            try:
                entries = _read_entries(layer)
            except types.LayerEnumerationError as e:
                _logger.debug("Skipping layer %s: %s", layer.name, e)
                continue
            result.update(entries)
        else:
            _logger.debug("Skipping non-enumerable layer %s", layer.name)
    return result


def _extract_composite(
    composite: types.CompositeLayer,
    result: dict[str, _typing.Any],
) -> None:
    # Children already written to ``result`` stay there if a later one fails
    try:
        for child in reversed(list(composite.children)):
            _extract_child(child, result)
    except Exception as e:
        _logger.debug("Stopped extracting composite layer %s: %s", composite.name, e)


def _extract_child(layer: types.Layer, result: dict[str, _typing.Any]) -> None:
    if isinstance(layer, types.CompositeLayer):
        _extract_composite(layer, result)
    elif isinstance(layer, types.MappingLayer):
        result.update(_read_entries(layer))


def _read_entries(layer: types.MappingLayer) -> dict[str, _typing.Any]:
    names = layer.property_names()
    try:
        return {name: layer.entries[name] for name in names}
    except Exception as e:
        raise types.LayerEnumerationError(layer.name, str(e)) from e
