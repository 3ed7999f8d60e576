"""
Layer variants that make up a layered configuration.

A layer is a named unit of configuration. There are three kinds:

- MappingLayer: an enumerable mapping of key → value
- LookupLayer: answers lookups but cannot list its keys
- CompositeLayer: an ordered list of child layers (first = highest precedence)

Layers are plain frozen dataclasses; code that needs to treat the kinds
differently dispatches on the variant with ``isinstance`` rather than
relying on overridden methods.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import typing as _typing


class LayerEnumerationError(Exception):
    """A layer could not list its keys."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"Cannot enumerate layer {name!r}: {message}")


_MISSING = object()


@_dataclasses.dataclass(frozen=True)
class MappingLayer:
    """
    A named mapping of configuration keys to values.

    The mapping is held by reference. Loaders build a fresh mapping for
    every refresh, so layers never need to be mutated in place.

    Attributes:
        name: Layer name, unique within the list that holds it.
        entries: Key → value mapping. Values are opaque and compared by ``==``.
    """

    name: str
    entries: _abc.Mapping[str, _typing.Any] = _dataclasses.field(default_factory=dict)

    def get(self, key: str, default: _typing.Any = None) -> _typing.Any:
        return self.entries.get(key, default)

    def contains(self, key: str) -> bool:
        return key in self.entries

    def property_names(self) -> list[str]:
        """
        List the keys of this layer.

        Raises:
            LayerEnumerationError: If the underlying mapping cannot be iterated.
        """
        try:
            return list(self.entries)
        except Exception as e:
            raise LayerEnumerationError(self.name, str(e)) from e


@_dataclasses.dataclass(frozen=True)
class LookupLayer:
    """
    A layer that resolves keys on demand but cannot enumerate them.

    Useful for sources such as secret stores or directory services where
    listing every key is impossible or expensive. Extraction skips these
    layers; ordinary lookups still consult them.

    Attributes:
        name: Layer name.
        lookup: Callable returning the value for a key, or raising KeyError.
    """

    name: str
    lookup: _typing.Callable[[str], _typing.Any]

    def get(self, key: str, default: _typing.Any = None) -> _typing.Any:
        try:
            return self.lookup(key)
        except KeyError:
            return default

    def contains(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING


@_dataclasses.dataclass(frozen=True)
class CompositeLayer:
    """
    A named, ordered group of child layers.

    The first child has the highest precedence: ``get`` returns the value
    from the first child that contains the key.

    Attributes:
        name: Layer name.
        children: Child layers in precedence order (highest first).
    """

    name: str
    children: _abc.Sequence[Layer] = ()

    def get(self, key: str, default: _typing.Any = None) -> _typing.Any:
        for child in self.children:
            value = child.get(key, _MISSING)
            if value is not _MISSING:
                return value
        return default

    def contains(self, key: str) -> bool:
        return any(child.contains(key) for child in self.children)

    def child_names(self) -> list[str]:
        return [child.name for child in self.children]


Layer = _typing.Union[MappingLayer, LookupLayer, CompositeLayer]
"""Any layer variant."""
