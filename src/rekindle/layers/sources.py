"""
LayerSources: the ordered, named list of layers backing configuration lookups.

The list is index-addressable with a name → position lookup. Both are
rebuilt on every mutation and published together as a single state tuple,
so a reader that is not synchronized with a writer sees the list either
before or after each individual mutation, never halfway through one.

Precedence follows list order: index 0 is the highest precedence layer.
"""

from __future__ import annotations

import typing as _typing

import rekindle.layers.types as types


class LayerError(Exception):
    """Base class for invalid layer list operations."""


class UnknownLayerError(LayerError):
    """Raised when an operation references a layer name that is not present."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No layer named {name!r}")


class DuplicateLayerError(LayerError):
    """Raised when an operation would put two layers with the same name in one list."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Layer {name!r} is already present")


class _State(_typing.NamedTuple):
    layers: tuple[types.Layer, ...]
    index: dict[str, int]


def _build_state(layers: _typing.Iterable[types.Layer]) -> _State:
    ordered = tuple(layers)
    index: dict[str, int] = {}
    for position, layer in enumerate(ordered):
        if layer.name in index:
            raise DuplicateLayerError(layer.name)
        index[layer.name] = position
    return _State(ordered, index)


class LayerSources:
    """
    Mutable ordered list of uniquely named layers.

    Example:
        >>> sources = LayerSources([MappingLayer("app", {"x": 1})])
        >>> sources.add_last(MappingLayer("defaultProperties", {"x": 0}))
        >>> sources.names()
        ['app', 'defaultProperties']

    Thread safety: each mutation publishes a new immutable snapshot with a
    single assignment, so readers never observe a half-applied mutation.
    Sequences of mutations are NOT atomic; callers that need that must
    serialize writers themselves.
    """

    def __init__(self, layers: _typing.Iterable[types.Layer] = ()) -> None:
        """
        Create a list from layers in precedence order (highest first).

        Raises:
            DuplicateLayerError: If two layers share a name.
        """
        self._state = _build_state(layers)

    def __iter__(self) -> _typing.Iterator[types.Layer]:
        return iter(self._state.layers)

    def __len__(self) -> int:
        return len(self._state.layers)

    def __contains__(self, name: object) -> bool:
        return name in self._state.index

    def __repr__(self) -> str:
        return f"LayerSources({self.names()!r})"

    def snapshot(self) -> tuple[types.Layer, ...]:
        """Return the current layers as an immutable tuple."""
        return self._state.layers

    def names(self) -> list[str]:
        """Return layer names in precedence order."""
        return [layer.name for layer in self._state.layers]

    def get(self, name: str) -> types.Layer | None:
        """Return the layer with the given name, or None."""
        state = self._state
        position = state.index.get(name)
        if position is None:
            return None
        return state.layers[position]

    def index_of(self, name: str) -> int:
        """
        Return the position of a layer.

        Raises:
            UnknownLayerError: If no layer has that name.
        """
        position = self._state.index.get(name)
        if position is None:
            raise UnknownLayerError(name)
        return position

    def precedence_of(self, name: str) -> int:
        """Alias of index_of: lower numbers win."""
        return self.index_of(name)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_first(self, layer: types.Layer) -> None:
        """Insert a layer with the highest precedence."""
        self._insert(0, layer)

    def add_last(self, layer: types.Layer) -> None:
        """Append a layer with the lowest precedence."""
        self._insert(len(self._state.layers), layer)

    def add_before(self, anchor: str, layer: types.Layer) -> None:
        """
        Insert a layer immediately before (higher precedence than) ``anchor``.

        Raises:
            UnknownLayerError: If ``anchor`` is not present.
            LayerError: If the layer is its own anchor.
        """
        self._check_not_self(anchor, layer)
        self._insert(self.index_of(anchor), layer)

    def add_after(self, anchor: str, layer: types.Layer) -> None:
        """
        Insert a layer immediately after (lower precedence than) ``anchor``.

        Raises:
            UnknownLayerError: If ``anchor`` is not present.
            LayerError: If the layer is its own anchor.
        """
        self._check_not_self(anchor, layer)
        self._insert(self.index_of(anchor) + 1, layer)

    def replace(self, name: str, layer: types.Layer) -> types.Layer:
        """
        Replace the layer called ``name`` with ``layer``, keeping its position.

        The replacement may carry a different name as long as that name is
        not already used by another layer.

        Returns:
            The layer that was replaced.

        Raises:
            UnknownLayerError: If ``name`` is not present.
            DuplicateLayerError: If the new name belongs to a different layer.
        """
        state = self._state
        position = self.index_of(name)
        if layer.name != name and layer.name in state.index:
            raise DuplicateLayerError(layer.name)
        layers = list(state.layers)
        previous = layers[position]
        layers[position] = layer
        self._state = _build_state(layers)
        return previous

    def remove(self, name: str) -> types.Layer:
        """
        Remove and return the layer called ``name``.

        Raises:
            UnknownLayerError: If ``name`` is not present.
        """
        position = self.index_of(name)
        layers = list(self._state.layers)
        removed = layers.pop(position)
        self._state = _build_state(layers)
        return removed

    def _insert(self, position: int, layer: types.Layer) -> None:
        state = self._state
        if layer.name in state.index:
            raise DuplicateLayerError(layer.name)
        layers = list(state.layers)
        layers.insert(position, layer)
        self._state = _build_state(layers)

    @staticmethod
    def _check_not_self(anchor: str, layer: types.Layer) -> None:
        if anchor == layer.name:
            raise LayerError(f"Layer {anchor!r} cannot be positioned relative to itself")
