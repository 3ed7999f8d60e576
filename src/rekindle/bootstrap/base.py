"""
Bootstrap contract: how the refresher obtains a fresh layered configuration.

A bootstrapper receives a BootstrapRequest describing the current
environment (its layers, its profiles, and a transient override layer) and
returns a BootstrapResult holding a new Environment. Anything it allocates
along the way is represented by BootstrapContext handles, which may be
chained through ``parent``; every handle in every chain must be released
once the refresher is done with the result.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

import rekindle.layers.environment as layers_environment
import rekindle.layers.types as types

_logger = _logging.getLogger(__name__)


class BootstrapContext:
    """
    A closable resource handle allocated during a bootstrap.

    Handles form a chain through ``parent``. Closing a handle runs its
    close callbacks in reverse registration order; it does not close the
    parent. Use ``release_chain`` to release a handle and all its ancestors.

    Example:
        >>> parent = BootstrapContext("bootstrap")
        >>> child = BootstrapContext("application", parent=parent)
        >>> failed = release_chain(child)
        >>> child.closed, parent.closed
        (True, True)
    """

    def __init__(self, name: str, *, parent: BootstrapContext | None = None) -> None:
        self.name = name
        self.parent = parent
        self._callbacks: list[_typing.Callable[[], None]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def on_close(self, callback: _typing.Callable[[], None]) -> None:
        """Register a callback to run when this handle is closed."""
        self._callbacks.append(callback)

    def close(self) -> None:
        """
        Close this handle. Closing twice is a no-op.

        Every callback runs even if an earlier one fails; the first failure
        is re-raised once all callbacks have run.
        """
        if self._closed:
            return
        self._closed = True
        first_error: Exception | None = None
        for callback in reversed(self._callbacks):
            try:
                callback()
            except Exception as e:
                if first_error is None:
                    first_error = e
        self._callbacks.clear()
        if first_error is not None:
            raise first_error

    def __repr__(self) -> str:
        parent = self.parent.name if self.parent is not None else None
        return f"BootstrapContext({self.name!r}, parent={parent!r}, closed={self._closed})"


def release_chain(context: BootstrapContext | None) -> list[BootstrapContext]:
    """
    Close a handle and every ancestor reachable through ``parent``.

    Release is best effort: a handle that fails to close is logged and the
    walk continues with its parent. Failures are never raised, so a release
    problem cannot hide an error that is already propagating.

    Returns:
        Handles whose close failed.
    """
    failed: list[BootstrapContext] = []
    seen: set[int] = set()
    current = context
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        try:
            current.close()
        except Exception as e:
            _logger.warning("Failed to release bootstrap context %s: %s", current.name, e)
            failed.append(current)
        current = current.parent
    return failed


@_dataclasses.dataclass
class BootstrapRequest:
    """
    Inputs for a bootstrap.

    Attributes:
        layers: Layers of the live environment, same objects, highest first.
        active_profiles: Profiles active in the live environment.
        default_profiles: Default profiles of the live environment.
        overrides: Transient layer placed above everything for this call only.
    """

    layers: tuple[types.Layer, ...]
    active_profiles: list[str]
    default_profiles: list[str]
    overrides: types.MappingLayer
    _tracked: list[BootstrapContext] = _dataclasses.field(
        default_factory=list, init=False, repr=False
    )

    @classmethod
    def from_environment(
        cls,
        env: layers_environment.Environment,
        overrides: types.MappingLayer,
    ) -> BootstrapRequest:
        """Describe ``env`` as bootstrap input."""
        return cls(
            layers=env.layers.snapshot(),
            active_profiles=list(env.active_profiles),
            default_profiles=list(env.default_profiles),
            overrides=overrides,
        )

    def to_environment(self) -> layers_environment.Environment:
        """
        Build a working environment for the bootstrap.

        The result holds a fresh list with ``overrides`` first followed by
        the live layers. Mutating it never touches the live environment.
        A live layer that happens to share the override name is left out.
        """
        layers = [self.overrides]
        layers.extend(layer for layer in self.layers if layer.name != self.overrides.name)
        return layers_environment.Environment(
            layers,
            active_profiles=self.active_profiles,
            default_profiles=self.default_profiles,
        )

    def track(self, context: BootstrapContext) -> BootstrapContext:
        """
        Register a handle for release even if the bootstrap later fails.

        Returns:
            The same handle, for chaining.
        """
        self._tracked.append(context)
        return context

    @property
    def tracked(self) -> list[BootstrapContext]:
        return list(self._tracked)


@_dataclasses.dataclass
class BootstrapResult:
    """
    Output of a bootstrap.

    Attributes:
        environment: The freshly built environment.
        context: Resource handle to release when done, or None.
    """

    environment: layers_environment.Environment
    context: BootstrapContext | None = None


@_typing.runtime_checkable
class Bootstrapper(_typing.Protocol):
    """Builds a fresh environment from the same inputs the process booted from."""

    def __call__(self, request: BootstrapRequest) -> BootstrapResult: ...


def release_all(contexts: _abc.Iterable[BootstrapContext | None]) -> None:
    """Release every chain in ``contexts``, closing shared ancestors only once."""
    for context in contexts:
        release_chain(context)
