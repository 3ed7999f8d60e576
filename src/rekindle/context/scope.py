"""
Refresh scope: instances that are rebuilt lazily after configuration changes.

The refresher only needs ``refresh_all()``; RefreshScope is that contract.
LazyRefreshScope is a small in-memory implementation: components register
a factory, ``get`` creates the instance on first use and caches it, and a
refresh throws cached instances away so the next ``get`` builds them again
against the new configuration.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import threading as _threading
import typing as _typing

import rekindle.context.events as events

_logger = _logging.getLogger(__name__)


@_typing.runtime_checkable
class RefreshScope(_typing.Protocol):
    """Discards refresh-sensitive instances so they are recreated lazily."""

    def refresh_all(self) -> None: ...


@_dataclasses.dataclass
class _Registration:
    factory: _typing.Callable[[], _typing.Any]
    destroy: _typing.Callable[[_typing.Any], None] | None = None


_UNSET = object()


class LazyRefreshScope:
    """
    In-memory refresh scope.

    Example:
        >>> scope = LazyRefreshScope()
        >>> scope.register("client", lambda: object())
        >>> first = scope.get("client")
        >>> scope.get("client") is first
        True
        >>> scope.refresh_all()
        >>> scope.get("client") is first
        False
    """

    def __init__(self, publisher: events.EventPublisher | None = None) -> None:
        """
        Initialize the scope.

        Args:
            publisher: Receives a RefreshScopeRefreshedEvent after each refresh.
        """
        self._publisher = publisher
        self._registrations: dict[str, _Registration] = {}
        self._instances: dict[str, _typing.Any] = {}
        self._lock = _threading.RLock()

    def register(
        self,
        name: str,
        factory: _typing.Callable[[], _typing.Any],
        destroy: _typing.Callable[[_typing.Any], None] | None = None,
    ) -> None:
        """
        Register a factory. Re-registering a name discards its cached instance.

        Args:
            name: Instance name.
            factory: Zero-argument callable building the instance.
            destroy: Called with the old instance when it is discarded.
        """
        with self._lock:
            self._discard(name)
            self._registrations[name] = _Registration(factory, destroy)

    def get(self, name: str) -> _typing.Any:
        """
        Return the cached instance, creating it on first use.

        Raises:
            KeyError: If nothing is registered under ``name``.
        """
        with self._lock:
            instance = self._instances.get(name, _UNSET)
            if instance is not _UNSET:
                return instance
            registration = self._registrations[name]
            instance = registration.factory()
            self._instances[name] = instance
            return instance

    def is_active(self, name: str) -> bool:
        """True if an instance is currently cached for ``name``."""
        with self._lock:
            return name in self._instances

    def names(self) -> list[str]:
        with self._lock:
            return list(self._registrations)

    def refresh(self, name: str) -> bool:
        """
        Discard the cached instance for ``name``.

        Returns:
            True if an instance was cached.
        """
        with self._lock:
            discarded = self._discard(name)
        if discarded:
            self._publish(events.RefreshScopeRefreshedEvent(name))
        return discarded

    def refresh_all(self) -> None:
        """Discard every cached instance."""
        with self._lock:
            for name in list(self._instances):
                self._discard(name)
        self._publish(events.RefreshScopeRefreshedEvent())

    def _discard(self, name: str) -> bool:
        instance = self._instances.pop(name, _UNSET)
        if instance is _UNSET:
            return False
        registration = self._registrations.get(name)
        if registration is not None and registration.destroy is not None:
            try:
                registration.destroy(instance)
            except Exception as e:
                _logger.warning("Failed to destroy refresh-scoped instance %s: %s", name, e)
        return True

    def _publish(self, event: events.ApplicationEvent) -> None:
        if self._publisher is not None:
            self._publisher.publish(event)
