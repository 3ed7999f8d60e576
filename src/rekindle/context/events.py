"""
Application events and an in-process publisher.

Events:
- EnvironmentChangeEvent: configuration keys changed after a refresh
- RefreshScopeRefreshedEvent: refresh-scoped instances were discarded

The publisher is fire-and-forget from the caller's point of view: a
listener that raises is logged and skipped, and the remaining listeners
still run.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import threading as _threading
import typing as _typing

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True)
class ApplicationEvent:
    """Base class for published events."""


@_dataclasses.dataclass(frozen=True)
class EnvironmentChangeEvent(ApplicationEvent):
    """
    Configuration keys changed.

    Attributes:
        keys: Names of keys that were added, modified or removed.
    """

    keys: frozenset[str] = frozenset()


@_dataclasses.dataclass(frozen=True)
class RefreshScopeRefreshedEvent(ApplicationEvent):
    """
    Refresh-scoped instances were discarded.

    Attributes:
        name: Instance name for a single refresh, or None when all were refreshed.
    """

    name: str | None = None


E = _typing.TypeVar("E", bound=ApplicationEvent)
Listener = _typing.Callable[[_typing.Any], None]


class EventPublisher:
    """
    Dispatches events to subscribed listeners.

    Listeners are called synchronously in subscription order on the
    publishing thread. A listener subscribed to a base class also receives
    every subclass event.

    Example:
        >>> publisher = EventPublisher()
        >>> seen = []
        >>> publisher.subscribe(EnvironmentChangeEvent, seen.append)
        >>> publisher.publish(EnvironmentChangeEvent(frozenset({"a"})))
        >>> seen[0].keys
        frozenset({'a'})
    """

    def __init__(self) -> None:
        self._listeners: list[tuple[type[ApplicationEvent], Listener]] = []
        self._lock = _threading.Lock()

    def subscribe(
        self,
        event_type: type[E],
        listener: _typing.Callable[[E], None],
    ) -> None:
        """Register ``listener`` for events of ``event_type`` and its subclasses."""
        with self._lock:
            self._listeners.append((event_type, listener))

    def unsubscribe(
        self,
        event_type: type[E],
        listener: _typing.Callable[[E], None],
    ) -> bool:
        """
        Remove a registration.

        Returns:
            True if the registration existed.
        """
        with self._lock:
            try:
                self._listeners.remove((event_type, listener))
            except ValueError:
                return False
            return True

    def publish(self, event: ApplicationEvent) -> None:
        """Deliver ``event`` to every matching listener."""
        with self._lock:
            listeners = list(self._listeners)

        for event_type, listener in listeners:
            if not isinstance(event, event_type):
                continue
            try:
                listener(event)
            except Exception as e:
                _logger.warning(
                    "Listener %r failed handling %s: %s",
                    listener,
                    type(event).__name__,
                    e,
                )
