"""
Collaborators notified after a refresh: the event publisher and the refresh scope.
"""

from rekindle.context.events import (
    ApplicationEvent,
    EnvironmentChangeEvent,
    EventPublisher,
    RefreshScopeRefreshedEvent,
)
from rekindle.context.scope import LazyRefreshScope, RefreshScope

__all__ = [
    "ApplicationEvent",
    "EnvironmentChangeEvent",
    "EventPublisher",
    "LazyRefreshScope",
    "RefreshScope",
    "RefreshScopeRefreshedEvent",
]
