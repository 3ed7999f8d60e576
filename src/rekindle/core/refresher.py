"""
ContextRefresher - reloads configuration and reports what changed.

A refresh runs these steps in order, as one transaction:

1. Snapshot the live environment.
2. Bootstrap a fresh environment from the live layers and profiles, with a
   transient ``refreshArgs`` layer on top for the duration of the call.
3. Drop ``refreshArgs`` from the fresh layers.
4. Reconcile the fresh layers into the live list, in place.
5. Release every resource the bootstrap allocated (always, even on error).
6. Snapshot the live environment again.
7. Diff the two snapshots.
8. Publish an EnvironmentChangeEvent with the changed keys.
9. Ask the refresh scope to discard its instances.

Only one refresh runs at a time per refresher. Ordinary configuration
readers are NOT locked out: while step 4 is running a reader may see some
layers already replaced and others not yet. Each individual layer list
mutation is atomic, the sequence is not.
"""

from __future__ import annotations

import collections.abc as _abc
import contextlib as _contextlib
import logging as _logging
import threading as _threading

import rekindle.bootstrap.base as bootstrap_base
import rekindle.constants as constants
import rekindle.context.events as events
import rekindle.context.scope as scope
import rekindle.core.diff as diff
import rekindle.layers.environment as layers_environment
import rekindle.layers.types as types
from rekindle.core.extract import extract
from rekindle.core.reconcile import reconcile

_logger = _logging.getLogger(__name__)


def refresh_args_layer() -> types.MappingLayer:
    """Transient overrides applied to every bootstrap made for a refresh."""
    return types.MappingLayer(
        constants.REFRESH_ARGS_LAYER_NAME,
        {
            constants.JMX_ENABLED_KEY: False,
            constants.MAIN_SOURCES_KEY: "",
        },
    )


class ContextRefresher:
    """
    Refreshes a live Environment in place.

    Example:
        >>> refresher = ContextRefresher(env, scope, bootstrapper, publisher)
        >>> refresher.refresh()
        frozenset({'server.port'})
    """

    def __init__(
        self,
        environment: layers_environment.Environment,
        refresh_scope: scope.RefreshScope,
        bootstrapper: bootstrap_base.Bootstrapper,
        publisher: events.EventPublisher | None = None,
        *,
        standard_layers: _abc.Collection[str] = constants.STANDARD_LAYER_NAMES,
        default_anchor: str = constants.DEFAULT_PROPERTIES_LAYER_NAME,
    ) -> None:
        """
        Initialize the refresher.

        Args:
            environment: The live environment; its layer list is edited in place.
            refresh_scope: Told to discard instances after each refresh.
            bootstrapper: Produces a fresh environment on demand.
            publisher: Receives an EnvironmentChangeEvent after each refresh.
            standard_layers: Layer names never merged and never diffed.
            default_anchor: Catch-all layer new layers are inserted above.
        """
        self._environment = environment
        self._scope = refresh_scope
        self._bootstrapper = bootstrapper
        self._publisher = publisher
        self._standard_layers = frozenset(standard_layers)
        self._default_anchor = default_anchor
        self._lock = _threading.Lock()

    @property
    def environment(self) -> layers_environment.Environment:
        return self._environment

    @property
    def standard_layers(self) -> frozenset[str]:
        return self._standard_layers

    def snapshot(self) -> dict[str, object]:
        """Flatten the live environment, leaving out standard layers."""
        return extract(self._environment.layers, excluded=self._standard_layers)

    def refresh(self) -> frozenset[str]:
        """
        Reload configuration and return the keys whose values changed.

        Returns:
            Names of keys added, modified or removed. Empty when nothing
            changed.

        Raises:
            Exception: Whatever the bootstrapper raised. Resources are still
                released, and no merge, event or invalidation happens.
        """
        with self._lock:
            before = self.snapshot()
            self._add_config_files_to_environment()
            changed = diff.changes(before, self.snapshot())
            keys = frozenset(changed)
            _logger.info("Refreshed environment: %d key(s) changed", len(keys))
            if self._publisher is not None:
                self._publisher.publish(events.EnvironmentChangeEvent(keys))
            self._scope.refresh_all()
        return keys

    def _add_config_files_to_environment(self) -> None:
        request = bootstrap_base.BootstrapRequest.from_environment(
            self._environment,
            refresh_args_layer(),
        )
        with _bootstrapped(self._bootstrapper, request) as result:
            incoming = result.environment.layers
            if constants.REFRESH_ARGS_LAYER_NAME in incoming:
                incoming.remove(constants.REFRESH_ARGS_LAYER_NAME)
            report = reconcile(
                self._environment.layers,
                incoming.snapshot(),
                standard_layers=self._standard_layers,
                default_anchor=self._default_anchor,
            )
            _logger.debug(
                "Reconciled layers: replaced=%s added=%s skipped=%s",
                report.replaced,
                report.added,
                report.skipped,
            )


@_contextlib.contextmanager
def _bootstrapped(
    bootstrapper: bootstrap_base.Bootstrapper,
    request: bootstrap_base.BootstrapRequest,
) -> _abc.Iterator[bootstrap_base.BootstrapResult]:
    """
    Run a bootstrap and release everything it allocated when the block exits.

    The result context is released first, then tracked handles newest first,
    so children always close before their parents.
    """
    result: bootstrap_base.BootstrapResult | None = None
    try:
        result = bootstrapper(request)
        yield result
    finally:
        contexts: list[bootstrap_base.BootstrapContext | None] = []
        if result is not None:
            contexts.append(result.context)
        contexts.extend(reversed(request.tracked))
        bootstrap_base.release_all(contexts)
