"""
Merge a freshly bootstrapped layer list into the live one, in place.

Incoming layers are processed in their declared order:

- Standard substrate layers are never copied, but when the live list
  already has one it becomes the anchor for following layers.
- Layers already present in the live list are replaced where they stand.
- New layers go right after the most recently matched layer, else right
  before the default anchor, else at the end.

Anchoring on the last matched layer keeps the relative ordering the
bootstrap established, so new layers land at the precedence they were
loaded at rather than drifting to the bottom of the list.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import logging as _logging

import rekindle.constants as constants
import rekindle.layers.sources as sources
import rekindle.layers.types as types

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass
class ReconcileReport:
    """
    What a reconciliation did to the live list.

    Attributes:
        replaced: Names of layers replaced in place.
        added: Names of layers inserted, in insertion order.
        skipped: Names of standard substrate layers left untouched.
    """

    replaced: list[str] = _dataclasses.field(default_factory=list)
    added: list[str] = _dataclasses.field(default_factory=list)
    skipped: list[str] = _dataclasses.field(default_factory=list)


def reconcile(
    live: sources.LayerSources,
    incoming: _abc.Iterable[types.Layer],
    *,
    standard_layers: _abc.Collection[str] = constants.STANDARD_LAYER_NAMES,
    default_anchor: str = constants.DEFAULT_PROPERTIES_LAYER_NAME,
) -> ReconcileReport:
    """
    Merge ``incoming`` into ``live``.

    Not safe to call concurrently with another reconciliation of the same
    list; callers serialize (ContextRefresher holds its refresh lock).

    Args:
        live: The live layer list, mutated in place.
        incoming: Layers from a fresh bootstrap, in precedence order.
        standard_layers: Names never replaced or inserted.
        default_anchor: Catch-all layer new layers are placed above when no
            better anchor exists.

    Returns:
        Report of replaced, added and skipped layers.
    """
    report = ReconcileReport()
    last_matched: str | None = None

    for layer in incoming:
        name = layer.name
        if name in live:
            last_matched = name

        if name in standard_layers:
            report.skipped.append(name)
            continue

        if name in live:
            live.replace(name, layer)
            report.replaced.append(name)
            _logger.debug("Replaced layer %s", name)
        elif last_matched is not None:
            live.add_after(last_matched, layer)
            report.added.append(name)
            _logger.debug("Added layer %s after %s", name, last_matched)
        elif default_anchor in live:
            live.add_before(default_anchor, layer)
            report.added.append(name)
            _logger.debug("Added layer %s before %s", name, default_anchor)
        else:
            live.add_last(layer)
            report.added.append(name)
            _logger.debug("Added layer %s last", name)

    return report
