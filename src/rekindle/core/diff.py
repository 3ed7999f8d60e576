"""
Compare two flat snapshots and report which keys changed.

Removed keys map to the REMOVED marker rather than being dropped, so a
removal is distinguishable from a key whose new value is None.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing


def _get_removed_singleton() -> _RemovedType:
    """Return the REMOVED singleton. Called by pickle to reconstruct."""
    return REMOVED


class _RemovedType:
    """Sentinel type marking a key that no longer has a value."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<REMOVED>"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> tuple[_typing.Callable[[], _RemovedType], tuple[()]]:
        """Pickle support: ensure singleton is preserved."""
        return (_get_removed_singleton, ())


REMOVED = _RemovedType()
"""Value recorded in a change set for a key that was removed."""


def changes(
    before: _abc.Mapping[str, _typing.Any],
    after: _abc.Mapping[str, _typing.Any],
) -> dict[str, _typing.Any]:
    """
    Compute the change set between two snapshots.

    Args:
        before: Snapshot taken before a refresh.
        after: Snapshot taken after a refresh.

    Returns:
        Dict with one entry per changed key: the new value for added or
        modified keys, REMOVED for keys that disappeared. Unchanged keys
        are absent.

    Example:
        >>> changes({"a": 1, "b": 2}, {"a": 1, "c": 3})
        {'b': <REMOVED>, 'c': 3}
    """
    result: dict[str, _typing.Any] = {}
    for key, old in before.items():
        if key not in after:
            result[key] = REMOVED
        elif not _equal(old, after[key]):
            result[key] = after[key]
    for key, new in after.items():
        if key not in before:
            result[key] = new
    return result


def _equal(one: _typing.Any, two: _typing.Any) -> bool:
    if one is None or two is None:
        return one is None and two is None
    return bool(one == two)
