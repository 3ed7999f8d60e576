"""
rekindle - runtime configuration refresh

Reloads a process's layered configuration without a restart, works out
which keys changed, and tells dependent components to rebuild themselves.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("rekindle")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "rekindle Contributors"

from rekindle.core import ContextRefresher  # noqa: E402
from rekindle.layers import Environment  # noqa: E402

__all__ = ["__version__", "__version_info__", "ContextRefresher", "Environment"]
