"""
Bootstrap collaborators.

A bootstrapper rebuilds configuration from the same inputs the process
booted from, returning a fresh Environment plus resource handles that the
refresher releases afterwards.
"""

from rekindle.bootstrap.base import (
    BootstrapContext,
    Bootstrapper,
    BootstrapRequest,
    BootstrapResult,
    release_all,
    release_chain,
)
from rekindle.bootstrap.files import ConfigFileError, FileBootstrapper

__all__ = [
    "BootstrapContext",
    "BootstrapRequest",
    "BootstrapResult",
    "Bootstrapper",
    "ConfigFileError",
    "FileBootstrapper",
    "release_all",
    "release_chain",
]
