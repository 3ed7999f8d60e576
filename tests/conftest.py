"""
Shared pytest fixtures for rekindle tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import collections.abc as _abc
import os as _os

import pytest as _pytest

import rekindle.bootstrap.base as bootstrap_base
import rekindle.layers as layers

# Environment keys that should be cleared for isolated tests
ENV_KEYS_TO_CLEAR = [
    "REKINDLE_CONFIG_NAME",
    "REKINDLE_CONFIG_LOCATIONS",
    "REKINDLE_ACTIVE_PROFILES",
    "REKINDLE_DEFAULT_PROFILES",
    "REKINDLE_EXTRA_STANDARD_LAYERS",
    "REKINDLE_LOG_LEVEL",
    "REKINDLE_ENV_FILE",
]


class RecordingScope:
    """Refresh scope that counts refresh_all calls."""

    def __init__(self) -> None:
        self.refresh_count = 0

    def refresh_all(self) -> None:
        self.refresh_count += 1


class StaticBootstrapper:
    """
    Bootstrapper returning a configurable list of layers.

    The returned environment holds the request's override layer followed
    by ``self.layers``, as a real bootstrap from scratch would. Each call
    allocates a context chained to a parent context.
    """

    def __init__(self, layer_list: _abc.Iterable[layers.Layer] = ()) -> None:
        self.layers: list[layers.Layer] = list(layer_list)
        self.requests: list[bootstrap_base.BootstrapRequest] = []
        self.contexts: list[bootstrap_base.BootstrapContext] = []

    def __call__(self, request: bootstrap_base.BootstrapRequest) -> bootstrap_base.BootstrapResult:
        self.requests.append(request)
        parent = bootstrap_base.BootstrapContext("parent")
        context = bootstrap_base.BootstrapContext("child", parent=parent)
        self.contexts.extend([context, parent])
        env = layers.Environment(
            [request.overrides, *self.layers],
            active_profiles=request.active_profiles,
            default_profiles=request.default_profiles,
        )
        return bootstrap_base.BootstrapResult(env, context)


@_pytest.fixture
def clean_env(monkeypatch: _pytest.MonkeyPatch) -> None:
    """Remove REKINDLE_* variables so settings use their defaults."""
    for key in list(_os.environ):
        if key in ENV_KEYS_TO_CLEAR or key.startswith("REKINDLE_"):
            monkeypatch.delenv(key, raising=False)


@_pytest.fixture
def recording_scope() -> RecordingScope:
    return RecordingScope()


@_pytest.fixture
def static_bootstrapper() -> StaticBootstrapper:
    return StaticBootstrapper()
