"""Refresh cycles against configuration files on disk."""

import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import rekindle.bootstrap as bootstrap
import rekindle.config as config
import rekindle.constants as constants
import rekindle.context as context
import rekindle.core as core


def _write(path: _pathlib.Path, content: str) -> None:
    path.write_text(content, encoding="utf-8")


@_pytest.fixture
def settings(tmp_path: _pathlib.Path, clean_env: None) -> config.RefreshSettings:
    _write(tmp_path / "application.yaml", "x: 1\ny: 2\n")
    return config.RefreshSettings(config_locations=[tmp_path])


class TestFileRefresh:
    """Settings, FileBootstrapper, reconcile and diff together."""

    def test_refresh_after_boot_reports_nothing(
        self,
        settings: config.RefreshSettings,
        recording_scope: _typing.Any,
    ) -> None:
        """Files unchanged since boot produce an empty change set."""
        env = settings.build_environment(environ={})
        refresher = settings.context_refresher(env, recording_scope)

        assert refresher.refresh() == frozenset()
        assert refresher.snapshot() == {"x": 1, "y": 2}

    def test_edits_and_profile_files_are_picked_up(
        self,
        tmp_path: _pathlib.Path,
        settings: config.RefreshSettings,
        recording_scope: _typing.Any,
    ) -> None:
        """Changed, added and removed files each show up in the change set."""
        env = settings.build_environment(environ={})
        live = env.layers
        publisher = context.EventPublisher()
        received: list[context.EnvironmentChangeEvent] = []
        publisher.subscribe(context.EnvironmentChangeEvent, received.append)
        refresher = settings.context_refresher(env, recording_scope, publisher)

        _write(tmp_path / "application.yaml", "x: 1\ny: 5\nw: 7\n")
        _write(tmp_path / "application-default.yaml", "p: 1\n")
        first = refresher.refresh()

        assert first == frozenset({"y", "w", "p"})
        assert env.get_property("y") == 5
        assert env.get_property("p") == 1

        (tmp_path / "application-default.yaml").unlink()
        second = refresher.refresh()

        assert second == frozenset({"p"})
        assert not env.contains_property("p")

        assert refresher.refresh() == frozenset()
        assert env.layers is live
        assert [event.keys for event in received] == [first, second, frozenset()]
        assert recording_scope.refresh_count == 3

    def test_file_layer_keeps_its_position(
        self,
        tmp_path: _pathlib.Path,
        settings: config.RefreshSettings,
        recording_scope: _typing.Any,
    ) -> None:
        """The reloaded file composite replaces its namesake in place."""
        env = settings.build_environment(environ={})
        names = env.layers.names()
        refresher = settings.context_refresher(env, recording_scope)

        _write(tmp_path / "application.yaml", "x: 2\n")
        refresher.refresh()

        assert env.layers.names() == names
        assert names.index(constants.APPLICATION_CONFIG_LAYER_NAME) == 2

    def test_environment_still_outranks_files(
        self,
        tmp_path: _pathlib.Path,
        settings: config.RefreshSettings,
        recording_scope: _typing.Any,
    ) -> None:
        """A refresh never lets a file value shadow the process environment."""
        env = settings.build_environment(environ={"x": "from-env"})
        refresher = settings.context_refresher(env, recording_scope)

        _write(tmp_path / "application.yaml", "x: 3\ny: 2\n")
        keys = refresher.refresh()

        assert keys == frozenset({"x"})
        assert env.get_property("x") == "from-env"

    def test_bootstrap_contexts_closed_child_first(
        self,
        settings: config.RefreshSettings,
        recording_scope: _typing.Any,
    ) -> None:
        """The application context closes before the bootstrap context."""
        file_bootstrapper = settings.bootstrapper()
        closed: list[str] = []

        def bootstrapper(request: bootstrap.BootstrapRequest) -> bootstrap.BootstrapResult:
            result = file_bootstrapper(request)
            result.context.on_close(lambda: closed.append(result.context.name))
            parent = result.context.parent
            parent.on_close(lambda: closed.append(parent.name))
            return result

        env = settings.build_environment(environ={})
        core.ContextRefresher(env, recording_scope, bootstrapper).refresh()

        assert closed == ["application", "bootstrap"]

    def test_broken_file_leaves_live_untouched(
        self,
        tmp_path: _pathlib.Path,
        settings: config.RefreshSettings,
        recording_scope: _typing.Any,
    ) -> None:
        """A file that fails to load aborts the refresh before any merge."""
        env = settings.build_environment(environ={})
        refresher = settings.context_refresher(env, recording_scope)

        _write(tmp_path / "application.yaml", "- not a mapping\n")

        with _pytest.raises(bootstrap.ConfigFileError):
            refresher.refresh()

        assert refresher.snapshot() == {"x": 1, "y": 2}
        assert recording_scope.refresh_count == 0
