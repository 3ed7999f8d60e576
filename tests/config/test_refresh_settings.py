"""Tests for RefreshSettings."""

import pathlib as _pathlib

import pydantic as _pydantic
import pytest as _pytest

import rekindle.config as config
import rekindle.constants as constants
import rekindle.context as context


@_pytest.mark.usefixtures("clean_env")
class TestRefreshSettingsDefaults:
    """Defaults without environment overrides."""

    def test_defaults(self) -> None:
        """Fields have documented defaults."""
        settings = config.RefreshSettings()

        assert settings.config_name == "application"
        assert settings.config_locations == [_pathlib.Path("config"), _pathlib.Path(".")]
        assert settings.active_profiles == []
        assert settings.default_profiles == ["default"]
        assert settings.extra_standard_layers == []
        assert settings.log_level == "WARNING"

    def test_standard_layers_without_extras(self) -> None:
        """The base set is returned unchanged."""
        assert config.RefreshSettings().standard_layers() == constants.STANDARD_LAYER_NAMES


@_pytest.mark.usefixtures("clean_env")
class TestRefreshSettingsEnvironment:
    """REKINDLE_* environment variables."""

    def test_comma_separated_lists(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """List settings split on commas."""
        monkeypatch.setenv("REKINDLE_ACTIVE_PROFILES", "dev, local")
        monkeypatch.setenv("REKINDLE_CONFIG_LOCATIONS", "/etc/app,./config")
        monkeypatch.setenv("REKINDLE_EXTRA_STANDARD_LAYERS", "vault")

        settings = config.RefreshSettings()

        assert settings.active_profiles == ["dev", "local"]
        assert settings.config_locations == [_pathlib.Path("/etc/app"), _pathlib.Path("./config")]
        assert "vault" in settings.standard_layers()
        assert constants.SYSTEM_ENVIRONMENT_LAYER_NAME in settings.standard_layers()

    def test_scalar_settings(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """Scalar settings are read directly."""
        monkeypatch.setenv("REKINDLE_CONFIG_NAME", "service")
        monkeypatch.setenv("REKINDLE_LOG_LEVEL", "debug")

        settings = config.RefreshSettings()

        assert settings.config_name == "service"
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        """Unknown log levels are rejected."""
        with _pytest.raises(_pydantic.ValidationError):
            config.RefreshSettings(log_level="loud")

    def test_constructor_overrides_environment(self, monkeypatch: _pytest.MonkeyPatch) -> None:
        """Constructor arguments win over env vars."""
        monkeypatch.setenv("REKINDLE_CONFIG_NAME", "from-env")

        assert config.RefreshSettings(config_name="from-init").config_name == "from-init"


@_pytest.mark.usefixtures("clean_env")
class TestBuildEnvironment:
    """Boot environment construction."""

    def test_layer_order(self, tmp_path: _pathlib.Path) -> None:
        """Standard layers, then files, then defaults."""
        (tmp_path / "application.yaml").write_text("server:\n  port: 8080\n", encoding="utf-8")
        settings = config.RefreshSettings(config_locations=[tmp_path])

        env = settings.build_environment(environ={"HOME": "/home/test"})

        assert env.layers.names() == [
            constants.SYSTEM_PROPERTIES_LAYER_NAME,
            constants.SYSTEM_ENVIRONMENT_LAYER_NAME,
            constants.APPLICATION_CONFIG_LAYER_NAME,
            constants.DEFAULT_PROPERTIES_LAYER_NAME,
        ]
        assert env.get_property("server.port") == 8080
        assert env.get_property("HOME") == "/home/test"

    def test_profiles_applied(self, tmp_path: _pathlib.Path) -> None:
        """Active profiles select profile files."""
        (tmp_path / "application.yaml").write_text("mode: base\n", encoding="utf-8")
        (tmp_path / "application-prod.yaml").write_text("mode: prod\n", encoding="utf-8")
        settings = config.RefreshSettings(config_locations=[tmp_path], active_profiles=["prod"])

        env = settings.build_environment(environ={})

        assert env.active_profiles == ["prod"]
        assert env.get_property("mode") == "prod"

    def test_bootstrapper_uses_settings(self, tmp_path: _pathlib.Path) -> None:
        """The bootstrapper honours config_name."""
        (tmp_path / "svc.yaml").write_text("a: 1\n", encoding="utf-8")
        settings = config.RefreshSettings(config_locations=[tmp_path], config_name="svc")

        env = settings.build_environment(environ={})

        assert env.get_property("a") == 1

    def test_context_refresher_uses_settings(self, tmp_path: _pathlib.Path) -> None:
        """The refresher re-reads the same files and skips the extra standard layers."""
        (tmp_path / "application.yaml").write_text("a: 1\n", encoding="utf-8")
        settings = config.RefreshSettings(
            config_locations=[tmp_path],
            extra_standard_layers=["vault"],
        )
        env = settings.build_environment(environ={})
        refresher = settings.context_refresher(env, context.LazyRefreshScope())

        (tmp_path / "application.yaml").write_text("a: 2\n", encoding="utf-8")

        assert "vault" in refresher.standard_layers
        assert refresher.refresh() == frozenset({"a"})
        assert env.get_property("a") == 2
