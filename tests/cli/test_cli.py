"""Tests for the rekindle CLI."""

import json as _json
import os as _os
import pathlib as _pathlib

import click.testing as _click_testing

import rekindle.cli as cli


class TestCLI:
    """Commands run against files in a temporary directory."""

    def setup_method(self) -> None:
        """Set up a runner with a clean environment."""
        clean_env = {k: v for k, v in _os.environ.items() if not k.startswith("REKINDLE_")}
        self.runner = _click_testing.CliRunner(env=clean_env)

    def test_help_lists_commands(self) -> None:
        """Help output should list all commands."""
        result = self.runner.invoke(cli.cli, ["--help"])

        assert result.exit_code == 0
        for cmd in ["show", "diff", "refresh"]:
            assert cmd in result.output

    def test_show(self, tmp_path: _pathlib.Path) -> None:
        """show prints flattened keys sorted."""
        (tmp_path / "application.yaml").write_text(
            "server:\n  port: 8080\ndebug: true\n", encoding="utf-8"
        )

        result = self.runner.invoke(cli.cli, ["-l", str(tmp_path), "show"])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["debug = true", "server.port = 8080"]

    def test_show_json_with_profile(self, tmp_path: _pathlib.Path) -> None:
        """--profile selects profile files; --json emits a mapping."""
        (tmp_path / "application.yaml").write_text("mode: base\n", encoding="utf-8")
        (tmp_path / "application-prod.yaml").write_text("mode: prod\n", encoding="utf-8")

        result = self.runner.invoke(cli.cli, ["-l", str(tmp_path), "-p", "prod", "show", "--json"])

        assert result.exit_code == 0, result.output
        assert _json.loads(result.output) == {"mode": "prod"}

    def test_show_empty(self, tmp_path: _pathlib.Path) -> None:
        """No files means no configuration."""
        result = self.runner.invoke(cli.cli, ["-l", str(tmp_path), "show"])

        assert result.exit_code == 0
        assert "No configuration found." in result.output

    def test_show_reports_broken_file(self, tmp_path: _pathlib.Path) -> None:
        """Config file errors become a non-zero exit with a message."""
        (tmp_path / "application.yaml").write_text("- a list\n", encoding="utf-8")

        result = self.runner.invoke(cli.cli, ["-l", str(tmp_path), "show"])

        assert result.exit_code == 1
        assert "config must be a YAML mapping" in result.output

    def test_diff(self, tmp_path: _pathlib.Path) -> None:
        """diff marks added, changed and removed keys."""
        old = tmp_path / "old.yaml"
        new = tmp_path / "new.yaml"
        old.write_text("a: 1\nb: 2\nc: 3\n", encoding="utf-8")
        new.write_text("a: 1\nb: 5\nd: 4\n", encoding="utf-8")

        result = self.runner.invoke(cli.cli, ["diff", str(old), str(new)])

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["~ b = 5", "- c", "+ d = 4"]

    def test_diff_json(self, tmp_path: _pathlib.Path) -> None:
        """diff --json groups keys by kind of change."""
        old = tmp_path / "old.yaml"
        new = tmp_path / "new.yaml"
        old.write_text("a: 1\nb: 2\n", encoding="utf-8")
        new.write_text("a: 2\nc: 3\n", encoding="utf-8")

        result = self.runner.invoke(cli.cli, ["diff", "--json", str(old), str(new)])

        assert result.exit_code == 0, result.output
        assert _json.loads(result.output) == {
            "added": {"c": 3},
            "changed": {"a": 2},
            "removed": ["b"],
        }

    def test_diff_identical(self, tmp_path: _pathlib.Path) -> None:
        """Identical files report no changes."""
        path = tmp_path / "same.yaml"
        path.write_text("a: 1\n", encoding="utf-8")

        result = self.runner.invoke(cli.cli, ["diff", str(path), str(path)])

        assert result.exit_code == 0
        assert "No changes." in result.output

    def test_refresh_on_fresh_boot_reports_nothing(self, tmp_path: _pathlib.Path) -> None:
        """A refresh right after loading finds no drift."""
        (tmp_path / "application.yaml").write_text("a: 1\n", encoding="utf-8")

        result = self.runner.invoke(cli.cli, ["-l", str(tmp_path), "refresh"])

        assert result.exit_code == 0, result.output
        assert "No changes." in result.output
