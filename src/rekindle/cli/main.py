"""
Main CLI entry point for rekindle.
"""

import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import click as _click
import pydantic as _pydantic

import rekindle
import rekindle.bootstrap.files as files
import rekindle.config as config
import rekindle.context as context
import rekindle.core as core
import rekindle.layers as layers

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(rekindle.__version__, "-v", "--version", prog_name="rekindle")
@_click.option(
    "--location",
    "-l",
    "locations",
    multiple=True,
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    help="Configuration directory (repeatable, later wins). Default: REKINDLE_CONFIG_LOCATIONS",
)
@_click.option(
    "--profile",
    "-p",
    "profiles",
    multiple=True,
    help="Active profile (repeatable, later wins). Default: REKINDLE_ACTIVE_PROFILES",
)
@_click.option("--verbose", is_flag=True, help="Enable debug logging")
@_click.pass_context
def cli(
    ctx: _click.Context,
    locations: tuple[_pathlib.Path, ...],
    profiles: tuple[str, ...],
    verbose: bool,
) -> None:
    """
    rekindle - reload layered configuration and report what changed.

    \b
    Examples:
        rekindle show                        # Effective configuration
        rekindle -p prod show --json         # With the prod profile, as JSON
        rekindle diff old.yaml new.yaml      # Keys that differ between two files
        rekindle refresh                     # Run one refresh cycle
    """
    overrides: dict[str, _typing.Any] = {}
    if locations:
        overrides["config_locations"] = list(locations)
    if profiles:
        overrides["active_profiles"] = list(profiles)

    try:
        settings = config.RefreshSettings(**overrides)
    except _pydantic.ValidationError as e:
        raise _click.ClickException(f"Invalid settings: {e}") from e

    _logging.basicConfig(
        level=_logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


def _build_environment(settings: config.RefreshSettings) -> layers.Environment:
    try:
        return settings.build_environment()
    except files.ConfigFileError as e:
        raise _click.ClickException(str(e)) from e


def _format_value(value: _typing.Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@cli.command()
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def show(ctx: _click.Context, as_json: bool) -> None:
    """Show the effective configuration loaded from files.

    Standard layers such as the process environment are left out.
    """
    settings: config.RefreshSettings = ctx.obj["settings"]
    env = _build_environment(settings)
    snapshot = core.extract(env.layers, excluded=settings.standard_layers())

    if as_json:
        _click.echo(_json.dumps(snapshot, indent=2, sort_keys=True, default=str))
        return

    if not snapshot:
        _click.echo("No configuration found.")
        return
    for key in sorted(snapshot):
        _click.echo(f"{key} = {_format_value(snapshot[key])}")


@cli.command()
@_click.argument("old", type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path))
@_click.argument("new", type=_click.Path(exists=True, dir_okay=False, path_type=_pathlib.Path))
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def diff(old: _pathlib.Path, new: _pathlib.Path, as_json: bool) -> None:
    """Show keys that differ between two configuration files.

    \b
    Output lines:
        + key = value    key only in NEW
        ~ key = value    key in both with a different value
        - key            key only in OLD
    """
    try:
        before = files.load_config_file(old)
        after = files.load_config_file(new)
    except files.ConfigFileError as e:
        raise _click.ClickException(str(e)) from e

    changed = core.changes(before, after)

    if as_json:
        payload = {
            "added": {k: v for k, v in changed.items() if k not in before},
            "changed": {k: v for k, v in changed.items() if k in before and v is not core.REMOVED},
            "removed": sorted(k for k, v in changed.items() if v is core.REMOVED),
        }
        _click.echo(_json.dumps(payload, indent=2, sort_keys=True, default=str))
        return

    if not changed:
        _click.echo("No changes.")
        return
    for key in sorted(changed):
        value = changed[key]
        if value is core.REMOVED:
            _click.echo(f"- {key}")
        elif key in before:
            _click.echo(f"~ {key} = {_format_value(value)}")
        else:
            _click.echo(f"+ {key} = {_format_value(value)}")


@cli.command()
@_click.pass_context
def refresh(ctx: _click.Context) -> None:
    """Load configuration, refresh it once, and list the keys that changed."""
    settings: config.RefreshSettings = ctx.obj["settings"]
    env = _build_environment(settings)
    publisher = context.EventPublisher()
    refresher = settings.context_refresher(env, context.LazyRefreshScope(publisher), publisher)

    try:
        keys = refresher.refresh()
    except (files.ConfigFileError, layers.LayerError) as e:
        raise _click.ClickException(str(e)) from e

    if not keys:
        _click.echo("No changes.")
        return
    for key in sorted(keys):
        _click.echo(key)


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="rekindle")


if __name__ == "__main__":
    main()
