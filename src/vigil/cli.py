"""vigil Command Line Interface.

Entry point for the vigil CLI tool.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from pydantic import ValidationError

from vigil import __version__
from vigil.contracts.errors import FixtureError, PluginConfigError, PluginNotFoundError
from vigil.core.config import VigilSettings, load_settings

if TYPE_CHECKING:
    from vigil.contracts.results import ValidationResult
    from vigil.engine.hub import ValidatorHub
    from vigil.plugins.manager import PluginManager

__all__ = ["app"]

# Module-level singleton for plugin manager
_plugin_manager_cache: PluginManager | None = None


def _get_plugin_manager() -> PluginManager:
    """Get initialized plugin manager (singleton).

    Returns:
        PluginManager with all built-in plugins registered
    """
    global _plugin_manager_cache

    from vigil.plugins.manager import PluginManager

    if _plugin_manager_cache is None:
        manager = PluginManager()
        manager.register_builtin_plugins()
        _plugin_manager_cache = manager
    return _plugin_manager_cache


app = typer.Typer(
    name="vigil",
    help="vigil: reactive validation over named fixtures.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"vigil version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """vigil: reactive validation over named fixtures."""
    from vigil.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "WARNING"
    configure_logging(json_output=json_logs, level=log_level)


def _format_error(title: str, message: str, details: list[str] | None = None, hint: str | None = None) -> None:
    typer.secho(f"Error: {title}", fg=typer.colors.RED, err=True)
    typer.echo(f"  {message}", err=True)
    for detail in details or []:
        typer.echo(f"    - {detail}", err=True)
    if hint:
        typer.echo(f"  Hint: {hint}", err=True)


def _parse_overrides(values: list[str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name:
            _format_error("Invalid --set", f"Expected NAME=VALUE, got '{item}'")
            raise typer.Exit(1)
        overrides[name] = value
    return overrides


def _apply_overrides(hub: ValidatorHub, overrides: dict[str, str]) -> None:
    for name, value in overrides.items():
        fixture = hub.fixtures.find_fixture(name)
        if isinstance(fixture, dict):
            fixture["value"] = value
        else:
            hub.fixtures.add_fixture({"value": value}, name)


def _load_or_exit(settings_path: Path) -> VigilSettings:
    try:
        return load_settings(settings_path)
    except (YamlParserError, YamlScannerError) as e:
        _format_error(
            "YAML Syntax Error",
            f"Failed to parse {settings_path.name}",
            details=[str(e.problem)] if hasattr(e, "problem") else None,
            hint="Check for unclosed brackets, incorrect indentation, or invalid characters.",
        )
        raise typer.Exit(1) from None
    except FileNotFoundError:
        _format_error(
            "File Not Found",
            f"Settings file does not exist: {settings_path}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = [f"{'.'.join(str(x) for x in error['loc'])}: {error['msg']}" for error in e.errors()]
        _format_error(
            "Configuration Validation Failed",
            f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and required values.",
        )
        raise typer.Exit(1) from None


def _format_result(result: ValidationResult | None) -> str:
    if result is None:
        return "no result"
    if result.message:
        return f"{result.state} - {result.message}"
    return result.state


@app.command()
def check(
    settings: str = typer.Option(
        ...,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    trigger: str | None = typer.Option(
        None,
        "--trigger",
        "-t",
        help="Trigger passed to every validator.",
    ),
    overrides: list[str] = typer.Option(
        [],
        "--set",
        help="Override a fixture value: NAME=VALUE (repeatable).",
    ),
) -> None:
    """Run every configured validator once and report the results."""
    from vigil.engine.batch import validate_all
    from vigil.engine.hub import ValidatorHub

    settings_path = Path(settings).expanduser()
    config = _load_or_exit(settings_path)
    values = _parse_overrides(overrides)

    try:
        hub = ValidatorHub.from_settings(config, _get_plugin_manager().build_registry())
        _apply_overrides(hub, values)
    except (PluginConfigError, PluginNotFoundError, FixtureError) as e:
        _format_error(
            "Plugin Configuration Error",
            str(e),
            hint="Check plugin types and that every plugin has a fixture and a result.",
        )
        raise typer.Exit(1) from None

    validators = hub.get_all_validators()
    results = asyncio.run(validate_all(validators, trigger))

    failed = False
    for validator, result in zip(validators, results, strict=True):
        line = f"{validator.name}: {_format_result(result)}"
        if result is not None and result.state in config.fail_states:
            failed = True
            typer.secho(line, fg=typer.colors.RED)
        else:
            typer.echo(line)

    if failed:
        raise typer.Exit(1)


# Plugins subcommand group
plugins_app = typer.Typer(help="Plugin management commands.")
app.add_typer(plugins_app, name="plugins")


@plugins_app.command("list")
def plugins_list() -> None:
    """List available plugin types."""
    manager = _get_plugin_manager()
    for plugin_type in manager.get_plugin_types():
        factory = manager.get_factory_by_type(plugin_type)
        doc = (factory.__doc__ or "").strip().splitlines() if factory is not None else []
        description = doc[0] if doc else "No description available."
        typer.echo(f"  {plugin_type:20} - {description}")


if __name__ == "__main__":
    app()
