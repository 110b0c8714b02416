"""kitectl CLI entrypoint.

Command-line interface for checking, installing and launching the Kite daemon.
"""

from __future__ import annotations

import functools
import json
import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from kitectl.core.errors import KitectlCliError
from kitectl.domain.entities import InstallOptions
from kitectl.domain.exceptions import KiteError
from kitectl.domain.states import LifecycleState
from kitectl.version import __version__

if TYPE_CHECKING:
    from kitectl.core.lifecycle.orchestrator import LifecycleOrchestrator
    from kitectl.domain.config import KitectlConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_STATE_HINTS = {
    LifecycleState.UNSUPPORTED: "Kite runs on macOS, Windows and Linux",
    LifecycleState.NOT_INSTALLED: "Run 'kitectl install' to install Kite",
    LifecycleState.NOT_RUNNING: "Run 'kitectl launch' to start Kite",
    LifecycleState.NOT_REACHABLE: "Kite is running but its API is not answering yet",
    LifecycleState.NOT_AUTHENTICATED: "Sign in to Kite from the Kite app",
}


def handle_cli_errors(command_name: str):
    """Decorator to handle common CLI errors.

    KitectlCliError is re-raised to use its built-in formatting; KiteError
    is converted with its hint; anything else becomes a generic error, with a
    traceback in verbose mode.

    Args:
        command_name: Name of the command for error messages.

    Returns:
        Decorated function with error handling.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except (KitectlCliError, click.exceptions.Exit):
                raise
            except KiteError as e:
                raise KitectlCliError.from_kite_error(e) from e
            except Exception as e:
                ctx = click.get_current_context()
                if ctx.obj.get("verbose", False):
                    import traceback

                    traceback.print_exc()
                raise KitectlCliError(
                    f"Unexpected error in {command_name}: {e}",
                    hint="Run with --verbose for more details",
                ) from e

        return wrapper

    return decorator


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if verbose:
        logging.getLogger("kitectl").setLevel(logging.DEBUG)


def _load_config(config_file: Path | None) -> KitectlConfig:
    """Load configuration through the config factory."""
    from kitectl.adapters.factory import ConfigFactory

    return ConfigFactory().create_config_provider().load(config_file)


def _create_orchestrator(ctx: click.Context) -> LifecycleOrchestrator:
    """Create the orchestrator for the current host from CLI context."""
    from kitectl.adapters.factory import OrchestratorFactory

    config = _load_config(ctx.obj.get("config_file"))
    return OrchestratorFactory(config).create_orchestrator()


def _absolute_path(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> str | None:
    """Make a project path absolute without following symlinks."""
    if value is None:
        return None
    return os.path.abspath(value)


@click.group()
@click.version_option(version=__version__, prog_name="kitectl")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output.",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Suppress non-essential output.",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file layered over the global config.",
)
@click.pass_context
def cli(
    ctx: click.Context, verbose: bool, quiet: bool, config_file: Path | None
) -> None:
    """kitectl - Check, install and launch the Kite daemon."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_file"] = config_file
    _configure_logging(verbose)


@cli.command()
@click.option(
    "--path",
    "project_path",
    type=click.Path(file_okay=True, dir_okay=True),
    callback=_absolute_path,
    default=None,
    help="Also check whether this project path is whitelisted.",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
@handle_cli_errors("status")
def status(ctx: click.Context, project_path: str | None, as_json: bool) -> None:
    """Show the Kite daemon's current state."""
    orchestrator = _create_orchestrator(ctx)
    report = orchestrator.resolve(path=project_path)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    if report.state is LifecycleState.AUTHENTICATED:
        click.echo("✓ Kite is running and authenticated")
    else:
        click.echo(f"✗ Kite is {report.state.label}")

    failure = report.failure
    if failure is not None and ctx.obj.get("verbose", False):
        detail = f"  Failed check: {failure.stage.value}"
        if failure.reason is not None:
            detail += f" ({failure.reason.value})"
        if failure.detail:
            detail += f": {failure.detail}"
        click.echo(detail)

    if report.timed_out:
        click.echo("  The Kite API timed out; it may still be starting")

    hint = _STATE_HINTS.get(report.state)
    if hint and not ctx.obj.get("quiet", False):
        click.echo(f"  {hint}")

    if report.whitelisted is not None:
        mark = "✓" if report.whitelisted else "✗"
        verdict = "whitelisted" if report.whitelisted else "not whitelisted"
        click.echo(f"{mark} {report.path} is {verdict}")


@cli.command()
@click.option("--launch", "launch_after", is_flag=True, help="Launch Kite after installing.")
@click.option(
    "--no-elevation",
    is_flag=True,
    help="Fail instead of running an installer that needs administrator rights.",
)
@click.pass_context
@handle_cli_errors("install")
def install(ctx: click.Context, launch_after: bool, no_elevation: bool) -> None:
    """Install the Kite daemon."""
    from kitectl.core.progress import spinner

    orchestrator = _create_orchestrator(ctx)
    quiet = ctx.obj.get("quiet", False)

    with spinner("Installing Kite...", quiet=quiet) as update:
        result = orchestrator.install(
            InstallOptions(
                launch=launch_after,
                allow_elevation=not no_elevation,
                on_step=update,
            )
        )

    if quiet:
        return
    if result.performed:
        click.echo("✓ Kite installed successfully")
    else:
        click.echo("Kite is already installed")
    if launch_after and result.state is LifecycleState.RUNNING:
        click.echo("✓ Kite launched")


@cli.command()
@click.option(
    "--wait/--no-wait",
    default=True,
    help="Wait until the Kite API answers (default: wait).",
)
@click.pass_context
@handle_cli_errors("launch")
def launch(ctx: click.Context, wait: bool) -> None:
    """Start the Kite daemon."""
    from kitectl.core.progress import spinner

    orchestrator = _create_orchestrator(ctx)
    quiet = ctx.obj.get("quiet", False)

    if not wait:
        result = orchestrator.launch()
        if not quiet:
            click.echo("✓ Kite started" if result.performed else "Kite is already running")
        return

    with spinner("Starting Kite...", quiet=quiet):
        report = orchestrator.launch_and_wait()

    if not report.state.is_at_least(LifecycleState.REACHABLE):
        raise KitectlCliError(
            f"Kite was started but is {report.state.label}",
            hint="Kite may still be starting. Check 'kitectl status' in a moment",
        )
    if not quiet:
        click.echo(f"✓ Kite is {report.state.label}")


@cli.command(name="check-path")
@click.argument("project_path", type=click.Path(), callback=_absolute_path)
@click.pass_context
@handle_cli_errors("check-path")
def check_path(ctx: click.Context, project_path: str) -> None:
    """Exit 0 if PROJECT_PATH is whitelisted in Kite, 1 otherwise."""
    orchestrator = _create_orchestrator(ctx)
    whitelisted = orchestrator.is_path_whitelisted(project_path)

    if not ctx.obj.get("quiet", False):
        verdict = "whitelisted" if whitelisted else "not whitelisted"
        click.echo(f"{project_path} is {verdict}")
    if not whitelisted:
        ctx.exit(1)


@cli.group()
def config() -> None:
    """Manage kitectl configuration.

    Settings are read from the global config file, then from --config FILE
    if given. Missing values use built-in defaults.
    """
    pass


@config.command(name="show")
@click.pass_context
@handle_cli_errors("config show")
def config_show(ctx: click.Context) -> None:
    """Print the effective configuration as TOML."""
    from kitectl.shared.config_io import config_to_toml, get_global_config_path

    global_path = get_global_config_path()
    if not ctx.obj.get("quiet", False):
        status = "exists" if global_path.exists() else "not created"
        click.echo(f"# Global config: {global_path} ({status})")
    click.echo(config_to_toml(_load_config(ctx.obj.get("config_file"))), nl=False)


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
@click.pass_context
@handle_cli_errors("config init")
def config_init(ctx: click.Context, force: bool) -> None:
    """Write a global config file with default settings."""
    from kitectl.domain.config import KitectlConfig
    from kitectl.shared.config_io import get_global_config_path, save_config

    path = get_global_config_path()
    if path.exists() and not force:
        raise KitectlCliError(
            f"Config file already exists: {path}",
            hint="Use --force to overwrite it",
        )

    save_config(KitectlConfig.default(), path)
    if not ctx.obj.get("quiet", False):
        click.echo(f"✓ Wrote default config to {path}")


@config.command(name="path")
@handle_cli_errors("config path")
def config_path() -> None:
    """Print the global config file location, for use in scripts."""
    from kitectl.shared.config_io import get_global_config_path

    click.echo(get_global_config_path())


def main() -> int:
    """Main entrypoint for the CLI."""
    try:
        cli(obj={})
        return 0
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
