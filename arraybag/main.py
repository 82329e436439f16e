"""
arraybag — CLI entrypoint.

Usage:
    python -m arraybag.main --help
    python -m arraybag.main keys
    python -m arraybag.main --root path/to/project get database_url
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click

from arraybag import __version__
from arraybag.core import context
from arraybag.core.bag import MISSING, ArrayBag
from arraybag.core.config.settings import Settings
from arraybag.core.errors import BagError, RootNotFoundError
from arraybag.core.observability.logging_config import setup_logging
from arraybag.core.project import find_project_root
from arraybag.core.store import config_path, registry


@click.group()
@click.version_option(version=__version__, prog_name="arraybag")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--root",
    "-r",
    "root",
    type=click.Path(file_okay=False),
    default=None,
    help="Project root (default: auto-detect from the current directory).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    root: str | None,
) -> None:
    """arraybag — inspect a project's configuration bag."""
    ctx.ensure_object(dict)

    settings = Settings.from_env()

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = settings.log_level

    setup_logging(
        level=level,
        log_file=settings.log_file,
        log_file_level=settings.log_file_level,
    )

    if root is not None:
        project_root = Path(root).resolve()
    else:
        try:
            project_root = find_project_root()
        except RootNotFoundError:
            project_root = Path.cwd().resolve()

    context.set_project_root(project_root)
    ctx.obj["root"] = project_root


def _load_bag(ctx: click.Context) -> ArrayBag:
    """Return the registered bag for the selected root, or exit 1."""
    try:
        return registry(ctx.obj["root"])
    except BagError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def _render(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


@cli.command()
@click.pass_context
def path(ctx: click.Context) -> None:
    """Print the config file path for the project."""
    click.echo(str(config_path(ctx.obj["root"])))


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def keys(ctx: click.Context, as_json: bool) -> None:
    """List the keys defined in the project's bag."""
    bag = _load_bag(ctx)

    if as_json:
        click.echo(json.dumps(bag.keys()))
        return

    for key in bag.keys():
        click.echo(key)


@cli.command()
@click.argument("key")
@click.option("--default", "default", default=None, help="Value to print when KEY is undefined.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def get(ctx: click.Context, key: str, default: str | None, as_json: bool) -> None:
    """Print the value stored at KEY."""
    bag = _load_bag(ctx)

    try:
        value = bag.get(key, MISSING if default is None else default)
    except BagError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(value, default=str))
    else:
        click.echo(_render(value))


@cli.command()
@click.argument("key")
@click.pass_context
def has(ctx: click.Context, key: str) -> None:
    """Check whether KEY is defined (exit code 0 if it is, 1 if not)."""
    bag = _load_bag(ctx)

    found = bag.has(key)
    click.echo("true" if found else "false")
    sys.exit(0 if found else 1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show(ctx: click.Context, as_json: bool) -> None:
    """Show every entry in the project's bag."""
    bag = _load_bag(ctx)
    data = bag.to_dict()

    if as_json:
        click.echo(json.dumps(data, indent=2, default=str))
        return

    root = ctx.obj["root"]
    click.secho(f"\n📋 {root.name or root}", fg="cyan", bold=True)
    click.echo(f"   {config_path(root)}")
    click.echo()

    if not data:
        click.echo("   (empty)")
    for key, value in data.items():
        click.echo(f"   • {key} = {_render(value)}")

    click.echo()


if __name__ == "__main__":
    cli()
