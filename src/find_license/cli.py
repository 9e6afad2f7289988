"""Click CLI for find-license: look up licenses of Go module dependencies."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import signal
import sys

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from find_license.config.hierarchy import load_config_hierarchy
from find_license.config.schema import FetcherSettings
from find_license.errors.exceptions import ModuleLoadError
from find_license.types import Module

error_console = Console(stderr=True)


def _setup_logging(verbosity: int, debug: bool, configured_level: str) -> None:
    """Configure logging from -v count, --debug and the configured level."""
    level = logging.getLevelName(configured_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = min(level, logging.INFO)
    elif verbosity >= 2 or debug:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(package_name="find-license")
def cli() -> None:
    """find-license: look up Go dependency licenses on pkg.go.dev."""


@cli.command()
@click.option(
    "--list",
    "use_list",
    is_flag=True,
    default=False,
    help="Read modules from `go list -m -json all` (the default; kept for compatibility).",
)
@click.option(
    "--from-file",
    type=click.Path(allow_dash=True),
    default=None,
    help="Read saved `go list -m -json all` output ('-' for stdin).",
)
@click.option("--direct", is_flag=True, default=False, help="Ignore indirect dependencies.")
@click.option("--dry", is_flag=True, default=False, help="Print modules without searching licenses.")
@click.option("--rate", type=float, default=None, help="Lookups started per second.")
@click.option("--concurrency", type=int, default=None, help="Maximum lookups in flight.")
@click.option("--timeout", type=float, default=None, help="Per-request timeout in seconds.")
@click.option("--base-url", type=str, default=None, help="Lookup service base URL.")
@click.option("--debug", is_flag=True, default=False, help="Enable debug logs.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def fetch(
    use_list: bool,
    from_file: str | None,
    direct: bool,
    dry: bool,
    rate: float | None,
    concurrency: int | None,
    timeout: float | None,
    base_url: str | None,
    debug: bool,
    verbose: int,
) -> None:
    """Search pkg.go.dev and print one JSON object per module license.

    Success objects carry Module, URI, Source, Content and Type; failures
    carry Module, URI and Err.
    """
    config = load_config_hierarchy(
        rate=rate,
        concurrency=concurrency,
        timeout=timeout,
        base_url=base_url,
        debug=debug or None,
    )
    try:
        settings = FetcherSettings.from_config(config)
    except ValidationError as e:
        error_console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)

    _setup_logging(verbose, settings.debug, settings.log_level)

    if use_list and from_file:
        error_console.print("[red]Error:[/red] --list and --from-file are mutually exclusive")
        sys.exit(2)

    try:
        modules = _load_modules(from_file, use_list)
    except ModuleLoadError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    modules = _filter_modules(modules, direct)

    if dry:
        click.echo(json.dumps([m.to_record() for m in modules], ensure_ascii=False))
        return

    asyncio.run(_fetch_and_print(settings, modules))


@cli.command("url")
@click.argument("path")
@click.argument("version", required=False, default="")
@click.option("--base-url", type=str, default=None, help="Lookup service base URL.")
def show_url(path: str, version: str, base_url: str | None) -> None:
    """Print the licenses page URL for a module."""
    from find_license.lookup.client import licenses_url

    settings = FetcherSettings.from_config(load_config_hierarchy(base_url=base_url))
    click.echo(licenses_url(Module(path=path, version=version), settings.base_url))


def _load_modules(from_file: str | None, use_list: bool = False) -> list[Module]:
    """Saved output when --from-file is given, otherwise a live `go list`."""
    from find_license.loaders import FileLoader, GoListLoader

    if use_list or not from_file:
        return GoListLoader().load()
    return FileLoader(from_file).load()


def _filter_modules(modules: list[Module], direct: bool) -> list[Module]:
    from find_license.loaders import remove_errored, remove_indirect

    if direct:
        modules = remove_indirect(modules)
    return remove_errored(modules)


async def _fetch_and_print(settings: FetcherSettings, modules: list[Module]) -> None:
    from find_license.core import LicenseFinder

    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    # Signal handlers are unavailable on some platforms and outside the main thread.
    with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
        loop.add_signal_handler(signal.SIGINT, cancel.set)

    async with LicenseFinder(settings) as finder:
        try:
            async for result in finder.fetch_licenses(modules, cancel):
                click.echo(json.dumps(result.to_record(), ensure_ascii=False, default=str))
        finally:
            with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
                loop.remove_signal_handler(signal.SIGINT)


def main() -> None:
    """Entry point for the CLI."""
    cli()
