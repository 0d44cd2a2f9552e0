"""CLI entry point for tap."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import NoReturn

import click

from tap.actions import tap_in, tap_out
from tap.config import TAP_STORE, resolve_store_dir
from tap.errors import TapError
from tap.log import hours_worked, utc_now
from tap.store import LogStore


def _fail(error: TapError) -> NoReturn:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _open_store(store: Path | None, *, shared: bool = False) -> LogStore:
    try:
        return LogStore.open(resolve_store_dir(store), shared=shared)
    except TapError as e:
        _fail(e)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="tap-clock")
@click.option(
    "--store",
    envvar=TAP_STORE,
    type=click.Path(path_type=Path),
    default=None,
    help=f"Directory holding log.txt (default: ${TAP_STORE})",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, store: Path | None, verbose: bool) -> None:
    """Clock in and out of work."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = store


@cli.command("in")
@click.pass_obj
def in_command(store: Path | None) -> None:
    """You're starting work."""
    with _open_store(store) as log_store:
        try:
            tap_in(log_store, utc_now())
        except TapError as e:
            _fail(e)


@cli.command("out")
@click.pass_obj
def out_command(store: Path | None) -> None:
    """Home time."""
    with _open_store(store) as log_store:
        try:
            tap_out(log_store, utc_now())
        except TapError as e:
            _fail(e)


@cli.command("hours")
@click.argument("start", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.argument("end", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.pass_obj
def hours_command(store: Path | None, start: datetime, end: datetime) -> None:
    """Show hours worked from START to END (YYYY-MM-DD, inclusive, UTC).

    Every day in the range needs a tap-out.

    Example:
        tap hours 2024-06-16 2024-06-17
    """
    with _open_store(store, shared=True) as log_store:
        try:
            log = log_store.read()
        except TapError as e:
            _fail(e)
    try:
        hours = hours_worked(start.date(), end.date(), log)
    except TapError as e:
        _fail(e)
    click.echo(f"{hours:.2f}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
