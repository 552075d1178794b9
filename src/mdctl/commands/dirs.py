"""Command group: content-type directory maintenance."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from mdctl.commands._base import MdGroup
from mdctl.services.directories import DirectoryService

if TYPE_CHECKING:
    from mdctl.commands._context import AppContext

_DIRS_EXAMPLES = """\
  mdctl dirs check
  mdctl dirs check --create
  mdctl dirs stats
  mdctl dirs cleanup
  mdctl dirs backup --target /var/backups/site"""


@click.group(cls=MdGroup, examples=_DIRS_EXAMPLES)
@click.pass_obj
def dirs(app: AppContext) -> None:
    """Inspect and maintain the content-type directories."""


@dirs.command(
    examples="""\
  mdctl dirs check
  mdctl dirs check --create
  mdctl --json dirs check"""
)
@click.option("--create", is_flag=True, help="Create missing directories.")
@click.pass_obj
def check(app: AppContext, create: bool) -> None:
    """Report missing directories (or create them with --create)."""
    service = DirectoryService(app.workspace)
    app.emit(service.initialize() if create else service.validate())


@dirs.command(
    examples="""\
  mdctl dirs stats
  mdctl --json dirs stats"""
)
@click.pass_obj
def stats(app: AppContext) -> None:
    """File count, size, and last modification per content type."""
    app.emit(DirectoryService(app.workspace).stats())


@dirs.command(
    examples="""\
  mdctl dirs cleanup"""
)
@click.pass_obj
def cleanup(app: AppContext) -> None:
    """Remove content-type directories that are empty."""
    app.emit(DirectoryService(app.workspace).cleanup())


@dirs.command(
    examples="""\
  mdctl dirs backup
  mdctl dirs backup --target /var/backups/site"""
)
@click.option(
    "--target",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Parent directory for the snapshot (default: next to the markdown base).",
)
@click.pass_obj
def backup(app: AppContext, target: Path | None) -> None:
    """Copy every markdown file into a timestamped snapshot."""
    app.emit(DirectoryService(app.workspace).backup(target))
