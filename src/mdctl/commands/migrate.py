"""Command group: legacy JSON index migration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from mdctl.commands._base import MdGroup
from mdctl.services.migration import MigrationService

if TYPE_CHECKING:
    from mdctl.commands._context import AppContext

_MIGRATE_EXAMPLES = """\
  mdctl migrate status
  mdctl migrate run --dry-run
  mdctl migrate run
  mdctl migrate run --file blog.json --overwrite
  mdctl migrate rollback post-1 post-2"""


@click.group(cls=MdGroup, examples=_MIGRATE_EXAMPLES)
@click.pass_obj
def migrate(app: AppContext) -> None:
    """Move inline content from the JSON index into markdown files."""


@migrate.command(
    examples="""\
  mdctl migrate run --dry-run
  mdctl migrate run
  mdctl migrate run --no-backup --batch-size 50
  mdctl migrate run --file portfolio.json --overwrite
  mdctl --json migrate run"""
)
@click.option("--dry-run", is_flag=True, help="Report what would change without writing.")
@click.option("--no-backup", is_flag=True, help="Skip the JSON backup before rewriting.")
@click.option("--overwrite", is_flag=True, help="Replace markdown files that already exist.")
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    default=None,
    help="Items per batch (default from [migration] batch_size).",
)
@click.option("--file", "file_name", default=None, help="Migrate a single index file only.")
@click.pass_obj
def run(
    app: AppContext,
    dry_run: bool,
    no_backup: bool,
    overwrite: bool,
    batch_size: int | None,
    file_name: str | None,
) -> None:
    """Migrate every pending item in the legacy index."""
    service = MigrationService(app.workspace)
    options: dict[str, Any] = {
        "dry_run": dry_run,
        "backup_original": False if no_backup else None,
        "overwrite_existing": overwrite,
        "batch_size": batch_size,
    }
    if file_name is not None:
        app.emit(service.migrate_file(file_name, **options))
    else:
        app.emit(service.migrate_all(**options))


@migrate.command(
    examples="""\
  mdctl migrate status
  mdctl --json migrate status"""
)
@click.pass_obj
def status(app: AppContext) -> None:
    """Count migrated and pending items per index file."""
    app.emit(MigrationService(app.workspace).status())


@migrate.command(
    examples="""\
  mdctl migrate rollback post-1
  mdctl migrate rollback post-1 post-2 project-7"""
)
@click.argument("item_ids", nargs=-1, required=True)
@click.pass_obj
def rollback(app: AppContext, item_ids: tuple[str, ...]) -> None:
    """Delete the markdown files of ITEM_IDS and restore their index entries."""
    app.emit(MigrationService(app.workspace).rollback(list(item_ids)))
