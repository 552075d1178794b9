"""Command: project initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from mdctl.commands._base import MdCommand

if TYPE_CHECKING:
    from mdctl.commands._context import AppContext

_INIT_EXAMPLES = """\
  mdctl init
  mdctl init /path/to/site
  mdctl init . --base-path content/markdown --data-dir content
  mdctl init --no-backup --force"""


@click.command("init", cls=MdCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option("--base-path", default=None, help="Markdown storage directory (project-relative).")
@click.option("--data-dir", default=None, help="Legacy JSON index directory (project-relative).")
@click.option("--no-backup", is_flag=True, help="Disable JSON backups before migration.")
@click.option("--force", is_flag=True, help="Overwrite an existing mdctl.toml.")
@click.pass_obj
def init_cmd(
    app: AppContext,
    path: str,
    base_path: str | None,
    data_dir: str | None,
    no_backup: bool,
    force: bool,
) -> None:
    """Write mdctl.toml and create the content directory tree."""
    from mdctl.services.init import InitService

    app.emit(
        InitService.init_project(
            Path(path).resolve(),
            base_path=base_path,
            data_dir=data_dir,
            backup_original=not no_backup,
            force=force,
        )
    )
