"""Command group: markdown content files (path, CRUD, listing, integrity)."""

from __future__ import annotations

from typing import TYPE_CHECKING, TextIO

import click

from mdctl.commands._base import MdGroup
from mdctl.services.content import ContentService

if TYPE_CHECKING:
    from mdctl.commands._context import AppContext


def _read_content(content: str | None, source: TextIO | None) -> str:
    """Body text from ``--content``, ``--from FILE``, or stdin (in that order)."""
    if content is not None and source is not None:
        raise click.UsageError("Pass either --content or --from, not both.")
    if content is not None:
        return content
    if source is not None:
        return source.read()
    return click.get_text_stream("stdin").read()


_content_option = click.option("--content", default=None, help="Markdown body as a string.")
_from_option = click.option(
    "--from",
    "source",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Read the markdown body from FILE ('-' for stdin).",
)

_FILE_EXAMPLES = """\
  mdctl file path my-post blog
  mdctl file create my-post blog --from draft.md
  mdctl file read blog/my-post.md
  mdctl file update blog/my-post.md --content "# Updated" --backup
  mdctl file list blog
  mdctl file verify blog/my-post.md --checksum 3f2a... --restore"""


@click.group("file", cls=MdGroup, examples=_FILE_EXAMPLES)
@click.pass_obj
def file_group(app: AppContext) -> None:
    """Create, read, update, delete, and inspect markdown content files."""


@file_group.command(
    examples="""\
  mdctl file path my-post blog
  mdctl file path "My Post!" blog --sanitize
  mdctl file path my-post blog --unique
  mdctl file path release-notes download --timestamp"""
)
@click.argument("content_id")
@click.argument("content_type")
@click.option("--sanitize", is_flag=True, help="Slugify the ID before building the filename.")
@click.option("--timestamp", is_flag=True, help="Append a UTC timestamp to the filename.")
@click.option("--unique", is_flag=True, help="Add a numeric suffix if the file already exists.")
@click.pass_obj
def path(
    app: AppContext,
    content_id: str,
    content_type: str,
    sanitize: bool,
    timestamp: bool,
    unique: bool,
) -> None:
    """Show the canonical storage path for CONTENT_ID of CONTENT_TYPE."""
    app.emit(
        ContentService(app.workspace).generate_path(
            content_id,
            content_type,
            sanitize_names=sanitize,
            add_timestamp=timestamp,
            unique=unique,
        )
    )


@file_group.command(
    examples="""\
  mdctl file create my-post blog --content "# Hello"
  mdctl file create my-post blog --from draft.md
  cat draft.md | mdctl file create my-post blog
  mdctl file create my-post blog --from draft.md --overwrite"""
)
@click.argument("content_id")
@click.argument("content_type")
@_content_option
@_from_option
@click.option("--overwrite", is_flag=True, help="Replace the file if it already exists.")
@click.pass_obj
def create(
    app: AppContext,
    content_id: str,
    content_type: str,
    content: str | None,
    source: TextIO | None,
    overwrite: bool,
) -> None:
    """Write a new markdown file for CONTENT_ID of CONTENT_TYPE."""
    body = _read_content(content, source)
    app.emit(
        ContentService(app.workspace).create(content_id, content_type, body, overwrite=overwrite)
    )


@file_group.command(
    examples="""\
  mdctl file read blog/my-post.md
  mdctl -q file read blog/my-post.md > my-post.md"""
)
@click.argument("file_path")
@click.pass_obj
def read(app: AppContext, file_path: str) -> None:
    """Print the content of FILE_PATH (storage-relative or absolute)."""
    app.emit(ContentService(app.workspace).read(file_path))


@file_group.command(
    examples="""\
  mdctl file update blog/my-post.md --content "# Updated"
  mdctl file update blog/my-post.md --from edited.md --backup"""
)
@click.argument("file_path")
@_content_option
@_from_option
@click.option("--backup", is_flag=True, help="Keep the previous version as FILE.backup.")
@click.pass_obj
def update(
    app: AppContext,
    file_path: str,
    content: str | None,
    source: TextIO | None,
    backup: bool,
) -> None:
    """Replace the content of an existing FILE_PATH."""
    body = _read_content(content, source)
    app.emit(ContentService(app.workspace).update(file_path, body, backup=backup))


@file_group.command(
    examples="""\
  mdctl file delete blog/my-post.md"""
)
@click.argument("file_path")
@click.pass_obj
def delete(app: AppContext, file_path: str) -> None:
    """Remove FILE_PATH from storage."""
    app.emit(ContentService(app.workspace).delete(file_path))


@file_group.command(
    examples="""\
  mdctl file exists blog/my-post.md
  mdctl -q file exists blog/my-post.md"""
)
@click.argument("file_path")
@click.pass_obj
def exists(app: AppContext, file_path: str) -> None:
    """Report whether FILE_PATH exists."""
    app.emit(ContentService(app.workspace).exists(file_path))


@file_group.command(
    "list",
    examples="""\
  mdctl file list blog
  mdctl --json file list portfolio""",
)
@click.argument("content_type")
@click.pass_obj
def list_cmd(app: AppContext, content_type: str) -> None:
    """List markdown files of CONTENT_TYPE, sorted by path."""
    app.emit(ContentService(app.workspace).list_by_type(content_type))


@file_group.command(
    examples="""\
  mdctl file info blog/my-post.md
  mdctl --json file info blog/my-post.md"""
)
@click.argument("file_path")
@click.pass_obj
def info(app: AppContext, file_path: str) -> None:
    """Size, timestamps, and checksum of FILE_PATH."""
    app.emit(ContentService(app.workspace).metadata(file_path))


@file_group.command(
    examples="""\
  mdctl file verify blog/my-post.md
  mdctl file verify blog/my-post.md --checksum 3f2a...
  mdctl file verify blog/my-post.md --checksum 3f2a... --restore --from known-good.md"""
)
@click.argument("file_path")
@click.option("--checksum", default=None, help="Expected SHA-256 of the content.")
@click.option("--restore", is_flag=True, help="Recover the file on checksum mismatch.")
@click.option(
    "--from",
    "source",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Known-good content to restore from.",
)
@click.pass_obj
def verify(
    app: AppContext,
    file_path: str,
    checksum: str | None,
    restore: bool,
    source: TextIO | None,
) -> None:
    """Check FILE_PATH is readable and matches --checksum."""
    app.emit(
        ContentService(app.workspace).verify(
            file_path,
            expected_checksum=checksum,
            restore=restore,
            backup_content=source.read() if source is not None else None,
        )
    )
