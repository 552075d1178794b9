"""Command group: embed reference inspection ([image:N], [video:N], [link:N])."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TextIO

import click

from mdctl.commands._base import MdGroup
from mdctl.services.content import ContentService

if TYPE_CHECKING:
    from mdctl.commands._context import AppContext

_EMBEDS_EXAMPLES = """\
  mdctl embeds check post.md --media post.json
  cat post.md | mdctl embeds check --media post.json
  mdctl embeds refs post.md"""


@click.group(cls=MdGroup, examples=_EMBEDS_EXAMPLES)
@click.pass_obj
def embeds(app: AppContext) -> None:
    """Validate and list embed references in markdown content."""


@embeds.command(
    examples="""\
  mdctl embeds check post.md --media post.json
  mdctl embeds check post.md
  mdctl --json embeds check post.md --media post.json"""
)
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option(
    "--media",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON content record holding images/videos/externalLinks arrays.",
)
@click.pass_obj
def check(app: AppContext, source: TextIO, media: str | None) -> None:
    """Check every embed in SOURCE points at an existing media entry.

    Without --media every embed is out of range.
    """
    record: dict[str, Any] = {}
    if media is not None:
        from mdctl.services.result import ServiceError, ServiceResult

        try:
            with open(media, encoding="utf-8") as f:
                record = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            app.emit(
                ServiceResult(
                    ok=False,
                    op="validate_embeds",
                    error=ServiceError(
                        code="MARKDOWN_VALIDATION_ERROR",
                        message=f"Error reading {media}: {exc}",
                    ),
                )
            )
            return
        if not isinstance(record, dict):
            app.emit(
                ServiceResult(
                    ok=False,
                    op="validate_embeds",
                    error=ServiceError(
                        code="MARKDOWN_VALIDATION_ERROR",
                        message="Media file must contain a JSON object.",
                    ),
                )
            )
            return

    app.emit(ContentService(app.workspace).validate_embeds(source.read(), record))


@embeds.command(
    examples="""\
  mdctl embeds refs post.md
  mdctl --json embeds refs post.md"""
)
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_obj
def refs(app: AppContext, source: TextIO) -> None:
    """List every embed reference in SOURCE with its position."""
    app.emit(ContentService(app.workspace).extract_references(source.read()))
