"""Legacy content records and their migrated variant.

A legacy JSON index file holds an array of loosely-typed objects owned by
the CMS. Migration turns a :class:`LegacyRecord` into a
:class:`MigratedRecord` through an explicit constructor instead of
patching optional fields in place.

INVARIANT: ``content`` is never removed. Once migrated, ``markdownPath``
is the source of truth for reads; ``content`` stays for older readers.

Both variants keep the full original JSON object in ``data`` so fields
this package does not know about round-trip untouched, in their
original order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from mdctl.domain.errors import ErrorKind, MarkdownError

MARKDOWN_PATH_KEY = "markdownPath"
MIGRATED_FLAG_KEY = "markdownMigrated"


@dataclass(frozen=True)
class LegacyRecord:
    """A content record whose body still lives inline in ``content``."""

    id: str
    type: str | None
    content: str
    data: dict[str, Any] = field(repr=False, compare=False)

    @property
    def is_migrated(self) -> bool:
        return False

    @property
    def has_content(self) -> bool:
        return bool(self.content.strip())

    def to_json(self) -> dict[str, Any]:
        return dict(self.data)


@dataclass(frozen=True)
class MigratedRecord(LegacyRecord):
    """A record whose body has been moved to a markdown file.

    ``markdown_path`` is storage-relative with forward slashes. It may be
    None for records flagged by hand without a path; those cannot be
    rolled back automatically.
    """

    markdown_path: str | None = None

    @property
    def is_migrated(self) -> bool:
        return True

    @classmethod
    def from_legacy(cls, record: LegacyRecord, markdown_path: str) -> MigratedRecord:
        """The migration step: attach a file reference, keep everything else."""
        data = {**record.data, MARKDOWN_PATH_KEY: markdown_path, MIGRATED_FLAG_KEY: True}
        return cls(
            id=record.id,
            type=record.type,
            content=record.content,
            data=data,
            markdown_path=markdown_path,
        )

    def revert(self) -> LegacyRecord:
        """The rollback step: strip both migration markers."""
        data = {
            k: v for k, v in self.data.items() if k not in (MARKDOWN_PATH_KEY, MIGRATED_FLAG_KEY)
        }
        return LegacyRecord(id=self.id, type=self.type, content=self.content, data=data)


def parse_record(raw: Any, *, source: str | None = None) -> LegacyRecord | MigratedRecord:
    """Classify one JSON object as legacy or migrated.

    Raises a VALIDATION_ERROR MarkdownError for objects without an ``id``.
    """
    if not isinstance(raw, dict):
        raise MarkdownError(
            f"Content record must be a JSON object, got {type(raw).__name__}",
            kind=ErrorKind.VALIDATION_ERROR,
            path=source,
        )
    record_id = raw.get("id")
    if record_id is None or str(record_id) == "":
        raise MarkdownError(
            "Content record has no 'id'",
            kind=ErrorKind.VALIDATION_ERROR,
            path=source,
            suggestion="Every record in a content index needs a non-empty id",
        )

    content = raw.get("content")
    common: dict[str, Any] = {
        "id": str(record_id),
        "type": str(raw["type"]) if raw.get("type") else None,
        "content": content if isinstance(content, str) else "",
        "data": dict(raw),
    }
    if raw.get(MIGRATED_FLAG_KEY) is True:
        path = raw.get(MARKDOWN_PATH_KEY)
        return MigratedRecord(**common, markdown_path=str(path) if path else None)
    return LegacyRecord(**common)
