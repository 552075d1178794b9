"""Content types and the type -> directory layout.

Every content type maps to exactly one storage directory below the
markdown base path. The mapping is built once from settings and injected
into every component that needs it, so there is a single table to keep
consistent.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import StrEnum

from mdctl.domain.errors import UnsupportedContentTypeError


class ContentType(StrEnum):
    """Closed set of content categories managed by the store."""

    PORTFOLIO = "portfolio"
    BLOG = "blog"
    PROFILE = "profile"
    PAGE = "page"
    TOOL = "tool"
    ASSET = "asset"
    DOWNLOAD = "download"
    PLUGIN = "plugin"
    OTHER = "other"


DEFAULT_DIRECTORIES: dict[ContentType, str] = {ct: ct.value for ct in ContentType}


def coerce_content_type(value: str | ContentType) -> ContentType:
    """Return *value* as a ContentType, rejecting unknown names.

    Unknown types are never defaulted to ``other``.
    """
    if isinstance(value, ContentType):
        return value
    try:
        return ContentType(str(value).strip())
    except ValueError:
        raise UnsupportedContentTypeError(str(value)) from None


class DirectoryLayout:
    """Bidirectional ContentType <-> directory-name table.

    INVARIANT: every ContentType has exactly one directory, directory names
    are unique, and each is a single path segment.
    """

    def __init__(self, directories: Mapping[str, str] | None = None) -> None:
        table: dict[ContentType, str] = dict(DEFAULT_DIRECTORIES)
        for key, dirname in (directories or {}).items():
            table[coerce_content_type(key)] = dirname

        for content_type, dirname in table.items():
            if not dirname or dirname in (".", "..") or "/" in dirname or "\\" in dirname:
                msg = f"Invalid directory name for {content_type.value!r}: {dirname!r}"
                raise ValueError(msg)

        reverse = {dirname: ct for ct, dirname in table.items()}
        if len(reverse) != len(table):
            msg = "Each content type must map to a distinct directory"
            raise ValueError(msg)

        self._by_type = table
        self._by_dir = reverse

    def directory_for(self, content_type: str | ContentType) -> str:
        """Directory name for *content_type* (raises on unknown types)."""
        return self._by_type[coerce_content_type(content_type)]

    def type_for(self, dirname: str) -> ContentType | None:
        """Reverse lookup; None when *dirname* is not a type directory."""
        return self._by_dir.get(dirname)

    def items(self) -> Iterator[tuple[ContentType, str]]:
        yield from self._by_type.items()

    def __iter__(self) -> Iterator[ContentType]:
        return iter(self._by_type)

    def __len__(self) -> int:
        return len(self._by_type)

    def as_dict(self) -> dict[str, str]:
        return {ct.value: dirname for ct, dirname in self._by_type.items()}
