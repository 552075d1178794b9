"""PathGenerator — canonical markdown paths and their safety checks.

Layout: ``{base}/{type_dir}/{content_id}.md``, exactly two components
below the base directory.

``generate``/``generate_unique`` raise on bad input. ``parse`` and
``validate`` never raise: they return structured results so callers can
use them as predicates or for batch pre-validation.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from mdctl.domain.errors import PathExhaustedError
from mdctl.domain.ids import sanitize_name, validate_id
from mdctl.domain.timestamps import filename_stamp
from mdctl.domain.types import ContentType, DirectoryLayout, coerce_content_type

MARKDOWN_SUFFIX = ".md"
DEFAULT_MAX_FILENAME_LENGTH = 255
MAX_UNIQUE_ATTEMPTS = 1000

_DISALLOWED_CHARS = re.compile(r'[<>"|*]')
_SEPARATORS = re.compile(r"[\\/]")


@dataclass(frozen=True)
class ParsedPath:
    """Result of :meth:`PathGenerator.parse`."""

    is_valid: bool
    content_id: str | None = None
    content_type: ContentType | None = None


@dataclass(frozen=True)
class PathValidation:
    """Result of :meth:`PathGenerator.validate`."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


def _normalize(path: str | Path) -> str:
    return os.path.normpath(os.path.abspath(os.fspath(path)))


class PathGenerator:
    """Derive, parse, and validate markdown file paths below *base_path*."""

    def __init__(
        self,
        base_path: str | Path,
        layout: DirectoryLayout,
        *,
        max_filename_length: int = DEFAULT_MAX_FILENAME_LENGTH,
    ) -> None:
        if max_filename_length <= len(MARKDOWN_SUFFIX):
            msg = f"max_filename_length must exceed {len(MARKDOWN_SUFFIX)}"
            raise ValueError(msg)
        self._base = Path(_normalize(base_path))
        self._layout = layout
        self._max_filename_length = max_filename_length

    @property
    def base_path(self) -> Path:
        return self._base

    @property
    def layout(self) -> DirectoryLayout:
        return self._layout

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def generate(
        self,
        content_id: str,
        content_type: str | ContentType,
        *,
        sanitize_names: bool = False,
        add_timestamp: bool = False,
    ) -> Path:
        """Return ``{base}/{type_dir}/{stem}.md`` for a content item.

        Without *sanitize_names* the ID must already be a valid content ID.
        The filename is truncated (keeping ``.md``) to the configured max.
        """
        dirname = self._layout.directory_for(coerce_content_type(content_type))
        stem = sanitize_name(content_id) if sanitize_names else validate_id(content_id)
        if add_timestamp:
            stem = f"{stem}-{filename_stamp()}"
        return self._base / dirname / self._filename(stem)

    def generate_unique(
        self,
        content_id: str,
        content_type: str | ContentType,
        existing_paths: Iterable[str | Path],
        *,
        sanitize_names: bool = False,
    ) -> Path:
        """Like :meth:`generate`, appending ``-1``, ``-2``, ... on collision.

        Raises PathExhaustedError after 1000 suffixed attempts.
        """
        taken = {_normalize(p) for p in existing_paths}
        candidate = self.generate(content_id, content_type, sanitize_names=sanitize_names)
        if _normalize(candidate) not in taken:
            return candidate

        stem = candidate.name[: -len(MARKDOWN_SUFFIX)]
        for attempt in range(1, MAX_UNIQUE_ATTEMPTS + 1):
            suffix = f"-{attempt}"
            room = self._max_filename_length - len(MARKDOWN_SUFFIX) - len(suffix)
            suffixed = candidate.parent / f"{stem[:room]}{suffix}{MARKDOWN_SUFFIX}"
            if _normalize(suffixed) not in taken:
                return suffixed
        raise PathExhaustedError(candidate, MAX_UNIQUE_ATTEMPTS)

    def _filename(self, stem: str) -> str:
        room = self._max_filename_length - len(MARKDOWN_SUFFIX)
        return f"{stem[:room]}{MARKDOWN_SUFFIX}"

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def parse(self, path: str | Path) -> ParsedPath:
        """Extract ``(content_id, content_type)`` from a store path.

        Valid only when the path sits exactly two segments below the base,
        the first segment is a known type directory, and the file ends
        in ``.md``. Never raises.
        """
        raw = os.fspath(path)
        if not os.path.isabs(raw):
            return ParsedPath(is_valid=False)
        normalized = _normalize(raw)
        try:
            rel = Path(normalized).relative_to(self._base)
        except ValueError:
            return ParsedPath(is_valid=False)

        parts = rel.parts
        if len(parts) != 2:
            return ParsedPath(is_valid=False)
        dirname, filename = parts
        content_type = self._layout.type_for(dirname)
        if content_type is None or not filename.endswith(MARKDOWN_SUFFIX):
            return ParsedPath(is_valid=False)
        stem = filename[: -len(MARKDOWN_SUFFIX)]
        if not stem:
            return ParsedPath(is_valid=False)
        return ParsedPath(is_valid=True, content_id=stem, content_type=content_type)

    def validate(self, path: str | Path) -> PathValidation:
        """Defense-in-depth checks, independent of :meth:`parse`.

        Collects every failing rule instead of stopping at the first.
        """
        raw = os.fspath(path)
        errors: list[str] = []

        if not raw.endswith(MARKDOWN_SUFFIX):
            errors.append("File must have a .md extension")
        if ".." in _SEPARATORS.split(raw):
            errors.append("Path traversal segments ('..') are not allowed")
        if "/" in raw and "\\" in raw:
            errors.append("Mixed path separators are not allowed")
        if _DISALLOWED_CHARS.search(raw):
            errors.append('Path contains disallowed characters (<>"|*)')

        base = os.fspath(self._base)
        normalized = _normalize(raw)
        if not os.path.isabs(raw) or not normalized.startswith(base + os.sep):
            errors.append("Path must be inside the markdown base directory")
        else:
            depth = len(Path(normalized).relative_to(self._base).parts)
            if depth > 2:
                errors.append("Path is nested too deeply (max: type directory + filename)")

        return PathValidation(is_valid=not errors, errors=errors)

    def is_safe(self, path: str | Path) -> bool:
        """True when *path* passes both :meth:`validate` and :meth:`parse`."""
        return self.validate(path).is_valid and self.parse(path).is_valid

    # ------------------------------------------------------------------
    # Relative <-> absolute
    # ------------------------------------------------------------------

    def to_relative(self, path: str | Path) -> str:
        """Storage-relative, forward-slash form (safe to persist in JSON).

        Paths outside the base directory are returned unchanged.
        """
        raw = os.fspath(path)
        if not os.path.isabs(raw):
            return PurePosixPath(raw.replace("\\", "/")).as_posix()
        try:
            rel = Path(_normalize(raw)).relative_to(self._base)
        except ValueError:
            return raw
        return rel.as_posix()

    def to_absolute(self, path: str | Path) -> Path:
        """Filesystem-absolute form (safe to pass to OS calls).

        Absolute inputs are returned as-is.
        """
        raw = os.fspath(path)
        if os.path.isabs(raw):
            return Path(raw)
        return self._base.joinpath(*PurePosixPath(raw.replace("\\", "/")).parts)
