"""ContentFileStore — CRUD on individual markdown files.

INVARIANT: The store exclusively owns the ``.md`` files below its base
path. Every public method validates its inputs (path safety, ID format,
content type, content safety) before touching disk, and every OS-level
failure leaves as a classified :class:`MarkdownError`.

Single writer per file: ``create`` checks for an existing file and then
writes. The window between the two is accepted; it is not an exclusive
create.
"""

from __future__ import annotations

import hashlib
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel

from mdctl.domain import safety
from mdctl.domain.errors import (
    AlreadyExistsError,
    FileMissingError,
    InvalidPathError,
    classify,
)
from mdctl.domain.paths import MARKDOWN_SUFFIX, PathGenerator
from mdctl.domain.timestamps import from_epoch
from mdctl.domain.types import ContentType, coerce_content_type
from mdctl.infrastructure.directories import DirectoryManager

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


class MarkdownFileMetadata(BaseModel):
    """Stat-derived facts about one markdown file.

    Always recomputed from the filesystem; never cached or persisted.
    """

    model_config = {"frozen": True}

    id: str
    file_path: str
    created_at: datetime
    updated_at: datetime
    size: int
    checksum: str | None = None


class IntegrityReport(BaseModel):
    model_config = {"frozen": True}

    is_valid: bool
    current_checksum: str
    expected_checksum: str | None = None


RestoreMethod = Literal["backup_content", "backup_file", "empty_file"]


def checksum_of(content: str) -> str:
    """SHA-256 hex digest of UTF-8 encoded *content*."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class ContentFileStore:
    """Markdown file CRUD over a :class:`PathGenerator` layout."""

    def __init__(
        self,
        paths: PathGenerator,
        directories: DirectoryManager,
        *,
        max_content_bytes: int = safety.DEFAULT_MAX_CONTENT_BYTES,
    ) -> None:
        self._paths = paths
        self._directories = directories
        self._max_content_bytes = max_content_bytes

    @property
    def paths(self) -> PathGenerator:
        return self._paths

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _guard(self, path: str | Path) -> Path:
        """Resolve *path* to absolute form and enforce the path rules."""
        absolute = self._paths.to_absolute(path)
        validation = self._paths.validate(absolute)
        if not validation.is_valid:
            raise InvalidPathError(path, validation.errors)
        if not self._paths.parse(absolute).is_valid:
            raise InvalidPathError(path, ["Path is not a content-type directory entry"])
        return absolute

    def check_content(self, content: str) -> None:
        """Apply the content safety rules without writing anything."""
        safety.check_content(content, max_bytes=self._max_content_bytes)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create(
        self,
        content_id: str,
        content_type: str | ContentType,
        content: str,
        *,
        overwrite: bool = False,
    ) -> Path:
        """GENERATE → VALIDATE → ENSURE DIR → CHECK EXISTING → WRITE.

        Returns the canonical absolute path.
        """
        ctype = coerce_content_type(content_type)
        path = self._paths.generate(content_id, ctype)
        self.check_content(content)
        self._directories.ensure(ctype)

        if not overwrite and self._exists(path):
            raise AlreadyExistsError(path, content_id=content_id)

        self._write(path, content)
        logger.debug("Created markdown file %s (%d chars)", path, len(content))
        return path

    def read(self, path: str | Path) -> str:
        target = self._guard(path)
        try:
            return target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise classify(exc, target) from exc

    def update(self, path: str | Path, content: str, *, backup: bool = False) -> Path | None:
        """Overwrite an existing file in place.

        With *backup*, the previous content is first copied to
        ``{path}.backup``; that sibling path is returned.
        """
        target = self._guard(path)
        self.check_content(content)
        if not self._exists(target):
            raise FileMissingError(target)

        backup_path: Path | None = None
        if backup:
            backup_path = target.with_name(target.name + BACKUP_SUFFIX)
            try:
                backup_path.write_text(target.read_text(encoding="utf-8"), encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise classify(exc, backup_path) from exc

        self._write(target, content)
        logger.debug("Updated markdown file %s", target)
        return backup_path

    def delete(self, path: str | Path) -> None:
        """Remove the file. Empty parent directories are left alone."""
        target = self._guard(path)
        if not self._exists(target):
            raise FileMissingError(target)
        try:
            target.unlink()
        except OSError as exc:
            raise classify(exc, target) from exc
        logger.debug("Deleted markdown file %s", target)

    def exists(self, path: str | Path) -> bool:
        """False for missing files and for paths that fail validation."""
        try:
            target = self._guard(path)
        except InvalidPathError:
            return False
        return self._exists(target)

    # ------------------------------------------------------------------
    # Metadata and listing
    # ------------------------------------------------------------------

    def metadata(self, path: str | Path, *, with_checksum: bool = True) -> MarkdownFileMetadata:
        target = self._guard(path)
        return self._metadata(target, with_checksum=with_checksum)

    def list(self, content_type: str | ContentType) -> list[MarkdownFileMetadata]:
        """Metadata for every file of one type, sorted by ID.

        An absent type directory yields an empty list.
        """
        directory = self._directories.path_for(coerce_content_type(content_type))
        if not directory.is_dir():
            return []
        try:
            files = sorted(p for p in directory.glob(f"*{MARKDOWN_SUFFIX}") if p.is_file())
        except OSError as exc:
            raise classify(exc, directory) from exc
        return [self._metadata(p, with_checksum=False) for p in files]

    def _metadata(self, target: Path, *, with_checksum: bool) -> MarkdownFileMetadata:
        try:
            st = target.stat()
            checksum = checksum_of(target.read_text(encoding="utf-8")) if with_checksum else None
        except (OSError, UnicodeDecodeError) as exc:
            raise classify(exc, target) from exc
        created = getattr(st, "st_birthtime", None) or st.st_ctime
        return MarkdownFileMetadata(
            id=target.name[: -len(MARKDOWN_SUFFIX)],
            file_path=self.to_relative(target),
            created_at=from_epoch(created),
            updated_at=from_epoch(st.st_mtime),
            size=st.st_size,
            checksum=checksum,
        )

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def verify(self, path: str | Path, expected_checksum: str | None = None) -> IntegrityReport:
        """Recompute the file checksum and compare it to *expected_checksum*."""
        current = checksum_of(self.read(path))
        return IntegrityReport(
            is_valid=expected_checksum is None or current == expected_checksum,
            current_checksum=current,
            expected_checksum=expected_checksum,
        )

    def restore(self, path: str | Path, backup_content: str | None = None) -> RestoreMethod:
        """Recover a damaged file.

        Tries, in order: the supplied *backup_content*, the ``.backup``
        sibling written by ``update(backup=True)``, and finally an empty file.
        """
        target = self._guard(path)
        sibling = target.with_name(target.name + BACKUP_SUFFIX)
        method: RestoreMethod
        try:
            if backup_content is not None:
                self.check_content(backup_content)
                content, method = backup_content, "backup_content"
            elif sibling.is_file():
                content, method = sibling.read_text(encoding="utf-8"), "backup_file"
            else:
                content, method = "", "empty_file"
        except (OSError, UnicodeDecodeError) as exc:
            raise classify(exc, sibling) from exc
        self._directories.ensure(self._paths.parse(target).content_type or ContentType.OTHER)
        self._write(target, content)
        logger.warning("Restored %s using %s", target, method)
        return method

    # ------------------------------------------------------------------
    # Path forms
    # ------------------------------------------------------------------

    def to_relative(self, path: str | Path) -> str:
        return self._paths.to_relative(path)

    def to_absolute(self, path: str | Path) -> Path:
        return self._paths.to_absolute(path)

    # ------------------------------------------------------------------
    # Raw I/O
    # ------------------------------------------------------------------

    @staticmethod
    def _exists(target: Path) -> bool:
        try:
            return os.path.isfile(target)
        except OSError:
            return False

    @staticmethod
    def _write(target: Path, content: str) -> None:
        try:
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise classify(exc, target) from exc
