"""LegacyIndex — the CMS's JSON content index files.

Each ``{data_dir}/{name}.json`` holds an array of content records. The
CMS owns these files; migration and rollback mutate them as a side
effect, which is the only place this package writes outside the
markdown tree.

INVARIANT: A rewrite is always read-entire-array, mutate in memory,
write-entire-array. The new array goes to a temporary file in the same
directory and replaces the original with a single ``os.replace`` so a
crash never leaves a half-written index.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from mdctl.domain.errors import ErrorKind, MarkdownError, classify
from mdctl.domain.records import LegacyRecord, MigratedRecord, parse_record
from mdctl.domain.timestamps import filename_stamp

logger = logging.getLogger(__name__)

JSON_SUFFIX = ".json"
BACKUP_DIRNAME = "backup"
DEFAULT_EXCLUDED_FILES: tuple[str, ...] = ("tags.json",)
DEFAULT_BACKUP_PREFIX = "backup-"


class LegacyIndex:
    """Read, rewrite, and back up the legacy JSON index files."""

    def __init__(
        self,
        data_dir: Path,
        *,
        excluded_files: tuple[str, ...] | list[str] = DEFAULT_EXCLUDED_FILES,
        backup_prefix: str = DEFAULT_BACKUP_PREFIX,
    ) -> None:
        self._data_dir = data_dir
        self._excluded = frozenset(excluded_files)
        self._backup_prefix = backup_prefix

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def backup_dir(self) -> Path:
        return self._data_dir / BACKUP_DIRNAME

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def list_files(self) -> list[str]:
        """Names of every migratable index file, sorted.

        Only top-level ``*.json`` files count; excluded names and files
        carrying the backup prefix are skipped. A missing or unreadable
        data directory raises, since nothing can be migrated without it.
        """
        try:
            entries = sorted(self._data_dir.iterdir())
        except OSError as exc:
            raise classify(exc, self._data_dir) from exc
        return [
            entry.name
            for entry in entries
            if entry.suffix == JSON_SUFFIX
            and entry.is_file()
            and entry.name not in self._excluded
            and not entry.name.startswith(self._backup_prefix)
        ]

    def path_for(self, name: str) -> Path:
        """Resolve an index file name, rejecting anything but a bare filename."""
        if not name or Path(name).name != name or name in (".", "..") or "\\" in name:
            raise MarkdownError(
                f"Invalid index file name: {name!r}",
                kind=ErrorKind.INVALID_PATH,
                path=name,
                suggestion="Pass a bare file name such as 'portfolio.json'",
            )
        if not name.endswith(JSON_SUFFIX):
            name = f"{name}{JSON_SUFFIX}"
        return self._data_dir / name

    # ------------------------------------------------------------------
    # Read / write
    # ------------------------------------------------------------------

    def load_raw(self, name: str) -> list[Any]:
        path = self.path_for(name)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise classify(exc, path) from exc
        if not isinstance(data, list):
            raise MarkdownError(
                f"Content index must be a JSON array: {path}",
                kind=ErrorKind.VALIDATION_ERROR,
                path=path,
                suggestion="Restore the file from the JSON backup directory",
            )
        return data

    def load(self, name: str) -> list[LegacyRecord | MigratedRecord]:
        """Parse every record of one index file.

        One malformed record fails the whole file; the file is the unit of
        rewrite, so there is no safe way to keep the others.
        """
        path = self.path_for(name)
        return [parse_record(raw, source=str(path)) for raw in self.load_raw(name)]

    def save(self, name: str, records: Sequence[LegacyRecord | Any]) -> Path:
        """Atomically replace one index file with *records*.

        Entries that are not records (objects that failed to parse) are
        written back exactly as loaded.
        """
        path = self.path_for(name)
        items = [r.to_json() if isinstance(r, LegacyRecord) else r for r in records]
        payload = json.dumps(items, indent=2, ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload + "\n")
            # mkstemp creates 0600; keep the mode the CMS gave the index.
            if path.exists():
                shutil.copymode(path, tmp_name)
            os.replace(tmp_name, path)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise classify(exc, path) from exc
        logger.debug("Rewrote %s (%d records)", path, len(records))
        return path

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def backup(self, names: list[str] | None = None) -> list[Path]:
        """Copy index files into ``{data_dir}/backup/{timestamp}-{name}``.

        Plain copies, taken before anything is mutated. Any failure here
        is fatal to the caller's run.
        """
        targets = names if names is not None else self.list_files()
        stamp = filename_stamp()
        copied: list[Path] = []
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            for name in targets:
                source = self.path_for(name)
                dest = self.backup_dir / f"{stamp}-{source.name}"
                shutil.copy2(source, dest)
                copied.append(dest)
        except OSError as exc:
            raise classify(exc, self.backup_dir) from exc
        logger.info("Backed up %d index files to %s", len(copied), self.backup_dir)
        return copied
