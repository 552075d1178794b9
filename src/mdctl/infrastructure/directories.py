"""DirectoryManager — the on-disk content-type directory taxonomy.

One subdirectory per content type below the markdown base path. All
methods are safe to call repeatedly; only :meth:`initialize`,
:meth:`ensure`, :meth:`cleanup_empty` and :meth:`backup` touch disk.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from mdctl.domain.errors import classify
from mdctl.domain.paths import MARKDOWN_SUFFIX
from mdctl.domain.timestamps import from_epoch, now_compact
from mdctl.domain.types import ContentType, DirectoryLayout

logger = logging.getLogger(__name__)

BACKUP_DIR_PREFIX = "markdown-backup-"


@dataclass(frozen=True)
class DirectoryStats:
    """Per-type directory summary; zeroed when unreadable or missing."""

    file_count: int = 0
    total_size: int = 0
    last_modified: datetime | None = None


class DirectoryManager:
    """Create, inspect, prune, and snapshot the type directories."""

    def __init__(self, base_path: Path, layout: DirectoryLayout) -> None:
        self._base = base_path
        self._layout = layout

    @property
    def base_path(self) -> Path:
        return self._base

    def path_for(self, content_type: str | ContentType) -> Path:
        return self._base / self._layout.directory_for(content_type)

    def initialize(self) -> list[Path]:
        """Create the base and every type directory that is missing.

        Check-then-create: a concurrent initializer may win the race, which
        is harmless. Returns the directories actually created.
        """
        created: list[Path] = []
        for target in [self._base, *(self._base / d for _, d in self._layout.items())]:
            if target.is_dir():
                continue
            try:
                target.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise classify(exc, target) from exc
            created.append(target)
        if created:
            logger.info("Created %d content directories under %s", len(created), self._base)
        return created

    def ensure(self, content_type: str | ContentType) -> Path:
        """Make sure the directory for one content type exists."""
        target = self.path_for(content_type)
        if not target.is_dir():
            try:
                target.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise classify(exc, target) from exc
            logger.debug("Created directory %s", target)
        return target

    def validate(self) -> list[Path]:
        """Directories that should exist but don't. No side effects."""
        expected = [self._base, *(self._base / d for _, d in self._layout.items())]
        return [p for p in expected if not p.is_dir()]

    def stats(self) -> dict[ContentType, DirectoryStats]:
        """Walk each type directory for file count, bytes, newest mtime."""
        return {ct: self._stats_for(self._base / d) for ct, d in self._layout.items()}

    def _stats_for(self, directory: Path) -> DirectoryStats:
        count = 0
        size = 0
        newest: float | None = None
        try:
            for entry in directory.iterdir():
                if not entry.is_file() or entry.suffix != MARKDOWN_SUFFIX:
                    continue
                st = entry.stat()
                count += 1
                size += st.st_size
                newest = st.st_mtime if newest is None else max(newest, st.st_mtime)
        except OSError:
            logger.debug("Directory unreadable, reporting zeroed stats: %s", directory)
            return DirectoryStats()
        return DirectoryStats(
            file_count=count,
            total_size=size,
            last_modified=from_epoch(newest) if newest is not None else None,
        )

    def cleanup_empty(self) -> list[Path]:
        """Remove type directories that are currently empty."""
        removed: list[Path] = []
        for _, dirname in self._layout.items():
            target = self._base / dirname
            if not target.is_dir():
                continue
            try:
                if any(target.iterdir()):
                    continue
                target.rmdir()
            except OSError as exc:
                raise classify(exc, target) from exc
            removed.append(target)
        if removed:
            logger.info("Removed %d empty content directories", len(removed))
        return removed

    def backup(self, target_dir: Path | None = None) -> Path:
        """Copy every ``.md`` file into a timestamped snapshot directory.

        The snapshot lands at ``{target_dir}/markdown-backup-{timestamp}``
        (default *target_dir*: the base path's parent) and keeps the
        per-type structure. Only markdown files are copied.
        """
        parent = target_dir if target_dir is not None else self._base.parent
        snapshot = parent / f"{BACKUP_DIR_PREFIX}{now_compact()}"
        copied = 0
        try:
            snapshot.mkdir(parents=True, exist_ok=False)
            for _, dirname in self._layout.items():
                source_dir = self._base / dirname
                if not source_dir.is_dir():
                    continue
                for source in sorted(source_dir.glob(f"*{MARKDOWN_SUFFIX}")):
                    if not source.is_file():
                        continue
                    dest = snapshot / dirname / source.name
                    dest.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(source, dest)
                    copied += 1
        except OSError as exc:
            raise classify(exc, snapshot) from exc
        logger.info("Backed up %d markdown files to %s", copied, snapshot)
        return snapshot
