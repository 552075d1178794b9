"""DirectoryService — initialize, inspect, prune, and snapshot the type directories."""

from __future__ import annotations

from pathlib import Path

from mdctl.domain.errors import MarkdownError
from mdctl.services.base import BaseService
from mdctl.services.result import ServiceResult


class DirectoryService(BaseService):
    """Service-layer wrapper around :class:`DirectoryManager`."""

    def initialize(self) -> ServiceResult:
        op = "initialize"
        directories = self._workspace.directories
        try:
            created = directories.initialize()
        except MarkdownError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "base_path": str(directories.base_path),
                "created": [self._display(p) for p in created],
                "directories": self._workspace.layout.as_dict(),
            },
        )

    def validate(self) -> ServiceResult:
        """Report missing directories. A missing directory is a warning, not a failure."""
        missing = self._workspace.directories.validate()
        shown = [self._display(p) for p in missing]
        return ServiceResult(
            ok=True,
            op="validate",
            data={"is_valid": not missing, "missing": shown},
            warnings=[f"Missing directory: {p}" for p in shown],
        )

    def stats(self) -> ServiceResult:
        per_type = self._workspace.directories.stats()
        items = [
            {
                "type": str(content_type),
                "directory": self._workspace.layout.directory_for(content_type),
                "file_count": s.file_count,
                "total_size": s.total_size,
                "last_modified": s.last_modified.isoformat() if s.last_modified else None,
            }
            for content_type, s in per_type.items()
        ]
        return ServiceResult(
            ok=True,
            op="stats",
            data={
                "items": items,
                "total_files": sum(s.file_count for s in per_type.values()),
                "total_size": sum(s.total_size for s in per_type.values()),
            },
        )

    def cleanup(self) -> ServiceResult:
        op = "cleanup"
        try:
            removed = self._workspace.directories.cleanup_empty()
        except MarkdownError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"removed": [self._display(p) for p in removed], "count": len(removed)},
        )

    def backup(self, target_dir: Path | None = None) -> ServiceResult:
        op = "backup"
        try:
            snapshot = self._workspace.directories.backup(target_dir)
        except MarkdownError as exc:
            return self._failure(op, exc)
        files = sorted(p for p in snapshot.rglob("*") if p.is_file())
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "backup_path": str(snapshot),
                "file_count": len(files),
            },
        )

    def _display(self, path: Path) -> str:
        """Project-relative form when possible."""
        try:
            return path.relative_to(self._workspace.root).as_posix()
        except ValueError:
            return str(path)
