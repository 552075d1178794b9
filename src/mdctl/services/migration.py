"""MigrationService — move inline legacy content into markdown files.

Pipeline: BACKUP → per file: LOAD → per batch: MIGRATE ITEMS → REWRITE INDEX → SUMMARIZE

Partial failure is the normal case. Every per-item failure becomes a
``failed`` :class:`MigrationResult`; only a run-level failure (the data
directory cannot be listed, the JSON backup cannot be written) aborts the
run and surfaces as a single entry in ``errors``.

:meth:`MigrationService.migrate_file` is the step-wise unit that
:meth:`MigrationService.migrate_all` iterates; a caller that wants to
stop early drives it file by file.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from mdctl.domain.errors import (
    AlreadyExistsError,
    ErrorKind,
    FileMissingError,
    MarkdownError,
)
from mdctl.domain.records import MIGRATED_FLAG_KEY, LegacyRecord, MigratedRecord, parse_record
from mdctl.domain.types import ContentType, coerce_content_type
from mdctl.services.base import BaseService, log_markdown_error
from mdctl.services.result import ServiceError, ServiceResult

logger = logging.getLogger(__name__)


class MigrationAction(StrEnum):
    MIGRATED = "migrated"
    UPDATED = "updated"
    WOULD_MIGRATE = "would_migrate"
    SKIPPED = "skipped"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"


_COUNTED = frozenset(
    {
        MigrationAction.MIGRATED,
        MigrationAction.UPDATED,
        MigrationAction.WOULD_MIGRATE,
        MigrationAction.ROLLED_BACK,
    }
)


class MigrationResult(BaseModel):
    """Outcome for one content item.

    ``success`` is True for skips too: a skip is "nothing to do", not a
    failure. Summaries count skips separately from successes.
    """

    model_config = {"frozen": True}

    id: str
    success: bool
    action: MigrationAction
    source_file: str
    markdown_path: str | None = None
    reason: str | None = None
    error: dict[str, Any] | None = None


class MigrationSummary(BaseModel):
    model_config = {"frozen": True}

    total_items: int = 0
    success_count: int = 0
    failure_count: int = 0
    skipped_count: int = 0
    total_files: int = 0
    dry_run: bool = False
    aborted: bool = False
    backup_dir: str | None = None
    results: list[MigrationResult] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def collect(
        cls,
        results: list[MigrationResult],
        *,
        errors: list[str] | None = None,
        **extra: Any,
    ) -> MigrationSummary:
        return cls(
            total_items=len(results),
            success_count=sum(1 for r in results if r.success and r.action in _COUNTED),
            failure_count=sum(1 for r in results if not r.success),
            skipped_count=sum(1 for r in results if r.action == MigrationAction.SKIPPED),
            results=results,
            errors=list(errors or []),
            **extra,
        )


@dataclass
class _Written:
    """A markdown write or delete made for one index file, for compensation."""

    path: Path
    previous: str | None  # prior content for overwrites and deletes, None for creates


def _skip(record: LegacyRecord, source: str, reason: str) -> MigrationResult:
    return MigrationResult(
        id=record.id,
        success=True,
        action=MigrationAction.SKIPPED,
        source_file=source,
        markdown_path=getattr(record, "markdown_path", None),
        reason=reason,
    )


def _fail(item_id: str, source: str, exc: MarkdownError) -> MigrationResult:
    log_markdown_error(exc, f"migrate {source}:{item_id}")
    return MigrationResult(
        id=item_id,
        success=False,
        action=MigrationAction.FAILED,
        source_file=source,
        reason=exc.message,
        error=exc.to_dict(),
    )


class MigrationService(BaseService):
    """Bulk migration, status, and rollback over the legacy JSON index."""

    # ------------------------------------------------------------------
    # Migrate
    # ------------------------------------------------------------------

    def migrate_all(
        self,
        *,
        dry_run: bool = False,
        backup_original: bool | None = None,
        overwrite_existing: bool = False,
        batch_size: int | None = None,
    ) -> ServiceResult:
        """Migrate every legacy index file.

        *backup_original* and *batch_size* default to the ``[migration]``
        settings. A dry run computes every path and runs every check, but
        writes nothing: no backup, no markdown file, no index rewrite.
        """
        op = "migrate_all"
        config = self._workspace.settings.migration
        if backup_original is None:
            backup_original = config.backup_original
        index = self._workspace.index

        try:
            files = index.list_files()
        except MarkdownError as exc:
            return self._abort(op, exc, dry_run=dry_run)

        backup_dir: str | None = None
        if backup_original and not dry_run and files:
            try:
                index.backup(files)
            except MarkdownError as exc:
                return self._abort(op, exc, dry_run=dry_run, total_files=len(files))
            backup_dir = str(index.backup_dir)

        results: list[MigrationResult] = []
        errors: list[str] = []
        for name in files:
            file_results, file_error = self._migrate_file(
                name,
                dry_run=dry_run,
                overwrite_existing=overwrite_existing,
                batch_size=batch_size or config.batch_size,
            )
            results.extend(file_results)
            if file_error is not None:
                errors.append(file_error)

        summary = MigrationSummary.collect(
            results,
            errors=errors,
            total_files=len(files),
            dry_run=dry_run,
            backup_dir=backup_dir,
        )
        logger.info(
            "Migration %s: %d migrated, %d skipped, %d failed across %d files",
            "dry run" if dry_run else "run",
            summary.success_count,
            summary.skipped_count,
            summary.failure_count,
            summary.total_files,
        )
        return self._summary_result(op, summary)

    def migrate_file(
        self,
        name: str,
        *,
        dry_run: bool = False,
        backup_original: bool | None = None,
        overwrite_existing: bool = False,
        batch_size: int | None = None,
    ) -> ServiceResult:
        """Migrate a single legacy index file (the step-wise unit)."""
        op = "migrate_file"
        config = self._workspace.settings.migration
        if backup_original is None:
            backup_original = config.backup_original
        index = self._workspace.index

        backup_dir: str | None = None
        try:
            path = index.path_for(name)
            if not path.is_file():
                raise FileMissingError(path)
            if backup_original and not dry_run:
                index.backup([path.name])
                backup_dir = str(index.backup_dir)
        except MarkdownError as exc:
            return self._abort(op, exc, dry_run=dry_run, total_files=1)

        results, file_error = self._migrate_file(
            path.name,
            dry_run=dry_run,
            overwrite_existing=overwrite_existing,
            batch_size=batch_size or config.batch_size,
        )
        summary = MigrationSummary.collect(
            results,
            errors=[file_error] if file_error else [],
            total_files=1,
            dry_run=dry_run,
            backup_dir=backup_dir,
        )
        return self._summary_result(op, summary)

    def _migrate_file(
        self,
        name: str,
        *,
        dry_run: bool,
        overwrite_existing: bool,
        batch_size: int,
    ) -> tuple[list[MigrationResult], str | None]:
        """Process one index file. Returns item results and a file-level error."""
        index = self._workspace.index
        try:
            raw_items = index.load_raw(name)
        except MarkdownError as exc:
            log_markdown_error(exc, f"migrate {name}")
            return [], f"{name}: {exc.message}"

        stem = Path(name).stem
        delay = self._workspace.settings.migration.batch_delay_ms / 1000
        entries: list[Any] = list(raw_items)
        results: list[MigrationResult] = []
        written: list[_Written] = []

        for start in range(0, len(entries), batch_size):
            if start and delay:
                time.sleep(delay)
            for position in range(start, min(start + batch_size, len(entries))):
                try:
                    record = parse_record(entries[position], source=name)
                except MarkdownError as exc:
                    results.append(_fail(f"#{position}", name, exc))
                    continue
                result, migrated = self._migrate_item(
                    record,
                    name,
                    stem,
                    dry_run=dry_run,
                    overwrite_existing=overwrite_existing,
                    written=written,
                )
                results.append(result)
                if migrated is not None:
                    entries[position] = migrated

        migrated_count = sum(
            1 for r in results if r.action in (MigrationAction.MIGRATED, MigrationAction.UPDATED)
        )
        if dry_run or migrated_count == 0:
            return results, None

        try:
            index.save(name, entries)
        except MarkdownError as exc:
            self._compensate(written)
            failure = MarkdownError(
                f"Index rewrite failed; {migrated_count} markdown files reverted: {exc.message}",
                kind=ErrorKind.MIGRATION_ERROR,
                path=exc.path,
                suggestion=exc.suggestion,
                details={"original_error": exc},
            )
            log_markdown_error(failure, f"migrate {name}")
            results = [
                _fail(r.id, name, failure)
                if r.action in (MigrationAction.MIGRATED, MigrationAction.UPDATED)
                else r
                for r in results
            ]
            return results, f"{name}: {failure.message}"

        logger.info("Migrated %d items in %s", migrated_count, name)
        return results, None

    def _migrate_item(
        self,
        record: LegacyRecord,
        source: str,
        stem: str,
        *,
        dry_run: bool,
        overwrite_existing: bool,
        written: list[_Written],
    ) -> tuple[MigrationResult, MigratedRecord | None]:
        if record.is_migrated:
            return _skip(record, source, "already migrated"), None
        if not record.has_content:
            return _skip(record, source, "no inline content"), None

        store = self._workspace.store
        try:
            content_type = self._resolve_type(record, stem)
            path = self._workspace.paths.generate(record.id, content_type)
            store.check_content(record.content)
            exists = store.exists(path)
            if exists and not overwrite_existing:
                raise AlreadyExistsError(path, content_id=record.id)

            relative = store.to_relative(path)
            if dry_run:
                return (
                    MigrationResult(
                        id=record.id,
                        success=True,
                        action=MigrationAction.WOULD_MIGRATE,
                        source_file=source,
                        markdown_path=relative,
                        reason="would overwrite existing file" if exists else None,
                    ),
                    None,
                )

            if exists:
                previous = store.read(path)
                store.update(path, record.content)
                written.append(_Written(path=path, previous=previous))
                action = MigrationAction.UPDATED
            else:
                store.create(record.id, content_type, record.content)
                written.append(_Written(path=path, previous=None))
                action = MigrationAction.MIGRATED
        except MarkdownError as exc:
            return _fail(record.id, source, exc), None

        result = MigrationResult(
            id=record.id,
            success=True,
            action=action,
            source_file=source,
            markdown_path=relative,
        )
        return result, MigratedRecord.from_legacy(record, relative)

    @staticmethod
    def _resolve_type(record: LegacyRecord, stem: str) -> ContentType:
        """The record's own type, else the index file stem (``blog.json`` -> blog)."""
        return coerce_content_type(record.type or stem)

    def _compensate(self, written: list[_Written]) -> None:
        """Undo markdown writes and deletes after a failed index rewrite (best-effort)."""
        for op in reversed(written):
            try:
                if op.previous is not None:
                    op.path.write_text(op.previous, encoding="utf-8")
                else:
                    op.path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Failed to revert markdown write: %s", op.path)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def status(self) -> ServiceResult:
        """Count migrated vs pending items from the ``markdownMigrated`` flag.

        Read-only and safe to poll. Unreadable files are reported as
        warnings and left out of the totals.
        """
        op = "status"
        index = self._workspace.index
        try:
            files = index.list_files()
        except MarkdownError as exc:
            return self._failure(op, exc)

        per_file: list[dict[str, Any]] = []
        warnings: list[str] = []
        for name in files:
            try:
                raw_items = index.load_raw(name)
            except MarkdownError as exc:
                warnings.append(f"{name}: {exc.message}")
                continue
            migrated = sum(
                1
                for raw in raw_items
                if isinstance(raw, dict) and raw.get(MIGRATED_FLAG_KEY) is True
            )
            per_file.append(
                {
                    "file": name,
                    "total_items": len(raw_items),
                    "migrated_items": migrated,
                    "pending_items": len(raw_items) - migrated,
                }
            )

        total = sum(f["total_items"] for f in per_file)
        migrated_total = sum(f["migrated_items"] for f in per_file)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "total_files": len(files),
                "total_items": total,
                "migrated_items": migrated_total,
                "pending_items": total - migrated_total,
                "files": per_file,
            },
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Rollback
    # ------------------------------------------------------------------

    def rollback(self, item_ids: list[str]) -> ServiceResult:
        """Delete the markdown files of migrated items and strip their markers.

        Rolling back an ID that is not migrated, or that no index file
        contains, is a reported failure. An index file is rewritten only
        when at least one of its items was reverted.
        """
        op = "rollback"
        wanted = list(dict.fromkeys(item_ids))
        index = self._workspace.index
        try:
            files = index.list_files()
        except MarkdownError as exc:
            return self._abort(op, exc)

        results: list[MigrationResult] = []
        errors: list[str] = []
        warnings: list[str] = []
        seen: set[str] = set()
        for name in files:
            try:
                entries: list[Any] = list(index.load_raw(name))
            except MarkdownError as exc:
                log_markdown_error(exc, f"rollback {name}")
                errors.append(f"{name}: {exc.message}")
                continue

            file_results: list[MigrationResult] = []
            removed: list[_Written] = []
            for position, raw in enumerate(entries):
                raw_id = raw.get("id") if isinstance(raw, dict) else None
                if raw_id is None or str(raw_id) not in wanted:
                    continue
                record = parse_record(raw, source=name)
                seen.add(record.id)
                result, legacy = self._rollback_item(record, name, warnings, removed)
                file_results.append(result)
                if legacy is not None:
                    entries[position] = legacy

            reverted = sum(1 for r in file_results if r.action == MigrationAction.ROLLED_BACK)
            if reverted:
                try:
                    index.save(name, entries)
                except MarkdownError as exc:
                    self._compensate(removed)
                    failure = MarkdownError(
                        f"Index rewrite failed; {len(removed)} markdown files restored: "
                        f"{exc.message}",
                        kind=ErrorKind.MIGRATION_ERROR,
                        path=exc.path,
                        suggestion=exc.suggestion,
                        details={"original_error": exc},
                    )
                    log_markdown_error(failure, f"rollback {name}")
                    errors.append(f"{name}: {failure.message}")
                    file_results = [
                        _fail(r.id, name, failure)
                        if r.action == MigrationAction.ROLLED_BACK
                        else r
                        for r in file_results
                    ]
            results.extend(file_results)

        for item_id in wanted:
            if item_id not in seen:
                results.append(
                    _fail(
                        item_id,
                        "",
                        MarkdownError(
                            f"No content item found with ID: {item_id}",
                            kind=ErrorKind.MIGRATION_ERROR,
                            suggestion="Check the ID against 'mdctl migrate status'",
                        ),
                    )
                )

        summary = MigrationSummary.collect(results, errors=errors, total_files=len(files))
        result = self._summary_result(op, summary)
        if warnings:
            result = result.model_copy(update={"warnings": [*result.warnings, *warnings]})
        return result

    def _rollback_item(
        self,
        record: LegacyRecord,
        source: str,
        warnings: list[str],
        removed: list[_Written],
    ) -> tuple[MigrationResult, LegacyRecord | None]:
        if not isinstance(record, MigratedRecord):
            exc = MarkdownError(
                f"Content item is not migrated: {record.id}",
                kind=ErrorKind.MIGRATION_ERROR,
                suggestion="Only migrated items can be rolled back",
            )
            return _fail(record.id, source, exc), None
        if not record.markdown_path:
            exc = MarkdownError(
                f"Migrated item has no markdownPath: {record.id}",
                kind=ErrorKind.MIGRATION_ERROR,
                suggestion="Fix the record by hand; the markdown file cannot be located",
            )
            return _fail(record.id, source, exc), None

        store = self._workspace.store
        path = store.to_absolute(record.markdown_path)
        try:
            previous = store.read(path)
            store.delete(path)
            removed.append(_Written(path=path, previous=previous))
        except MarkdownError as exc:
            if exc.kind != ErrorKind.FILE_NOT_FOUND:
                return _fail(record.id, source, exc), None
            warnings.append(f"{record.id}: markdown file was already missing")

        result = MigrationResult(
            id=record.id,
            success=True,
            action=MigrationAction.ROLLED_BACK,
            source_file=source,
            markdown_path=record.markdown_path,
        )
        return result, record.revert()

    # ------------------------------------------------------------------
    # Result shaping
    # ------------------------------------------------------------------

    @staticmethod
    def _summary_result(op: str, summary: MigrationSummary) -> ServiceResult:
        warnings: list[str] = []
        if summary.failure_count:
            warnings.append(f"{summary.failure_count} of {summary.total_items} items failed")
        warnings.extend(summary.errors)
        return ServiceResult(
            ok=True,
            op=op,
            data=summary.model_dump(mode="json"),
            warnings=warnings,
        )

    def _abort(self, op: str, exc: MarkdownError, **extra: Any) -> ServiceResult:
        """Run-level failure: nothing was migrated."""
        log_markdown_error(exc, op)
        summary = MigrationSummary(aborted=True, errors=[exc.message], **extra)
        return ServiceResult(
            ok=False,
            op=op,
            data=summary.model_dump(mode="json"),
            error=ServiceError.from_markdown_error(exc),
        )
