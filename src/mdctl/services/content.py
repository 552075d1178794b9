"""ContentService — the consumer-facing markdown file operations.

Thin request/response layer over :class:`ContentFileStore` and
:class:`EmbedValidator`: plain data in, :class:`ServiceResult` out.
Paths in results are storage-relative (forward slashes) so they can be
persisted as-is.
"""

from __future__ import annotations

from typing import Any

from mdctl.domain.embeds import MediaReferenceSet
from mdctl.domain.errors import MarkdownError, embed_issue_to_error
from mdctl.domain.types import ContentType, coerce_content_type
from mdctl.services.base import BaseService, log_markdown_error
from mdctl.services.result import ServiceError, ServiceResult


class ContentService(BaseService):
    """Create, read, update, delete, and inspect markdown content files."""

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def generate_path(
        self,
        content_id: str,
        content_type: str | ContentType,
        *,
        sanitize_names: bool = False,
        add_timestamp: bool = False,
        unique: bool = False,
    ) -> ServiceResult:
        """Compute the canonical path without touching disk.

        With *unique*, files already present in the type directory are
        treated as taken and a numeric suffix is appended on collision.
        """
        op = "generate_path"
        paths = self._workspace.paths
        try:
            if unique:
                existing = [
                    paths.to_absolute(meta.file_path)
                    for meta in self._workspace.store.list(content_type)
                ]
                path = paths.generate_unique(
                    content_id, content_type, existing, sanitize_names=sanitize_names
                )
            else:
                path = paths.generate(
                    content_id,
                    content_type,
                    sanitize_names=sanitize_names,
                    add_timestamp=add_timestamp,
                )
        except MarkdownError as exc:
            return self._failure(op, exc)

        parsed = paths.parse(path)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": parsed.content_id,
                "type": str(coerce_content_type(content_type)),
                "path": paths.to_relative(path),
                "absolute_path": str(path),
                "exists": self._workspace.store.exists(path),
            },
        )

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
    ) -> ServiceResult:
        op = "create"
        store = self._workspace.store
        try:
            path = store.create(content_id, content_type, content, overwrite=overwrite)
        except MarkdownError as exc:
            return self._failure(op, exc, id=content_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": content_id,
                "type": str(coerce_content_type(content_type)),
                "path": store.to_relative(path),
                "absolute_path": str(path),
                "size": len(content.encode("utf-8")),
            },
        )

    def read(self, path: str) -> ServiceResult:
        op = "read"
        store = self._workspace.store
        try:
            content = store.read(path)
        except MarkdownError as exc:
            return self._failure(op, exc, path=path)
        return ServiceResult(
            ok=True,
            op=op,
            data={"path": store.to_relative(path), "content": content},
        )

    def update(self, path: str, content: str, *, backup: bool = False) -> ServiceResult:
        op = "update"
        store = self._workspace.store
        try:
            backup_path = store.update(path, content, backup=backup)
        except MarkdownError as exc:
            return self._failure(op, exc, path=path)
        data: dict[str, Any] = {
            "path": store.to_relative(path),
            "size": len(content.encode("utf-8")),
        }
        if backup_path is not None:
            data["backup_path"] = str(backup_path)
        return ServiceResult(ok=True, op=op, data=data)

    def delete(self, path: str) -> ServiceResult:
        op = "delete"
        store = self._workspace.store
        try:
            store.delete(path)
        except MarkdownError as exc:
            return self._failure(op, exc, path=path)
        return ServiceResult(ok=True, op=op, data={"path": store.to_relative(path)})

    def exists(self, path: str) -> ServiceResult:
        store = self._workspace.store
        return ServiceResult(
            ok=True,
            op="exists",
            data={"path": store.to_relative(path), "exists": store.exists(path)},
        )

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def list_by_type(self, content_type: str | ContentType) -> ServiceResult:
        op = "list_by_type"
        try:
            items = self._workspace.store.list(content_type)
            ctype = coerce_content_type(content_type)
        except MarkdownError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "type": str(ctype),
                "count": len(items),
                "items": [item.model_dump(mode="json") for item in items],
            },
        )

    def metadata(self, path: str) -> ServiceResult:
        op = "metadata"
        try:
            meta = self._workspace.store.metadata(path)
        except MarkdownError as exc:
            return self._failure(op, exc, path=path)
        return ServiceResult(ok=True, op=op, data=meta.model_dump(mode="json"))

    def verify(
        self,
        path: str,
        *,
        expected_checksum: str | None = None,
        restore: bool = False,
        backup_content: str | None = None,
    ) -> ServiceResult:
        """Check file integrity; optionally repair a mismatch.

        A checksum mismatch without *restore* is a failed result. With
        *restore*, the file is recovered and the method used is reported
        as a warning.
        """
        op = "verify"
        store = self._workspace.store
        warnings: list[str] = []
        try:
            report = store.verify(path, expected_checksum)
            data: dict[str, Any] = {"path": store.to_relative(path), **report.model_dump()}
            if not report.is_valid:
                if not restore:
                    return ServiceResult(
                        ok=False,
                        op=op,
                        data=data,
                        error=ServiceError(
                            code="MARKDOWN_VALIDATION_ERROR",
                            message=f"Checksum mismatch for {data['path']}",
                            detail={
                                "expected": expected_checksum,
                                "actual": report.current_checksum,
                                "suggestion": "Re-run with --restore to recover the file",
                            },
                        ),
                    )
                method = store.restore(path, backup_content)
                data["restored"] = method
                warnings.append(f"Integrity check failed; restored using {method}")
        except MarkdownError as exc:
            return self._failure(op, exc, path=path)
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    # ------------------------------------------------------------------
    # Embeds
    # ------------------------------------------------------------------

    def validate_embeds(
        self,
        content: str,
        media: MediaReferenceSet | dict[str, Any] | None = None,
    ) -> ServiceResult:
        """Check embed references in *content* against *media*.

        *media* may be a :class:`MediaReferenceSet` or a raw content record
        (its ``images``/``videos``/``externalLinks`` arrays are used).
        Iframe host warnings never fail the result.
        """
        op = "validate_embeds"
        if not isinstance(media, MediaReferenceSet):
            media = MediaReferenceSet.from_record(media or {})
        validation = self._workspace.embeds.validate(content, media)
        data = {
            "is_valid": validation.is_valid,
            "references": len(self._workspace.embeds.extract_references(content)),
            "errors": [issue.to_dict() for issue in validation.errors],
        }
        if validation.is_valid:
            return ServiceResult(ok=True, op=op, data=data, warnings=validation.warnings)

        first = embed_issue_to_error(validation.errors[0], content)
        log_markdown_error(first, op)
        error = ServiceError.from_markdown_error(first)
        if len(validation.errors) > 1:
            error = error.model_copy(
                update={"message": f"{first.message} (+{len(validation.errors) - 1} more)"}
            )
        return ServiceResult(
            ok=False,
            op=op,
            data=data,
            warnings=validation.warnings,
            error=error,
        )

    def extract_references(self, content: str) -> ServiceResult:
        refs = self._workspace.embeds.extract_references(content)
        return ServiceResult(
            ok=True,
            op="extract_references",
            data={
                "count": len(refs),
                "references": [
                    {
                        "type": ref.type,
                        "index": ref.index,
                        "text": ref.text,
                        "original_match": ref.original_match,
                        "start_pos": ref.start_pos,
                        "end_pos": ref.end_pos,
                        "line": ref.line,
                        "column": ref.column,
                    }
                    for ref in refs
                ],
            },
        )
