"""BaseService — foundation for all mdctl services.

Every service receives a :class:`Workspace` at construction time and
converts classified :class:`MarkdownError` failures into a failed
:class:`ServiceResult` through :meth:`BaseService._failure`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mdctl.domain.errors import ErrorKind, MarkdownError
from mdctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from mdctl.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)

_LOG_LEVELS: dict[ErrorKind, int] = {
    ErrorKind.FILE_NOT_FOUND: logging.WARNING,
    ErrorKind.EMBED_ERROR: logging.WARNING,
    ErrorKind.PERMISSION_DENIED: logging.ERROR,
    ErrorKind.DISK_FULL: logging.ERROR,
    ErrorKind.MIGRATION_ERROR: logging.ERROR,
}


def log_markdown_error(exc: MarkdownError, op: str) -> None:
    """Log at a level chosen by error kind; everything else logs at INFO."""
    logger.log(
        _LOG_LEVELS.get(exc.kind, logging.INFO),
        "%s failed [%s] %s",
        op,
        exc.kind.value,
        exc.message,
        extra={"path": exc.path, "code": exc.code},
    )


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class ContentService(BaseService):
            def read(self, path: str) -> ServiceResult:
                try:
                    content = self._workspace.store.read(path)
                except MarkdownError as exc:
                    return self._failure("read", exc)
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    @staticmethod
    def _failure(op: str, exc: MarkdownError, **data: Any) -> ServiceResult:
        log_markdown_error(exc, op)
        return ServiceResult(
            ok=False,
            op=op,
            data=data,
            error=ServiceError.from_markdown_error(exc),
        )
