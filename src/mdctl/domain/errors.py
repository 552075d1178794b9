"""MarkdownError taxonomy and the I/O error classifier.

INVARIANT: Every disk-facing failure in the store, the directory manager,
and the migration service is routed through :func:`classify`. The mapping
table below is the only place that knows about platform error codes.

The taxonomy is closed: :class:`ErrorKind` values are stable machine tags
that callers may branch on; ``suggestion`` and ``user_message`` are the
strings a UI renders. Raw OS codes stay in ``code``/``details`` for logs.
"""

from __future__ import annotations

import errno
import json
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mdctl.domain.embeds import EmbedIssue


class ErrorKind(StrEnum):
    """Closed error taxonomy."""

    FILE_NOT_FOUND = "MARKDOWN_FILE_NOT_FOUND"
    PERMISSION_DENIED = "MARKDOWN_PERMISSION_DENIED"
    DISK_FULL = "MARKDOWN_DISK_FULL"
    INVALID_PATH = "MARKDOWN_INVALID_PATH"
    INVALID_CONTENT = "MARKDOWN_INVALID_CONTENT"
    EMBED_ERROR = "MARKDOWN_EMBED_ERROR"
    MIGRATION_ERROR = "MARKDOWN_MIGRATION_ERROR"
    VALIDATION_ERROR = "MARKDOWN_VALIDATION_ERROR"
    BUSY = "MARKDOWN_BUSY"
    TIMEOUT = "MARKDOWN_TIMEOUT"
    OUT_OF_MEMORY = "MARKDOWN_OUT_OF_MEMORY"
    INTERRUPTED = "MARKDOWN_INTERRUPTED"


_USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.FILE_NOT_FOUND: (
        "The content file could not be found. It may have been moved or deleted."
    ),
    ErrorKind.PERMISSION_DENIED: (
        "Unable to access the content file due to permission restrictions."
    ),
    ErrorKind.DISK_FULL: "Unable to save content due to insufficient disk space.",
    ErrorKind.INVALID_PATH: "The file path is invalid or contains unsupported characters.",
    ErrorKind.INVALID_CONTENT: "The content could not be processed.",
    ErrorKind.EMBED_ERROR: "There's an issue with embedded content in your markdown.",
    ErrorKind.MIGRATION_ERROR: "Failed to migrate content to the new format.",
    ErrorKind.VALIDATION_ERROR: "The content contains validation errors that need to be fixed.",
    ErrorKind.BUSY: "The content file is busy. Please try again shortly.",
    ErrorKind.TIMEOUT: "The operation took too long. Please try again.",
    ErrorKind.OUT_OF_MEMORY: "The server ran out of memory while processing the content.",
    ErrorKind.INTERRUPTED: "The operation was interrupted. Please try again.",
}


class MarkdownError(Exception):
    """A classified failure of a markdown store operation.

    Attributes:
        kind: Machine-checkable taxonomy tag.
        message: Developer-facing description.
        path: The offending path, if any.
        code: Symbolic OS error code (``"ENOENT"``) when classified from one.
        suggestion: Human-actionable next step.
        details: Extra context; ``original_error`` is always present when
            the error was classified from a lower-level exception.
    """

    default_kind: ErrorKind = ErrorKind.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        path: str | Path | None = None,
        code: str | None = None,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind or self.default_kind
        self.message = message
        self.path = str(path) if path is not None else None
        self.code = code
        self.suggestion = suggestion
        self.details = dict(details or {})

    @property
    def original_error(self) -> BaseException | None:
        return self.details.get("original_error")

    @property
    def user_message(self) -> str:
        """Friendly message for end users (never includes OS codes)."""
        return _USER_MESSAGES[self.kind]

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe payload (original error rendered with ``repr``)."""
        payload: dict[str, Any] = {
            "kind": self.kind.value,
            "message": self.message,
            "user_message": self.user_message,
        }
        if self.path is not None:
            payload["path"] = self.path
        if self.code is not None:
            payload["code"] = self.code
        if self.suggestion is not None:
            payload["suggestion"] = self.suggestion
        for key, value in self.details.items():
            if key == "original_error":
                payload[key] = repr(value)
            elif isinstance(value, (str, int, float, bool, list, dict)) or value is None:
                payload[key] = value
            else:
                payload[key] = str(value)
        return payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.value}, {self.message!r})"


# ---------------------------------------------------------------------------
# Typed errors raised by the store and path layer
# ---------------------------------------------------------------------------


class AlreadyExistsError(MarkdownError):
    default_kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, path: str | Path, *, content_id: str | None = None) -> None:
        super().__init__(
            f"Markdown file already exists: {path}",
            path=path,
            code="EEXIST",
            suggestion="Update the existing file instead, or choose a different content ID",
            details={"content_id": content_id} if content_id else None,
        )


class UnsupportedContentTypeError(MarkdownError):
    default_kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, content_type: str) -> None:
        super().__init__(
            f"Invalid content type: {content_type!r}",
            suggestion="Use one of the configured content types",
            details={"content_type": content_type},
        )


class InvalidContentIdError(MarkdownError):
    default_kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, content_id: str, reason: str) -> None:
        super().__init__(
            f"Invalid content ID {content_id!r}: {reason}",
            suggestion="Use 1-100 characters from A-Z, a-z, 0-9, '_' and '-'",
            details={"content_id": content_id},
        )


class InvalidPathError(MarkdownError):
    default_kind = ErrorKind.INVALID_PATH

    def __init__(self, path: str | Path, errors: list[str] | None = None) -> None:
        super().__init__(
            f"Invalid markdown file path: {path}",
            path=path,
            suggestion="Ensure the file path is valid and doesn't contain invalid characters",
            details={"errors": list(errors or [])},
        )


class PathExhaustedError(MarkdownError):
    default_kind = ErrorKind.INVALID_PATH

    def __init__(self, base_path: str | Path, attempts: int) -> None:
        super().__init__(
            f"No unique path found for {base_path} after {attempts} attempts",
            path=base_path,
            suggestion="Choose a different content ID",
            details={"attempts": attempts},
        )


class UnsafeContentError(MarkdownError):
    default_kind = ErrorKind.INVALID_CONTENT

    def __init__(self, message: str, reasons: list[str]) -> None:
        super().__init__(
            message,
            suggestion="Remove the flagged elements and submit the content again",
            details={"reasons": reasons},
        )


class FileMissingError(MarkdownError):
    """Raised when an operation requires an existing file."""

    default_kind = ErrorKind.FILE_NOT_FOUND

    def __init__(self, path: str | Path) -> None:
        super().__init__(
            f"Failed to read markdown file: {path}",
            path=path,
            code="ENOENT",
            suggestion="Check if the file path is correct and the file exists",
        )


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Rule:
    kind: ErrorKind
    template: str
    suggestion: str


_ERRNO_RULES: dict[int, _Rule] = {
    errno.ENOENT: _Rule(
        ErrorKind.FILE_NOT_FOUND,
        "Failed to read markdown file: {path}",
        "Check if the file path is correct and the file exists",
    ),
    errno.EACCES: _Rule(
        ErrorKind.PERMISSION_DENIED,
        "Permission denied accessing file: {path}",
        "Check file permissions and ensure the application has read/write access",
    ),
    errno.EPERM: _Rule(
        ErrorKind.PERMISSION_DENIED,
        "Permission denied accessing file: {path}",
        "Check file permissions and ensure the application has read/write access",
    ),
    errno.EROFS: _Rule(
        ErrorKind.PERMISSION_DENIED,
        "Read-only file system: {path}",
        "Mount the content directory read-write or point the store elsewhere",
    ),
    errno.ENOSPC: _Rule(
        ErrorKind.DISK_FULL,
        "Insufficient disk space to write markdown file: {path}",
        "Free up disk space and try again",
    ),
    errno.EDQUOT: _Rule(
        ErrorKind.DISK_FULL,
        "Disk quota exceeded writing markdown file: {path}",
        "Free up disk space or raise the quota and try again",
    ),
    errno.EFBIG: _Rule(
        ErrorKind.DISK_FULL,
        "File too large: {path}",
        "Reduce the content size and try again",
    ),
    errno.EINVAL: _Rule(
        ErrorKind.INVALID_PATH,
        "Invalid file path: {path}",
        "Ensure the file path is valid and doesn't contain invalid characters",
    ),
    errno.ENAMETOOLONG: _Rule(
        ErrorKind.INVALID_PATH,
        "File name too long: {path}",
        "Use a shorter content ID",
    ),
    errno.ENOTDIR: _Rule(
        ErrorKind.INVALID_PATH,
        "A parent of the path is not a directory: {path}",
        "Check the storage layout; a file may be shadowing a content directory",
    ),
    errno.ELOOP: _Rule(
        ErrorKind.INVALID_PATH,
        "Too many symbolic links resolving: {path}",
        "Remove the symbolic link loop from the storage tree",
    ),
    errno.EISDIR: _Rule(
        ErrorKind.INVALID_CONTENT,
        "Is a directory: {path}",
        "Specify a file, not a directory",
    ),
    errno.EBUSY: _Rule(
        ErrorKind.BUSY,
        "File is locked: {path}",
        "Wait for the file to be unlocked",
    ),
    errno.ETXTBSY: _Rule(
        ErrorKind.BUSY,
        "File is busy: {path}",
        "Wait for the file to be released",
    ),
    errno.EAGAIN: _Rule(
        ErrorKind.BUSY,
        "Resource temporarily unavailable: {path}",
        "Try the operation again",
    ),
    errno.EMFILE: _Rule(
        ErrorKind.BUSY,
        "Too many open files: {path}",
        "Close some files and try again",
    ),
    errno.ENFILE: _Rule(
        ErrorKind.BUSY,
        "Too many open files in system: {path}",
        "Close some files and try again",
    ),
    errno.ETIMEDOUT: _Rule(
        ErrorKind.TIMEOUT,
        "Operation timed out: {path}",
        "Try the operation again",
    ),
    errno.ENETUNREACH: _Rule(
        ErrorKind.TIMEOUT,
        "Network is unreachable: {path}",
        "Check network connection",
    ),
    errno.EHOSTUNREACH: _Rule(
        ErrorKind.TIMEOUT,
        "Host is unreachable: {path}",
        "Check network connection",
    ),
    errno.ENOMEM: _Rule(
        ErrorKind.OUT_OF_MEMORY,
        "Cannot allocate memory: {path}",
        "Free up memory and try again",
    ),
    errno.EINTR: _Rule(
        ErrorKind.INTERRUPTED,
        "Write interrupted: {path}",
        "Try the operation again",
    ),
}

# Exception classes that imply a kind even when errno is unset.
_TYPE_RULES: tuple[tuple[type[BaseException], int], ...] = (
    (FileNotFoundError, errno.ENOENT),
    (PermissionError, errno.EACCES),
    (IsADirectoryError, errno.EISDIR),
    (NotADirectoryError, errno.ENOTDIR),
    (TimeoutError, errno.ETIMEDOUT),
    (InterruptedError, errno.EINTR),
    (BlockingIOError, errno.EAGAIN),
)

_FALLBACK = _Rule(
    ErrorKind.INVALID_CONTENT,
    "File operation failed: {path}",
    "Check the file and try again",
)


def _errno_of(exc: OSError) -> int | None:
    if exc.errno is not None:
        return exc.errno
    for exc_type, code in _TYPE_RULES:
        if isinstance(exc, exc_type):
            return code
    return None


def classify(exc: BaseException, path: str | Path | None = None) -> MarkdownError:
    """Map a low-level failure to a :class:`MarkdownError`.

    Already-classified errors pass through unchanged. The original
    exception is preserved in ``details["original_error"]``.
    """
    if isinstance(exc, MarkdownError):
        return exc

    where = str(path) if path is not None else getattr(exc, "filename", None) or "<unknown>"
    details: dict[str, Any] = {"original_error": exc}

    if isinstance(exc, OSError):
        code = _errno_of(exc)
        rule = _ERRNO_RULES.get(code, _FALLBACK) if code is not None else _FALLBACK
        symbol = errno.errorcode.get(code) if code is not None else None
        return MarkdownError(
            rule.template.format(path=where),
            kind=rule.kind,
            path=where,
            code=symbol,
            suggestion=rule.suggestion,
            details=details,
        )

    if isinstance(exc, UnicodeDecodeError):
        return MarkdownError(
            f"File is not valid UTF-8 text: {where}",
            kind=ErrorKind.INVALID_CONTENT,
            path=where,
            suggestion="Re-save the file with UTF-8 encoding",
            details=details,
        )

    if isinstance(exc, json.JSONDecodeError):
        return MarkdownError(
            f"Invalid JSON in {where}: {exc.msg} (line {exc.lineno})",
            kind=ErrorKind.VALIDATION_ERROR,
            path=where,
            suggestion="Fix the JSON syntax or restore the file from backup",
            details=details,
        )

    if isinstance(exc, MemoryError):
        return MarkdownError(
            f"Cannot allocate memory: {where}",
            kind=ErrorKind.OUT_OF_MEMORY,
            path=where,
            suggestion="Free up memory and try again",
            details=details,
        )

    return MarkdownError(
        f"Unknown file error: {exc}",
        kind=ErrorKind.INVALID_CONTENT,
        path=where,
        suggestion="Check the file and try again",
        details=details,
    )


def embed_issue_to_error(issue: EmbedIssue, content: str) -> MarkdownError:
    """Wrap an embed validation issue as an ``EMBED_ERROR`` MarkdownError."""
    lines = content.split("\n")
    context_line = lines[issue.line - 1] if 0 < issue.line <= len(lines) else ""
    return MarkdownError(
        issue.message,
        kind=ErrorKind.EMBED_ERROR,
        suggestion=issue.suggestion,
        details={
            "type": issue.type,
            "line": issue.line,
            "column": issue.column,
            "context_line": context_line,
        },
    )
