"""Content safety rules applied before every markdown write.

These are hard rejections, not sanitization: flagged content is never
escaped or stripped. The caller fixes the input and resubmits.
"""

from __future__ import annotations

import re

from mdctl.domain.errors import UnsafeContentError

DEFAULT_MAX_CONTENT_BYTES = 10 * 1024 * 1024

_DANGEROUS_ELEMENTS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("script tag", re.compile(r"<script\b", re.IGNORECASE)),
    (
        "iframe with javascript: or data: source",
        re.compile(
            r"""<iframe\b[^>]*\bsrc\s*=\s*["']?\s*(?:javascript|data):""",
            re.IGNORECASE,
        ),
    ),
    (
        "inline event handler attribute",
        # Quoted or unquoted value; "/" separates attributes as well as whitespace.
        re.compile(r"<[^>]*[\s/]on[a-z]+\s*=", re.IGNORECASE),
    ),
)

# C0 controls, DEL and C1 controls. Tab, LF, VT, FF and CR are whitespace.
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0e-\x1f\x7f-\x9f]")


def find_unsafe_elements(content: str) -> list[str]:
    """Names of every dangerous construct present in *content*."""
    reasons = [label for label, pattern in _DANGEROUS_ELEMENTS if pattern.search(content)]
    if _CONTROL_CHARS.search(content):
        reasons.append("control characters")
    return reasons


def check_content(content: str, *, max_bytes: int = DEFAULT_MAX_CONTENT_BYTES) -> None:
    """Raise UnsafeContentError unless *content* may be written as-is."""
    size = len(content.encode("utf-8"))
    if size > max_bytes:
        raise UnsafeContentError(
            f"Content exceeds maximum size ({size} > {max_bytes} bytes)",
            [f"size {size} bytes"],
        )

    reasons = find_unsafe_elements(content)
    if reasons:
        raise UnsafeContentError(
            "Content contains potentially dangerous elements: " + ", ".join(reasons),
            reasons,
        )
