"""Content ID validation and sanitization.

Content IDs are assigned by the surrounding CMS, never generated here.
They double as the markdown file stem.

INVARIANT: a stored ID matches ``[A-Za-z0-9_-]+`` and is at most 100 chars.
"""

from __future__ import annotations

import re

from mdctl.domain.errors import InvalidContentIdError

MAX_ID_LENGTH = 100
FALLBACK_NAME = "untitled"

CONTENT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_REPEATED_SEPARATORS = re.compile(r"([._-])\1+")


def is_valid_id(content_id: str) -> bool:
    """True when *content_id* satisfies the stored-ID invariant."""
    return (
        bool(content_id)
        and len(content_id) <= MAX_ID_LENGTH
        and CONTENT_ID_PATTERN.match(content_id) is not None
    )


def validate_id(content_id: str) -> str:
    """Return *content_id* unchanged, or raise InvalidContentIdError."""
    if not content_id:
        raise InvalidContentIdError(content_id, "ID must not be empty")
    if len(content_id) > MAX_ID_LENGTH:
        raise InvalidContentIdError(content_id, f"ID exceeds {MAX_ID_LENGTH} characters")
    if CONTENT_ID_PATTERN.match(content_id) is None:
        raise InvalidContentIdError(content_id, "ID contains disallowed characters")
    return content_id


def sanitize_name(name: str) -> str:
    """Make an arbitrary string usable as a file stem.

    Strips characters outside ``[A-Za-z0-9._-]``, collapses runs of the
    same separator, and trims separators from both ends so the result can
    never be ``..`` or a dotfile. Falls back to ``"untitled"``.

    Examples:
        >>> sanitize_name("My Post!!")
        'MyPost'
        >>> sanitize_name("a--b__c..d")
        'a-b_c.d'
        >>> sanitize_name("../../")
        'untitled'
    """
    cleaned = _UNSAFE_CHARS.sub("", name)
    cleaned = _REPEATED_SEPARATORS.sub(r"\1", cleaned)
    cleaned = cleaned.strip("._-")
    return cleaned or FALLBACK_NAME
