"""Embed reference extraction and validation.

Pure functions over markdown text, no disk I/O. Embeds point into a
content item's media arrays by zero-based position::

    ![image:0 "Alt text"]    -> images[0]
    ![video:1]               -> videos[1]
    [link:2 "Custom text"]   -> externalLinks[2]

The index is the contract: reordering a media array changes what an
existing embed points at, and nothing here can detect that.

Raw ``<iframe src="...">`` tags are checked against a host allow-list;
unknown hosts are warnings, not errors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

EmbedType = Literal["image", "video", "link"]

DEFAULT_ALLOWED_IFRAME_HOSTS: tuple[str, ...] = (
    "youtube.com",
    "youtu.be",
    "vimeo.com",
    "codepen.io",
    "codesandbox.io",
    "github.com",
    "gist.github.com",
)

# Negative indices are matched on purpose so they can be reported.
_EMBED_PATTERNS: dict[EmbedType, re.Pattern[str]] = {
    "image": re.compile(r'!\[image:(-?\d+)(?:\s+"([^"]*)")?\]'),
    "video": re.compile(r'!\[video:(-?\d+)(?:\s+"([^"]*)")?\]'),
    "link": re.compile(r'(?<!!)\[link:(-?\d+)(?:\s+"([^"]*)")?\]'),
}
_IFRAME_PATTERN = re.compile(r'<iframe[^>]*src="([^"]*)"[^>]*>', re.IGNORECASE)

_LABELS: dict[EmbedType, tuple[str, str]] = {
    "image": ("Image", "images"),
    "video": ("Video", "videos"),
    "link": ("Link", "links"),
}


# ---------------------------------------------------------------------------
# Media arrays
# ---------------------------------------------------------------------------


class VideoRef(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    url: str
    title: str | None = None


class LinkRef(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    url: str
    title: str = ""


class MediaReferenceSet(BaseModel):
    """Ordered media arrays of one content item (JSON field names accepted)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    images: list[str] = Field(default_factory=list)
    videos: list[VideoRef] = Field(default_factory=list)
    external_links: list[LinkRef] = Field(default_factory=list, alias="externalLinks")

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> MediaReferenceSet:
        """Pick the media arrays out of a legacy content record."""
        return cls.model_validate(
            {
                "images": record.get("images") or [],
                "videos": record.get("videos") or [],
                "externalLinks": record.get("externalLinks") or [],
            }
        )

    def count(self, embed_type: EmbedType) -> int:
        if embed_type == "image":
            return len(self.images)
        if embed_type == "video":
            return len(self.videos)
        return len(self.external_links)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmbedReference:
    """One embed token found in markdown text.

    ``start_pos``/``end_pos`` are offsets into the whole content string;
    ``line``/``column`` are 1-based.
    """

    type: EmbedType
    index: int
    original_match: str
    start_pos: int
    end_pos: int
    line: int
    column: int
    text: str | None = None  # alt text (image/video) or custom text (link)


@dataclass(frozen=True)
class EmbedIssue:
    """An out-of-range or malformed embed reference."""

    line: int
    column: int
    message: str
    suggestion: str
    embed_type: EmbedType
    embed_index: int
    type: str = "INVALID_INDEX"
    severity: str = "error"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "suggestion": self.suggestion,
            "severity": self.severity,
            "embed_type": self.embed_type,
            "embed_index": self.embed_index,
        }


@dataclass(frozen=True)
class EmbedValidation:
    is_valid: bool
    errors: list[EmbedIssue] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


class EmbedValidator:
    """Check embed references against a content item's media arrays."""

    def __init__(self, allowed_iframe_hosts: tuple[str, ...] | list[str] | None = None) -> None:
        hosts = allowed_iframe_hosts
        if hosts is None:
            hosts = DEFAULT_ALLOWED_IFRAME_HOSTS
        self._allowed_hosts = tuple(h.lower().lstrip(".") for h in hosts)

    def extract_references(self, content: str) -> list[EmbedReference]:
        """All image/video/link embeds, in document order. No bounds check."""
        refs: list[EmbedReference] = []
        offset = 0
        for line_no, line in enumerate(content.split("\n"), start=1):
            for embed_type, pattern in _EMBED_PATTERNS.items():
                for match in pattern.finditer(line):
                    refs.append(
                        EmbedReference(
                            type=embed_type,
                            index=int(match.group(1)),
                            original_match=match.group(0),
                            start_pos=offset + match.start(),
                            end_pos=offset + match.end(),
                            line=line_no,
                            column=match.start() + 1,
                            text=match.group(2),
                        )
                    )
            offset += len(line) + 1
        refs.sort(key=lambda r: r.start_pos)
        return refs

    def validate(self, content: str, media: MediaReferenceSet) -> EmbedValidation:
        errors = [
            issue
            for ref in self.extract_references(content)
            if (issue := self._check_bounds(ref, media.count(ref.type))) is not None
        ]
        warnings = self._check_iframes(content)
        return EmbedValidation(is_valid=not errors, errors=errors, warnings=warnings)

    def is_allowed_iframe_src(self, src: str) -> bool:
        """True when *src* is an http(s) URL on an allowed host or subdomain."""
        try:
            parsed = urlparse(src)
        except ValueError:
            return False
        host = (parsed.hostname or "").lower()
        if parsed.scheme not in ("http", "https") or not host:
            return False
        return any(host == d or host.endswith(f".{d}") for d in self._allowed_hosts)

    @staticmethod
    def _check_bounds(ref: EmbedReference, available: int) -> EmbedIssue | None:
        label, plural = _LABELS[ref.type]
        if ref.index < 0:
            return EmbedIssue(
                line=ref.line,
                column=ref.column,
                message=f"{label} index {ref.index} cannot be negative",
                suggestion="Use a positive index starting from 0",
                embed_type=ref.type,
                embed_index=ref.index,
            )
        if ref.index >= available:
            if available == 0:
                message = f"{label} index {ref.index} is out of range. No {plural} are attached"
                suggestion = f"Add {plural} to your content before embedding them"
            else:
                message = (
                    f"{label} index {ref.index} is out of range. "
                    f"Available {plural}: 0-{available - 1}"
                )
                suggestion = (
                    f"Use an index between 0 and {available - 1}, "
                    f"or add more {plural} to your content"
                )
            return EmbedIssue(
                line=ref.line,
                column=ref.column,
                message=message,
                suggestion=suggestion,
                embed_type=ref.type,
                embed_index=ref.index,
            )
        return None

    def _check_iframes(self, content: str) -> list[str]:
        warnings: list[str] = []
        for line_no, line in enumerate(content.split("\n"), start=1):
            for match in _IFRAME_PATTERN.finditer(line):
                src = match.group(1)
                if not self.is_allowed_iframe_src(src):
                    warnings.append(
                        f'Line {line_no}: Iframe source "{src}" may not be safe. '
                        "Consider using trusted domains only."
                    )
        return warnings
