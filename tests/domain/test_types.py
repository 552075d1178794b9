"""Tests for ContentType and DirectoryLayout."""

from __future__ import annotations

import pytest

from mdctl.domain.errors import UnsupportedContentTypeError
from mdctl.domain.types import ContentType, DirectoryLayout, coerce_content_type


class TestCoerceContentType:
    def test_accepts_enum_and_string(self) -> None:
        assert coerce_content_type(ContentType.BLOG) is ContentType.BLOG
        assert coerce_content_type("portfolio") is ContentType.PORTFOLIO
        assert coerce_content_type(" page ") is ContentType.PAGE

    def test_unknown_type_is_rejected_not_defaulted(self) -> None:
        with pytest.raises(UnsupportedContentTypeError):
            coerce_content_type("video")

    def test_case_sensitive(self) -> None:
        with pytest.raises(UnsupportedContentTypeError):
            coerce_content_type("Blog")


class TestDirectoryLayout:
    def test_default_maps_every_type_to_its_name(self) -> None:
        layout = DirectoryLayout()
        assert len(layout) == len(ContentType)
        for content_type in ContentType:
            assert layout.directory_for(content_type) == content_type.value
            assert layout.type_for(content_type.value) is content_type

    def test_override(self) -> None:
        layout = DirectoryLayout({"blog": "posts"})
        assert layout.directory_for("blog") == "posts"
        assert layout.type_for("posts") is ContentType.BLOG
        assert layout.type_for("blog") is None

    def test_unknown_directory(self) -> None:
        assert DirectoryLayout().type_for("nope") is None

    def test_override_with_unknown_type(self) -> None:
        with pytest.raises(UnsupportedContentTypeError):
            DirectoryLayout({"video": "videos"})

    @pytest.mark.parametrize("dirname", ["", ".", "..", "a/b", "a\\b"])
    def test_rejects_bad_directory_names(self, dirname: str) -> None:
        with pytest.raises(ValueError, match="Invalid directory name"):
            DirectoryLayout({"blog": dirname})

    def test_rejects_duplicate_directories(self) -> None:
        with pytest.raises(ValueError, match="distinct"):
            DirectoryLayout({"blog": "page"})

    def test_as_dict(self) -> None:
        data = DirectoryLayout({"tool": "tools"}).as_dict()
        assert data["tool"] == "tools"
        assert data["other"] == "other"
