"""Tests for content ID validation and filename sanitization."""

from __future__ import annotations

import pytest

from mdctl.domain.errors import ErrorKind, InvalidContentIdError
from mdctl.domain.ids import MAX_ID_LENGTH, is_valid_id, sanitize_name, validate_id


class TestValidateId:
    @pytest.mark.parametrize("content_id", ["post-1", "Project_42", "a", "X" * MAX_ID_LENGTH])
    def test_accepts_valid_ids(self, content_id: str) -> None:
        assert validate_id(content_id) == content_id
        assert is_valid_id(content_id)

    @pytest.mark.parametrize(
        "content_id",
        ["", "has space", "dots.are.out", "../etc/passwd", "x" * (MAX_ID_LENGTH + 1), "ümlaut"],
    )
    def test_rejects_invalid_ids(self, content_id: str) -> None:
        assert not is_valid_id(content_id)
        with pytest.raises(InvalidContentIdError) as excinfo:
            validate_id(content_id)
        assert excinfo.value.kind == ErrorKind.VALIDATION_ERROR

    def test_error_carries_the_id(self) -> None:
        with pytest.raises(InvalidContentIdError) as excinfo:
            validate_id("bad id")
        assert excinfo.value.details["content_id"] == "bad id"
        assert excinfo.value.suggestion


class TestSanitizeName:
    def test_strips_unsafe_characters(self) -> None:
        assert sanitize_name("My Post!!") == "MyPost"

    def test_collapses_repeated_separators(self) -> None:
        assert sanitize_name("a--b__c..d") == "a-b_c.d"

    def test_trims_separators_from_ends(self) -> None:
        assert sanitize_name("-.hidden_") == "hidden"

    def test_traversal_collapses_to_fallback(self) -> None:
        assert sanitize_name("../../") == "untitled"

    def test_empty_falls_back(self) -> None:
        assert sanitize_name("") == "untitled"
        assert sanitize_name("!!!") == "untitled"
