"""Tests for PathGenerator — generation, parsing, validation, path forms."""

from __future__ import annotations

import re
from pathlib import Path

import pytest

from mdctl.domain.errors import (
    InvalidContentIdError,
    PathExhaustedError,
    UnsupportedContentTypeError,
)
from mdctl.domain.paths import MAX_UNIQUE_ATTEMPTS, PathGenerator
from mdctl.domain.types import ContentType, DirectoryLayout


@pytest.fixture
def base(tmp_path: Path) -> Path:
    return tmp_path / "markdown"


@pytest.fixture
def paths(base: Path) -> PathGenerator:
    return PathGenerator(base, DirectoryLayout())


class TestGenerate:
    def test_canonical_layout(self, paths: PathGenerator, base: Path) -> None:
        assert paths.generate("post-1", "blog") == base / "blog" / "post-1.md"

    def test_uses_layout_override(self, base: Path) -> None:
        gen = PathGenerator(base, DirectoryLayout({"blog": "posts"}))
        assert gen.generate("post-1", ContentType.BLOG) == base / "posts" / "post-1.md"

    def test_deterministic(self, paths: PathGenerator) -> None:
        assert paths.generate("a", "page") == paths.generate("a", "page")

    def test_invalid_id_without_sanitize(self, paths: PathGenerator) -> None:
        with pytest.raises(InvalidContentIdError):
            paths.generate("My Post!", "blog")

    def test_sanitize(self, paths: PathGenerator, base: Path) -> None:
        path = paths.generate("My Post!", "blog", sanitize_names=True)
        assert path == base / "blog" / "MyPost.md"

    def test_unknown_type(self, paths: PathGenerator) -> None:
        with pytest.raises(UnsupportedContentTypeError):
            paths.generate("post-1", "newsletter")

    def test_timestamp_suffix(self, paths: PathGenerator) -> None:
        path = paths.generate("notes", "download", add_timestamp=True)
        assert re.fullmatch(r"notes-\d{14}\.md", path.name)

    def test_truncates_long_filenames(self, base: Path) -> None:
        gen = PathGenerator(base, DirectoryLayout(), max_filename_length=10)
        path = gen.generate("abcdefghijkl", "blog")
        assert path.name == "abcdefg.md"

    def test_max_filename_length_must_exceed_suffix(self, base: Path) -> None:
        with pytest.raises(ValueError):
            PathGenerator(base, DirectoryLayout(), max_filename_length=3)


class TestGenerateUnique:
    def test_no_collision(self, paths: PathGenerator, base: Path) -> None:
        assert paths.generate_unique("a", "blog", []) == base / "blog" / "a.md"

    def test_numeric_suffixes(self, paths: PathGenerator, base: Path) -> None:
        existing = [base / "blog" / "a.md", base / "blog" / "a-1.md"]
        assert paths.generate_unique("a", "blog", existing) == base / "blog" / "a-2.md"

    def test_exhausted(self, paths: PathGenerator, base: Path) -> None:
        existing = [base / "blog" / "a.md"]
        existing += [base / "blog" / f"a-{i}.md" for i in range(1, MAX_UNIQUE_ATTEMPTS + 1)]
        with pytest.raises(PathExhaustedError):
            paths.generate_unique("a", "blog", existing)


class TestParse:
    def test_round_trip(self, paths: PathGenerator) -> None:
        parsed = paths.parse(paths.generate("post-1", "portfolio"))
        assert parsed.is_valid
        assert parsed.content_id == "post-1"
        assert parsed.content_type is ContentType.PORTFOLIO

    def test_relative_paths_are_invalid(self, paths: PathGenerator) -> None:
        assert not paths.parse("blog/post-1.md").is_valid

    def test_outside_base(self, paths: PathGenerator, tmp_path: Path) -> None:
        assert not paths.parse(tmp_path / "elsewhere" / "blog" / "x.md").is_valid

    def test_wrong_depth(self, paths: PathGenerator, base: Path) -> None:
        assert not paths.parse(base / "x.md").is_valid
        assert not paths.parse(base / "blog" / "nested" / "x.md").is_valid

    def test_unknown_directory(self, paths: PathGenerator, base: Path) -> None:
        assert not paths.parse(base / "misc" / "x.md").is_valid

    def test_wrong_extension(self, paths: PathGenerator, base: Path) -> None:
        assert not paths.parse(base / "blog" / "x.txt").is_valid


class TestValidate:
    def test_generated_path_is_valid(self, paths: PathGenerator) -> None:
        path = paths.generate("a", "blog")
        assert paths.validate(path).is_valid
        assert paths.is_safe(path)

    def test_traversal(self, paths: PathGenerator, base: Path) -> None:
        result = paths.validate(f"{base}/blog/../../etc/passwd.md")
        assert not result.is_valid
        assert any("traversal" in e for e in result.errors)

    def test_extension(self, paths: PathGenerator, base: Path) -> None:
        result = paths.validate(base / "blog" / "a.txt")
        assert any(".md" in e for e in result.errors)

    def test_disallowed_characters(self, paths: PathGenerator, base: Path) -> None:
        result = paths.validate(f"{base}/blog/a|b.md")
        assert any("disallowed" in e for e in result.errors)

    def test_mixed_separators(self, paths: PathGenerator, base: Path) -> None:
        result = paths.validate(f"{base}/blog\\a.md")
        assert any("Mixed" in e for e in result.errors)

    def test_outside_base(self, paths: PathGenerator, tmp_path: Path) -> None:
        result = paths.validate(tmp_path / "other" / "a.md")
        assert any("inside" in e for e in result.errors)

    def test_too_deep(self, paths: PathGenerator, base: Path) -> None:
        result = paths.validate(base / "blog" / "x" / "a.md")
        assert any("deeply" in e for e in result.errors)

    def test_collects_every_error(self, paths: PathGenerator) -> None:
        result = paths.validate("../x|y.txt")
        assert len(result.errors) >= 3

    def test_never_raises(self, paths: PathGenerator) -> None:
        assert not paths.validate("").is_valid


class TestPathForms:
    def test_to_relative(self, paths: PathGenerator, base: Path) -> None:
        assert paths.to_relative(base / "blog" / "a.md") == "blog/a.md"

    def test_to_relative_keeps_relative_input(self, paths: PathGenerator) -> None:
        assert paths.to_relative("blog\\a.md") == "blog/a.md"

    def test_to_relative_outside_base_unchanged(self, paths: PathGenerator, tmp_path: Path) -> None:
        outside = str(tmp_path / "x.md")
        assert paths.to_relative(outside) == outside

    def test_to_absolute(self, paths: PathGenerator, base: Path) -> None:
        assert paths.to_absolute("blog/a.md") == base / "blog" / "a.md"

    def test_to_absolute_keeps_absolute_input(self, paths: PathGenerator, base: Path) -> None:
        target = base / "page" / "b.md"
        assert paths.to_absolute(target) == target

    def test_relative_absolute_inverse(self, paths: PathGenerator) -> None:
        path = paths.generate("post-1", "tool")
        assert paths.to_absolute(paths.to_relative(path)) == path
