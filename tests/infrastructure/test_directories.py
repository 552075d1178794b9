"""Tests for DirectoryManager — type directory lifecycle."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdctl.domain.types import ContentType, DirectoryLayout
from mdctl.infrastructure.directories import BACKUP_DIR_PREFIX, DirectoryManager


@pytest.fixture
def base(tmp_path: Path) -> Path:
    return tmp_path / "content" / "markdown"


@pytest.fixture
def manager(base: Path) -> DirectoryManager:
    return DirectoryManager(base, DirectoryLayout({"blog": "posts"}))


class TestInitialize:
    def test_creates_base_and_every_type(self, manager: DirectoryManager, base: Path) -> None:
        created = manager.initialize()
        assert created[0] == base
        assert len(created) == len(ContentType) + 1
        assert (base / "posts").is_dir()
        assert not (base / "blog").exists()

    def test_idempotent(self, manager: DirectoryManager) -> None:
        manager.initialize()
        assert manager.initialize() == []

    def test_validate(self, manager: DirectoryManager, base: Path) -> None:
        assert base in manager.validate()
        manager.initialize()
        assert manager.validate() == []
        (base / "posts").rmdir()
        assert manager.validate() == [base / "posts"]

    def test_ensure(self, manager: DirectoryManager, base: Path) -> None:
        assert manager.ensure("blog") == base / "posts"
        assert (base / "posts").is_dir()
        assert manager.path_for(ContentType.TOOL) == base / "tool"


class TestStats:
    def test_counts_markdown_files_only(self, manager: DirectoryManager, base: Path) -> None:
        manager.initialize()
        (base / "posts" / "a.md").write_text("12345")
        (base / "posts" / "b.md").write_text("123")
        (base / "posts" / "c.txt").write_text("ignored")
        stats = manager.stats()
        assert stats[ContentType.BLOG].file_count == 2
        assert stats[ContentType.BLOG].total_size == 8
        assert stats[ContentType.BLOG].last_modified is not None
        assert stats[ContentType.PAGE].file_count == 0
        assert stats[ContentType.PAGE].last_modified is None

    def test_missing_directory_is_zeroed(self, manager: DirectoryManager) -> None:
        stats = manager.stats()
        assert all(s.file_count == 0 for s in stats.values())


class TestCleanup:
    def test_removes_only_empty_type_dirs(self, manager: DirectoryManager, base: Path) -> None:
        manager.initialize()
        (base / "posts" / "a.md").write_text("x")
        removed = manager.cleanup_empty()
        assert base / "posts" not in removed
        assert base / "page" in removed
        assert (base / "posts").is_dir()
        assert not (base / "page").exists()
        assert base.is_dir()

    def test_hidden_files_keep_directory(self, manager: DirectoryManager, base: Path) -> None:
        manager.initialize()
        (base / "page" / ".keep").write_text("")
        assert base / "page" not in manager.cleanup_empty()


class TestBackup:
    def test_copies_markdown_tree(self, manager: DirectoryManager, base: Path) -> None:
        manager.initialize()
        (base / "posts" / "a.md").write_text("post")
        (base / "page" / "about.md").write_text("about")
        (base / "page" / "draft.txt").write_text("skip")
        snapshot = manager.backup()
        assert snapshot.parent == base.parent
        assert snapshot.name.startswith(BACKUP_DIR_PREFIX)
        assert (snapshot / "posts" / "a.md").read_text() == "post"
        assert (snapshot / "page" / "about.md").read_text() == "about"
        assert not (snapshot / "page" / "draft.txt").exists()

    def test_custom_target(self, manager: DirectoryManager, tmp_path: Path) -> None:
        manager.initialize()
        snapshot = manager.backup(tmp_path / "backups")
        assert snapshot.parent == tmp_path / "backups"
        assert snapshot.is_dir()

    def test_back_to_back_backups_do_not_collide(self, manager: DirectoryManager) -> None:
        manager.initialize()
        assert manager.backup() != manager.backup()
