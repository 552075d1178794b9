"""Tests for the file command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from mdctl.cli import cli
from mdctl.infrastructure.store import checksum_of

MARKDOWN = Path("public/data/content/markdown")


@pytest.mark.usefixtures("_isolated_project")
class TestFileCreate:
    def test_create_with_content(self, cli_runner: CliRunner, project_root: Path) -> None:
        result = cli_runner.invoke(cli, ["file", "create", "post-1", "blog", "--content", "# Hi"])
        assert result.exit_code == 0
        assert "OK" in result.output
        assert "blog/post-1.md" in result.output
        written = project_root / MARKDOWN / "blog" / "post-1.md"
        assert written.read_text(encoding="utf-8") == "# Hi"

    def test_create_from_stdin(self, cli_runner: CliRunner, project_root: Path) -> None:
        result = cli_runner.invoke(cli, ["file", "create", "p", "page"], input="from stdin\n")
        assert result.exit_code == 0
        assert (project_root / MARKDOWN / "page" / "p.md").read_text() == "from stdin\n"

    def test_create_from_file(self, cli_runner: CliRunner, project_root: Path) -> None:
        draft = project_root / "draft.md"
        draft.write_text("# Draft\n", encoding="utf-8")
        result = cli_runner.invoke(cli, ["file", "create", "d", "blog", "--from", str(draft)])
        assert result.exit_code == 0
        assert (project_root / MARKDOWN / "blog" / "d.md").read_text() == "# Draft\n"

    def test_content_and_from_conflict(self, cli_runner: CliRunner, project_root: Path) -> None:
        draft = project_root / "draft.md"
        draft.write_text("x")
        result = cli_runner.invoke(
            cli, ["file", "create", "d", "blog", "--content", "y", "--from", str(draft)]
        )
        assert result.exit_code == 2
        assert "not both" in result.output

    def test_duplicate_fails_with_json_on_stderr(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["file", "create", "dup", "blog", "--content", "x"])
        result = cli_runner.invoke(
            cli, ["--json", "file", "create", "dup", "blog", "--content", "y"]
        )
        assert result.exit_code == 1
        assert result.stdout == ""
        payload = json.loads(result.stderr)
        assert payload["ok"] is False
        assert payload["op"] == "create"
        assert payload["error"]["code"] == "MARKDOWN_VALIDATION_ERROR"
        assert payload["error"]["detail"]["code"] == "EEXIST"

    def test_overwrite(self, cli_runner: CliRunner, project_root: Path) -> None:
        cli_runner.invoke(cli, ["file", "create", "o", "blog", "--content", "old"])
        result = cli_runner.invoke(
            cli, ["file", "create", "o", "blog", "--content", "new", "--overwrite"]
        )
        assert result.exit_code == 0
        assert (project_root / MARKDOWN / "blog" / "o.md").read_text() == "new"

    def test_unsafe_content_rejected(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["file", "create", "x", "blog", "--content", "<script>alert(1)</script>"]
        )
        assert result.exit_code == 1
        assert "ERROR" in result.stderr
        assert "suggestion:" in result.stderr


@pytest.mark.usefixtures("_isolated_project")
class TestFileReadUpdateDelete:
    @pytest.fixture(autouse=True)
    def _post(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["file", "create", "post", "blog", "--content", "# Body\n"])

    def test_read_quiet_prints_content(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "file", "read", "blog/post.md"])
        assert result.exit_code == 0
        assert result.stdout == "# Body\n\n"

    def test_read_rich(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["file", "read", "blog/post.md"])
        assert result.exit_code == 0
        assert result.stdout.startswith("# Body")

    def test_read_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "file", "read", "blog/missing.md"])
        assert result.exit_code == 1
        assert "ERROR: read - " in result.stderr

    def test_update_with_backup(self, cli_runner: CliRunner, project_root: Path) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "file", "update", "blog/post.md", "--content", "# New", "--backup"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["backup_path"].endswith("post.md.backup")
        backup = project_root / MARKDOWN / "blog" / "post.md.backup"
        assert backup.read_text() == "# Body\n"

    def test_delete_then_exists(self, cli_runner: CliRunner) -> None:
        before = cli_runner.invoke(cli, ["-q", "file", "exists", "blog/post.md"])
        assert before.stdout.strip() == "true"
        assert cli_runner.invoke(cli, ["file", "delete", "blog/post.md"]).exit_code == 0
        after = cli_runner.invoke(cli, ["-q", "file", "exists", "blog/post.md"])
        assert after.exit_code == 0
        assert after.stdout.strip() == "false"


@pytest.mark.usefixtures("_isolated_project")
class TestFileInspection:
    def test_path_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "file", "path", "My Post!", "blog", "--sanitize"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["op"] == "generate_path"
        assert data["data"]["path"] == "blog/MyPost.md"

    def test_path_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "file", "path", "p1", "portfolio"])
        assert result.stdout.strip() == "portfolio/p1.md"

    def test_list_quiet(self, cli_runner: CliRunner) -> None:
        for cid in ("b", "a"):
            cli_runner.invoke(cli, ["file", "create", cid, "profile", "--content", cid])
        result = cli_runner.invoke(cli, ["-q", "file", "list", "profile"])
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["profile/a.md", "profile/b.md"]

    def test_list_table(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["file", "create", "a", "page", "--content", "abc"])
        result = cli_runner.invoke(cli, ["file", "list", "page"])
        assert result.exit_code == 0
        assert "page/a.md" in result.stdout
        assert "1 page files" in result.stdout

    def test_info(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["file", "create", "i", "blog", "--content", "hello"])
        result = cli_runner.invoke(cli, ["--json", "file", "info", "blog/i.md"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["checksum"] == checksum_of("hello")

    def test_verify_mismatch_exit_code(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["file", "create", "v", "blog", "--content", "hello"])
        ok = cli_runner.invoke(
            cli, ["file", "verify", "blog/v.md", "--checksum", checksum_of("hello")]
        )
        assert ok.exit_code == 0
        bad = cli_runner.invoke(cli, ["file", "verify", "blog/v.md", "--checksum", "0" * 64])
        assert bad.exit_code == 1

    def test_verify_restore_from_file(self, cli_runner: CliRunner, project_root: Path) -> None:
        cli_runner.invoke(cli, ["file", "create", "v", "blog", "--content", "broken"])
        good = project_root / "good.md"
        good.write_text("good", encoding="utf-8")
        result = cli_runner.invoke(
            cli,
            [
                "file",
                "verify",
                "blog/v.md",
                "--checksum",
                checksum_of("good"),
                "--restore",
                "--from",
                str(good),
            ],
        )
        assert result.exit_code == 0
        assert "WARNING:" in result.stderr
        assert (project_root / MARKDOWN / "blog" / "v.md").read_text() == "good"
