"""Shared pytest fixtures and test helpers for mdctl tests."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from mdctl.config.settings import MdSettings
from mdctl.infrastructure.workspace import Workspace

DATA_DIR = Path("public/data/content")


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo the root handler swap done by every CLI invocation."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    md = logging.getLogger("mdctl")
    md_level = md.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    md.setLevel(md_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Temporary project directory holding an empty legacy data directory.

    The markdown tree is left uncreated so tests can observe initialization.
    """
    (tmp_path / DATA_DIR).mkdir(parents=True)
    return tmp_path


@pytest.fixture
def settings(project_root: Path) -> MdSettings:
    """Default settings rooted at the temp project, with no batch delay."""
    return MdSettings.from_cli(project_root=project_root, migration={"batch_delay_ms": 0})


@pytest.fixture
def workspace(settings: MdSettings) -> Workspace:
    """Workspace with every content-type directory created."""
    ws = Workspace(settings)
    ws.directories.initialize()
    return ws


@pytest.fixture
def _isolated_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp project root holding a minimal ``mdctl.toml``.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command test
    classes. Tests that need the path can also request ``project_root``.
    """
    (project_root / "mdctl.toml").write_text("[migration]\nbatch_delay_ms = 0\n")
    monkeypatch.delenv("MDCTL_CONFIG", raising=False)
    monkeypatch.chdir(project_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def write_index(project_root: Path) -> Callable[[str, list[Any]], Path]:
    """Write a legacy JSON index file into the project's data directory."""

    def _write(name: str, records: list[Any]) -> Path:
        path = project_root / DATA_DIR / name
        path.write_text(json.dumps(records, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def read_index(project_root: Path) -> Callable[[str], list[Any]]:
    """Load a legacy JSON index file back from the data directory."""

    def _read(name: str) -> list[Any]:
        data: list[Any] = json.loads((project_root / DATA_DIR / name).read_text(encoding="utf-8"))
        return data

    return _read
