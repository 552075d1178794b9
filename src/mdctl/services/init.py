"""InitService — bootstrap a project: config file plus directory tree."""

from __future__ import annotations

import logging
from pathlib import Path

from mdctl.config.discovery import CONFIG_FILENAME
from mdctl.config.models import MigrationConfig, StorageConfig
from mdctl.domain.errors import ErrorKind, MarkdownError, classify
from mdctl.infrastructure.templates import build_template_environment
from mdctl.services.base import BaseService
from mdctl.services.result import ServiceResult

logger = logging.getLogger(__name__)


class InitService:
    """Project initialization. Runs before any workspace exists."""

    @staticmethod
    def init_project(
        path: Path,
        *,
        base_path: str | None = None,
        data_dir: str | None = None,
        backup_original: bool = True,
        force: bool = False,
    ) -> ServiceResult:
        """Write ``mdctl.toml`` into *path* and create the storage tree.

        An existing config is only replaced with *force*.
        """
        op = "init"
        config_path = path / CONFIG_FILENAME
        storage = StorageConfig(base_path=base_path or StorageConfig().base_path)
        migration = MigrationConfig(
            data_dir=data_dir or MigrationConfig().data_dir,
            backup_original=backup_original,
        )

        try:
            if config_path.exists() and not force:
                raise MarkdownError(
                    f"Project already initialized: {config_path}",
                    kind=ErrorKind.VALIDATION_ERROR,
                    path=config_path,
                    code="EEXIST",
                    suggestion="Pass --force to overwrite the existing config",
                )
            env = build_template_environment("config", project_root=path)
            rendered = env.get_template("mdctl.toml.j2").render(
                base_path=storage.base_path,
                directories=storage.directories,
                data_dir=migration.data_dir,
                backup_original=migration.backup_original,
            )
            try:
                path.mkdir(parents=True, exist_ok=True)
                config_path.write_text(rendered, encoding="utf-8")
            except OSError as exc:
                raise classify(exc, config_path) from exc

            from mdctl.config.settings import MdSettings
            from mdctl.infrastructure.workspace import Workspace

            settings = MdSettings.from_cli(config_path=str(config_path), project_root=path)
            workspace = Workspace(settings)
            created = workspace.directories.initialize()
            if not settings.data_dir.is_dir():
                try:
                    settings.data_dir.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    raise classify(exc, settings.data_dir) from exc
                created.insert(0, settings.data_dir)
        except MarkdownError as exc:
            return BaseService._failure(op, exc)

        logger.info("Initialized project at %s", path)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "project_path": str(path),
                "config_path": str(config_path),
                "base_path": str(workspace.paths.base_path),
                "data_dir": str(settings.data_dir),
                "created": [_display(p, path) for p in created],
            },
        )


def _display(target: Path, root: Path) -> str:
    try:
        return target.relative_to(root).as_posix()
    except ValueError:
        return str(target)
