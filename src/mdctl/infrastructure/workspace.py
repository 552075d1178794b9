"""Workspace — the single dependency injected into every service.

Built once from :class:`MdSettings`. It resolves the configured paths
against the project root and wires one :class:`DirectoryLayout` into the
path generator, the directory manager, and the file store, so all three
share one type -> directory table.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from mdctl.domain.embeds import EmbedValidator
from mdctl.domain.paths import PathGenerator
from mdctl.domain.types import DirectoryLayout
from mdctl.infrastructure.directories import DirectoryManager
from mdctl.infrastructure.legacy_index import LegacyIndex
from mdctl.infrastructure.store import ContentFileStore

if TYPE_CHECKING:
    from mdctl.config.settings import MdSettings


class Workspace:
    """Repository object holding the store, the index, and the validators.

    Constructed lazily by the CLI and passed to services through
    :class:`~mdctl.services.base.BaseService`.
    """

    def __init__(self, settings: MdSettings) -> None:
        self._settings = settings
        storage = settings.storage
        migration = settings.migration

        self._layout: DirectoryLayout = storage.layout()
        self._paths = PathGenerator(
            settings.markdown_base,
            self._layout,
            max_filename_length=storage.max_filename_length,
        )
        self._directories = DirectoryManager(self._paths.base_path, self._layout)
        self._store = ContentFileStore(
            self._paths,
            self._directories,
            max_content_bytes=storage.max_content_bytes,
        )
        self._index = LegacyIndex(
            settings.data_dir,
            excluded_files=migration.excluded_files,
            backup_prefix=migration.backup_prefix,
        )
        self._embeds = EmbedValidator(settings.embeds.allowed_iframe_hosts)

    @property
    def root(self) -> Path:
        """The project root that relative config paths resolve against."""
        return self._settings.project_root

    @property
    def settings(self) -> MdSettings:
        return self._settings

    @property
    def layout(self) -> DirectoryLayout:
        return self._layout

    @property
    def paths(self) -> PathGenerator:
        return self._paths

    @property
    def directories(self) -> DirectoryManager:
        return self._directories

    @property
    def store(self) -> ContentFileStore:
        return self._store

    @property
    def index(self) -> LegacyIndex:
        return self._index

    @property
    def embeds(self) -> EmbedValidator:
        return self._embeds
