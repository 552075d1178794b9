"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, mdctl.toml only contains
overrides. A project that keeps the stock layout needs no config file.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from mdctl.domain.embeds import DEFAULT_ALLOWED_IFRAME_HOSTS
from mdctl.domain.errors import MarkdownError
from mdctl.domain.paths import DEFAULT_MAX_FILENAME_LENGTH
from mdctl.domain.safety import DEFAULT_MAX_CONTENT_BYTES
from mdctl.domain.types import DirectoryLayout

# --- mdctl.toml sections ---


class StorageConfig(BaseModel):
    """[storage] section."""

    model_config = {"frozen": True}

    base_path: str = "public/data/content/markdown"
    directories: dict[str, str] = Field(default_factory=dict)
    max_filename_length: int = Field(default=DEFAULT_MAX_FILENAME_LENGTH, gt=3)
    max_content_bytes: int = Field(default=DEFAULT_MAX_CONTENT_BYTES, gt=0)

    @field_validator("directories")
    @classmethod
    def _check_layout(cls, value: dict[str, str]) -> dict[str, str]:
        try:
            DirectoryLayout(value)
        except MarkdownError as exc:
            raise ValueError(exc.message) from exc
        return value

    def layout(self) -> DirectoryLayout:
        return DirectoryLayout(self.directories)


class MigrationConfig(BaseModel):
    """[migration] section."""

    model_config = {"frozen": True}

    data_dir: str = "public/data/content"
    batch_size: int = Field(default=10, ge=1)
    batch_delay_ms: int = Field(default=100, ge=0)
    backup_original: bool = True
    excluded_files: list[str] = Field(default_factory=lambda: ["tags.json"])
    backup_prefix: str = "backup-"


class EmbedsConfig(BaseModel):
    """[embeds] section."""

    model_config = {"frozen": True}

    allowed_iframe_hosts: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_IFRAME_HOSTS)
    )


class MdConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    storage: StorageConfig = Field(default_factory=StorageConfig)
    migration: MigrationConfig = Field(default_factory=MigrationConfig)
    embeds: EmbedsConfig = Field(default_factory=EmbedsConfig)
