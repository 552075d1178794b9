"""Subcommand modules for mdctl.

Provides register_commands() which uses deferred imports to keep
``mdctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from mdctl.commands.dirs import dirs
    from mdctl.commands.embeds import embeds
    from mdctl.commands.file import file_group
    from mdctl.commands.migrate import migrate

    cli.add_command(dirs)
    cli.add_command(file_group)
    cli.add_command(embeds)
    cli.add_command(migrate)

    # --- Standalone commands ---
    from mdctl.commands.init_cmd import init_cmd

    cli.add_command(init_cmd)
