"""Subcommand modules for optguard.

Provides register_commands() which uses deferred imports to keep
``optguard --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from optguard.commands.profile import profile
    from optguard.commands.rules import rules
    from optguard.commands.settings_cmd import get, preview, reset, save

    cli.add_command(rules)
    cli.add_command(preview)
    cli.add_command(save)
    cli.add_command(get)
    cli.add_command(reset)
    cli.add_command(profile)
