"""Command: list option bindings and their rules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from optguard.commands._base import OptCommand

if TYPE_CHECKING:
    from optguard.commands._context import AppContext


@click.command(
    cls=OptCommand,
    examples="""\
  optguard rules
  optguard rules autodescription-site-settings
  optguard --json rules""",
)
@click.argument("bundle_key", required=False)
@click.pass_obj
def rules(app: AppContext, bundle_key: str | None) -> None:
    """List which rule validates each registered option."""
    from optguard.services.rules import RulesService

    app.emit(RulesService(app.ctx).list_rules(bundle_key))
