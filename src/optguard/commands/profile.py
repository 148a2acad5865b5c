"""Command: read or update a user's social profile fields."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

import click

from optguard.commands._base import OptCommand
from optguard.commands._input import InputError, is_missing, read_value

if TYPE_CHECKING:
    from optguard.commands._context import AppContext


@click.command(
    cls=OptCommand,
    examples="""\
  optguard profile 7
  optguard profile 7 --set twitter_page=@example
  optguard profile 7 --value '{"facebook_page": "facebook.com/example"}'""",
)
@click.argument("user_id")
@click.option("--value", default=None, help="Fields as a JSON object.")
@click.option("--file", "file", default=None, help="Read fields from a JSON file.")
@click.option("--set", "pairs", multiple=True, metavar="FIELD=VALUE", help="Set one field.")
@click.pass_obj
def profile(
    app: AppContext,
    user_id: str,
    value: str | None,
    file: str | None,
    pairs: tuple[str, ...],
) -> None:
    """Show a user's profile fields, or update them when values are given."""
    from optguard.services.profile import ProfileService

    svc = ProfileService(app.ctx)
    try:
        fields = read_value(value=value, file=file, pairs=pairs)
    except InputError as exc:
        app.emit(exc.to_result("update_profile"))
        return

    if is_missing(fields):
        app.emit(svc.get(user_id))
        return
    if not isinstance(fields, Mapping):
        app.emit(InputError("Profile fields must be a JSON object").to_result("update_profile"))
        return
    app.emit(svc.update(user_id, fields))
