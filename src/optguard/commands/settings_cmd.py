"""Commands: preview, save, read and reset option bundles."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import click

from optguard.commands._base import OptCommand
from optguard.commands._input import InputError, is_missing, read_value

if TYPE_CHECKING:
    from optguard.commands._context import AppContext


def _value_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Shared ``--key/--value/--file/--set/--merge`` options."""
    decorators = [
        click.option(
            "-k",
            "--key",
            "bundle_key",
            default=None,
            help="Option name (default: the site settings field).",
        ),
        click.option("--value", default=None, help="Value as JSON."),
        click.option(
            "--file",
            "file",
            default=None,
            help="Read the JSON value from a file ('-' for stdin).",
        ),
        click.option(
            "--set",
            "pairs",
            multiple=True,
            metavar="KEY=VALUE",
            help="Set one sub-key (repeatable).",
        ),
        click.option(
            "--merge",
            is_flag=True,
            help="Lay the submission over the stored value instead of replacing it.",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _candidate(
    app: AppContext,
    op: str,
    bundle_key: str | None,
    value: str | None,
    file: str | None,
    pairs: tuple[str, ...],
    merge: bool,
) -> Any:
    try:
        candidate = read_value(value=value, file=file, pairs=pairs)
    except InputError as exc:
        app.emit(exc.to_result(op))
        return None
    if is_missing(candidate):
        click.echo("No value given. Use --value, --file or --set.", err=True)
        raise SystemExit(1)

    if merge:
        key = bundle_key or app.ctx.settings_field
        stored = app.ctx.store.get_stored(key)
        if isinstance(stored, Mapping) and isinstance(candidate, Mapping):
            candidate = {**stored, **candidate}
    return candidate


@click.command(
    cls=OptCommand,
    examples="""\
  optguard preview --set title_location=center --merge
  optguard preview --file settings.json
  optguard preview --key blog_public --value 1""",
)
@_value_options
@click.pass_obj
def preview(
    app: AppContext,
    bundle_key: str | None,
    value: str | None,
    file: str | None,
    pairs: tuple[str, ...],
    merge: bool,
) -> None:
    """Show what a save would store, without storing it."""
    from optguard.services.settings import SettingsService

    candidate = _candidate(app, "preview_settings", bundle_key, value, file, pairs, merge)
    app.emit(SettingsService(app.ctx).preview(bundle_key, candidate))


@click.command(
    cls=OptCommand,
    examples="""\
  optguard save --file settings.json
  optguard save --merge --set title_separator=dash --set sitemap_query_limit=500
  cat settings.json | optguard save --file -""",
)
@_value_options
@click.pass_obj
def save(
    app: AppContext,
    bundle_key: str | None,
    value: str | None,
    file: str | None,
    pairs: tuple[str, ...],
    merge: bool,
) -> None:
    """Sanitize a submitted value and store it."""
    from optguard.services.settings import SettingsService

    candidate = _candidate(app, "save_settings", bundle_key, value, file, pairs, merge)
    app.emit(SettingsService(app.ctx).save(bundle_key, candidate))


@click.command(
    cls=OptCommand,
    examples="""\
  optguard get
  optguard --json get --key optguard_db_version""",
)
@click.option("-k", "--key", "bundle_key", default=None, help="Option name.")
@click.pass_obj
def get(app: AppContext, bundle_key: str | None) -> None:
    """Print the stored value of an option."""
    from optguard.services.settings import SettingsService

    app.emit(SettingsService(app.ctx).get(bundle_key))


@click.command(
    cls=OptCommand,
    examples="""\
  optguard reset
  optguard reset --yes""",
)
@click.option("-k", "--key", "bundle_key", default=None, help="Option name.")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def reset(app: AppContext, bundle_key: str | None, yes: bool) -> None:
    """Overwrite an option with its defaults."""
    from optguard.services.settings import SettingsService

    key = bundle_key or app.ctx.settings_field
    if not yes and not app.settings.json_output:
        click.confirm(f"Reset {key} to its defaults?", abort=True, err=True)
    app.emit(SettingsService(app.ctx).reset(key))
