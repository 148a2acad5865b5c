"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from optguard.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from optguard.services.result import ServiceResult

Renderer = Callable[["ServiceResult", "Console"], None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console)
        if verbose:
            _render_meta(console, result)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _compact(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), sort_keys=True)
    return str(value)


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "opt.ok"), (f"  {result.op}", "opt.op")))


def _field(console: Console, key: str, value: Any) -> None:
    style = "opt.option" if key in ("bundle_key", "user_id") else ""
    console.print(Text.assemble((f"  {key}: ", "opt.key"), (_compact(value), style)))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)
    style = "yellow" if duration > 100 else "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{ak}={_annotation(av)}" for ak, av in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _annotation(value: Any) -> str:
    if isinstance(value, list):
        return "|".join(str(v) for v in value)
    return str(value)


def _value_table(value: Mapping[str, Any], changed: list[str] | None = None) -> Table:
    """Two-column table of a compound option's sub-keys."""
    changed_set = set(changed or [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Key", no_wrap=True)
    table.add_column("Value")
    for key in sorted(value):
        style = "opt.changed" if key in changed_set else ""
        table.add_row(Text(key, style=style), _compact(value[key]))
    return table


def _render_value(console: Console, value: Any, changed: list[str] | None = None) -> None:
    if isinstance(value, Mapping):
        console.print(_value_table(value, changed))
    else:
        _field(console, "value", value)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text.assemble(("ERROR", "opt.error"), (f"  {result.op}", "opt.op"), f": {msg}"))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Settings renderers ────────────────────────────────────────────────


def _render_commit(result: ServiceResult, console: Console) -> None:
    """Render save/reset results: what changed, not the whole bundle."""
    d = result.data
    _status_line(console, result)
    _field(console, "bundle_key", d.get("bundle_key", ""))
    changed = d.get("changed_keys", [])
    _field(console, "changed", ", ".join(changed) if changed else "(none)")
    if d.get("migrated_keys"):
        _field(console, "migrated", ", ".join(d["migrated_keys"]))


def _render_preview(result: ServiceResult, console: Console) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "bundle_key", d.get("bundle_key", ""))
    if not d.get("registered", True):
        console.print(Text("  not registered: value passes through unchanged", style="opt.warning"))
    _render_value(console, d.get("value"), d.get("changed_keys"))


def _render_get(result: ServiceResult, console: Console) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "bundle_key", d.get("bundle_key", ""))
    _render_value(console, d.get("value"))


def _render_rules(result: ServiceResult, console: Console) -> None:
    entries = result.data.get("entries", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Option", style="opt.option", no_wrap=True)
    table.add_column("Sub-key", no_wrap=True)
    table.add_column("Rule", style="opt.rule")
    table.add_column("Kind")
    for entry in entries:
        table.add_row(
            str(entry.get("bundle_key", "")),
            str(entry.get("sub_key") or ""),
            str(entry.get("rule", "")),
            str(entry.get("kind", "")),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(entries))} bindings")


def _render_profile(result: ServiceResult, console: Console) -> None:
    d = result.data
    _status_line(console, result)
    _field(console, "user_id", d.get("user_id", ""))
    for key, value in sorted((d.get("profile") or {}).items()):
        _field(console, key, value)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "save_settings": _render_commit,
    "reset_settings": _render_commit,
    "preview_settings": _render_preview,
    "get_settings": _render_get,
    "list_rules": _render_rules,
    "update_profile": _render_profile,
    "get_profile": _render_profile,
}
