"""Reading option values from the command line.

Values arrive as JSON (``--value`` or ``--file``, ``-`` for stdin) and/or
``--set key=value`` pairs. ``--set`` values stay strings, the way a
submitted form delivers them.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click

from optguard.services.result import ServiceError, ServiceResult

_MISSING = object()


class InputError(Exception):
    """Raised when command-line input cannot be turned into a value."""

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_result(self, op: str) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code="INVALID_INPUT", message=self.message, detail=self.detail),
        )


def _parse_json(raw: str, source: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InputError(f"Invalid JSON in {source}: {exc.msg}", source=source) from exc


def _parse_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise InputError(f"Expected KEY=VALUE, got {pair!r}", pair=pair)
        parsed[key.strip()] = value
    return parsed


def read_value(
    *,
    value: str | None,
    file: str | None,
    pairs: tuple[str, ...] = (),
) -> Any:
    """Combine ``--value``/``--file`` JSON with ``--set`` pairs.

    Pairs are laid over a JSON object. Returns ``_MISSING`` when nothing
    was given.

    Raises:
        InputError: On unparseable JSON, malformed pairs, or pairs given
            together with a non-object JSON value.
    """
    if value is not None and file is not None:
        raise InputError("Use either --value or --file, not both")

    candidate: Any = _MISSING
    if value is not None:
        candidate = _parse_json(value, "--value")
    elif file is not None:
        if file == "-":
            raw = click.get_text_stream("stdin").read()
        else:
            path = Path(file)
            if not path.is_file():
                raise InputError(f"File not found: {file}", path=file)
            raw = path.read_text(encoding="utf-8")
        candidate = _parse_json(raw, file)

    if pairs:
        overlay = _parse_pairs(pairs)
        if candidate is _MISSING:
            return overlay
        if not isinstance(candidate, Mapping):
            raise InputError("--set needs a JSON object to merge into")
        return {**candidate, **overlay}
    return candidate


def is_missing(candidate: Any) -> bool:
    return candidate is _MISSING
