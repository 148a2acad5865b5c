"""Save tracing for ``--verbose`` runs.

A :func:`traced` service method opens a root span. The stages of a save
(``sanitize``, ``post_commit``) open child spans with :func:`trace_span`,
and the dispatcher records on the active span how many registered sub-keys
it validated and which rule kinds it ran. The finished tree is attached to
``ServiceResult.meta["telemetry"]`` and logged through structlog.

Tracing is off unless the CLI switches it on; every helper then returns
after a single ContextVar lookup and records nothing.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator, Iterable
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from optguard.services.result import ServiceResult

_tracing: ContextVar[bool] = ContextVar("optguard_tracing", default=False)
_active: ContextVar[Span | None] = ContextVar("optguard_active_span", default=None)


@dataclass
class Span:
    """One timed stage of a save, with its sub-stages."""

    name: str
    annotations: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter)
    ended: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.ended is None:
            return 0.0
        return (self.ended - self.started) * 1000

    def finish(self) -> None:
        self.ended = time.perf_counter()

    def annotate(self, **values: Any) -> None:
        self.annotations.update(values)

    def record_rules(self, sub_keys: int, kinds: Iterable[str]) -> None:
        """Add *sub_keys* to the validated count and merge *kinds* into the rule kinds seen.

        A span can cover several dispatcher calls (a multi-key submission),
        so both figures accumulate.
        """
        self.annotations["sub_keys"] = self.annotations.get("sub_keys", 0) + sub_keys
        seen = set(self.annotations.get("rule_kinds", ())) | set(kinds)
        self.annotations["rule_kinds"] = sorted(seen)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def enable_telemetry() -> None:
    """Turn tracing on for the current context (``--verbose``)."""
    _tracing.set(True)


def disable_telemetry() -> None:
    _tracing.set(False)
    _active.set(None)


def get_current_span() -> Span | None:
    """The innermost open span, or None when tracing is off or no root is open."""
    if not _tracing.get():
        return None
    return _active.get()


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Open a child span of the active span; yields None when there is nothing to attach to."""
    parent = get_current_span()
    if parent is None:
        yield None
        return

    child = Span(name=name)
    parent.children.append(child)
    token = _active.set(child)
    try:
        yield child
    finally:
        child.finish()
        _active.reset(token)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Run *func* under a root span named after it.

    A :class:`ServiceResult` return value gets the span tree merged into
    its ``meta``; anything else is returned unchanged.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _tracing.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        token = _active.set(root)
        ok = False
        try:
            result = func(*args, **kwargs)
            ok = not isinstance(result, ServiceResult) or result.ok
        finally:
            root.finish()
            _active.reset(token)
            structlog.get_logger("optguard.telemetry").debug(
                "span.complete",
                span_name=root.name,
                duration_ms=round(root.duration_ms, 2),
                ok=ok,
                children=len(root.children),
            )

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": root.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper
