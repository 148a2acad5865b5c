"""Rule variants and the named rule library.

A rule is a frozen pydantic model tagged by ``kind``. Each variant carries
its own parameters (choice sets, bounds, static defaults) and implements
``apply(candidate, previous, default)``. Rules are pure and total: an
invalid candidate degrades to *previous* or a default, never to an error.

The :class:`RuleLibrary` maps rule names to rule instances. The registry
binds option keys to *names*; an unknown name resolves to
:class:`IdentityRule` so a stale binding can never break a save.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from enum import StrEnum
from typing import Annotated, Any, Literal

import nh3
from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, Field, TypeAdapter

from optguard.domain import transforms as t


class RuleKind(StrEnum):
    """Closed set of rule variants."""

    CHOICE = "choice"
    ONE_ZERO = "one_zero"
    ABSINT = "absint"
    NUMERIC_STRING = "numeric_string"
    BOUNDED_INT = "bounded_int"
    TEXT = "text"
    URL = "url"
    SOCIAL_HANDLE = "social_handle"
    PROFILE_URL = "profile_url"
    COLOR_HEX = "color_hex"
    POST_TYPES = "post_types"
    SAFE_HTML = "safe_html"
    EMAIL = "email"
    IDENTITY = "identity"


class Fallback(StrEnum):
    """What a choice rule returns for a candidate outside its set."""

    PREVIOUS_OR_DEFAULT = "previous_or_default"
    PREVIOUS = "previous"
    DEFAULT = "default"


class TextStep(StrEnum):
    """Narrow text transforms a :class:`TextRule` can sequence."""

    SINGLE_LINE = "single_line"
    NBSP = "nbsp"
    TABS = "tabs"
    BACKSLASH = "backslash"
    DUPE_SPACE = "dupe_space"
    STRIP_HTML = "strip_html"
    STRIP_HTML_SPACE = "strip_html_space"
    TRIM = "trim"


_TEXT_STEPS: dict[TextStep, Callable[[str], str]] = {
    TextStep.SINGLE_LINE: t.single_line,
    TextStep.NBSP: t.nbsp,
    TextStep.TABS: t.tabs,
    TextStep.BACKSLASH: t.backslash_entities,
    TextStep.DUPE_SPACE: t.dupe_space,
    TextStep.STRIP_HTML: t.strip_tags,
    TextStep.STRIP_HTML_SPACE: t.strip_html_space,
    TextStep.TRIM: str.strip,
}

# Single-line must run before dupe-space: joining lines can create new runs.
ONE_LINE_STEPS: tuple[TextStep, ...] = (
    TextStep.SINGLE_LINE,
    TextStep.NBSP,
    TextStep.TABS,
    TextStep.BACKSLASH,
    TextStep.DUPE_SPACE,
)


# ---------------------------------------------------------------------------
# Rule variants
# ---------------------------------------------------------------------------


class BaseRule(BaseModel):
    """Common base for all rule variants."""

    model_config = {"frozen": True}

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> Any:
        """Return the accepted value for *candidate* given the stored *previous*."""
        raise NotImplementedError


class ChoiceRule(BaseRule):
    """Accept only members of a closed set of strings."""

    kind: Literal["choice"] = "choice"
    choices: tuple[str, ...]
    fallback: Fallback = Fallback.PREVIOUS_OR_DEFAULT
    default: str | None = None

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> str:
        if isinstance(candidate, str) and candidate in self.choices:
            return candidate

        static = self.default if self.default is not None else default
        if self.fallback is Fallback.DEFAULT:
            return t.as_text(static)
        if self.fallback is Fallback.PREVIOUS_OR_DEFAULT and t.is_empty(previous):
            return t.as_text(static)
        return t.as_text(previous)


class OneZeroRule(BaseRule):
    kind: Literal["one_zero"] = "one_zero"

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> int:
        return t.one_zero(candidate)


class AbsIntRule(BaseRule):
    kind: Literal["absint"] = "absint"

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> int:
        return t.absint(candidate)


class NumericStringRule(BaseRule):
    kind: Literal["numeric_string"] = "numeric_string"

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> str:
        return t.numeric_string(candidate)


class BoundedIntRule(BaseRule):
    """Clamp an integer into ``[minimum, maximum]``; 0 means unset and yields the default."""

    kind: Literal["bounded_int"] = "bounded_int"
    minimum: int
    maximum: int
    default: int | None = None

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> int:
        value = t.to_int(candidate)
        if value == 0:
            static = self.default if self.default is not None else default
            return t.to_int(static)
        return min(max(value, self.minimum), self.maximum)


class TextRule(BaseRule):
    """Run a sequence of text steps in order."""

    kind: Literal["text"] = "text"
    steps: tuple[TextStep, ...] = ONE_LINE_STEPS

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> str:
        value = t.as_text(candidate)
        for step in self.steps:
            value = _TEXT_STEPS[step](value)
        return value


class UrlRule(BaseRule):
    kind: Literal["url"] = "url"
    keep_query: bool = False

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> str:
        url = t.as_text(candidate)
        if not self.keep_query:
            url = t.strip_query(url)
        return t.normalize_url(url)


class SocialHandleRule(BaseRule):
    kind: Literal["social_handle"] = "social_handle"

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> str:
        return t.social_handle(candidate)


class ProfileUrlRule(BaseRule):
    kind: Literal["profile_url"] = "profile_url"
    base_url: str = "https://www.facebook.com/"

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> str:
        return t.profile_url(candidate, self.base_url)


class ColorHexRule(BaseRule):
    """Hex color; invalid input yields ``""`` rather than the previous value."""

    kind: Literal["color_hex"] = "color_hex"

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> str:
        return t.color_hex(candidate)


class PostTypesRule(BaseRule):
    """Per-post-type flag set. Keys in *exclude* (force-enabled types) are dropped."""

    kind: Literal["post_types"] = "post_types"
    exclude: tuple[str, ...] = ()

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> dict[str, int]:
        return t.post_type_flags(candidate, self.exclude)


class SafeHtmlRule(BaseRule):
    """Keep markup, but only allowlisted tags and attributes.

    *tags* narrows the allowlist; when empty the sanitizer's default set of
    post-content tags applies. ``script`` and ``style`` lose their content
    too, and ``javascript:`` links are dropped.
    """

    kind: Literal["safe_html"] = "safe_html"
    tags: tuple[str, ...] = ()

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> str:
        return nh3.clean(t.as_text(candidate), tags=set(self.tags) or None)


class EmailRule(BaseRule):
    """A single address, normalized; anything that is not an address yields ``""``."""

    kind: Literal["email"] = "email"

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> str:
        value = t.as_text(candidate).strip()
        if not value:
            return ""
        try:
            return validate_email(value, check_deliverability=False).normalized
        except EmailNotValidError:
            return ""


class IdentityRule(BaseRule):
    kind: Literal["identity"] = "identity"

    def apply(self, candidate: Any, previous: Any, default: Any = None) -> Any:
        return candidate


Rule = Annotated[
    ChoiceRule
    | OneZeroRule
    | AbsIntRule
    | NumericStringRule
    | BoundedIntRule
    | TextRule
    | UrlRule
    | SocialHandleRule
    | ProfileUrlRule
    | ColorHexRule
    | PostTypesRule
    | SafeHtmlRule
    | EmailRule
    | IdentityRule,
    Field(discriminator="kind"),
]

RULE_ADAPTER: TypeAdapter[Rule] = TypeAdapter(Rule)

IDENTITY = IdentityRule()


def parse_rule(data: BaseRule | Mapping[str, Any]) -> BaseRule:
    """Validate a rule given as a model or as a ``{"kind": ..., ...}`` mapping.

    Raises:
        pydantic.ValidationError: If *data* does not describe a known variant.
    """
    if isinstance(data, BaseRule):
        return data
    return RULE_ADAPTER.validate_python(dict(data))


# ---------------------------------------------------------------------------
# Named library
# ---------------------------------------------------------------------------


class RuleLibrary:
    """Named catalog of rules. Names are unique; adding an existing name replaces it."""

    def __init__(self, rules: Mapping[str, BaseRule | Mapping[str, Any]] | None = None) -> None:
        self._rules: dict[str, BaseRule] = {}
        for name, rule in (rules or {}).items():
            self.add(name, rule)

    def add(self, name: str, rule: BaseRule | Mapping[str, Any]) -> None:
        """Add or replace the rule called *name*.

        Raises:
            ValueError: If *name* is blank.
            pydantic.ValidationError: If *rule* is a mapping that is not a valid rule.
        """
        normalized = name.strip()
        if not normalized:
            msg = "Rule name must not be empty"
            raise ValueError(msg)
        self._rules[normalized] = parse_rule(rule)

    def resolve(self, name: str) -> BaseRule:
        """Return the rule called *name*, or the identity rule when unknown."""
        return self._rules.get(name, IDENTITY)

    def apply(self, name: str, candidate: Any, previous: Any, default: Any = None) -> Any:
        return self.resolve(name).apply(candidate, previous, default)

    def names(self) -> list[str]:
        return sorted(self._rules)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._rules)
