"""Narrow string and scalar transforms used by the rule library.

Pure functions, no infrastructure dependencies. Every function is total:
any input yields a value, never an exception. Composite rules in
:mod:`optguard.domain.rules` sequence these, so order matters (e.g.
``single_line`` must run before ``dupe_space``).
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs, urlsplit

# Schemes a stored URL may carry. Scheme-less (root-relative) URLs are kept.
ALLOWED_PROTOCOLS: frozenset[str] = frozenset(
    {
        "http",
        "https",
        "ftp",
        "ftps",
        "mailto",
        "news",
        "irc",
        "gopher",
        "nntp",
        "feed",
        "telnet",
        "mms",
        "rtsp",
        "sms",
        "svn",
        "tel",
        "fax",
        "xmpp",
        "webcal",
        "urn",
    }
)

_NBSP_TOKENS = ("&nbsp;", "&#160;", "\u00a0")
_DUPE_SPACE = re.compile(r"[ \t\n\r\f\v\u00a0]{2,}")
_TAG = re.compile(r"<!--.*?(?:-->|$)|<[A-Za-z/!?][^>]*(?:>|$)", re.DOTALL)
_ESCAPED_CHAR = re.compile(r"\\(.?)", re.DOTALL)
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_URL_UNSAFE = re.compile(r"[^a-z0-9\-~+_.?#=!&;,/:%@$|*'()\[\]\u0080-\uffff]", re.IGNORECASE)
_PHP_FILE = re.compile(r"^[a-z0-9-]+?\.php", re.IGNORECASE)
_ROOT_RELATIVE = re.compile(r"^(https?:)?//[^/]+(/.*)", re.IGNORECASE | re.DOTALL)
_COLOR_HEX = re.compile(r"^(?:[A-Fa-f0-9]{3}){1,2}$")


def as_text(value: Any) -> str:
    """Coerce a submitted scalar to text. Mappings and ``None`` become ``""``."""
    if value is None or isinstance(value, (Mapping, list, tuple, set)):
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    return str(value)


def is_empty(value: Any) -> bool:
    """Form-value emptiness: ``None``, ``False``, ``0``, ``""``, ``"0"`` and empty containers."""
    if isinstance(value, str):
        return value in ("", "0")
    return not value


# ---------------------------------------------------------------------------
# Text transforms
# ---------------------------------------------------------------------------


def single_line(value: str) -> str:
    """Join all non-blank lines with single spaces.

    Examples:
        >>> single_line("a\\r\\n\\r\\n  b  \\n")
        'a b'
    """
    lines = value.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    kept = [line.strip() for line in lines if line.strip() and line != "&nbsp;"]
    return " ".join(kept)


def dupe_space(value: str) -> str:
    """Collapse runs of two or more spaces (ordinary or non-breaking) to one space."""
    return _DUPE_SPACE.sub(" ", value)


def nbsp(value: str) -> str:
    """Replace non-breaking spaces, literal or entity-encoded, with ordinary spaces."""
    for token in _NBSP_TOKENS:
        value = value.replace(token, " ")
    return value


def tabs(value: str) -> str:
    return value.replace("\t", " ")


def strip_slashes(value: str) -> str:
    """Undo backslash escaping: ``\\x`` becomes ``x`` and ``\\\\`` becomes ``\\``."""
    return _ESCAPED_CHAR.sub(lambda m: m.group(1), value)


def backslash_entities(value: str) -> str:
    """Replace literal backslashes with ``&#92;`` after undoing upstream escaping."""
    return strip_slashes(value).replace("\\", "&#92;")


def strip_tags(value: str) -> str:
    """Remove markup tags and comments until none remain.

    A dangling ``<tag`` is removed to the end. Dropping an inner tag can join
    its neighbours into a new tag (``<<b>script>``), so passes repeat.
    """
    while _TAG.search(value):
        value = _TAG.sub("", value)
    return value


def strip_spaces(value: str) -> str:
    return value.replace(" ", "")


def strip_html_space(value: str) -> str:
    """Remove markup and every space, for opaque tokens such as verification codes."""
    return strip_spaces(strip_tags(value))


# ---------------------------------------------------------------------------
# URL transforms
# ---------------------------------------------------------------------------


def relative_url(url: str) -> str:
    """Convert a full URL to its path, without the leading slash.

    Examples:
        >>> relative_url("https://example.com/some/path")
        'some/path'
        >>> relative_url("/already/relative")
        'already/relative'
    """
    return _ROOT_RELATIVE.sub(r"\2", url).lstrip(" \\/")


def strip_query(url: str) -> str:
    """Truncate *url* at the first ``?``. A URL that is only a query is kept whole."""
    head = url.split("?", 1)[0]
    return head or url


def normalize_url(url: str) -> str:
    """Validate *url* as well-formed and safe to store.

    Removes characters that cannot appear in a URL, prepends ``http://``
    to bare domains, and rejects (returns ``""``) any scheme outside
    :data:`ALLOWED_PROTOCOLS`.
    """
    url = url.strip()
    if not url:
        return ""
    url = url.replace(" ", "%20")
    url = _URL_UNSAFE.sub("", url)
    if not url:
        return ""
    url = url.replace(";//", "://")
    if ":" not in url and not url.startswith(("/", "#", "?")) and not _PHP_FILE.match(url):
        url = "http://" + url

    try:
        scheme = urlsplit(url).scheme.lower()
    except ValueError:
        return ""
    if scheme and scheme not in ALLOWED_PROTOCOLS:
        return ""
    return url


def social_handle(value: Any) -> str:
    """Normalize a social profile name to ``@handle``.

    Full profile URLs are reduced to their path, trailing slashes are
    dropped, ``@`` is prefixed when absent, and interior whitespace removed.
    """
    text = as_text(value)
    if is_empty(text):
        return ""
    profile = relative_url(strip_tags(text).strip())
    profile = profile.rstrip(" /")
    if not profile.startswith("@"):
        profile = "@" + profile
    return profile.replace(" ", "").replace("\t", "")


def profile_url(value: Any, base_url: str = "https://www.facebook.com/") -> str:
    """Rewrite a profile link onto *base_url*.

    A ``profile.php`` path keeps only its numeric ``id`` query argument;
    without an ``id`` the link is rejected. Any other path is validated
    as a URL with its query string.
    """
    text = as_text(value)
    if is_empty(text):
        return ""
    link = base_url + relative_url(strip_tags(text).strip())
    link = link.rstrip(" /")

    if "profile.php" in link:
        query = link.split("?")[1] if "?" in link else ""
        args = parse_qs(query, keep_blank_values=True)
        if "id" not in args:
            return ""
        return normalize_url(f"{base_url}profile.php?id={absint(args['id'][0])}")
    return normalize_url(link)


# ---------------------------------------------------------------------------
# Scalar coercions
# ---------------------------------------------------------------------------


def to_int(value: Any) -> int:
    """Signed integer coercion of a form value; the leading integer of a string, else 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and abs(value) != float("inf") else 0
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else 0
    return 0


def absint(value: Any) -> int:
    """Non-negative integer: negative and non-numeric input become 0."""
    return max(0, to_int(value))


def one_zero(value: Any) -> int:
    return 0 if is_empty(value) else 1


def numeric_string(value: Any) -> str:
    return str(to_int(value))


def color_hex(value: Any) -> str:
    """Return a 3- or 6-digit hex color without ``#``, or ``""`` when invalid."""
    color = as_text(value).strip("# ")
    if _COLOR_HEX.match(color):
        return color
    return ""


def post_type_flags(value: Any, exclude: tuple[str, ...] = ()) -> dict[str, int]:
    """Coerce every flag of a post-type mapping to 1/0, dropping *exclude* keys."""
    if not isinstance(value, Mapping):
        return {}
    return {str(k): one_zero(v) for k, v in value.items() if k not in exclude}
