"""Built-in site option catalog: rule definitions, bindings and defaults.

Every option of the site settings bundle is registered here exactly once
by :func:`register_site_options`. The bundle is one compound option (the
*settings field*) whose sub-keys are the individual settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from optguard.domain.compat import CompatStep, CopyKey, FlagFanout
from optguard.domain.rules import (
    ONE_LINE_STEPS,
    AbsIntRule,
    BaseRule,
    BoundedIntRule,
    ChoiceRule,
    ColorHexRule,
    EmailRule,
    Fallback,
    NumericStringRule,
    OneZeroRule,
    PostTypesRule,
    ProfileUrlRule,
    SafeHtmlRule,
    SocialHandleRule,
    TextRule,
    TextStep,
    UrlRule,
)

if TYPE_CHECKING:
    from optguard.domain.registry import RuleRegistry

DEFAULT_SETTINGS_FIELD = "autodescription-site-settings"
DEFAULT_FORCED_POST_TYPES: tuple[str, ...] = ("post", "page", "attachment")
SITEMAP_QUERY_MIN = 1
SITEMAP_QUERY_MAX = 50000

ROBOTS = ("noindex", "nofollow", "noarchive")
ROBOTS_SCOPES = ("category", "tag", "author", "date", "search", "attachment", "site")

# --- Choice vocabularies ---

SEPARATORS: tuple[str, ...] = (
    "pipe",
    "dash",
    "ndash",
    "mdash",
    "bull",
    "middot",
    "lsaquo",
    "rsaquo",
    "frasl",
    "laquo",
    "raquo",
    "le",
    "ge",
    "lt",
    "gt",
)
LEFT_RIGHT: tuple[str, ...] = ("left", "right")
KNOWLEDGE_TYPES: tuple[str, ...] = ("person", "organization")
QUERY_TYPES: tuple[str, ...] = ("in_query", "post_query")
TWITTER_CARDS: tuple[str, ...] = ("summary", "summary_large_image")
CANONICAL_SCHEMES: tuple[str, ...] = ("automatic", "https", "http")


def robots_post_type_option_id(robot: str) -> str:
    """Sub-key of the per-post-type flag set for a robots directive."""
    return f"{robot}_post_types"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def builtin_rules(
    *,
    forced_post_types: tuple[str, ...] = DEFAULT_FORCED_POST_TYPES,
    sitemap_query_min: int = SITEMAP_QUERY_MIN,
    sitemap_query_max: int = SITEMAP_QUERY_MAX,
) -> dict[str, BaseRule]:
    """Named rules shipped with optguard."""
    return {
        "title_separator": ChoiceRule(choices=SEPARATORS),
        "description_separator": ChoiceRule(choices=SEPARATORS),
        "left_right": ChoiceRule(choices=LEFT_RIGHT),
        "left_right_home": ChoiceRule(choices=LEFT_RIGHT),
        "knowledge_type": ChoiceRule(choices=KNOWLEDGE_TYPES, fallback=Fallback.PREVIOUS),
        "alter_query_type": ChoiceRule(
            choices=QUERY_TYPES, fallback=Fallback.DEFAULT, default="in_query"
        ),
        "twitter_card": ChoiceRule(choices=TWITTER_CARDS),
        "canonical_scheme": ChoiceRule(
            choices=CANONICAL_SCHEMES, fallback=Fallback.DEFAULT, default="automatic"
        ),
        "one_zero": OneZeroRule(),
        "absint": AbsIntRule(),
        "numeric_string": NumericStringRule(),
        "title": TextRule(steps=(TextStep.STRIP_HTML, *ONE_LINE_STEPS, TextStep.TRIM)),
        "title_raw": TextRule(),
        "description": TextRule(steps=(TextStep.STRIP_HTML, *ONE_LINE_STEPS, TextStep.TRIM)),
        "description_raw": TextRule(),
        "no_html": TextRule(steps=(TextStep.STRIP_HTML,)),
        "no_html_space": TextRule(steps=(TextStep.STRIP_HTML_SPACE,)),
        "safe_html": SafeHtmlRule(),
        "email_address": EmailRule(),
        "url": UrlRule(),
        "url_query": UrlRule(keep_query=True),
        "facebook_profile": ProfileUrlRule(),
        "twitter_name": SocialHandleRule(),
        "color_hex": ColorHexRule(),
        "post_types": PostTypesRule(),
        "disabled_post_types": PostTypesRule(exclude=forced_post_types),
        "min_max_sitemap": BoundedIntRule(minimum=sitemap_query_min, maximum=sitemap_query_max),
    }


# ---------------------------------------------------------------------------
# Bindings
# ---------------------------------------------------------------------------

SITE_BINDINGS: dict[str, tuple[str, ...]] = {
    "title_separator": ("title_separator",),
    "description_separator": ("description_separator",),
    "description_raw": (
        "homepage_description",
        "homepage_og_description",
        "homepage_twitter_description",
    ),
    "title": ("knowledge_name",),
    "title_raw": (
        "homepage_title",
        "homepage_title_tagline",
        "homepage_og_title",
        "homepage_twitter_title",
    ),
    "knowledge_type": ("knowledge_type",),
    "left_right": ("title_location",),
    "left_right_home": ("home_title_location",),
    "alter_query_type": ("alter_archive_query_type", "alter_search_query_type"),
    "one_zero": (
        "alter_search_query",
        "alter_archive_query",
        "display_pixel_counter",
        "display_character_counter",
        "cache_meta_schema",
        "cache_sitemap",
        "cache_object",
        "display_seo_bar_tables",
        "display_seo_bar_metabox",
        "title_rem_additions",
        "title_rem_prefixes",
        "title_strip_tags",
        "auto_description",
        "description_additions",
        "description_blogname",
        *(f"{scope}_{robot}" for robot in ROBOTS for scope in ROBOTS_SCOPES),
        "paged_noindex",
        "home_paged_noindex",
        "homepage_noindex",
        "homepage_nofollow",
        "homepage_noarchive",
        "homepage_tagline",
        "shortlink_tag",
        "prev_next_posts",
        "prev_next_archives",
        "prev_next_frontpage",
        "og_tags",
        "facebook_tags",
        "twitter_tags",
        "knowledge_output",
        "post_publish_time",
        "post_modify_time",
        "knowledge_logo",
        "ping_google",
        "ping_bing",
        "ping_yandex",
        "excerpt_the_feed",
        "source_the_feed",
        "ld_json_searchbox",
        "ld_json_breadcrumbs",
        "sitemaps_output",
        "sitemaps_robots",
        "sitemaps_modified",
        "sitemaps_priority",
        "sitemap_styles",
        "sitemap_logo",
    ),
    "absint": ("social_image_fb_id", "homepage_social_image_id", "knowledge_logo_id"),
    "numeric_string": ("timestamps_format",),
    "disabled_post_types": ("disabled_post_types",),
    "post_types": tuple(robots_post_type_option_id(robot) for robot in ROBOTS),
    "no_html_space": (
        "facebook_appid",
        "google_verification",
        "bing_verification",
        "yandex_verification",
        "pint_verification",
    ),
    "url": (
        "knowledge_facebook",
        "knowledge_twitter",
        "knowledge_gplus",
        "knowledge_instagram",
        "knowledge_youtube",
        "knowledge_pinterest",
        "knowledge_soundcloud",
        "knowledge_tumblr",
    ),
    "url_query": (
        "knowledge_linkedin",
        "social_image_fb_url",
        "homepage_social_image_url",
        "knowledge_logo_url",
    ),
    "facebook_profile": ("facebook_publisher", "facebook_author"),
    "twitter_name": ("twitter_site", "twitter_creator"),
    "twitter_card": ("twitter_card",),
    "canonical_scheme": ("canonical_scheme",),
    "color_hex": ("sitemap_color_main", "sitemap_color_accent"),
    "min_max_sitemap": ("sitemap_query_limit",),
}


def register_site_options(registry: RuleRegistry, settings_field: str = DEFAULT_SETTINGS_FIELD) -> None:
    """The full registration pass for the site settings bundle."""
    for rule_name, sub_keys in SITE_BINDINGS.items():
        registry.register(rule_name, settings_field, sub_keys)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

_ENABLED_BY_DEFAULT = frozenset(
    {
        "display_pixel_counter",
        "display_character_counter",
        "cache_meta_schema",
        "cache_sitemap",
        "display_seo_bar_tables",
        "display_seo_bar_metabox",
        "auto_description",
        "description_additions",
        "description_blogname",
        "search_noindex",
        "attachment_noindex",
        "paged_noindex",
        "homepage_tagline",
        "prev_next_posts",
        "prev_next_archives",
        "prev_next_frontpage",
        "og_tags",
        "facebook_tags",
        "twitter_tags",
        "knowledge_output",
        "post_publish_time",
        "post_modify_time",
        "knowledge_logo",
        "ping_google",
        "ping_bing",
        "excerpt_the_feed",
        "source_the_feed",
        "ld_json_searchbox",
        "ld_json_breadcrumbs",
        "sitemaps_output",
        "sitemaps_robots",
        "sitemaps_modified",
        "sitemaps_priority",
        "sitemap_styles",
        "sitemap_logo",
    }
)

SITE_DEFAULTS: dict[str, Any] = {
    **{key: int(key in _ENABLED_BY_DEFAULT) for key in SITE_BINDINGS["one_zero"]},
    "title_separator": "pipe",
    "description_separator": "pipe",
    "title_location": "left",
    "home_title_location": "left",
    "knowledge_type": "organization",
    "knowledge_name": "",
    "alter_archive_query_type": "in_query",
    "alter_search_query_type": "in_query",
    "twitter_card": "summary_large_image",
    "canonical_scheme": "automatic",
    "timestamps_format": "1",
    "sitemap_query_limit": 1200,
    "sitemap_color_main": "333",
    "sitemap_color_accent": "00cd98",
    "disabled_post_types": {},
    **{robots_post_type_option_id(robot): {} for robot in ROBOTS},
}

# Legacy option names kept in sync after every save.
COMPAT_STEPS: list[CompatStep] = [
    CopyKey(source="title_separator", target="title_seperator"),
    *(
        FlagFanout(
            source=robots_post_type_option_id(robot),
            item="attachment",
            target=f"attachment_{robot}",
        )
        for robot in ROBOTS
    ),
]

# --- Per-user profile fields ---

PROFILE_META_PREFIX = "user_meta:"
PROFILE_RULES: dict[str, str] = {
    "facebook_page": "facebook_profile",
    "twitter_page": "twitter_name",
}
USER_DEFAULTS: dict[str, str] = {
    "facebook_page": "",
    "twitter_page": "",
}
