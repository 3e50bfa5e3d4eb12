"""Parse and request options.

Defaults are the permissive ones: every strictness toggle starts enabled, so a
malformed document from the public web is tolerated unless the caller opts
into strict behaviour.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional, Tuple


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class StrictnessOptions:
    """Leniency toggles. True means "tolerate this kind of breakage"."""

    strip_invalid_characters: bool = True
    auto_close_tags: bool = True
    allow_undisclosed_xml_namespaces: bool = True
    allow_custom_xml_elements: bool = True
    allow_incorrect_date_formats: bool = True
    allow_unescaped_markup: bool = True

    @classmethod
    def strict(cls) -> "StrictnessOptions":
        return cls(
            strip_invalid_characters=False,
            auto_close_tags=False,
            allow_undisclosed_xml_namespaces=False,
            allow_custom_xml_elements=False,
            allow_incorrect_date_formats=False,
            allow_unescaped_markup=False,
        )


@dataclass(frozen=True)
class ParseOptions:
    max_items: int = 0  # 0 means unlimited
    parse_dates: bool = True
    parse_extensions: bool = True
    keep_original_feed: bool = False
    strictness: StrictnessOptions = field(default_factory=StrictnessOptions)

    @classmethod
    def strict(cls, **overrides) -> "ParseOptions":
        return cls(strictness=StrictnessOptions.strict(), **overrides)

    def with_strictness(self, **toggles: bool) -> "ParseOptions":
        return replace(self, strictness=replace(self.strictness, **toggles))

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ParseOptions":
        """Build options from UNIFEED_* environment variables.

        UNIFEED_STRICT=true switches every strictness toggle off; individual
        UNIFEED_ALLOW_* / UNIFEED_STRIP_INVALID_CHARACTERS / UNIFEED_AUTO_CLOSE_TAGS
        variables then override single toggles.
        """
        env = os.environ if env is None else env
        base = StrictnessOptions.strict() if _env_bool(env, "UNIFEED_STRICT", False) else StrictnessOptions()
        strictness = StrictnessOptions(
            strip_invalid_characters=_env_bool(env, "UNIFEED_STRIP_INVALID_CHARACTERS", base.strip_invalid_characters),
            auto_close_tags=_env_bool(env, "UNIFEED_AUTO_CLOSE_TAGS", base.auto_close_tags),
            allow_undisclosed_xml_namespaces=_env_bool(
                env, "UNIFEED_ALLOW_UNDISCLOSED_XML_NAMESPACES", base.allow_undisclosed_xml_namespaces
            ),
            allow_custom_xml_elements=_env_bool(env, "UNIFEED_ALLOW_CUSTOM_XML_ELEMENTS", base.allow_custom_xml_elements),
            allow_incorrect_date_formats=_env_bool(
                env, "UNIFEED_ALLOW_INCORRECT_DATE_FORMATS", base.allow_incorrect_date_formats
            ),
            allow_unescaped_markup=_env_bool(env, "UNIFEED_ALLOW_UNESCAPED_MARKUP", base.allow_unescaped_markup),
        )
        return cls(
            max_items=max(0, _env_int(env, "UNIFEED_MAX_ITEMS", 0)),
            parse_dates=_env_bool(env, "UNIFEED_PARSE_DATES", True),
            parse_extensions=_env_bool(env, "UNIFEED_PARSE_EXTENSIONS", True),
            keep_original_feed=_env_bool(env, "UNIFEED_KEEP_ORIGINAL_FEED", False),
            strictness=strictness,
        )


DEFAULT_USER_AGENT = "unifeed/1.0"


@dataclass(frozen=True)
class RequestOptions:
    """Options for the optional HTTP fetch collaborator."""

    timeout: float = 29.0
    user_agent: str = DEFAULT_USER_AGENT
    if_none_match: str = ""
    if_modified_since: str = ""
    proxy_url: str = ""
    proxy_auth: Optional[Tuple[str, str]] = None
    feed_auth: Optional[Tuple[str, str]] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "RequestOptions":
        env = os.environ if env is None else env
        try:
            timeout = float((env.get("UNIFEED_TIMEOUT") or "29").strip())
        except ValueError:
            timeout = 29.0
        feed_auth = None
        user = (env.get("UNIFEED_FEED_USERNAME") or "").strip()
        password = env.get("UNIFEED_FEED_PASSWORD") or ""
        if user and password:
            feed_auth = (user, password)
        return cls(
            timeout=timeout,
            user_agent=(env.get("UNIFEED_USER_AGENT") or DEFAULT_USER_AGENT).strip(),
            proxy_url=(env.get("UNIFEED_PROXY_URL") or "").strip(),
            feed_auth=feed_auth,
        )
