"""Language selection for generated content.

Generated text comes in exactly two languages. The runtime's locale is read
once per request and collapsed: anything starting with "pt" is Portuguese,
any other real locale is English. When no locale is configured at all the
fallback is Portuguese, the arcade's home language.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from nebula_arcade.models import Language

FALLBACK_LANGUAGE: Language = "Portuguese"

LOCALE_ENV_VARS: tuple[str, ...] = (
    "ARCADE_LANGUAGE",
    "LANGUAGE",
    "LC_ALL",
    "LC_MESSAGES",
    "LANG",
)

_NO_PREFERENCE = {"", "c", "posix"}


def collapse_locale(raw: str) -> Language | None:
    """Map a locale string ("pt_BR.UTF-8", "en-US", "Portuguese") to a Language."""
    tag = raw.strip().split(":")[0].split(".")[0].lower()
    if tag in _NO_PREFERENCE:
        return None
    if tag.startswith("pt") or tag.startswith("portug"):
        return "Portuguese"
    return "English"


def resolve_language(
    raw: str | None = None,
    env: Mapping[str, str] | None = None,
) -> Language:
    """Return the language for generated content.

    An explicit `raw` value wins; otherwise the first locale variable set in
    `env` (default: the process environment) decides.
    """
    if raw:
        collapsed = collapse_locale(raw)
        if collapsed:
            return collapsed
    source = env if env is not None else os.environ
    for name in LOCALE_ENV_VARS:
        collapsed = collapse_locale(source.get(name, ""))
        if collapsed:
            return collapsed
    return FALLBACK_LANGUAGE
