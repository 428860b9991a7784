from __future__ import annotations

import json
import logging
from functools import lru_cache
from importlib import resources
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..localization.models import Localization, LocalizationSettings, PluralizedStringEntry, StringEntry


log = logging.getLogger(__name__)

# Suffixes a pluralized entry expands into, keyed by plural form
PLURAL_SUFFIXES = {
    "zero": "_0",
    "one": "_1",
    "two": "_2",
    "few": "_3_10",
    "many": "_many",
    "other": "_any",
}


def dict_from_localization(localization: Localization) -> Dict[str, str]:
    result: Dict[str, str] = {}
    for entry in localization.entries:
        if isinstance(entry, StringEntry):
            result[entry.key] = entry.value
        elif isinstance(entry, PluralizedStringEntry):
            for form, suffix in PLURAL_SUFFIXES.items():
                value = getattr(entry, form)
                if value is not None:
                    result[entry.key + suffix] = value
    return result


class PresentationStrings:
    """Read-only string table for one language.

    Lookups fall back to the packaged default table and finally to the key
    itself, so a partially translated pack never breaks rendering.
    """

    def __init__(
        self,
        language_code: str,
        mapping: Mapping[str, str],
        fallback: Optional["PresentationStrings"] = None,
    ) -> None:
        self._language_code = language_code
        self._mapping = MappingProxyType(dict(mapping))
        self._fallback = fallback

    @property
    def language_code(self) -> str:
        return self._language_code

    @property
    def mapping(self) -> Mapping[str, str]:
        return self._mapping

    def __contains__(self, key: str) -> bool:
        return key in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PresentationStrings):
            return NotImplemented
        return self._language_code == other._language_code and dict(self._mapping) == dict(other._mapping)

    def __repr__(self) -> str:
        return f"PresentationStrings(language_code={self._language_code!r}, entries={len(self._mapping)})"

    def lookup(self, key: str) -> Optional[str]:
        msg = self._mapping.get(key)
        if msg is None and self._fallback is not None:
            return self._fallback.lookup(key)
        return msg

    def get(self, key: str, **kwargs: Any) -> str:
        msg = self.lookup(key)
        if msg is None:
            return key
        try:
            return msg.format(**kwargs)
        except (KeyError, IndexError, ValueError):
            return msg

    def plural(self, key: str, count: int, **kwargs: Any) -> str:
        for suffix in _plural_suffixes(count):
            if self.lookup(key + suffix) is not None:
                return self.get(key + suffix, count=count, **kwargs)
        return self.get(key, count=count, **kwargs)


def _plural_suffixes(count: int) -> list[str]:
    n = abs(count)
    suffixes = []
    if n == 0:
        suffixes.append("_0")
    elif n == 1:
        suffixes.append("_1")
    elif n == 2:
        suffixes.append("_2")
    if 3 <= n <= 10:
        suffixes.append("_3_10")
    if n > 10:
        suffixes.append("_many")
    suffixes.append("_any")
    return suffixes


@lru_cache(maxsize=1)
def default_presentation_strings() -> PresentationStrings:
    data = json.loads(resources.files("introbot.locales").joinpath("en.json").read_text(encoding="utf-8"))
    return PresentationStrings("en", data)


def strings_from_settings(settings: Optional[LocalizationSettings]) -> PresentationStrings:
    if settings is None:
        return default_presentation_strings()
    return PresentationStrings(
        settings.language_code,
        dict_from_localization(settings.localization),
        fallback=default_presentation_strings(),
    )


def t(strings: Optional[PresentationStrings], key: str, **kwargs: Any) -> str:
    return (strings or default_presentation_strings()).get(key, **kwargs)
