"""Value types shared by the suggestion source, the backend client and the store.

Everything here is immutable and round-trips through plain dicts so that it
can be stored in a JSON column and read back from the language pack backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union

from ..core.errors import LangPackError

PLURAL_FORMS: Tuple[str, ...] = ("zero", "one", "two", "few", "many", "other")


@dataclass(frozen=True)
class StringEntry:
    key: str
    value: str

    def to_dict(self) -> dict:
        return {"key": self.key, "value": self.value}


@dataclass(frozen=True)
class PluralizedStringEntry:
    key: str
    zero: Optional[str] = None
    one: Optional[str] = None
    two: Optional[str] = None
    few: Optional[str] = None
    many: Optional[str] = None
    other: str = ""

    def to_dict(self) -> dict:
        data: dict[str, Any] = {"key": self.key}
        for form in PLURAL_FORMS:
            value = getattr(self, form)
            if value is not None:
                data[f"{form}_value"] = value
        return data


LocalizationEntry = Union[StringEntry, PluralizedStringEntry]


def entry_from_dict(data: Any) -> LocalizationEntry:
    if not isinstance(data, dict) or not isinstance(data.get("key"), str):
        raise LangPackError(f"malformed string entry: {data!r}")
    if "value" in data:
        return StringEntry(key=data["key"], value=str(data["value"]))
    if "other_value" in data:
        forms = {form: data.get(f"{form}_value") for form in PLURAL_FORMS}
        forms["other"] = str(forms["other"])
        return PluralizedStringEntry(key=data["key"], **forms)
    raise LangPackError(f"string entry without value: {data['key']}")


@dataclass(frozen=True)
class Localization:
    version: int
    entries: Tuple[LocalizationEntry, ...] = ()

    def to_dict(self) -> dict:
        return {"version": self.version, "entries": [e.to_dict() for e in self.entries]}

    @classmethod
    def from_dict(cls, data: dict) -> "Localization":
        return cls(
            version=int(data.get("version", 0)),
            entries=tuple(entry_from_dict(e) for e in data.get("entries", [])),
        )


@dataclass(frozen=True)
class LocalizationInfo:
    language_code: str
    title: str
    localized_title: str


@dataclass(frozen=True)
class SuggestedLocalizationInfo:
    """Raw answer of the backend: the suggested code plus what it offers."""

    language_code: str
    extracted_entries: Tuple[LocalizationEntry, ...] = ()
    available_localizations: Tuple[LocalizationInfo, ...] = ()


@dataclass(frozen=True)
class SuggestedLocalization:
    """What the splash screen offers the user as an alternate language."""

    info: LocalizationInfo
    continue_with_language_string: str
    choose_language_string: str = "Choose Language"
    choose_language_other_string: str = "Choose Language"
    english_language_name_string: str = "English"

    @property
    def language_code(self) -> str:
        return self.info.language_code


@dataclass(frozen=True)
class LocalizationSettings:
    language_code: str
    localization: Localization = field(default_factory=lambda: Localization(version=0))

    def to_dict(self) -> dict:
        return {"language_code": self.language_code, "localization": self.localization.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "LocalizationSettings":
        return cls(
            language_code=str(data["language_code"]),
            localization=Localization.from_dict(data.get("localization") or {}),
        )
