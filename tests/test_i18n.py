"""
Tests for string tables built from localization packs.
"""
import pytest

from conftest import GERMAN_PACK
from introbot.core.i18n import (
    PresentationStrings,
    default_presentation_strings,
    dict_from_localization,
    strings_from_settings,
    t,
)
from introbot.localization.models import Localization, LocalizationSettings, PluralizedStringEntry, StringEntry


class TestDictFromLocalization:
    def test_plain_entries(self):
        loc = Localization(version=1, entries=(StringEntry("a", "A"), StringEntry("b", "B")))
        assert dict_from_localization(loc) == {"a": "A", "b": "B"}

    def test_pluralized_entries_expand(self):
        loc = Localization(
            version=1,
            entries=(PluralizedStringEntry("n", zero="none", one="one", few="few", other="lots"),),
        )
        assert dict_from_localization(loc) == {
            "n_0": "none",
            "n_1": "one",
            "n_3_10": "few",
            "n_any": "lots",
        }


class TestPresentationStrings:
    def test_format_arguments(self):
        strings = PresentationStrings("de", {"hello": "Hallo {name}"})
        assert strings.get("hello", name="Ana") == "Hallo Ana"

    def test_missing_argument_returns_raw(self):
        strings = PresentationStrings("de", {"hello": "Hallo {name}"})
        assert strings.get("hello") == "Hallo {name}"

    def test_falls_back_then_returns_key(self):
        base = PresentationStrings("en", {"only.en": "English only"})
        strings = PresentationStrings("de", {}, fallback=base)
        assert strings.get("only.en") == "English only"
        assert strings.get("nowhere") == "nowhere"

    def test_plural_forms(self):
        strings = PresentationStrings(
            "en", {"n_0": "none", "n_1": "{count} item", "n_any": "{count} items"}
        )
        assert strings.plural("n", 0) == "none"
        assert strings.plural("n", 1) == "1 item"
        assert strings.plural("n", 7) == "7 items"
        assert strings.plural("n", 42) == "42 items"

    def test_mapping_is_read_only(self):
        strings = PresentationStrings("en", {"a": "A"})
        with pytest.raises(TypeError):
            strings.mapping["a"] = "B"  # type: ignore[index]
        assert strings.get("a") == "A"


class TestDefaults:
    def test_default_table_is_english(self):
        strings = default_presentation_strings()
        assert strings.language_code == "en"
        assert strings.get("Login.ContinueWithLocalization") == "Continue"

    def test_missing_settings_fall_back_to_default(self):
        assert strings_from_settings(None) is default_presentation_strings()

    def test_settings_build_table_with_fallback(self):
        strings = strings_from_settings(LocalizationSettings("de", GERMAN_PACK))
        assert strings.language_code == "de"
        assert strings.get("Intro.Title") == "Willkommen"
        assert strings.get("Intro.PleaseWait") == default_presentation_strings().get("Intro.PleaseWait")

    def test_t_without_table(self):
        assert t(None, "Intro.StartMessaging") == "Start Messaging"
