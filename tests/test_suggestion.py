"""
Tests for the suggested localization source.
"""
import asyncio

import httpx
import pytest

from introbot.infra.langpack_client import LangPackClient
from introbot.localization.models import (
    LocalizationInfo,
    PluralizedStringEntry,
    StringEntry,
    SuggestedLocalizationInfo,
)
from introbot.localization.suggestion import (
    CONTINUE_WITH_LOCALIZATION_KEY,
    build_suggestion,
    currently_suggested_localization,
    suggested_localization,
)

GERMAN = LocalizationInfo("de", "German", "Deutsch")
ENGLISH = LocalizationInfo("en", "English", "English")
FRENCH = LocalizationInfo("fr", "French", "Français")


async def collect(network, **kwargs):
    return [s async for s in suggested_localization(network, [CONTINUE_WITH_LOCALIZATION_KEY], **kwargs)]


class TestBuildSuggestion:
    def test_label_taken_from_payload(self):
        info = SuggestedLocalizationInfo(
            "de",
            extracted_entries=(StringEntry(CONTINUE_WITH_LOCALIZATION_KEY, "Weiter auf Deutsch"),),
            available_localizations=(GERMAN,),
        )
        suggestion = build_suggestion(info)
        assert suggestion.continue_with_language_string == "Weiter auf Deutsch"
        assert suggestion.info == GERMAN
        assert suggestion.language_code == "de"
        assert suggestion.choose_language_string == "Choose Language"
        assert suggestion.english_language_name_string == "English"

    def test_default_label_without_key(self):
        info = SuggestedLocalizationInfo(
            "de",
            extracted_entries=(StringEntry("Other.Key", "x"),),
            available_localizations=(GERMAN,),
        )
        assert build_suggestion(info).continue_with_language_string == "Continue"

    def test_pluralized_entry_with_same_key_is_ignored(self):
        info = SuggestedLocalizationInfo(
            "de",
            extracted_entries=(PluralizedStringEntry(CONTINUE_WITH_LOCALIZATION_KEY, other="x"),),
            available_localizations=(GERMAN,),
        )
        assert build_suggestion(info).continue_with_language_string == "Continue"

    def test_no_available_localizations(self):
        info = SuggestedLocalizationInfo("de", available_localizations=())
        assert build_suggestion(info) is None

    def test_first_available_is_baseline(self):
        info = SuggestedLocalizationInfo("de", available_localizations=(ENGLISH, GERMAN))
        assert build_suggestion(info) is None

    def test_custom_baseline(self):
        info = SuggestedLocalizationInfo("de", available_localizations=(GERMAN,))
        assert build_suggestion(info, baseline="de") is None


class TestCurrentlySuggested:
    async def test_no_suggested_code(self, network):
        network.suggested_code = None
        assert await currently_suggested_localization(network, ["k"], "de") is None
        assert network.config_calls == ["de"]
        assert network.strings_calls == []

    async def test_suggested_language_moved_first(self, network):
        network.suggested_code = "de"
        network.languages = [ENGLISH, FRENCH, GERMAN]

        info = await currently_suggested_localization(network, ["k1", "k2"])

        assert info.language_code == "de"
        assert info.available_localizations == (GERMAN, ENGLISH, FRENCH)
        assert network.strings_calls == [("de", ("k1", "k2"))]


class TestSuggestedLocalizationStream:
    async def test_emits_one_suggestion(self, network):
        network.suggested_code = "de"
        network.languages = [ENGLISH, GERMAN]
        network.strings["de"] = [StringEntry(CONTINUE_WITH_LOCALIZATION_KEY, "Weiter auf Deutsch")]

        result = await collect(network)

        assert len(result) == 1
        assert result[0].language_code == "de"
        assert result[0].continue_with_language_string == "Weiter auf Deutsch"

    async def test_empty_language_list_emits_nothing(self, network):
        network.suggested_code = "de"
        network.languages = []
        assert await collect(network) == []

    async def test_baseline_first_emits_nothing(self, network):
        network.suggested_code = "en"
        network.languages = [ENGLISH, GERMAN]
        assert await collect(network) == []

    async def test_no_suggestion_emits_nothing(self, network):
        assert await collect(network) == []

    async def test_network_failure_emits_nothing(self, network):
        network.config_error = httpx.ConnectError("down")
        assert await collect(network) == []

    async def test_can_be_cancelled_while_waiting(self, network):
        network.suggested_code = "de"
        network.languages = [GERMAN]
        network.config_gate = asyncio.Event()
        received = []

        async def consume():
            async for s in suggested_localization(network):
                received.append(s)

        task = asyncio.create_task(consume())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert received == []

    async def test_malformed_language_list_emits_nothing(self):
        def handler(request):
            if request.url.path == "/config":
                return httpx.Response(200, json={"suggested_lang_code": "de"})
            if request.url.path == "/langpack/strings":
                return httpx.Response(200, json={"strings": []})
            return httpx.Response(200, json={"languages": {"de": "German"}})

        client = LangPackClient("http://langpack.test", transport=httpx.MockTransport(handler))
        try:
            assert await collect(client) == []
        finally:
            await client.close()
