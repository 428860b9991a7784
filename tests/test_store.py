"""
Tests for the preferences store and repository.
"""
import pytest

from conftest import GERMAN_PACK, put_settings, read_settings
from introbot.infra import db
from introbot.infra.store import PreferencesStore
from introbot.localization.apply import download_and_apply_localization
from introbot.localization.models import LocalizationSettings


class TestTransactions:
    async def test_returns_result_of_function(self, store):
        async def _fn(repo):
            await repo.set("greeting", {"text": "hi"})
            return "done"

        assert await store.transaction(_fn) == "done"

        async def _get(repo):
            return await repo.get("greeting")

        assert await store.transaction(_get) == {"text": "hi"}

    async def test_rolls_back_on_error(self, store):
        async def _fail(repo):
            await repo.set("greeting", {"text": "hi"})
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await store.transaction(_fail)

        async def _get(repo):
            return await repo.get("greeting")

        assert await store.transaction(_get) is None

    async def test_set_overwrites(self, store):
        async def _set(value):
            async def _fn(repo):
                await repo.set("k", value)
            await store.transaction(_fn)

        await _set({"v": 1})
        await _set({"v": 2})

        async def _get(repo):
            return await repo.get("k")

        assert await store.transaction(_get) == {"v": 2}

    async def test_delete(self, store):
        await put_settings(store, LocalizationSettings("de", GERMAN_PACK))

        async def _delete(repo):
            await repo.delete("localization_settings")

        await store.transaction(_delete)
        assert await read_settings(store) is None

    async def test_scopes_are_isolated(self, sessionmaker):
        chat_a = PreferencesStore(sessionmaker, scope_id=1)
        chat_b = PreferencesStore(sessionmaker, scope_id=2)

        await put_settings(chat_a, LocalizationSettings("de", GERMAN_PACK))

        assert (await read_settings(chat_a)).language_code == "de"
        assert await read_settings(chat_b) is None


class TestLocalizationSettings:
    async def test_round_trip(self, store):
        settings = LocalizationSettings("de", GERMAN_PACK)
        await put_settings(store, settings)
        assert await read_settings(store) == settings

    async def test_download_and_apply(self, store, network):
        await download_and_apply_localization(store, network, "de")

        stored = await read_settings(store)
        assert stored == LocalizationSettings("de", GERMAN_PACK)
        assert network.pack_calls == ["de"]

    async def test_download_failure_keeps_previous(self, store, network):
        await put_settings(store, LocalizationSettings("de", GERMAN_PACK))
        network.errors["fr"] = RuntimeError("no pack")

        with pytest.raises(RuntimeError):
            await download_and_apply_localization(store, network, "fr")

        assert (await read_settings(store)).language_code == "de"


class TestSessionFactory:
    async def test_uninitialized_database_raises(self, monkeypatch):
        monkeypatch.setattr(db, "SessionLocal", None)
        store = PreferencesStore(scope_id=7)

        async def _fn(repo):
            return await repo.get("greeting")

        with pytest.raises(RuntimeError, match="Sessionmaker not initialized"):
            await store.transaction(_fn)

    async def test_falls_back_to_process_sessionmaker(self, sessionmaker, monkeypatch):
        monkeypatch.setattr(db, "SessionLocal", sessionmaker)
        await put_settings(PreferencesStore(scope_id=7), LocalizationSettings("de", GERMAN_PACK))

        assert (await read_settings(PreferencesStore(sessionmaker, scope_id=7))).language_code == "de"
