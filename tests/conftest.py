"""
Pytest configuration and shared fixtures.
"""
import asyncio
from collections import defaultdict
from typing import Dict, List, Optional

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from introbot.infra.models import Base
from introbot.infra.store import PreferencesStore
from introbot.localization.models import (
    Localization,
    LocalizationInfo,
    LocalizationSettings,
    PluralizedStringEntry,
    StringEntry,
)


GERMAN_PACK = Localization(
    version=3,
    entries=(
        StringEntry("Intro.Title", "Willkommen"),
        StringEntry("Intro.StartMessaging", "Jetzt starten"),
        PluralizedStringEntry("Intro.Members", one="{count} Mitglied", other="{count} Mitglieder"),
    ),
)

FRENCH_PACK = Localization(
    version=5,
    entries=(StringEntry("Intro.Title", "Bienvenue"),),
)


class FakeNetwork:
    """In-memory stand-in for LangPackClient with per-language gates."""

    def __init__(self) -> None:
        self.suggested_code: Optional[str] = None
        self.strings: Dict[str, List] = {}
        self.languages: List[LocalizationInfo] = []
        self.packs: Dict[str, Localization] = {"de": GERMAN_PACK, "fr": FRENCH_PACK}
        self.errors: Dict[str, Exception] = {}
        self.config_error: Optional[Exception] = None
        self.gates: Dict[str, asyncio.Event] = {}
        self.started: Dict[str, asyncio.Event] = defaultdict(asyncio.Event)
        self.config_gate: Optional[asyncio.Event] = None
        self.config_calls: List[Optional[str]] = []
        self.strings_calls: List[tuple] = []
        self.pack_calls: List[str] = []

    async def get_config(self, client_lang_code=None):
        self.config_calls.append(client_lang_code)
        if self.config_gate is not None:
            await self.config_gate.wait()
        if self.config_error is not None:
            raise self.config_error
        return self.suggested_code

    async def get_strings(self, lang_code, keys):
        self.strings_calls.append((lang_code, tuple(keys)))
        return list(self.strings.get(lang_code, []))

    async def get_languages(self):
        return list(self.languages)

    async def get_lang_pack(self, lang_code):
        self.pack_calls.append(lang_code)
        self.started[lang_code].set()
        gate = self.gates.get(lang_code)
        if gate is not None:
            await gate.wait()
        if lang_code in self.errors:
            raise self.errors[lang_code]
        return self.packs[lang_code]


@pytest.fixture
def network():
    return FakeNetwork()


@pytest.fixture
async def sessionmaker(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def store(sessionmaker):
    return PreferencesStore(sessionmaker, scope_id=42)


async def put_settings(store, settings: LocalizationSettings) -> None:
    async def _write(repo):
        await repo.set_localization_settings(settings)

    await store.transaction(_write)


async def read_settings(store) -> Optional[LocalizationSettings]:
    async def _read(repo):
        return await repo.get_localization_settings()

    return await store.transaction(_read)
