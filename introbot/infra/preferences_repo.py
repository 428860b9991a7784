from __future__ import annotations

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..localization.models import LocalizationSettings
from .models import GLOBAL_SCOPE, PreferenceEntry

LOCALIZATION_SETTINGS_KEY = "localization_settings"


class PreferencesRepo:
    def __init__(self, session: AsyncSession, scope_id: int = GLOBAL_SCOPE) -> None:
        self.s = session
        self.scope_id = scope_id

    async def _row(self, key: str) -> Optional[PreferenceEntry]:
        q = select(PreferenceEntry).where(PreferenceEntry.scope_id == self.scope_id, PreferenceEntry.key == key)
        return (await self.s.execute(q)).scalars().first()

    async def get(self, key: str) -> Optional[dict]:
        row = await self._row(key)
        return row.value if row else None

    async def set(self, key: str, value: dict) -> None:
        row = await self._row(key)
        if row is None:
            self.s.add(PreferenceEntry(scope_id=self.scope_id, key=key, value=value))
        else:
            row.value = value
        await self.s.flush()

    async def delete(self, key: str) -> None:
        await self.s.execute(
            delete(PreferenceEntry).where(PreferenceEntry.scope_id == self.scope_id, PreferenceEntry.key == key)
        )

    async def get_localization_settings(self) -> Optional[LocalizationSettings]:
        v = await self.get(LOCALIZATION_SETTINGS_KEY)
        return None if v is None else LocalizationSettings.from_dict(v)

    async def set_localization_settings(self, settings: LocalizationSettings) -> None:
        await self.set(LOCALIZATION_SETTINGS_KEY, settings.to_dict())
