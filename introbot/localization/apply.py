from __future__ import annotations

import logging

from ..infra.preferences_repo import PreferencesRepo
from ..infra.store import PreferencesStore
from .models import LocalizationSettings
from .network import LangPackNetwork

log = logging.getLogger(__name__)


async def download_and_apply_localization(
    store: PreferencesStore, network: LangPackNetwork, language_code: str
) -> None:
    """Fetch the full pack for ``language_code`` and make it the stored localization."""
    localization = await network.get_lang_pack(language_code)

    async def _apply(repo: PreferencesRepo) -> None:
        await repo.set_localization_settings(LocalizationSettings(language_code, localization))

    await store.transaction(_apply)
    log.info(
        "Applied localization %s (version %s, %d entries) to scope %s",
        language_code,
        localization.version,
        len(localization.entries),
        store.scope_id,
    )
