from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Iterable, Optional

import httpx

from ..core.errors import LangPackError
from .models import StringEntry, SuggestedLocalization, SuggestedLocalizationInfo
from .network import LangPackNetwork

log = logging.getLogger(__name__)

BASELINE_LANGUAGE = "en"
CONTINUE_WITH_LOCALIZATION_KEY = "Login.ContinueWithLocalization"
DEFAULT_CONTINUE_LABEL = "Continue"


async def currently_suggested_localization(
    network: LangPackNetwork,
    extract_keys: Iterable[str],
    client_lang_code: Optional[str] = None,
) -> Optional[SuggestedLocalizationInfo]:
    code = await network.get_config(client_lang_code)
    if not code:
        return None
    entries, languages = await asyncio.gather(
        network.get_strings(code, list(extract_keys)),
        network.get_languages(),
    )
    # the suggested language goes first, the rest keep backend order
    languages = sorted(languages, key=lambda info: info.language_code != code)
    return SuggestedLocalizationInfo(
        language_code=code,
        extracted_entries=tuple(entries),
        available_localizations=tuple(languages),
    )


def build_suggestion(
    info: SuggestedLocalizationInfo, baseline: str = BASELINE_LANGUAGE
) -> Optional[SuggestedLocalization]:
    """Turn the backend answer into what the splash offers, or None to stay on the baseline."""
    continue_label = DEFAULT_CONTINUE_LABEL
    for entry in info.extracted_entries:
        if isinstance(entry, StringEntry) and entry.key == CONTINUE_WITH_LOCALIZATION_KEY:
            continue_label = entry.value

    if not info.available_localizations:
        return None
    available = info.available_localizations[0]
    if available.language_code == baseline:
        return None
    return SuggestedLocalization(info=available, continue_with_language_string=continue_label)


async def suggested_localization(
    network: LangPackNetwork,
    extract_keys: Iterable[str] = (CONTINUE_WITH_LOCALIZATION_KEY,),
    client_lang_code: Optional[str] = None,
    baseline: str = BASELINE_LANGUAGE,
) -> AsyncIterator[SuggestedLocalization]:
    """Yield at most one suggestion, then finish.

    A missing suggestion and a failed query both end the stream without a
    value; the splash then simply keeps the baseline language.
    """
    try:
        info = await currently_suggested_localization(network, extract_keys, client_lang_code)
    except (httpx.HTTPError, LangPackError) as e:
        log.warning("Suggested localization unavailable: %s", e)
        return
    if info is None:
        log.debug("No localization suggested for client_lang_code=%s", client_lang_code)
        return
    suggestion = build_suggestion(info, baseline)
    if suggestion is not None:
        log.info("Suggesting localization %s", suggestion.language_code)
        yield suggestion
