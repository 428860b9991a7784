from __future__ import annotations

from typing import Iterable, List, Optional, Protocol

from .models import Localization, LocalizationEntry, LocalizationInfo


class LangPackNetwork(Protocol):
    """What the suggestion and activation code needs from the backend.

    ``LangPackClient`` implements it over HTTP. Errors are ``httpx.HTTPError``
    for transport failures and ``LangPackError`` for unusable payloads.
    """

    async def get_config(self, client_lang_code: Optional[str] = None) -> Optional[str]: ...

    async def get_strings(self, lang_code: str, keys: Iterable[str]) -> List[LocalizationEntry]: ...

    async def get_languages(self) -> List[LocalizationInfo]: ...

    async def get_lang_pack(self, lang_code: str) -> Localization: ...
