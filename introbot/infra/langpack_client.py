"""HTTP client for the language pack backend."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from ..core.errors import LangPackError
from ..localization.models import Localization, LocalizationEntry, LocalizationInfo, entry_from_dict

logger = logging.getLogger(__name__)


class LangPackClient:
    """Language pack backend client."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self):
        await self.client.aclose()

    async def _get(self, path: str, params: Any = None) -> Dict[str, Any]:
        response = await self.client.get(path, params=params)
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as e:
            raise LangPackError(f"{path}: response is not JSON") from e
        if not isinstance(data, dict):
            raise LangPackError(f"{path}: expected an object, got {type(data).__name__}")
        return data

    @staticmethod
    def _list(data: Dict[str, Any], field: str) -> List[Any]:
        items = data.get(field, [])
        if not isinstance(items, list):
            raise LangPackError(f"'{field}' must be a list, got {type(items).__name__}")
        return items

    async def get_config(self, client_lang_code: Optional[str] = None) -> Optional[str]:
        """Language the backend suggests for a client with the given locale."""
        params = {"lang_code": client_lang_code} if client_lang_code else None
        data = await self._get("/config", params=params)
        code = data.get("suggested_lang_code")
        return code or None

    async def get_strings(self, lang_code: str, keys: Iterable[str]) -> List[LocalizationEntry]:
        params = [("lang_code", lang_code)] + [("keys", k) for k in keys]
        data = await self._get("/langpack/strings", params=params)
        return [entry_from_dict(e) for e in self._list(data, "strings")]

    async def get_languages(self) -> List[LocalizationInfo]:
        data = await self._get("/langpack/languages")
        result = []
        for item in self._list(data, "languages"):
            try:
                result.append(
                    LocalizationInfo(
                        language_code=item["lang_code"],
                        title=item.get("name", item["lang_code"]),
                        localized_title=item.get("native_name", item.get("name", item["lang_code"])),
                    )
                )
            except (KeyError, TypeError) as e:
                raise LangPackError(f"malformed language entry: {item!r}") from e
        return result

    async def get_lang_pack(self, lang_code: str) -> Localization:
        try:
            data = await self._get(f"/langpack/{lang_code}")
        except (httpx.HTTPError, LangPackError) as e:
            logger.error(f"Language pack download failed ({lang_code}): {e}")
            raise
        if data.get("lang_code", lang_code) != lang_code:
            raise LangPackError(f"asked for '{lang_code}', got '{data.get('lang_code')}'")
        try:
            version = int(data.get("version", 0))
        except (TypeError, ValueError) as e:
            raise LangPackError(f"bad version for '{lang_code}': {data.get('version')!r}") from e
        return Localization(
            version=version,
            entries=tuple(entry_from_dict(e) for e in self._list(data, "strings")),
        )
