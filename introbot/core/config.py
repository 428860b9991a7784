from __future__ import annotations

from typing import Annotated, List, Optional
from pathlib import Path
from dotenv import load_dotenv

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Load .env file explicitly
ENV_FILE_NAME = ".env"
env_path = Path(__file__).parent.parent.parent / ENV_FILE_NAME
load_dotenv(env_path, override=False)

DEFAULT_SUGGESTION_KEYS = ["Login.ContinueWithLocalization"]


def _split_csv(v) -> list:
    if v in (None, "", []):
        return []
    if isinstance(v, (list, tuple)):
        return list(v)
    if isinstance(v, str):
        return [x.strip() for x in v.split(",") if x.strip()]
    return []


class Settings(BaseSettings):
    BOT_TOKEN: str = ""
    OWNER_IDS: Annotated[List[int], NoDecode] = []
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/bot.db"
    BASELINE_LANG: str = "en"
    LANGPACK_API_URL: str = "http://localhost:8080"
    LANGPACK_API_TIMEOUT: float = 10.0
    ACTIVATION_TIMEOUT: float = 30.0  # 0 disables the bound
    SUGGESTION_KEYS: Annotated[List[str], NoDecode] = list(DEFAULT_SUGGESTION_KEYS)
    DEBUG: bool = False

    @field_validator("OWNER_IDS", mode="before")
    @classmethod
    def parse_owner_ids(cls, v):  # type: ignore
        return [int(x) for x in _split_csv(v)]

    @field_validator("SUGGESTION_KEYS", mode="before")
    @classmethod
    def parse_suggestion_keys(cls, v):  # type: ignore
        keys = [str(x) for x in _split_csv(v)]
        return keys or list(DEFAULT_SUGGESTION_KEYS)

    @property
    def activation_timeout(self) -> Optional[float]:
        return self.ACTIVATION_TIMEOUT if self.ACTIVATION_TIMEOUT > 0 else None

    model_config = SettingsConfigDict(
        env_file=ENV_FILE_NAME,
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
