from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmptyParticipantsPolicy(str, Enum):
    STRICT = "strict"
    PAYER = "payer"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    empty_participants_policy: EmptyParticipantsPolicy = Field(
        EmptyParticipantsPolicy.STRICT,
        alias="EMPTY_PARTICIPANTS_POLICY",
    )
    currency_label: str = Field("원", alias="CURRENCY_LABEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
