from __future__ import annotations

from functools import lru_cache
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    bot_token: str = Field(..., alias="BOT_TOKEN")
    database_url: str = Field(..., alias="DATABASE_URL")
    tz: str = Field("UTC", alias="TZ")
    currency_symbol: str = Field("$", alias="CURRENCY_SYMBOL")
    reminder_interval_minutes: int = Field(1, alias="REMINDER_INTERVAL_MINUTES", ge=1)
    calendar_recent_expenses: int = Field(10, alias="CALENDAR_RECENT_EXPENSES", ge=0)

    @property
    def zoneinfo(self) -> ZoneInfo:
        return ZoneInfo(self.tz)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
