from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_SECRET_FIELDS = ("bitget_api_secret", "bitget_passphrase")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Bitget (spot)
    bitget_api_key: str = Field(default="", validation_alias="BITGET_API_KEY")
    bitget_api_secret: str = Field(default="", validation_alias="BITGET_API_SECRET")
    bitget_passphrase: str = Field(default="", validation_alias="BITGET_PASSPHRASE")
    bitget_base_url: str = Field(default="https://api.bitget.com", validation_alias="BITGET_BASE_URL")
    http_timeout_seconds: float = Field(default=10.0, gt=0, validation_alias="HTTP_TIMEOUT_SECONDS")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    def redacted(self) -> dict[str, Any]:
        data = self.model_dump()
        for key in _SECRET_FIELDS:
            data[key] = "***" if data[key] else ""
        return data
