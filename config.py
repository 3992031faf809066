# Di dalam file: config.py

import json
from typing import Any, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from models import JurisdictionMode


def _parse_string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(item).strip() for item in value if str(item).strip()]
    text = str(value).strip()
    if not text:
        return []
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return [str(item).strip() for item in parsed if str(item).strip()]
    return [part.strip() for part in text.replace(";", ",").split(",") if part.strip()]


class Settings(BaseSettings):
    default_jurisdiction_mode: JurisdictionMode = JurisdictionMode.CLASSICAL
    # Any agar parser env tidak memaksa format JSON untuk daftar
    cors_origins: Any = [
        "http://localhost",
        "http://localhost:3000",  # Alamat frontend Next.js
    ]
    log_level: str = "INFO"

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> List[str]:
        return _parse_string_list(value)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        text = str(value or "").strip().upper()
        return text or "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FARAID_",
        extra="ignore",
    )


settings = Settings()
