from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Connection and mapping settings.

    Values are read from MINIDAO_DATABASE, MINIDAO_DIALECT, ... when not
    passed explicitly.
    """

    model_config = SettingsConfigDict(env_prefix="MINIDAO_")

    database: str = ":memory:"
    dialect: str | None = None
    naming: Literal["camel", "identity"] = "camel"
    quote_identifiers: bool = False
    log_sql: bool = True

    @field_validator("dialect")
    @classmethod
    def normalize_dialect(cls, value):
        if value is None:
            return None
        value = value.strip().lower()
        return value or None
