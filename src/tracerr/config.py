from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    log_level: str = Field(default="INFO")
    json_indent: int | None = Field(default=None)
    show_stack: bool = Field(default=True)

    @field_validator("json_indent", mode="before")
    @classmethod
    def _parse_json_indent(cls, v: int | str | None) -> int | str | None:
        if v == "":
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    model_config = SettingsConfigDict(
        env_prefix="TRACERR_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )
