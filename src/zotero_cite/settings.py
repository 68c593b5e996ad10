"""Configuration management using Pydantic Settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CiteSettings(BaseSettings):
    """zotero-cite settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ZOTERO_",
        extra="ignore",
    )

    # Library access
    library_id: str | None = Field(default=None)
    library_type: Literal["user", "group"] = Field(default="user")
    api_key: str | None = Field(default=None)
    local: bool = Field(default=False)

    # Better BibTeX
    use_better_bibtex: bool = Field(default=True)
    better_bibtex_port: int = Field(default=23119)

    # Remote calls
    request_timeout: int = Field(default=30, ge=1)
    retry_attempts: int = Field(default=3, ge=1)

    # Completion
    max_completions: int = Field(default=100, ge=1)


settings = CiteSettings()
