"""Runtime configuration loaded from the environment (and an optional .env) via Pydantic settings."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from archive_mcp.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS, ArchiveClient


class Settings(BaseSettings):
    """Settings for the 0xArchive MCP server process."""

    api_key: Optional[str] = Field(default=None, alias="OXARCHIVE_API_KEY")
    base_url: str = Field(default=DEFAULT_BASE_URL, alias="OXARCHIVE_BASE_URL")
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, alias="OXARCHIVE_TIMEOUT", gt=0)
    log_level: str = Field(default="INFO", alias="OXARCHIVE_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("api_key", mode="before")
    @classmethod
    def _blank_key_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return str(value).strip().upper() if value is not None else "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


@dataclass(frozen=True)
class ClientState:
    """Whether the upstream client could be built at startup.

    Resolved once and handed to the dispatcher; there is no other path to
    the client.
    """
    client: Optional[ArchiveClient] = None

    @classmethod
    def configured(cls, client) -> "ClientState":
        return cls(client=client)

    @classmethod
    def unconfigured(cls) -> "ClientState":
        return cls(client=None)

    @property
    def is_configured(self) -> bool:
        return self.client is not None


def build_client_state(settings: Settings) -> ClientState:
    if not settings.api_key:
        return ClientState.unconfigured()
    return ClientState.configured(
        ArchiveClient(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
        )
    )
