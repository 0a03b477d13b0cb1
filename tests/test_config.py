import pytest

from archive_mcp.client import DEFAULT_BASE_URL, ArchiveClient
from archive_mcp.config import ClientState, Settings, build_client_state


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("OXARCHIVE_API_KEY", "OXARCHIVE_BASE_URL", "OXARCHIVE_TIMEOUT", "OXARCHIVE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings(_env_file=None)
    assert settings.api_key is None
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.timeout_seconds == 60.0
    assert settings.log_level == "INFO"


def test_reads_environment(clean_env):
    clean_env.setenv("OXARCHIVE_API_KEY", " 0xa_live ")
    clean_env.setenv("OXARCHIVE_TIMEOUT", "15")
    clean_env.setenv("OXARCHIVE_LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.api_key == "0xa_live"
    assert settings.timeout_seconds == 15.0
    assert settings.log_level == "DEBUG"


def test_blank_key_counts_as_missing(clean_env):
    clean_env.setenv("OXARCHIVE_API_KEY", "   ")
    assert Settings(_env_file=None).api_key is None


def test_missing_key_gives_unconfigured_state(clean_env):
    state = build_client_state(Settings(_env_file=None))
    assert state == ClientState.unconfigured()
    assert not state.is_configured


@pytest.mark.asyncio
async def test_key_gives_configured_state(clean_env):
    state = build_client_state(Settings(_env_file=None, api_key="0xa_live"))
    try:
        assert state.is_configured
        assert isinstance(state.client, ArchiveClient)
    finally:
        await state.client.aclose()
