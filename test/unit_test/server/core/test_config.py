"""Unit tests for server configuration settings model.

Tests verify that the Settings model binds environment variables and that
the grouped configuration properties expose them.
"""

from pathlib import Path

import pytest

from transparent_trust.server.core.config import (
    AnthropicConfig,
    CORSConfig,
    GitSyncConfig,
    RateLimitConfig,
    Settings,
)


@pytest.fixture
def env_example_path() -> Path:
    """Get path to .env.example file."""
    return Path(__file__).resolve().parent.parent.parent.parent.parent / ".env.example"


@pytest.fixture
def env_example_vars(env_example_path: Path) -> dict[str, str]:
    """Parse .env.example file and return environment variables."""
    env_vars = {}
    with open(env_example_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, value = line.split("=", 1)
                env_vars[key.strip()] = value.strip()
    return env_vars


def _settings() -> Settings:
    return Settings(_env_file=None)


class TestEnvExample:
    def test_every_setting_is_documented(self, env_example_vars: dict[str, str]):
        aliases = {field.alias for field in Settings.model_fields.values()}
        missing = aliases - set(env_example_vars)
        assert not missing, f"Undocumented settings: {sorted(missing)}"


class TestSettingsBinding:
    def test_server_binding(self, monkeypatch):
        monkeypatch.setenv("TRANSPARENT_TRUST_SERVER_HOST", "127.0.0.1")
        monkeypatch.setenv("TRANSPARENT_TRUST_SERVER_PORT", "9001")
        monkeypatch.setenv("TRANSPARENT_TRUST_LOG_LEVEL", "DEBUG")

        settings = _settings()
        assert settings.server_host == "127.0.0.1"
        assert settings.server_port == 9001
        assert settings.log_level == "DEBUG"

    def test_database_url_binding(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./dev.db")
        assert _settings().database_url == "sqlite+aiosqlite:///./dev.db"

    def test_llm_binding(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "openai")
        monkeypatch.setenv("LLM_TEMPERATURE", "0.7")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("OPENAI_BASE_URL", "https://llm.internal/v1")

        settings = _settings()
        assert settings.llm.provider == "openai"
        assert settings.llm.temperature == 0.7
        assert settings.openai.api_key == "sk-test"
        assert settings.openai.base_url == "https://llm.internal/v1"

    def test_cors_binding(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", '["https://app.example.com"]')
        monkeypatch.setenv("CORS_ALLOW_CREDENTIALS", "false")

        cors = _settings().cors
        assert isinstance(cors, CORSConfig)
        assert cors.origins == ["https://app.example.com"]
        assert cors.allow_credentials is False

    def test_git_sync_binding(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GIT_SYNC_ENABLED", "true")
        monkeypatch.setenv("GIT_REPO_PATH", str(tmp_path))
        monkeypatch.setenv("GIT_SYNC_AUTO_PUSH", "true")

        git_sync = _settings().git_sync
        assert isinstance(git_sync, GitSyncConfig)
        assert git_sync.enabled is True
        assert git_sync.repo_path == str(tmp_path)
        assert git_sync.auto_push is True

    def test_rate_limit_binding(self, monkeypatch):
        monkeypatch.setenv("RATE_LIMIT_ENABLED", "false")
        monkeypatch.setenv("RATE_LIMIT_LLM_REQUESTS", "3")

        rate_limit = _settings().rate_limit
        assert isinstance(rate_limit, RateLimitConfig)
        assert rate_limit.enabled is False
        assert rate_limit.llm_requests == 3


class TestSettingsDefaults:
    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for field in Settings.model_fields.values():
            monkeypatch.delenv(field.alias, raising=False)

    def test_server_defaults(self):
        settings = _settings()
        assert settings.server_host == "0.0.0.0"
        assert settings.server_port == 8000
        assert settings.auth_default_provider == "okta"

    def test_llm_defaults(self):
        settings = _settings()
        assert settings.llm.provider == "anthropic"
        assert settings.llm.max_tokens == 4096
        assert isinstance(settings.anthropic, AnthropicConfig)
        assert settings.anthropic.api_key is None

    def test_feature_defaults(self):
        settings = _settings()
        assert settings.git_sync.enabled is False
        assert settings.rate_limit.enabled is True
        assert settings.rate_limit.standard_requests == 100
