import pytest

from agents.llm_client import GeminiClient
from config import ConfigError, Settings

ENV_VARS = [
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GITHUB_TOKEN",
    "GITHUB_API_BASE",
    "REVIEW_MAX_RETRIES",
    "REVIEW_BASE_DELAY_MS",
    "REVIEW_JITTER_MS",
    "REVIEW_TEMPERATURE",
    "REVIEW_MAX_OUTPUT_TOKENS",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = Settings.from_env()

    assert settings.gemini_model == "gemini-2.0-flash"
    assert (settings.max_retries, settings.base_delay_ms, settings.jitter_ms) == (3, 1000, 200)
    assert settings.temperature == 0.2
    assert settings.max_output_tokens == 700
    assert settings.github_token is None


def test_overrides(monkeypatch):
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")
    monkeypatch.setenv("REVIEW_MAX_RETRIES", "5")
    monkeypatch.setenv("REVIEW_TEMPERATURE", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.gemini_model == "gemini-2.5-pro"
    assert settings.max_retries == 5
    assert settings.temperature == 0.0
    assert settings.log_level == "DEBUG"


def test_invalid_number_names_the_variable(monkeypatch):
    monkeypatch.setenv("REVIEW_BASE_DELAY_MS", "soon")

    with pytest.raises(ConfigError, match="REVIEW_BASE_DELAY_MS"):
        Settings.from_env()


def test_gemini_client_requires_api_key():
    with pytest.raises(ConfigError, match="GEMINI_API_KEY"):
        GeminiClient.from_settings(Settings())
