# config.py
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_MODEL = "gemini-2.0-flash"
GITHUB_API_BASE = "https://api.github.com"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ConfigError(Exception):
    pass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


class Settings(BaseModel):
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    github_token: Optional[str] = None
    github_api_base: str = GITHUB_API_BASE

    # retry policy; these are tunables, not protocol constants
    max_retries: int = 3
    base_delay_ms: int = 1000
    jitter_ms: int = 200

    temperature: float = 0.2
    max_output_tokens: int = 700

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Read settings from the process environment (and a .env file if present).
        """
        load_dotenv()
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_MODEL,
            github_token=os.getenv("GITHUB_TOKEN") or None,
            github_api_base=os.getenv("GITHUB_API_BASE") or GITHUB_API_BASE,
            max_retries=_env_int("REVIEW_MAX_RETRIES", 3),
            base_delay_ms=_env_int("REVIEW_BASE_DELAY_MS", 1000),
            jitter_ms=_env_int("REVIEW_JITTER_MS", 200),
            temperature=_env_float("REVIEW_TEMPERATURE", 0.2),
            max_output_tokens=_env_int("REVIEW_MAX_OUTPUT_TOKENS", 700),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
