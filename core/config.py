"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass

DEFAULT_HOSTED_URL = "https://pub.dev"


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{value}'")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{value}'")


@dataclass
class Settings:
    """Settings shared by the CLI and the web application."""

    hosted_url: str = DEFAULT_HOSTED_URL
    timeout: float = 30.0
    max_concurrency: int = 6
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from PUBCHECK_* environment variables."""
        return cls(
            hosted_url=os.getenv("PUBCHECK_HOSTED_URL", DEFAULT_HOSTED_URL).rstrip("/"),
            timeout=_env_float("PUBCHECK_TIMEOUT", 30.0),
            max_concurrency=_env_int("PUBCHECK_MAX_CONCURRENCY", 6),
            log_level=os.getenv("PUBCHECK_LOG_LEVEL", "INFO").upper(),
        )
