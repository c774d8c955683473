"""
Service settings, read from the environment.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the render service."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # Artifact store
    output_dir: Path = Path("/output")

    # Access gate
    api_key: str | None = None
    api_keys_file: Path = Path("/app/apikeys.txt")
    api_keys_reload_ms: int = 30_000

    # Admission control
    rate_limit_window_ms: int = 60_000
    rate_limit_max: int = 120
    max_body_bytes: int = 15 * 1024 * 1024

    # Rendering
    load_timeout_ms: int = 60_000
    settle_delay_ms: int = 100
    browser_args: list[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def init_settings(settings: Settings) -> Settings:
    """Install an explicit settings instance (tests, embedding)."""
    global _settings
    _settings = settings
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() reloads."""
    global _settings
    _settings = None
