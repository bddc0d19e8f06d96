"""Environment-driven settings for the scraper service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_PORT = 3000


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Service configuration."""

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    executable_path: str | None = None
    log_level: str = "INFO"
    chunk_delay_ms: int = 500
    launch_timeout_ms: int = 30000
    cors_origins: tuple[str, ...] = ("*",)

    @property
    def chunk_delay(self) -> float:
        """Pause between chunks in seconds."""
        return max(0, self.chunk_delay_ms) / 1000

    @classmethod
    def from_env(cls) -> Settings:
        executable_path = (
            os.environ.get("PUPPETEER_EXECUTABLE_PATH")
            or os.environ.get("BROWSER_EXECUTABLE_PATH")
            or None
        )
        origins = os.environ.get("CORS_ORIGINS", "*")
        return cls(
            host=os.environ.get("HOST", "0.0.0.0"),
            port=_env_int("PORT", DEFAULT_PORT),
            executable_path=executable_path,
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            chunk_delay_ms=_env_int("CHUNK_DELAY_MS", 500),
            launch_timeout_ms=_env_int("BROWSER_LAUNCH_TIMEOUT_MS", 30000),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from the environment once per process."""
    return Settings.from_env()
