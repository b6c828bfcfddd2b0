from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FIATCONV_", case_sensitive=False)

    cache_lifetime_seconds: int = 60 * 60
    # connect and per-read socket timeout, not a limit on the whole request
    http_timeout_seconds: float = 10.0
    api_base: str = "https://api.exchangeratesapi.io"
    cache_path: str = ""
    log_level: str = "WARNING"


def get_settings() -> Settings:
    return Settings()


def user_cache_dir() -> Path:
    """Return the per-user cache directory for the current platform.

    Raises OSError when it cannot be determined from the environment.
    """
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA")
        if not local:
            raise OSError("%LocalAppData% is not defined")
        return Path(local)

    home = os.environ.get("HOME")
    if sys.platform == "darwin":
        if not home:
            raise OSError("$HOME is not defined")
        return Path(home) / "Library" / "Caches"

    xdg = os.environ.get("XDG_CACHE_HOME")
    if xdg and os.path.isabs(xdg):
        return Path(xdg)
    if not home:
        raise OSError("neither $XDG_CACHE_HOME nor $HOME are defined")
    return Path(home) / ".cache"


def resolve_cache_path(settings: Settings, prog: str) -> str:
    if settings.cache_path:
        return settings.cache_path
    try:
        cache_dir = user_cache_dir()
    except OSError:
        return os.devnull
    name = Path(prog).name
    if not name or name == "__main__.py":
        name = "fiatconv"
    return str(cache_dir / name)
