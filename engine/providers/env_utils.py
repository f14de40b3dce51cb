"""Environment and .env lookups for provider and game settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_DOTENV_LOADED = False


def load_dotenv(path: str | Path = ".env", *, force: bool = False) -> None:
    """Load `KEY=value` lines from a .env file without overriding the environment."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED and not force:
        return
    _DOTENV_LOADED = True

    dotenv_path = Path(path)
    if not dotenv_path.is_file():
        return

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ").strip()
        key, sep, value = line.partition("=")
        if not sep or not key.strip():
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        os.environ.setdefault(key.strip(), value)


def getenv_any(*names: str, default: str | None = None) -> str | None:
    """Return the first non-empty variable among `names`."""
    load_dotenv()
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


def require_env_any(*names: str) -> str:
    """Like `getenv_any`, but a missing value is an error naming every candidate."""
    value = getenv_any(*names)
    if value is not None:
        return value
    raise ValueError(f"Missing required environment variable. Set one of: {', '.join(names)}")


@dataclass(frozen=True)
class GameSettings:
    """Process-wide defaults read from CODENAMES_* variables."""

    provider: str = "random"
    model: str | None = None
    record_dir: str | None = None

    @classmethod
    def from_env(cls) -> "GameSettings":
        return cls(
            provider=(getenv_any("CODENAMES_PROVIDER", default="random") or "random").strip().lower(),
            model=getenv_any("CODENAMES_MODEL"),
            record_dir=getenv_any("CODENAMES_RECORD_DIR"),
        )
