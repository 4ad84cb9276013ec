import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

TOKEN_MODES = ("diff", "strokes")
DEFAULT_DATABASE_URL = "sqlite:///clubscore/DATA/clubscore.db"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    database_url: str
    scoring_pin: str
    token_mode: str = "diff"
    log_level: str = "INFO"


def _normalize_database_url(value: Optional[str]) -> str:
    """Return a database url, treating bare file paths as SQLite databases."""
    url = (value or "").strip()
    if not url:
        return DEFAULT_DATABASE_URL
    if "://" in url or url.startswith("sqlite:"):
        return url
    if Path(url).suffix:
        return f"sqlite:///{url}"
    return url


def _choice(value: Optional[str], allowed: tuple[str, ...], default: str) -> str:
    picked = (value or "").strip()
    for option in allowed:
        if picked.lower() == option.lower():
            return option
    return default


def load_settings() -> Settings:
    return Settings(
        database_url=_normalize_database_url(os.getenv("DATABASE_URL")),
        scoring_pin=os.getenv("SCORING_PIN", "1234").strip(),
        token_mode=_choice(os.getenv("SCORECARD_TOKEN_MODE"), TOKEN_MODES, "diff"),
        log_level=_choice(os.getenv("LOG_LEVEL"), LOG_LEVELS, "INFO"),
    )
