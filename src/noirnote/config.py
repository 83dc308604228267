"""Global tuning constants and runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

ROOT = Path(__file__).resolve().parents[2]

BASE_SCORE = 1000
DIFFICULTY_MULTIPLIERS = {
    "easy": 1.0,
    "medium": 1.5,
    "hard": 2.0,
}

# Charged once per wrong final report.
PENALTY_MS = 5 * 60 * 1000
AUTOSAVE_DEBOUNCE_MS = 500
LEADERBOARD_LIMIT = 100
HISTORY_LIMIT = 100
FALLBACK_DISPLAY_NAME = "Detective"

DEFAULT_DB_PATH = ROOT / "data" / "noirnote.db"
DEFAULT_CASES_PATH = ROOT / "data" / "cases.yml"
DEFAULT_SETTINGS_PATH = ROOT / "data" / "settings.yml"


@dataclass
class Settings:
    db_path: Path = DEFAULT_DB_PATH
    cases_path: Path = DEFAULT_CASES_PATH
    log_level: str = "INFO"
    player_id: str | None = None
    display_name: str | None = None

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Read settings from YAML (if present), then apply environment overrides."""
        settings_path = Path(path) if path else DEFAULT_SETTINGS_PATH
        data: dict = {}
        if settings_path.exists():
            data = yaml.safe_load(settings_path.read_text(encoding="utf-8")) or {}
        settings = cls(
            db_path=Path(data.get("db_path", DEFAULT_DB_PATH)),
            cases_path=Path(data.get("cases_path", DEFAULT_CASES_PATH)),
            log_level=str(data.get("log_level", "INFO")).upper(),
            player_id=data.get("player_id"),
            display_name=data.get("display_name"),
        )
        if os.getenv("NOIRNOTE_DB"):
            settings.db_path = Path(os.environ["NOIRNOTE_DB"])
        if os.getenv("NOIRNOTE_CASES"):
            settings.cases_path = Path(os.environ["NOIRNOTE_CASES"])
        if os.getenv("NOIRNOTE_LOG_LEVEL"):
            settings.log_level = os.environ["NOIRNOTE_LOG_LEVEL"].upper()
        if os.getenv("NOIRNOTE_PLAYER"):
            settings.player_id = os.environ["NOIRNOTE_PLAYER"]
        return settings
