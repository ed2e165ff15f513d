"""Load settings from .env, config/settings.yaml and the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobhunt.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
DATA_DIR: Path = ROOT_DIR / "data"
BACKUP_DIR: Path = ROOT_DIR / "backups"

GROQ_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_TEXT_MODEL = "llama-3.3-70b-versatile"
DEFAULT_ANALYSIS_MODEL = "llama-3.3-70b-versatile"


@dataclass
class Settings:
    data_dir: Path = DATA_DIR
    backup_dir: Path = BACKUP_DIR
    timezone: str | None = None
    api_key: str = ""
    base_url: str = GROQ_BASE_URL
    text_model: str = DEFAULT_TEXT_MODEL
    analysis_model: str = DEFAULT_ANALYSIS_MODEL


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        log.warning("Ignoring %s: expected a mapping, got %s", path.name, type(data).__name__)
        return {}
    return data


def load_settings(path: Path | None = None) -> Settings:
    """Build Settings; environment variables win over settings.yaml."""
    data = _load_yaml(path or SETTINGS_PATH)
    groq = data.get("groq") or {}

    data_dir = get_env("JOBHUNT_DATA_DIR") or data.get("data_dir") or DATA_DIR
    backup_dir = get_env("JOBHUNT_BACKUP_DIR") or data.get("backup_dir") or BACKUP_DIR

    settings = Settings(
        data_dir=Path(data_dir).expanduser(),
        backup_dir=Path(backup_dir).expanduser(),
        timezone=get_env("JOBHUNT_TZ") or data.get("timezone") or None,
        api_key=get_env("GROQ_API_KEY"),
        base_url=get_env("GROQ_BASE_URL") or groq.get("base_url") or GROQ_BASE_URL,
        text_model=get_env("GROQ_LLM_MODEL") or groq.get("text_model") or DEFAULT_TEXT_MODEL,
        analysis_model=(
            get_env("GROQ_ANALYSIS_MODEL")
            or groq.get("analysis_model")
            or DEFAULT_ANALYSIS_MODEL
        ),
    )
    log.debug("Settings loaded — data_dir=%s, tz=%s", settings.data_dir, settings.timezone or "local")
    return settings


def ensure_dirs(settings: Settings) -> None:
    for d in (settings.data_dir, settings.backup_dir):
        d.mkdir(parents=True, exist_ok=True)
