"""Load settings and env configuration."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobconnect.log import get_logger

log = get_logger(__name__)

load_dotenv()

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = PROJECT_ROOT / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
REPORTS_DIR: Path = PROJECT_ROOT / "reports"
DATA_DIR: Path = Path(os.environ.get("JOBCONNECT_DATA_DIR") or PROJECT_ROOT / "data")

LISTINGS_URL = (
    "https://raw.githubusercontent.com/SimplifyJobs/Summer2026-Internships/"
    "dev/.github/scripts/listings.json"
)
MAX_CSV_BYTES = 10 * 1024 * 1024

DEFAULT_SETTINGS: dict[str, Any] = {
    "listings_url": LISTINGS_URL,
    "fetch_retries": 3,
    "fetch_base_delay_ms": 1000,
    "fetch_timeout_s": 20.0,
    "max_csv_bytes": MAX_CSV_BYTES,
    "default_categories": ["Software Engineering"],
    "user_id": "current_user",
}


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Defaults overlaid with ``config/settings.yaml`` when it exists."""
    settings = dict(DEFAULT_SETTINGS)
    path = path or SETTINGS_PATH
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if isinstance(data, dict):
            unknown = sorted(set(data) - set(DEFAULT_SETTINGS))
            if unknown:
                log.warning("Unknown settings in %s: %s", path.name, ", ".join(unknown))
            settings.update({k: v for k, v in data.items() if k in DEFAULT_SETTINGS})
        else:
            log.warning("Ignoring %s: expected a mapping, got %s", path.name, type(data).__name__)

    # Env wins over the settings file
    env_url = get_env("JOBCONNECT_LISTINGS_URL")
    if env_url:
        settings["listings_url"] = env_url
    return settings


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def ensure_dirs() -> None:
    for d in (REPORTS_DIR, DATA_DIR):
        d.mkdir(parents=True, exist_ok=True)
