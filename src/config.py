import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from src.teams.persistence import DEFAULT_REMOTE_BASE_URL

logger = logging.getLogger(__name__)

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = BASE_DIR / "data"
CONFIG_PATH = DATA_DIR / "team_config.json"

DEFAULT_TEAM_NAMES = ["Rojo", "Azul", "Verde", "Amarillo"]
DEFAULT_TEAM_COLORS = {
    "Rojo": {"color": "#EF4444", "bg": "#FEE2E2"},
    "Azul": {"color": "#3B82F6", "bg": "#DBEAFE"},
    "Verde": {"color": "#10B981", "bg": "#D1FAE5"},
    "Amarillo": {"color": "#F59E0B", "bg": "#FEF3C7"},
}


class TeamConfig(BaseModel):
    team_names: List[str] = Field(default_factory=lambda: list(DEFAULT_TEAM_NAMES))
    team_colors: Dict[str, Dict[str, str]] = Field(default_factory=lambda: dict(DEFAULT_TEAM_COLORS))
    fixed_overrides: Dict[str, str] = Field(default_factory=dict)
    sheet_url: str = ""

    assignments_key: str = "team_assignments_v13"
    attendance_key: str = "team_attendance_v1"
    cache_dir: str = str(DATA_DIR / "cache")

    remote_bin_id: Optional[str] = None
    remote_api_key: Optional[str] = None
    remote_base_url: str = DEFAULT_REMOTE_BASE_URL
    timeout_seconds: float = 30.0

    @model_validator(mode="after")
    def check_overrides(self):
        if len(set(self.team_names)) != len(self.team_names):
            raise ValueError("team_names must be unique")
        unknown = sorted({t for t in self.fixed_overrides.values() if t not in self.team_names})
        if unknown:
            raise ValueError(f"fixed_overrides point at unknown teams: {unknown}")
        return self

    @property
    def remote_enabled(self):
        return bool(self.remote_bin_id and self.remote_api_key)


def _flatten(raw):
    """The JSON file groups storage/remote settings; the model is flat."""
    flat = {k: v for k, v in raw.items() if k not in ("storage", "remote")}
    storage = raw.get("storage", {})
    remote = raw.get("remote", {})
    for key in ("assignments_key", "attendance_key", "cache_dir"):
        if key in storage:
            flat[key] = storage[key]
    if "base_url" in remote:
        flat["remote_base_url"] = remote["base_url"]
    if "bin_id" in remote:
        flat["remote_bin_id"] = remote["bin_id"]
    if "timeout_seconds" in remote:
        flat["timeout_seconds"] = remote["timeout_seconds"]
    return flat


def load_config(path=None, env=None) -> TeamConfig:
    """
    Load data/team_config.json (or `path`) and apply environment overrides.

    TEAMS_CONFIG_PATH, TEAMS_SHEET_URL, TEAMS_REMOTE_BIN_ID,
    TEAMS_REMOTE_API_KEY and TEAMS_REMOTE_BASE_URL are read from `env`
    (defaults to os.environ). The access key is only ever taken from the
    environment.
    """
    env = os.environ if env is None else env

    if path is None:
        path = env.get("TEAMS_CONFIG_PATH") or CONFIG_PATH
    path = Path(path)

    raw = {}
    if path.exists():
        with open(path, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    else:
        logger.info("Config %s not found, using defaults", path)

    values = _flatten(raw)
    values.pop("remote_api_key", None)

    if env.get("TEAMS_SHEET_URL"):
        values["sheet_url"] = env["TEAMS_SHEET_URL"]
    if env.get("TEAMS_REMOTE_BIN_ID"):
        values["remote_bin_id"] = env["TEAMS_REMOTE_BIN_ID"]
    if env.get("TEAMS_REMOTE_BASE_URL"):
        values["remote_base_url"] = env["TEAMS_REMOTE_BASE_URL"]
    values["remote_api_key"] = env.get("TEAMS_REMOTE_API_KEY") or None

    config = TeamConfig(**values)

    # Relative cache dirs are resolved against the project root
    cache_dir = Path(config.cache_dir)
    if not cache_dir.is_absolute():
        config.cache_dir = str(BASE_DIR / cache_dir)

    if not config.remote_enabled:
        logger.info("Remote store credentials not set; assignments are kept on this device only")
    return config
