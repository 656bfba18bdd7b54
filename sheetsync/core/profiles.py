from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError


load_dotenv(override=False)

LOG_DIR_ENV = "SHEETSYNC_LOG_DIR"
PROFILES_ENV = "SHEETSYNC_PROFILES"
DEFAULT_PROFILE = "default"

SyncScope = Literal["document", "page", "selection"]


class SyncSettings(BaseModel):
    """A single named profile of sync options.

    Attributes:
        name: Profile key.
        scope: Portion of the document to sync.
        clear_on_empty: Clear text nodes whose bound value is blank.
        include_main_components: Bind inside main components without a ``+`` prefix.
        random_seed: Seed for random index modes; ``None`` for nondeterministic runs.
        image_timeout_sec: Timeout for image downloads.
        progress_every: Emit a per-node progress message every N nodes.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = DEFAULT_PROFILE
    scope: SyncScope = "page"
    clear_on_empty: bool = True
    include_main_components: bool = False
    random_seed: int | None = None
    image_timeout_sec: float = Field(default=10.0, gt=0)
    progress_every: int = Field(default=1, ge=1)


def _project_root() -> Path:
    # In source layout, this file is under <root>/sheetsync/core
    return Path(__file__).resolve().parents[2]


def _config_dir() -> Path:
    return _project_root() / "sheetsync" / "config"


def log_dir() -> Path:
    env = os.getenv(LOG_DIR_ENV)
    if env:
        return Path(env)
    return Path.home() / ".sheetsync" / "logs"


def load_profiles(path: str | Path | None = None) -> dict[str, SyncSettings]:
    """Load sync profiles from config/profiles.yaml.

    Returns a dict of profile-key -> SyncSettings. The built-in ``default``
    profile is always present even when the file does not define it.
    """
    env_path = os.getenv(PROFILES_ENV)
    cfg_path = Path(path) if path else Path(env_path) if env_path else _config_dir() / "profiles.yaml"
    if not cfg_path.exists():
        raise ConfigError(f"profiles file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"profiles file must contain a mapping: {cfg_path}")
    profiles_raw: Dict[str, Any] = data.get("profiles") or {}
    if not isinstance(profiles_raw, dict):
        raise ConfigError("'profiles' must be a mapping of name -> options")

    profiles: dict[str, SyncSettings] = {DEFAULT_PROFILE: SyncSettings()}
    for key, raw in profiles_raw.items():
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ConfigError(f"invalid profile {key}: expected a mapping of options")
        try:
            profiles[key] = SyncSettings.model_validate({**raw, "name": key})
        except ValidationError as e:
            raise ConfigError(f"invalid profile {key}: {e}") from e
    return profiles


def get_settings(name: str | None = None, path: str | Path | None = None) -> SyncSettings:
    profiles = load_profiles(path)
    key = name or DEFAULT_PROFILE
    if key not in profiles:
        raise ConfigError(f"unknown profile: {key}")
    return profiles[key]
