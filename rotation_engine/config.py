# rotation_engine/config.py
from __future__ import annotations
import logging
import os
import textwrap
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .constants import BALANCED_ROTATION, DEFAULT_INTERVAL_DAYS, MAX_INTERVAL_DAYS
from .models import StrategyConfig, Target

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ROTATION_ENGINE_CONFIG"
DEFAULT_CONFIG_PATH = "config/rotation.yaml"


class AppSettings(BaseModel):
    default_strategy: str = BALANCED_ROTATION
    assignment_interval_days: Optional[int] = DEFAULT_INTERVAL_DAYS
    history_window: Optional[int] = None
    participants_csv: Optional[str] = None
    history_csv: Optional[str] = None
    strategy: Dict[str, Any] = Field(default_factory=dict)
    targets: List[Target] = Field(default_factory=list)

    @field_validator("targets", mode="before")
    @classmethod
    def _targets_from_mapping(cls, v):
        # YAML may give {label: capacity} or {id: {...}} instead of a list
        if isinstance(v, dict):
            out = []
            for key, entry in v.items():
                if isinstance(entry, dict):
                    out.append({"id": str(key), "label": str(key), **entry})
                else:
                    out.append({"id": str(key), "label": str(key), "capacity": entry})
            return out
        return v

    def interval_days(self) -> int:
        """Configured cadence, defaulting to 14 and clamped to 1..365."""
        interval = self.assignment_interval_days
        if interval is None:
            return DEFAULT_INTERVAL_DAYS
        if interval < 1:
            logger.warning("Invalid assignment_interval_days: %s. Defaulting to %d.", interval, DEFAULT_INTERVAL_DAYS)
            return DEFAULT_INTERVAL_DAYS
        if interval > MAX_INTERVAL_DAYS:
            logger.warning("Assignment interval %s exceeds maximum (%d days). Using %d.",
                           interval, MAX_INTERVAL_DAYS, MAX_INTERVAL_DAYS)
            return MAX_INTERVAL_DAYS
        return interval

    def strategy_config(self, **overrides) -> StrategyConfig:
        data = dict(self.strategy)
        if self.history_window is not None:
            data.setdefault("history_window", self.history_window)
        data.update({k: v for k, v in overrides.items() if v is not None})
        return StrategyConfig.from_mapping(data)


def settings_path(path: Optional[str] = None) -> str:
    return path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH


def parse_settings(text: str) -> AppSettings:
    obj = yaml.safe_load(text) or {}
    if not isinstance(obj, dict):
        raise ValueError("Settings file must contain a mapping at the top level.")
    return AppSettings(**obj)


def load_settings(path: Optional[str] = None) -> AppSettings:
    """Load YAML settings from `path`, $ROTATION_ENGINE_CONFIG or the default location."""
    p = settings_path(path)
    with open(p, "r", encoding="utf-8") as f:
        return parse_settings(f.read())


def ensure_assets_exist(path: Optional[str] = None) -> str:
    p = settings_path(path)
    folder = os.path.dirname(p)
    if folder:
        os.makedirs(folder, exist_ok=True)
    if not os.path.exists(p):
        with open(p, "w", encoding="utf-8") as f:
            f.write(DEFAULT_SETTINGS_YAML)
    return p


# ===== Sample settings (written by ensure_assets_exist) =====
DEFAULT_SETTINGS_YAML = textwrap.dedent("""\
default_strategy: balanced_rotation
assignment_interval_days: 14
history_window: 2
participants_csv: data/participants.csv
history_csv: data/history.csv

strategy:
  max_attempts: 50
  rotation_weight: 0.7
  balance_weight: 0.3
  skill_threshold: 0.5

targets:
  - id: kitchen
    label: Kitchen
    capacity: 2
  - id: toilet_a
    label: Toilet A
    capacity: 1
    excluded_groups: [B]
  - id: toilet_b
    label: Toilet B
    capacity: 1
    excluded_groups: [A]
  - id: hallway
    label: Hallway
    capacity: 1
""")
