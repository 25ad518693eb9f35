"""
Scheduler configuration.

Defaults mirror the scheduler's stock preferences (07:30 - 16:30 window,
no full sections, at-risk allowed, 20 schedules). A YAML file can override
any field; the path comes from ``SCHEDULER_CONFIG`` or ``config.yaml``.
"""
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from constraints import Constraints

CONFIG_ENV_VAR = "SCHEDULER_CONFIG"
DEFAULT_CONFIG_PATH = "config.yaml"


@dataclass
class SchedulerConfig:
    environment: str = "development"

    # Default constraints, "HH:MM" like the preferences screen stores them
    earliest_start: str = "07:30"
    latest_end: str = "16:30"
    allow_full: bool = False
    allow_at_risk: bool = True
    max_full_per_schedule: int = 1
    max_schedules: int = 20
    preferred_end: Optional[str] = None
    late_start: str = "17:00"

    # Search budget the host applies per request
    max_steps: Optional[int] = 200_000
    max_seconds: Optional[float] = 5.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchedulerConfig":
        merged = asdict(cls())
        for k, v in data.items():
            if k in merged:
                merged[k] = v
        return cls(**merged)

    def default_constraints(self) -> Constraints:
        return Constraints.from_mapping(
            {
                "earliest_start": self.earliest_start,
                "latest_end": self.latest_end,
                "allow_full": self.allow_full,
                "allow_at_risk": self.allow_at_risk,
                "max_full_per_schedule": self.max_full_per_schedule,
                "max_schedules": self.max_schedules,
                "preferred_end": self.preferred_end,
                "late_start": self.late_start,
            }
        )


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    return yaml.safe_load(path.read_text(encoding="utf-8")) or {}


def load_config(path: Optional[str] = None) -> SchedulerConfig:
    cfg_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    data = _load_yaml(cfg_path)
    if not isinstance(data, dict):
        raise ValueError(f"{cfg_path} must contain a mapping")
    return SchedulerConfig.from_dict(data)
