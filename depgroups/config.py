"""Configuration loading for depgroups (.depgroups.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .models import TIER_FREE, Schedule, normalize_tier

CONFIG_FILENAME = ".depgroups.yml"
DEFAULT_MAX_DEPTH = 3
DEFAULT_OUTPUT = Path(".github") / "dependabot.yml"

_INTERVALS = {"daily", "weekly", "monthly"}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ScheduleConfig:
    """Update schedule settings."""

    interval: str = "weekly"
    day: str = "monday"
    time: str = "09:00"

    def to_schedule(self) -> Schedule:
        return Schedule(interval=self.interval, day=self.day, time=self.time)


@dataclass
class DepGroupsConfig:
    """Represents the settings defined in .depgroups.yml."""

    root: Path
    tier: str = TIER_FREE
    max_depth: int = DEFAULT_MAX_DEPTH
    exclude_dirs: List[str] = field(default_factory=list)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    open_pull_requests_limit: int = 10
    github_actions: bool = True
    promotional_grouping: Optional[bool] = None
    strict_groups: bool = False
    output: Path = DEFAULT_OUTPUT


def load_config(config_path: Path) -> DepGroupsConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DepGroupsConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = DepGroupsConfig(root=root)

    tier = _as_str(data.get("tier"))
    if tier is not None:
        try:
            config.tier = normalize_tier(tier)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

    max_depth = _as_int(data.get("max_depth"))
    if max_depth is not None:
        if max_depth < 0:
            raise ConfigError("max_depth must be zero or a positive integer")
        config.max_depth = max_depth

    config.exclude_dirs = _as_str_list(data.get("exclude_dirs"))

    schedule_data = _as_dict(data.get("schedule"))
    if schedule_data:
        interval = _as_str(schedule_data.get("interval"))
        if interval is not None:
            if interval.lower() not in _INTERVALS:
                raise ConfigError(
                    f"schedule.interval must be one of: {', '.join(sorted(_INTERVALS))}"
                )
            config.schedule.interval = interval.lower()
        day = _as_str(schedule_data.get("day"))
        if day:
            config.schedule.day = day.lower()
        time = _as_str(schedule_data.get("time"))
        if time:
            config.schedule.time = time

    limit = _as_int(data.get("open_pull_requests_limit"))
    if limit is not None:
        config.open_pull_requests_limit = limit

    github_actions = _as_bool(data.get("github_actions"))
    if github_actions is not None:
        config.github_actions = github_actions

    config.promotional_grouping = _as_bool(data.get("promotional_grouping"))
    config.strict_groups = _as_bool(data.get("strict_groups")) or False

    output = _as_str(data.get("output"))
    if output:
        config.output = Path(output)

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1", "on"}:
            return True
        if lowered in {"false", "no", "0", "off"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
