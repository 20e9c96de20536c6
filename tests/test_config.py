"""Tests for depgroups.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from depgroups.config import ConfigError, DepGroupsConfig, load_config
from depgroups.models import Schedule


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, DepGroupsConfig)
    assert config.root == tmp_path.resolve()
    assert config.tier == "free"
    assert config.max_depth == 3
    assert config.exclude_dirs == []
    assert config.schedule.to_schedule() == Schedule()
    assert config.open_pull_requests_limit == 10
    assert config.github_actions is True
    assert config.promotional_grouping is None
    assert config.strict_groups is False
    assert config.output == Path(".github") / "dependabot.yml"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".depgroups.yml"
    config_file.write_text(
        """
tier: Pro
max_depth: 2
exclude_dirs:
  - examples
  - fixtures
schedule:
  interval: Daily
  day: Friday
  time: "06:30"
open_pull_requests_limit: 4
github_actions: false
promotional_grouping: "off"
strict_groups: true
output: config/dependabot.yml
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.tier == "pro"
    assert config.max_depth == 2
    assert config.exclude_dirs == ["examples", "fixtures"]
    assert config.schedule.to_schedule() == Schedule(interval="daily", day="friday", time="06:30")
    assert config.open_pull_requests_limit == 4
    assert config.github_actions is False
    assert config.promotional_grouping is False
    assert config.strict_groups is True
    assert config.output == Path("config") / "dependabot.yml"


def test_load_config_accepts_empty_file(tmp_path: Path) -> None:
    (tmp_path / ".depgroups.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.tier == "free"


@pytest.mark.parametrize(
    "content",
    [
        "tier: gold\n",
        "max_depth: -1\n",
        "schedule:\n  interval: hourly\n",
        "- just\n- a list\n",
        "tier: [unclosed\n",
    ],
)
def test_load_config_rejects_invalid_content(tmp_path: Path, content: str) -> None:
    (tmp_path / ".depgroups.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
