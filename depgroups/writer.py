"""Serialization of a planned configuration to a Dependabot policy file."""

from __future__ import annotations

from pathlib import Path
from typing import List

import yaml

from .logging import get_logger
from .models import ECOSYSTEM_ORDER
from .planner import PlanResult

logger = get_logger("writer")


def render_header(result: PlanResult) -> str:
    configuration = result.configuration
    ecosystems = [name for name in ECOSYSTEM_ORDER if name in result.reports]
    lines: List[str] = [
        "# Dependabot configuration generated by depgroups",
        f"# Tier: {configuration.tier} ({'grouped' if configuration.grouped else 'basic'})",
        "#",
        f"# Detected ecosystems: {', '.join(ecosystems) or 'none'}",
    ]
    for name in ecosystems:
        frameworks = ", ".join(result.reports[name].frameworks)
        if frameworks:
            lines.append(f"# {name}: {frameworks}")
    if result.nested:
        lines.append("#")
        lines.append("# Not monitored (below the project root):")
        lines.extend(f"#   {path}" for path in result.nested)
    return "\n".join(lines) + "\n"


def render_config(result: PlanResult) -> str:
    """Return the YAML text for ``result``, comment header included."""
    body = yaml.safe_dump(
        result.configuration.to_dict(),
        sort_keys=False,
        default_flow_style=False,
    )
    return f"{render_header(result)}\n{body}"


def write_config(result: PlanResult, path: Path) -> Path:
    """Write the rendered configuration, creating parent directories."""
    target = path if path.is_absolute() else result.root / path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_config(result), encoding="utf-8")
    logger.info("Wrote %s", target)
    return target


__all__ = ["render_config", "render_header", "write_config"]
