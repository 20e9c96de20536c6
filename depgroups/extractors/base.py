"""Base classes for manifest extractor strategies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ..logging import get_logger
from ..models import RawDependency

logger = get_logger("extractors")


class ManifestExtractor(ABC):
    """Contract for turning one manifest dialect into raw dependencies."""

    ecosystem: str = ""

    def extract(self, path: Path) -> List[RawDependency]:
        """Read ``path`` and return its dependency declarations in file order.

        Unreadable files yield no dependencies rather than an error.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", path.name, exc)
            return []
        return self.parse(text, path.name)

    @abstractmethod
    def parse(self, text: str, source: str) -> List[RawDependency]:
        """Parse manifest ``text``; ``source`` names the file it came from."""
