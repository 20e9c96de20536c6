"""Framework-aware dependency update grouping for polyglot projects."""

__version__ = "0.1.0"
