"""
Configuration module for managing environment variables and settings.
"""

import os
from pathlib import Path
from typing import FrozenSet, List, Optional

from dotenv import load_dotenv

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class Config:
    """Configuration manager for review settings."""

    def __init__(self, env_path: Optional[Path] = None):
        """
        Initialize configuration and load environment variables.

        Args:
            env_path: ``.env`` file to load; defaults to the project root
        """
        if env_path is None:
            env_path = Path(__file__).parent.parent.parent / ".env"
        load_dotenv(env_path)

        self._problems: List[str] = []

        self.max_findings_per_file: int = self._int_env("TAINTREVIEW_MAX_FINDINGS_PER_FILE", 5)
        self.fail_on_high: bool = (
            os.getenv("TAINTREVIEW_FAIL_ON_HIGH", "false").strip().lower() in TRUE_VALUES
        )
        self.extensions: Optional[FrozenSet[str]] = self._extensions_env("TAINTREVIEW_EXTENSIONS")

    def _int_env(self, name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            return int(raw)
        except ValueError:
            self._problems.append(f"{name}={raw!r} is not an integer - using {default}")
            return default

    @staticmethod
    def _extensions_env(name: str) -> Optional[FrozenSet[str]]:
        raw = os.getenv(name)
        if not raw:
            return None
        suffixes = set()
        for part in raw.split(","):
            part = part.strip().lower()
            if part:
                suffixes.add(part if part.startswith(".") else f".{part}")
        return frozenset(suffixes) or None

    def validate(self) -> dict:
        """
        Validate the loaded settings.

        Returns:
            Dictionary with validation results
        """
        missing = []
        warnings = list(self._problems)

        if self.max_findings_per_file < 1:
            missing.append("TAINTREVIEW_MAX_FINDINGS_PER_FILE must be at least 1")

        return {
            "valid": len(missing) == 0,
            "missing": missing,
            "warnings": warnings,
        }


# Global config instance
config = Config()
