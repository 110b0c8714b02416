"""Configuration provider port."""

from pathlib import Path
from typing import Protocol

from kitectl.domain.config import KitectlConfig


class ConfigProvider(Protocol):
    """Protocol for building the effective KitectlConfig."""

    def load(self, config_file: Path | None = None) -> KitectlConfig:
        """Load the layered configuration.

        Args:
            config_file: Extra file applied over the global config

        Returns:
            KitectlConfig; defaults stand in for anything missing or invalid
        """
        ...
