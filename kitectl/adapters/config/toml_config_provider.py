"""TOML-based configuration provider.

Config loading priority (highest to lowest):
1. Explicit: --config FILE
2. Global: ~/.config/kitectl/config.toml (user defaults)
3. Built-in defaults
"""

import logging
from pathlib import Path

from kitectl.domain.config import KitectlConfig
from kitectl.shared.config_io import (
    config_data_to_kitectl_config,
    get_global_config_path,
    load_config_data,
    merge_config_data,
)

logger = logging.getLogger(__name__)


class TomlConfigProvider:
    """Configuration provider that loads from TOML files.

    Implements config cascade:
    1. Load global config if present
    2. Load explicit config file if given
    3. Explicit values override global values (key-level merge per section)
    4. Missing values fall back to built-in defaults

    Gracefully handles missing or invalid configs with warnings.
    """

    def _apply(
        self, config: KitectlConfig, data: dict, path: Path, label: str
    ) -> tuple[KitectlConfig, dict]:
        """Layer one file's data over what has been loaded so far.

        Returns the unchanged config and data if the merged result is invalid.
        """
        try:
            file_data = load_config_data(path)
            merged = merge_config_data(data, file_data)
            config = config_data_to_kitectl_config(merged)
            logger.debug("Loaded %s config from %s", label, path)
            return config, merged
        except (FileNotFoundError, ValueError) as e:
            logger.warning(
                "Failed to parse %s config at %s: %s. Ignoring it.",
                label,
                path,
                e,
            )
            return config, data

    def load(self, config_file: Path | None = None) -> KitectlConfig:
        """Load configuration with global fallback.

        Args:
            config_file: Optional explicit config file

        Returns:
            KitectlConfig instance with merged values or defaults
        """
        config = KitectlConfig.default()
        data: dict = {}

        global_path = get_global_config_path()
        if global_path.exists():
            config, data = self._apply(config, data, global_path, "global")

        if config_file is not None:
            if config_file.exists():
                config, data = self._apply(config, data, config_file, "explicit")
            else:
                logger.warning("Config file %s does not exist. Ignoring it.", config_file)

        return config
