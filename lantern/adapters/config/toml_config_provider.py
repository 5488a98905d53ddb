"""TOML-based configuration provider.

Loads configuration from .lantern/config.toml with global config fallback.

Config loading priority (highest to lowest):
1. Local: .lantern/config.toml (deployment-specific)
2. Global: ~/.config/lantern/config.toml (user defaults)
3. Built-in defaults
"""

import logging
from pathlib import Path

from lantern.domain.config import LanternConfig
from lantern.shared.config_io import get_global_config_path, load_config_data

logger = logging.getLogger(__name__)


class TomlConfigProvider:
    """Configuration provider that loads from TOML files.

    Implements config cascade:
    1. Load global config (~/.config/lantern/config.toml) if present
    2. Load local config (.lantern/config.toml) if present
    3. Local values override global values (field-level merge, tenants
       merged per tenant)
    4. Missing values fall back to built-in defaults

    Gracefully handles missing or invalid configs with warnings.
    """

    def load(self, lantern_dir: Path) -> LanternConfig:
        """Load configuration with global fallback.

        Args:
            lantern_dir: Path to .lantern directory containing config.toml

        Returns:
            LanternConfig instance with merged global/local values or defaults
        """
        local_path = lantern_dir / "config.toml"
        global_path = get_global_config_path()

        config = LanternConfig.default()

        if global_path.exists():
            try:
                global_data = load_config_data(global_path)
                config = LanternConfig.from_partial(config, global_data)
                logger.debug("Loaded global config from %s", global_path)
            except (FileNotFoundError, ValueError, TypeError) as e:
                logger.warning(
                    "Failed to parse global config at %s: %s. Ignoring global config.",
                    global_path,
                    e,
                )

        if local_path.exists():
            try:
                local_data = load_config_data(local_path)
                config = LanternConfig.from_partial(config, local_data)
                logger.debug("Loaded local config from %s", local_path)
            except (FileNotFoundError, ValueError, TypeError) as e:
                logger.warning(
                    "Failed to parse config.toml: %s. Using global/default configuration.",
                    e,
                )

        return config
