"""Configuration provider ports.

Defines the interfaces for loading application configuration and for looking
up per-tenant routing configuration.
"""

from pathlib import Path
from typing import Protocol

from lantern.domain.config import LanternConfig, TenantConfig


class ConfigProvider(Protocol):
    """Protocol for loading and providing configuration."""

    def load(self, lantern_dir: Path) -> LanternConfig:
        """Load configuration from the lantern directory.

        Args:
            lantern_dir: Path to .lantern directory containing config.toml

        Returns:
            LanternConfig instance with loaded or default values

        Note:
            Implementations should gracefully fall back to defaults
            if config file is missing or invalid.
        """
        ...


class TenantConfigSource(Protocol):
    """Protocol for per-tenant routing configuration lookups."""

    def get_tenant_config(self, tenant_id: int) -> TenantConfig:
        """Return the routing config of a tenant (tenant 0 is global)."""
        ...
