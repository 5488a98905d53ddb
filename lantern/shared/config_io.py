"""Configuration I/O utilities for reading and writing TOML config files.

This module handles serialization/deserialization of LanternConfig to/from TOML format.
"""

import os
import platform
import tomllib  # Built-in Python 3.11+
from pathlib import Path
from typing import Any

import tomli_w

from lantern.domain.config import LanternConfig


def get_global_config_path() -> Path:
    """Get the path to the global config file.

    The location is platform-dependent:
    - Linux/macOS: $XDG_CONFIG_HOME/lantern/config.toml or ~/.config/lantern/config.toml
    - Windows: %APPDATA%/lantern/config.toml

    Returns:
        Path to the global config file (may not exist)
    """
    if platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "lantern" / "config.toml"
        return Path.home() / ".config" / "lantern" / "config.toml"
    xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg_config:
        return Path(xdg_config) / "lantern" / "config.toml"
    return Path.home() / ".config" / "lantern" / "config.toml"


def load_config_data(path: Path) -> dict[str, Any]:
    """Load raw TOML data from a config file.

    Args:
        path: Path to config.toml file

    Returns:
        Dictionary with parsed TOML data

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in config file: {e}") from e


def load_config(path: Path) -> LanternConfig:
    """Load configuration from a TOML file over the built-in defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed or has invalid values
    """
    data = load_config_data(path)
    try:
        return LanternConfig.from_partial(LanternConfig.default(), data)
    except TypeError as e:
        raise ValueError(f"Invalid config in {path}: {e}") from e


def config_to_data(config: LanternConfig) -> dict[str, Any]:
    """Convert a LanternConfig to a TOML-serializable dictionary."""
    return {
        "sync": {
            "page_size": config.sync.page_size,
            "max_pages_per_run": config.sync.max_pages_per_run,
            "index_timeout": config.sync.index_timeout,
            "default_tenant": config.sync.default_tenant,
            "protected_meta_keys": list(config.sync.protected_meta_keys),
        },
        "storage": {"state_db": config.storage.state_db},
        "index": {
            "hosts": list(config.index.hosts),
            "index_prefix": config.index.index_prefix,
        },
        "content": {"export_path": config.content.export_path},
        "tenants": {
            str(tenant_id): {
                "synced_post_types": sorted(tenant.synced_post_types),
                "cross_tenant_search_active": tenant.cross_tenant_search_active,
            }
            for tenant_id, tenant in sorted(config.tenants.items())
        },
    }


def save_config(config: LanternConfig, path: Path) -> None:
    """Save configuration to a TOML file.

    Args:
        config: LanternConfig to save
        path: Destination path for config.toml
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(config_to_data(config), f)


def create_default_config_file(path: Path) -> None:
    """Create a default config.toml file with sensible defaults and comments.

    Args:
        path: Destination path for config.toml
    """
    # Template string keeps the comments that tomli_w would drop
    template = """\
# Lantern Configuration
# Created by: lantern init

[sync]
# Items fetched per listing page during a bulk sync
page_size = 350

# Full pages processed per tenant each time pending syncs run
max_pages_per_run = 1

# Seconds to wait for the search index before giving up on an item
index_timeout = 10.0

# Tenant used when a command does not name one
default_tenant = 1

# Metadata keys never copied into documents (underscore keys are always skipped)
protected_meta_keys = []

[storage]
# Sync state database, relative to .lantern/
state_db = "state.db"

[index]
hosts = ["http://localhost:9200"]
index_prefix = "lantern"

[content]
# JSON content export, relative to .lantern/
export_path = "content.json"

# Tenant 0 is global: when cross_tenant_search_active is true, every tenant
# is written to the shared "<index_prefix>-global" index.
[tenants.0]
cross_tenant_search_active = false

[tenants.1]
synced_post_types = ["post", "page"]
"""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(template)
