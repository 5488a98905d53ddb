"""Config domain models for lantern.

Configuration is stored in .lantern/config.toml and describes how content is
routed into the search index, how bulk syncs are paced, and where sync state
and external collaborators live. This module defines the domain models that
represent validated configuration state.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

# Tenant whose config carries the fleet-wide routing switch. Writes routed
# to this tenant land in the shared cross-tenant index.
GLOBAL_TENANT_ID = 0


@dataclass(frozen=True)
class TenantConfig:
    """Routing configuration for a single tenant.

    Attributes:
        synced_post_types: Content types that are kept in the search index.
            An empty set disables syncing for the tenant.
        cross_tenant_search_active: Only meaningful on the global tenant.
            When true, every tenant's documents are written to the global
            index regardless of the tenant's own flag.
    """

    synced_post_types: frozenset[str] = field(default_factory=frozenset)
    cross_tenant_search_active: bool = False

    def __post_init__(self) -> None:
        """Normalize and validate tenant config after initialization."""
        # Accept any iterable of type names from TOML lists
        if not isinstance(self.synced_post_types, frozenset):
            object.__setattr__(
                self, "synced_post_types", frozenset(self.synced_post_types)
            )
        for post_type in self.synced_post_types:
            if not isinstance(post_type, str) or not post_type:
                raise ValueError(
                    f"synced_post_types entries must be non-empty strings, "
                    f"got {post_type!r}"
                )

    def syncs(self, content_type: str) -> bool:
        return content_type in self.synced_post_types


@dataclass(frozen=True)
class SyncConfig:
    """Configuration for sync pacing and document building.

    Attributes:
        page_size: Items fetched per listing page during bulk sync.
        max_pages_per_run: Full pages processed per tenant in one bulk run.
        index_timeout: Seconds to wait for an index client call before
            treating it as an empty response.
        default_tenant: Tenant used when a caller does not name one.
        protected_meta_keys: Metadata keys never copied into documents, on
            top of the underscore-prefixed internal keys.

    Raises:
        ValueError: If page_size, max_pages_per_run or index_timeout are not
            positive, or default_tenant is negative.
    """

    page_size: int = 350
    max_pages_per_run: int = 1
    index_timeout: float = 10.0
    default_tenant: int = 1
    protected_meta_keys: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate sync config after initialization."""
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.max_pages_per_run <= 0:
            raise ValueError(
                f"max_pages_per_run must be positive, got {self.max_pages_per_run}"
            )
        if self.index_timeout <= 0:
            raise ValueError(
                f"index_timeout must be positive, got {self.index_timeout}"
            )
        if self.default_tenant < 0:
            raise ValueError(
                f"default_tenant cannot be negative, got {self.default_tenant}"
            )


@dataclass(frozen=True)
class StorageConfig:
    """Configuration for sync state persistence.

    Attributes:
        state_db: SQLite database file, relative to the .lantern directory.
    """

    state_db: str = "state.db"

    def __post_init__(self) -> None:
        """Validate storage config after initialization."""
        if not self.state_db:
            raise ValueError("state_db cannot be empty")


@dataclass(frozen=True)
class IndexConfig:
    """Configuration for the Elasticsearch index client.

    Attributes:
        hosts: Elasticsearch node URLs.
        index_prefix: Prefix for physical index names. Tenant N writes to
            "<prefix>-N", the global tenant to "<prefix>-global".
    """

    hosts: list[str] = field(default_factory=lambda: ["http://localhost:9200"])
    index_prefix: str = "lantern"

    def __post_init__(self) -> None:
        """Validate index config after initialization."""
        if not self.hosts:
            raise ValueError("hosts cannot be empty")
        if not self.index_prefix:
            raise ValueError("index_prefix cannot be empty")


@dataclass(frozen=True)
class ContentConfig:
    """Configuration for the bundled content export reader.

    Attributes:
        export_path: JSON content export, relative to the .lantern directory.
    """

    export_path: str = "content.json"


def _tenant_configs_from_data(data: Mapping[Any, Any]) -> dict[int, TenantConfig]:
    tenants: dict[int, TenantConfig] = {}
    for key, values in data.items():
        try:
            tenant_id = int(key)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Tenant key must be an integer, got {key!r}") from e
        if tenant_id < 0:
            raise ValueError(f"Tenant id cannot be negative, got {tenant_id}")
        if isinstance(values, TenantConfig):
            tenants[tenant_id] = values
        else:
            tenants[tenant_id] = TenantConfig(**values)
    return tenants


@dataclass(frozen=True)
class LanternConfig:
    """Complete lantern configuration.

    Typically loaded from .lantern/config.toml and used throughout the
    application. Also serves as the per-tenant routing config source for the
    sync engine.

    Attributes:
        sync: Sync pacing configuration
        storage: Sync state storage configuration
        index: Index client configuration
        content: Content export configuration
        tenants: Tenant id -> routing configuration. Tenant 0 is global.
    """

    sync: SyncConfig = field(default_factory=SyncConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    index: IndexConfig = field(default_factory=IndexConfig)
    content: ContentConfig = field(default_factory=ContentConfig)
    tenants: dict[int, TenantConfig] = field(default_factory=dict)

    @staticmethod
    def default() -> "LanternConfig":
        """Create a config with all default values."""
        return LanternConfig(
            sync=SyncConfig(),
            storage=StorageConfig(),
            index=IndexConfig(),
            content=ContentConfig(),
            tenants={},
        )

    def get_tenant_config(self, tenant_id: int) -> TenantConfig:
        """Return the routing config for a tenant.

        Unconfigured tenants get an empty config, which disables syncing.
        """
        return self.tenants.get(tenant_id, TenantConfig())

    @staticmethod
    def from_partial(base: "LanternConfig", data: dict[str, Any]) -> "LanternConfig":
        """Create a new config by overlaying partial TOML data onto a base.

        Section values in data override the matching fields of base. Tenant
        tables are merged per tenant, so a local config can add a tenant
        without repeating the global ones.

        Args:
            base: Config supplying values for anything data leaves out.
            data: Raw config dictionary (e.g. parsed TOML).

        Returns:
            New validated LanternConfig.

        Raises:
            ValueError: If a section contains unknown keys or invalid values.
        """
        sections: dict[str, Any] = {}
        for name, section_type in (
            ("sync", SyncConfig),
            ("storage", StorageConfig),
            ("index", IndexConfig),
            ("content", ContentConfig),
        ):
            current = getattr(base, name)
            overrides = data.get(name, {})
            known = {f.name for f in fields(section_type)}
            unknown = set(overrides) - known
            if unknown:
                raise ValueError(
                    f"Unknown keys in [{name}]: {', '.join(sorted(unknown))}"
                )
            merged = {f: getattr(current, f) for f in known}
            merged.update(overrides)
            sections[name] = section_type(**merged)

        tenants = dict(base.tenants)
        tenants.update(_tenant_configs_from_data(data.get("tenants", {})))

        return LanternConfig(tenants=tenants, **sections)
