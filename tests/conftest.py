"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from lantern.adapters.memory.sync_state_store import InMemorySyncStateStore
from lantern.adapters.sqlite.schema import init_database
from lantern.adapters.sqlite.sync_state_repository import SQLiteSyncStateStore
from lantern.core.sync.sync_engine import SyncEngine
from lantern.domain.config import LanternConfig, SyncConfig, TenantConfig
from lantern.domain.entities import ContentItem, ContentStatus
from tests.helpers.fakes import FakeContentAccessor, RecordingIndexClient

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def isolate_global_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config lookup at an empty temp directory.

    Keeps a developer's ~/.config/lantern/config.toml out of the tests.
    """
    xdg = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg))
    return xdg


# ============================================================================
# Content and index fakes
# ============================================================================


def make_item(
    item_id: int,
    *,
    content_type: str = "post",
    status: ContentStatus = ContentStatus.PUBLISH,
    tenant_id: int = 1,
    **fields,
) -> ContentItem:
    """Build a ContentItem with sensible defaults for tests."""
    created = datetime(2024, 1, 1, tzinfo=UTC) + timedelta(hours=item_id)
    defaults = {
        "title": f"Item {item_id}",
        "body": f"Body of item {item_id}",
        "created_at": created.replace(tzinfo=None),
        "created_at_gmt": created,
        "modified_at": created.replace(tzinfo=None),
        "modified_at_gmt": created,
        "slug": f"item-{item_id}",
    }
    defaults.update(fields)
    return ContentItem(
        id=item_id,
        content_type=content_type,
        status=status,
        tenant_id=tenant_id,
        **defaults,
    )


@pytest.fixture
def item_factory() -> Callable[..., ContentItem]:
    """Provide make_item as a fixture."""
    return make_item


@pytest.fixture
def content() -> FakeContentAccessor:
    """Content store with tenants 1 and 2 and no items."""
    accessor = FakeContentAccessor()
    accessor.add_tenant(1)
    accessor.add_tenant(2)
    return accessor


@pytest.fixture
def index_client() -> RecordingIndexClient:
    return RecordingIndexClient()


@pytest.fixture
def state_store() -> InMemorySyncStateStore:
    return InMemorySyncStateStore()


@pytest.fixture
def sqlite_state_store(tmp_path: Path):
    """SQLite sync state store on an initialized temp database."""
    db_path = tmp_path / "state.db"
    init_database(db_path)
    store = SQLiteSyncStateStore(db_path)
    yield store
    store.close()


# ============================================================================
# Configuration and engine
# ============================================================================


@pytest.fixture
def lantern_config() -> LanternConfig:
    """Config syncing posts and pages for tenants 1 and 2, cross-tenant off."""
    return LanternConfig(
        sync=SyncConfig(page_size=5),
        tenants={
            0: TenantConfig(cross_tenant_search_active=False),
            1: TenantConfig(synced_post_types=frozenset({"post", "page"})),
            2: TenantConfig(synced_post_types=frozenset({"post"})),
        },
    )


@pytest.fixture
def cross_tenant_config(lantern_config: LanternConfig) -> LanternConfig:
    """Same tenants as lantern_config with cross-tenant search switched on."""
    tenants = dict(lantern_config.tenants)
    tenants[0] = TenantConfig(cross_tenant_search_active=True)
    return LanternConfig(sync=lantern_config.sync, tenants=tenants)


@pytest.fixture
def engine_factory(
    content: FakeContentAccessor,
    index_client: RecordingIndexClient,
    state_store: InMemorySyncStateStore,
    lantern_config: LanternConfig,
) -> Callable[..., SyncEngine]:
    """Build a SyncEngine over the shared fakes, with overridable parts."""

    def _create(**overrides) -> SyncEngine:
        config = overrides.pop("config", lantern_config)
        kwargs = {
            "content": content,
            "index_client": index_client,
            "state_store": state_store,
            "tenant_configs": config,
            "config": config.sync,
            "clock": lambda: FIXED_NOW,
        }
        kwargs.update(overrides)
        return SyncEngine(**kwargs)

    return _create


@pytest.fixture
def engine(engine_factory: Callable[..., SyncEngine]) -> SyncEngine:
    return engine_factory()
