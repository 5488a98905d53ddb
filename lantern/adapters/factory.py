"""Factory classes for engine and adapter instantiation.

This module centralizes the creation of the sync engine and its dependencies,
keeping the CLI layer free from direct adapter imports. The factories use lazy
imports so that commands which never touch the search backend do not import
the Elasticsearch client.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lantern.adapters.sqlite.sync_state_repository import SQLiteSyncStateStore
    from lantern.core.sync.event_gateway import EventGateway
    from lantern.core.sync.sync_engine import SyncEngine
    from lantern.domain.config import LanternConfig
    from lantern.ports.content import ContentAccessor
    from lantern.ports.index import IndexClient


class ConfigFactory:
    """Factory for creating configuration-related instances."""

    def create_config_provider(self):
        """Create a TomlConfigProvider instance.

        Returns:
            TomlConfigProvider instance.
        """
        from lantern.adapters.config.toml_config_provider import TomlConfigProvider

        return TomlConfigProvider()

    def create_db_initializer(self):
        """Create a SqliteDatabaseInitializer instance.

        Returns:
            SqliteDatabaseInitializer instance.
        """
        from lantern.adapters.sqlite.initializer import SqliteDatabaseInitializer

        return SqliteDatabaseInitializer()


class RepositoryFactory:
    """Factory for creating sync state and content instances.

    Used on their own by lightweight commands (status, schedule, cancel)
    that never call the index.
    """

    def create_state_store(self, db_path: Path) -> SQLiteSyncStateStore:
        """Create a SQLiteSyncStateStore instance.

        Args:
            db_path: Path to the SQLite database.

        Returns:
            SQLiteSyncStateStore instance.
        """
        from lantern.adapters.sqlite.sync_state_repository import SQLiteSyncStateStore

        return SQLiteSyncStateStore(db_path)

    def create_content_accessor(self, export_path: Path) -> ContentAccessor:
        """Create a JsonContentStore instance.

        Args:
            export_path: Path to the JSON content export.

        Returns:
            JsonContentStore instance.
        """
        from lantern.adapters.content.json_content_store import JsonContentStore

        return JsonContentStore(export_path)


class IndexClientFactory:
    """Factory for creating index client instances.

    Args:
        config: LanternConfig with index and timeout settings.
    """

    def __init__(self, config: LanternConfig) -> None:
        self._config = config

    def create_index_client(self) -> IndexClient:
        """Create the Elasticsearch index client.

        Returns:
            IndexClient whose requests fail with TimeoutError after
            sync.index_timeout seconds.
        """
        from lantern.adapters.elasticsearch.index_client import ElasticsearchIndexClient

        return ElasticsearchIndexClient(
            hosts=list(self._config.index.hosts),
            index_prefix=self._config.index.index_prefix,
            request_timeout=self._config.sync.index_timeout,
        )


class EngineFactory:
    """Factory for creating the sync engine with all dependencies.

    Centralizes the dependency wiring, keeping the CLI layer clean and
    testable.
    """

    def create_sync_engine(
        self,
        lantern_dir: Path,
        config: LanternConfig,
        index_client: IndexClient | None = None,
        content: ContentAccessor | None = None,
    ) -> SyncEngine:
        """Create a SyncEngine for a .lantern directory.

        Args:
            lantern_dir: Directory holding config, state db and export.
            config: Loaded configuration.
            index_client: Index client override (defaults to Elasticsearch).
            content: Content accessor override (defaults to the JSON export).

        Returns:
            Configured SyncEngine.
        """
        from lantern.core.sync.sync_engine import SyncEngine

        repositories = RepositoryFactory()
        state_store = repositories.create_state_store(lantern_dir / config.storage.state_db)
        if content is None:
            content = repositories.create_content_accessor(
                lantern_dir / config.content.export_path
            )
        if index_client is None:
            index_client = IndexClientFactory(config).create_index_client()

        return SyncEngine(
            content=content,
            index_client=index_client,
            state_store=state_store,
            tenant_configs=config,
            config=config.sync,
        )

    def create_event_gateway(self, engine: SyncEngine) -> EventGateway:
        """Create an EventGateway feeding the given engine."""
        from lantern.core.sync.event_gateway import EventGateway

        return EventGateway(engine)
