"""Tests for per-item sync, lifecycle events and scheduling in SyncEngine."""

import sqlite3
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from lantern.adapters.memory.sync_state_store import InMemorySyncStateStore
from lantern.core.sync import classify_sync_error
from lantern.domain.config import GLOBAL_TENANT_ID, LanternConfig, TenantConfig
from lantern.domain.entities import (
    ContentStatus,
    IndexResponse,
    SyncErrorType,
    SyncOutcome,
)
from lantern.domain.exceptions import UnknownTenantError
from lantern.ports.index import IndexClientError
from lantern.ports.repositories import SyncStateError
from tests.conftest import FIXED_NOW, make_item


class TestClassifySyncError:
    """Tests for the classify_sync_error function."""

    def test_classifies_timeout(self) -> None:
        assert classify_sync_error(TimeoutError("slow")) == SyncErrorType.TIMEOUT

    def test_classifies_index_client_error(self) -> None:
        assert classify_sync_error(IndexClientError("503")) == SyncErrorType.INDEX_ERROR

    def test_classifies_sync_state_error(self) -> None:
        assert classify_sync_error(SyncStateError("locked")) == SyncErrorType.DATABASE_ERROR

    def test_classifies_raw_sqlite_error(self) -> None:
        error = sqlite3.OperationalError("database is locked")
        assert classify_sync_error(error) == SyncErrorType.DATABASE_ERROR

    def test_classifies_unknown_tenant_as_content_error(self) -> None:
        assert classify_sync_error(UnknownTenantError(9)) == SyncErrorType.CONTENT_ERROR

    def test_classifies_other_as_unknown(self) -> None:
        assert classify_sync_error(KeyError("x")) == SyncErrorType.UNKNOWN


class TestDecideAndSync:
    """Tests for SyncEngine.decide_and_sync."""

    def test_first_sync_indexes_and_marks(self, engine, content, index_client, state_store) -> None:
        item = content.add_item(make_item(1))

        result = engine.decide_and_sync(item)

        assert result.outcome == SyncOutcome.INDEXED
        assert result.succeeded
        assert result.target_index_id == 1
        assert len(index_client.index_calls) == 1
        assert state_store.is_marked(1, 1)
        assert state_store.get_document_id(1, 1) == "doc-1-1"
        assert state_store.get_last_synced(1, 1) == FIXED_NOW

    def test_resync_updates_without_touching_document_id(
        self, engine, content, index_client, state_store
    ) -> None:
        item = content.add_item(make_item(1))
        engine.decide_and_sync(item)
        index_client.responses[1] = IndexResponse(document_id="other")

        result = engine.decide_and_sync(item)

        assert result.outcome == SyncOutcome.UPDATED
        assert len(index_client.index_calls) == 2
        assert state_store.is_marked(1, 1)
        assert state_store.get_document_id(1, 1) == "doc-1-1"

    def test_document_carries_item_fields(self, engine, content, index_client) -> None:
        item = content.add_item(make_item(3, title="Hello"))

        engine.decide_and_sync(item)

        document, _ = index_client.index_calls[0]
        payload = document.to_payload()
        assert payload["post_id"] == 3
        assert payload["post_title"] == "Hello"
        assert payload["post_status"] == "publish"
        assert payload["site_id"] == 1

    def test_host_tenant_overrides_target(self, engine, content, index_client, state_store) -> None:
        item = content.add_item(make_item(1))

        result = engine.decide_and_sync(item, tenant_id=1, host_tenant_id=GLOBAL_TENANT_ID)

        assert result.target_index_id == GLOBAL_TENANT_ID
        assert index_client.targets == [GLOBAL_TENANT_ID]
        # Marker stays keyed on the item's tenant
        assert state_store.is_marked(1, 1)
        assert not state_store.is_marked(1, GLOBAL_TENANT_ID)

    def test_empty_response_leaves_item_unmarked(
        self, engine, content, index_client, state_store
    ) -> None:
        item = content.add_item(make_item(1))
        index_client.responses[1] = None

        result = engine.decide_and_sync(item)

        assert result.outcome == SyncOutcome.FAILED
        assert result.error_type == SyncErrorType.INDEX_ERROR
        assert not state_store.is_marked(1, 1)
        assert state_store.get_last_synced(1, 1) is None

    @pytest.mark.parametrize(
        ("error", "expected_type"),
        [
            (IndexClientError("cluster red"), SyncErrorType.INDEX_ERROR),
            (TimeoutError("too slow"), SyncErrorType.TIMEOUT),
        ],
    )
    def test_client_failures_become_failed_results(
        self, engine, content, index_client, state_store, error, expected_type
    ) -> None:
        item = content.add_item(make_item(1))
        index_client.responses[1] = error

        result = engine.decide_and_sync(item)

        assert result.outcome == SyncOutcome.FAILED
        assert result.error_type == expected_type
        assert result.error
        assert not state_store.is_marked(1, 1)

    def test_missing_document_id_on_first_sync_is_failure(
        self, engine, content, index_client, state_store
    ) -> None:
        item = content.add_item(make_item(1))
        index_client.responses[1] = IndexResponse(document_id=None)

        result = engine.decide_and_sync(item)

        assert result.outcome == SyncOutcome.FAILED
        assert not state_store.is_marked(1, 1)

    def test_missing_document_id_on_update_is_fine(
        self, engine, content, index_client, state_store
    ) -> None:
        item = content.add_item(make_item(1))
        engine.decide_and_sync(item)
        index_client.responses[1] = IndexResponse(document_id=None)

        result = engine.decide_and_sync(item)

        assert result.outcome == SyncOutcome.UPDATED
        assert state_store.get_document_id(1, 1) == "doc-1-1"

    def test_concurrent_marker_reports_update(self, engine_factory, content) -> None:
        class RacingStore(InMemorySyncStateStore):
            """Store in which another worker marks the item first."""

            def is_marked(self, item_id, tenant_id):
                return False

            def mark_synced(self, item_id, tenant_id, document_id, when):
                super().mark_synced(item_id, tenant_id, document_id, when)
                return False

        store = RacingStore()
        engine = engine_factory(state_store=store)
        item = content.add_item(make_item(1))

        result = engine.decide_and_sync(item)

        assert result.outcome == SyncOutcome.UPDATED
        assert store.get_document_id(1, 1) == "doc-1-1"

    def test_persistence_failure_propagates(self, engine_factory, content) -> None:
        store = MagicMock()
        store.is_marked.return_value = False
        store.mark_synced.side_effect = SyncStateError("disk full")
        engine = engine_factory(state_store=store)
        item = content.add_item(make_item(1))

        with pytest.raises(SyncStateError):
            engine.decide_and_sync(item)

    def test_failed_state_write_is_retried_in_full(
        self, engine_factory, content, index_client
    ) -> None:
        class FlakyStore(InMemorySyncStateStore):
            """Store whose first sync-state write fails."""

            failures = 1

            def mark_synced(self, item_id, tenant_id, document_id, when):
                if self.failures:
                    self.failures -= 1
                    raise SyncStateError("database is locked")
                return super().mark_synced(item_id, tenant_id, document_id, when)

        store = FlakyStore()
        engine = engine_factory(state_store=store)
        item = content.add_item(make_item(42))

        with pytest.raises(SyncStateError):
            engine.decide_and_sync(item)
        assert not store.is_marked(42, 1)
        assert store.get_document_id(42, 1) is None

        result = engine.decide_and_sync(item)

        assert result.outcome == SyncOutcome.INDEXED
        assert store.get_document_id(42, 1) == "doc-1-42"
        assert engine.handle_delete(42, 1) is True
        assert [call["document_id"] for call in index_client.delete_calls] == ["doc-1-42"]

    def test_marked_item_without_document_id_gets_it_back(
        self, engine, content, index_client, state_store
    ) -> None:
        item = content.add_item(make_item(42))
        state_store.set_marked(42, 1)

        result = engine.decide_and_sync(item)

        assert result.outcome == SyncOutcome.UPDATED
        assert state_store.get_document_id(42, 1) == "doc-1-42"
        assert state_store.get_last_synced(42, 1) == FIXED_NOW
        assert engine.handle_delete(42, 1) is True
        assert len(index_client.delete_calls) == 1


class TestHandleTransition:
    """Tests for SyncEngine.handle_transition."""

    def test_publish_of_synced_type_indexes_once(
        self, engine, content, index_client, state_store
    ) -> None:
        item = content.add_item(make_item(1))

        result = engine.handle_transition(ContentStatus.PUBLISH, ContentStatus.DRAFT, item)

        assert result is not None
        assert result.outcome == SyncOutcome.INDEXED
        assert len(index_client.index_calls) == 1
        assert index_client.targets == [1]
        assert state_store.is_marked(1, 1)

    def test_accepts_plain_status_strings(self, engine, content, index_client) -> None:
        item = content.add_item(make_item(1))

        result = engine.handle_transition("publish", "future", item)

        assert result is not None
        assert len(index_client.index_calls) == 1

    def test_republish_updates(self, engine, content) -> None:
        item = content.add_item(make_item(1))
        engine.handle_transition("publish", "draft", item)

        result = engine.handle_transition("publish", "publish", item)

        assert result.outcome == SyncOutcome.UPDATED

    @pytest.mark.parametrize(
        "new_status",
        [ContentStatus.DRAFT, ContentStatus.PRIVATE, ContentStatus.TRASH, "pending"],
    )
    def test_non_publish_transitions_are_ignored(
        self, engine, content, index_client, new_status
    ) -> None:
        item = content.add_item(make_item(1))

        assert engine.handle_transition(new_status, ContentStatus.PUBLISH, item) is None
        assert index_client.index_calls == []

    def test_unsynced_type_makes_no_calls(self, engine, content, index_client, state_store) -> None:
        item = content.add_item(make_item(1, content_type="product"))

        assert engine.handle_transition("publish", "draft", item) is None
        assert index_client.index_calls == []
        assert not state_store.is_marked(1, 1)

    def test_unconfigured_tenant_makes_no_calls(self, engine, content, index_client) -> None:
        item = content.add_item(make_item(1, tenant_id=7))

        assert engine.handle_transition("publish", "draft", item) is None
        assert index_client.index_calls == []

    def test_revisions_are_ignored(self, engine_factory, content, index_client) -> None:
        config = LanternConfig(
            tenants={1: TenantConfig(synced_post_types=frozenset({"post", "revision"}))}
        )
        engine = engine_factory(config=config)
        item = content.add_item(make_item(1, content_type="revision"))

        assert engine.handle_transition("publish", "draft", item) is None
        assert index_client.index_calls == []

    def test_suppressed_block_skips_events(self, engine, content, index_client) -> None:
        item = content.add_item(make_item(1))

        with engine.suppressed():
            with engine.suppressed():
                assert engine.is_suppressed
            assert engine.handle_transition("publish", "draft", item) is None

        assert not engine.is_suppressed
        assert index_client.index_calls == []
        assert engine.handle_transition("publish", "draft", item) is not None

    def test_caller_without_edit_rights_is_ignored(self, engine, content, index_client) -> None:
        item = content.add_item(make_item(1))
        content.read_only.add((1, 1))

        assert engine.handle_transition("publish", "draft", item) is None
        assert index_client.index_calls == []

    def test_cross_tenant_search_routes_to_global(
        self, engine_factory, content, index_client, state_store, cross_tenant_config
    ) -> None:
        engine = engine_factory(config=cross_tenant_config)
        first = content.add_item(make_item(1, tenant_id=1))
        second = content.add_item(make_item(1, tenant_id=2))

        engine.handle_transition("publish", "draft", first)
        engine.handle_transition("publish", "draft", second)

        assert index_client.targets == [GLOBAL_TENANT_ID, GLOBAL_TENANT_ID]
        assert state_store.is_marked(1, 1)
        assert state_store.is_marked(1, 2)

    def test_tenant_flag_alone_does_not_route_globally(
        self, engine_factory, content, index_client
    ) -> None:
        config = LanternConfig(
            tenants={
                1: TenantConfig(
                    synced_post_types=frozenset({"post"}),
                    cross_tenant_search_active=True,
                )
            }
        )
        engine = engine_factory(config=config)
        item = content.add_item(make_item(1))

        engine.handle_transition("publish", "draft", item)

        assert index_client.targets == [1]


class TestHandleDelete:
    """Tests for SyncEngine.handle_delete."""

    def test_delete_without_document_id_is_noop(self, engine, content, index_client) -> None:
        content.add_item(make_item(1))

        assert engine.handle_delete(1, 1) is False
        assert index_client.delete_calls == []

    def test_delete_removes_document_and_clears_marker(
        self, engine, content, index_client, state_store
    ) -> None:
        item = content.add_item(make_item(1))
        engine.handle_transition("publish", "draft", item)

        assert engine.handle_delete(1, 1) is True

        assert index_client.delete_calls == [
            {"document_id": "doc-1-1", "source_index_hint": None, "target_index_id": 1}
        ]
        assert not state_store.is_marked(1, 1)
        assert state_store.get_document_id(1, 1) is None

    def test_default_tenant_is_used_when_omitted(self, engine, content, index_client) -> None:
        item = content.add_item(make_item(1))
        engine.handle_transition("publish", "draft", item)

        assert engine.handle_delete(1) is True
        assert index_client.delete_calls[0]["target_index_id"] == 1

    def test_failed_delete_still_clears_marker(
        self, engine, content, index_client, state_store
    ) -> None:
        item = content.add_item(make_item(1))
        engine.handle_transition("publish", "draft", item)
        index_client.delete_error = IndexClientError("503")

        assert engine.handle_delete(1, 1) is True
        assert not state_store.is_marked(1, 1)

    def test_unsynced_type_is_not_deleted(
        self, engine, content, index_client, state_store
    ) -> None:
        content.add_item(make_item(1, content_type="product"))
        state_store.set_document_id(1, 1, "stale")

        assert engine.handle_delete(1, 1) is False
        assert index_client.delete_calls == []

    def test_unknown_item_is_not_deleted(self, engine, index_client, state_store) -> None:
        state_store.set_document_id(99, 1, "orphan")

        assert engine.handle_delete(99, 1) is False
        assert index_client.delete_calls == []

    def test_suppressed_delete_is_skipped(self, engine, content, index_client) -> None:
        item = content.add_item(make_item(1))
        engine.handle_transition("publish", "draft", item)

        with engine.suppressed():
            assert engine.handle_delete(1, 1) is False
        assert index_client.delete_calls == []

    def test_cross_tenant_delete_targets_global(
        self, engine_factory, content, index_client, cross_tenant_config
    ) -> None:
        engine = engine_factory(config=cross_tenant_config)
        item = content.add_item(make_item(1, tenant_id=2))
        engine.handle_transition("publish", "draft", item)

        engine.handle_delete(1, 2)

        assert index_client.delete_calls[0]["target_index_id"] == GLOBAL_TENANT_ID


class TestScheduling:
    """Tests for schedule_sync and cancel_sync."""

    def test_schedule_is_first_wins(self, engine_factory, state_store) -> None:
        times = iter(
            [
                datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
                datetime(2024, 5, 1, 13, 0, tzinfo=UTC),
            ]
        )
        engine = engine_factory(clock=lambda: next(times))

        assert engine.schedule_sync(1) is True
        assert engine.schedule_sync(1) is False

        cursor = state_store.get_sync_status(1)
        assert cursor.start_time == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
        assert cursor.posts_processed == 0

    def test_schedule_defaults_to_configured_tenant(self, engine, state_store) -> None:
        assert engine.schedule_sync() is True
        assert state_store.get_sync_status(1).is_scheduled

    def test_schedule_global_tenant_is_distinct(self, engine, state_store) -> None:
        assert engine.schedule_sync(GLOBAL_TENANT_ID) is True
        assert state_store.get_sync_status(GLOBAL_TENANT_ID).is_scheduled
        assert not state_store.get_sync_status(1).is_scheduled

    def test_cancel_resets_cursor(self, engine, state_store) -> None:
        engine.schedule_sync(2)

        assert engine.cancel_sync(2) is True
        assert not state_store.get_sync_status(2).is_scheduled
        assert engine.cancel_sync(2) is False


class TestLifecycle:
    """Tests for releasing the engine's collaborators."""

    def test_context_manager_closes_index_and_store(
        self, engine_factory, index_client
    ) -> None:
        store = MagicMock()

        with engine_factory(state_store=store):
            pass

        assert index_client.closed
        store.close.assert_called_once_with()

    def test_store_is_closed_when_index_close_fails(self, engine_factory) -> None:
        index = MagicMock()
        index.close.side_effect = IndexClientError("transport already gone")
        store = MagicMock()
        engine = engine_factory(index_client=index, state_store=store)

        with pytest.raises(IndexClientError):
            engine.close()

        store.close.assert_called_once_with()
