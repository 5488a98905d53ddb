"""Tests for EventGateway."""

import logging
from unittest.mock import MagicMock

import pytest

from lantern.core.sync import EventGateway
from lantern.domain.entities import BulkSyncReport, SyncOutcome, TenantSyncReport
from lantern.ports.index import IndexClientError
from lantern.ports.repositories import SyncStateError
from tests.conftest import make_item


@pytest.fixture
def gateway(engine) -> EventGateway:
    return EventGateway(engine)


def test_publish_event_reaches_engine(gateway, content, index_client) -> None:
    item = content.add_item(make_item(1))

    result = gateway.on_status_transition("publish", "draft", item)

    assert result.outcome == SyncOutcome.INDEXED
    assert len(index_client.index_calls) == 1


def test_transition_errors_are_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    engine = MagicMock()
    engine.handle_transition.side_effect = SyncStateError("database is locked")
    gateway = EventGateway(engine)

    with caplog.at_level(logging.ERROR):
        result = gateway.on_status_transition("publish", "draft", make_item(1))

    assert result is None
    assert "database is locked" in caplog.text


def test_unexpected_transition_errors_log_traceback(caplog: pytest.LogCaptureFixture) -> None:
    engine = MagicMock()
    engine.handle_transition.side_effect = KeyError("boom")
    gateway = EventGateway(engine)

    with caplog.at_level(logging.ERROR):
        assert gateway.on_status_transition("publish", "draft", make_item(1)) is None

    assert any(record.exc_info for record in caplog.records)


def test_delete_event_reaches_engine(gateway, content, index_client) -> None:
    item = content.add_item(make_item(1))
    gateway.on_status_transition("publish", "draft", item)

    assert gateway.on_delete(1, 1) is True
    assert len(index_client.delete_calls) == 1


def test_delete_errors_are_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    engine = MagicMock()
    engine.handle_delete.side_effect = IndexClientError("unreachable")
    gateway = EventGateway(engine)

    with caplog.at_level(logging.ERROR):
        assert gateway.on_delete(1, 1) is False

    assert caplog.records


def test_admin_run_returns_report() -> None:
    engine = MagicMock()
    report = BulkSyncReport(tenants=[TenantSyncReport(tenant_id=1, processed=3, completed=True)])
    engine.run_pending_syncs.return_value = report
    progress = MagicMock()

    assert EventGateway(engine).on_admin_trigger_run_pending_syncs(progress) is report
    engine.run_pending_syncs.assert_called_once_with(progress=progress)


def test_schedule_and_cancel_requests(gateway, state_store) -> None:
    assert gateway.on_schedule_sync_request() is True
    assert gateway.on_schedule_sync_request(1) is False
    assert gateway.on_cancel_sync_request(1) is True
    assert not state_store.get_sync_status(1).is_scheduled
