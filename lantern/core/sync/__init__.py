"""Sync module for keeping the search index synchronized with content.

Contains the SyncEngine (per-item decisions, markers, bulk sync), its document
builder, index router and scheduler, and the EventGateway that feeds it events.
"""

from lantern.core.sync.document_builder import DocumentBuilder
from lantern.core.sync.event_gateway import EventGateway
from lantern.core.sync.routing import IndexRouter
from lantern.core.sync.scheduler import SyncScheduler
from lantern.core.sync.sync_engine import SyncEngine, classify_sync_error

__all__ = [
    "DocumentBuilder",
    "EventGateway",
    "IndexRouter",
    "SyncEngine",
    "SyncScheduler",
    "classify_sync_error",
]
