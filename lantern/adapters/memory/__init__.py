"""In-memory adapters for lantern."""

from lantern.adapters.memory.sync_state_store import InMemorySyncStateStore

__all__ = ["InMemorySyncStateStore"]
