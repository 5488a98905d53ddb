"""Content accessor adapters."""

from lantern.adapters.content.json_content_store import JsonContentStore

__all__ = ["JsonContentStore"]
