"""Content accessor backed by a JSON content export.

The export holds one section per tenant:

    {
      "tenants": {
        "1": {
          "taxonomies": {"post": ["category", "post_tag"]},
          "users": {"7": {"login": "ana", "display_name": "Ana Lima"}},
          "terms": [{"term_id": 3, "slug": "news", "name": "News",
                     "taxonomy": "category", "parent": 0}],
          "items": [{"id": 42, "type": "post", "status": "publish",
                     "title": "...", "author": 7, "date_gmt": "2024-01-02T10:00:00",
                     "terms": {"category": [3]}, "meta": {"color": "red"}}]
        }
      }
    }

Publishable listings are ordered by creation time (UTC) and then id, so an
item created later never shifts the offset of existing items. Backdated
items still can.
"""

import json
import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from lantern.domain.entities import Author, ContentItem, ContentStatus, Term
from lantern.domain.exceptions import UnknownTenantError

logger = logging.getLogger(__name__)


def _parse_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _item_from_data(data: Mapping[str, Any], tenant_id: int) -> ContentItem:
    return ContentItem(
        id=int(data["id"]),
        content_type=data["type"],
        status=ContentStatus(data.get("status", ContentStatus.DRAFT.value)),
        title=data.get("title", ""),
        body=data.get("body", ""),
        excerpt=data.get("excerpt", ""),
        created_at=_parse_time(data.get("date")),
        created_at_gmt=_parse_time(data.get("date_gmt")),
        modified_at=_parse_time(data.get("modified")),
        modified_at_gmt=_parse_time(data.get("modified_gmt")),
        parent_id=int(data.get("parent", 0)),
        author_id=int(data.get("author", 0)),
        slug=data.get("slug", ""),
        mime_type=data.get("mime_type", ""),
        permalink=data.get("permalink", ""),
        tenant_id=tenant_id,
    )


class _TenantContent:
    """Parsed export section of one tenant."""

    def __init__(self, tenant_id: int, data: Mapping[str, Any]) -> None:
        self.taxonomies: dict[str, list[str]] = {
            content_type: list(names)
            for content_type, names in data.get("taxonomies", {}).items()
        }
        self.authors: dict[int, Author] = {
            int(user_id): Author(
                login=user.get("login", ""),
                display_name=user.get("display_name", ""),
            )
            for user_id, user in data.get("users", {}).items()
        }
        self.terms: dict[int, Term] = {
            int(term["term_id"]): Term(
                term_id=int(term["term_id"]),
                slug=term["slug"],
                name=term["name"],
                taxonomy=term["taxonomy"],
                parent_id=int(term.get("parent", 0)),
            )
            for term in data.get("terms", [])
        }
        self.items: dict[int, ContentItem] = {}
        self.assignments: dict[int, dict[str, list[int]]] = {}
        self.meta: dict[int, dict[str, Any]] = {}
        for raw in data.get("items", []):
            item = _item_from_data(raw, tenant_id)
            self.items[item.id] = item
            self.assignments[item.id] = {
                taxonomy: [int(t) for t in term_ids]
                for taxonomy, term_ids in raw.get("terms", {}).items()
            }
            self.meta[item.id] = dict(raw.get("meta", {}))

    def listing_key(self, item: ContentItem) -> tuple[datetime, int]:
        created = item.created_at_gmt or item.created_at
        if created is None:
            return (datetime.min, item.id)
        if created.tzinfo is not None:
            created = created.astimezone(UTC).replace(tzinfo=None)
        return (created, item.id)


class JsonContentStore:
    """Read-only ContentAccessor over a JSON export file.

    The file is parsed on first use. Every caller is treated as an editor:
    the export is only ever driven from the administrative CLI.
    """

    def __init__(self, export_path: Path) -> None:
        """Initialize the store.

        Args:
            export_path: Path to the JSON export.
        """
        self.export_path = export_path
        self._tenants: dict[int, _TenantContent] | None = None

    def _load(self) -> dict[int, _TenantContent]:
        if self._tenants is None:
            try:
                with self.export_path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in content export: {e}") from e
            self._tenants = {
                int(tenant_id): _TenantContent(int(tenant_id), section)
                for tenant_id, section in data.get("tenants", {}).items()
            }
            logger.debug(
                "Loaded content export %s (%d tenants)",
                self.export_path,
                len(self._tenants),
            )
        return self._tenants

    def _tenant(self, tenant_id: int) -> _TenantContent:
        tenants = self._load()
        if tenant_id not in tenants:
            raise UnknownTenantError(tenant_id)
        return tenants[tenant_id]

    def get_item(self, item_id: int, tenant_id: int) -> ContentItem | None:
        return self._tenant(tenant_id).items.get(item_id)

    def get_author(self, user_id: int, tenant_id: int) -> Author | None:
        return self._tenant(tenant_id).authors.get(user_id)

    def get_taxonomies_for(self, content_type: str, tenant_id: int) -> Sequence[str]:
        return self._tenant(tenant_id).taxonomies.get(content_type, [])

    def get_assigned_terms(
        self, item_id: int, taxonomy: str, tenant_id: int
    ) -> Sequence[Term]:
        tenant = self._tenant(tenant_id)
        term_ids = tenant.assignments.get(item_id, {}).get(taxonomy, [])
        # Dangling term ids in the export are skipped
        return [tenant.terms[t] for t in term_ids if t in tenant.terms]

    def get_raw_meta(self, item_id: int, tenant_id: int) -> Mapping[str, Any]:
        return self._tenant(tenant_id).meta.get(item_id, {})

    def list_publishable_items(
        self,
        tenant_id: int,
        content_types: frozenset[str],
        offset: int,
        page_size: int,
    ) -> Sequence[ContentItem]:
        tenant = self._tenant(tenant_id)
        publishable = sorted(
            (
                item
                for item in tenant.items.values()
                if item.status == ContentStatus.PUBLISH
                and item.content_type in content_types
            ),
            key=tenant.listing_key,
        )
        return publishable[offset : offset + page_size]

    def get_tenant_ids(self) -> Sequence[int]:
        return sorted(self._load())

    def can_edit(self, item_id: int, tenant_id: int) -> bool:
        return True
