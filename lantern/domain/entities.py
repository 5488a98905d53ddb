"""Domain entities and value objects.

Core domain models representing the business concepts of Lantern: content
items read from the content store, the documents built from them for the
search index, and the bookkeeping records that drive synchronization.
These are pure Python dataclasses with no dependencies on infrastructure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ContentStatus(str, Enum):
    """Lifecycle status of a content item.

    Only PUBLISH items are ever sent to the search index.
    """

    PUBLISH = "publish"
    DRAFT = "draft"
    PENDING = "pending"
    PRIVATE = "private"
    FUTURE = "future"
    TRASH = "trash"
    AUTO_DRAFT = "auto-draft"
    INHERIT = "inherit"


# Content type used by the content store for stored revisions of an item.
REVISION_CONTENT_TYPE = "revision"


class SyncErrorType(str, Enum):
    """Classification of sync errors.

    Allows callers to distinguish between different failure modes and respond
    appropriately (e.g., log and continue vs. abort the tenant).
    """

    NONE = "none"  # No error occurred
    INDEX_ERROR = "index_error"  # Index client rejected or failed the call
    TIMEOUT = "timeout"  # Index client did not answer in time
    DATABASE_ERROR = "database_error"  # Sync state could not be read or written
    CONTENT_ERROR = "content_error"  # Content store lookup failed
    UNKNOWN = "unknown"  # Unclassified error


class SyncOutcome(str, Enum):
    """What a single decide-and-sync call ended up doing."""

    INDEXED = "indexed"  # First successful index, marker set
    UPDATED = "updated"  # Re-index of an already marked item
    FAILED = "failed"  # Index call failed or returned nothing
    SKIPPED = "skipped"  # Filtered out by a guard


@dataclass(frozen=True)
class ContentItem:
    """A content item as exposed by the content store.

    Attributes:
        id: Item identifier, unique within its tenant.
        content_type: Content type name (e.g. "post", "page", "article").
        status: Current lifecycle status.
        title: Rendered title.
        body: Content body.
        excerpt: Short summary, may be empty.
        created_at: Creation time in the tenant's local time.
        created_at_gmt: Creation time in UTC.
        modified_at: Last modification time in the tenant's local time.
        modified_at_gmt: Last modification time in UTC.
        parent_id: Parent item id, 0 for top-level items.
        author_id: User id of the author, 0 if unknown.
        slug: URL slug.
        mime_type: MIME type for attachments, empty otherwise.
        permalink: Public URL of the item.
        tenant_id: Tenant (site) the item belongs to.

    Raises:
        ValueError: If id is not positive, tenant_id is negative, or
            content_type is empty.
    """

    id: int
    content_type: str
    status: ContentStatus
    title: str = ""
    body: str = ""
    excerpt: str = ""
    created_at: datetime | None = None
    created_at_gmt: datetime | None = None
    modified_at: datetime | None = None
    modified_at_gmt: datetime | None = None
    parent_id: int = 0
    author_id: int = 0
    slug: str = ""
    mime_type: str = ""
    permalink: str = ""
    tenant_id: int = 1

    def __post_init__(self) -> None:
        """Validate item data after initialization."""
        if self.id <= 0:
            raise ValueError(f"id must be positive, got {self.id}")
        if self.tenant_id < 0:
            raise ValueError(f"tenant_id cannot be negative, got {self.tenant_id}")
        if not self.content_type:
            raise ValueError("content_type cannot be empty")

    @property
    def is_revision(self) -> bool:
        return self.content_type == REVISION_CONTENT_TYPE


@dataclass(frozen=True)
class Author:
    """Author fields copied into index documents."""

    login: str = ""
    display_name: str = ""

    def to_payload(self) -> dict[str, str]:
        return {"login": self.login, "display_name": self.display_name}


@dataclass(frozen=True)
class Term:
    """A taxonomy term assigned to a content item."""

    term_id: int
    slug: str
    name: str
    taxonomy: str
    parent_id: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "term_id": self.term_id,
            "slug": self.slug,
            "name": self.name,
            "parent": self.parent_id,
        }


def _format_time(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class IndexDocument:
    """Flattened projection of a content item sent to the index client.

    Built fresh for every sync and never persisted. The status is always
    "publish" since only published items reach the index.

    Attributes:
        item: The source content item.
        author: Author login and display name.
        terms: Taxonomy name -> ordered list of assigned terms. Taxonomies
            without terms are absent.
        meta: Non-protected metadata with deserialized values.
        tenant_id: Tenant whose content this document represents.
    """

    item: ContentItem
    author: Author
    terms: dict[str, list[Term]] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)
    tenant_id: int = 1

    @property
    def item_id(self) -> int:
        return self.item.id

    def to_payload(self) -> dict[str, Any]:
        """Convert the document to the wire payload for the index client.

        Returns:
            JSON-serializable dict.
        """
        item = self.item
        return {
            "post_id": item.id,
            "post_author": self.author.to_payload(),
            "post_date": _format_time(item.created_at),
            "post_date_gmt": _format_time(item.created_at_gmt),
            "post_title": item.title,
            "post_excerpt": item.excerpt,
            "post_content": item.body,
            "post_status": ContentStatus.PUBLISH.value,
            "post_name": item.slug,
            "post_modified": _format_time(item.modified_at),
            "post_modified_gmt": _format_time(item.modified_at_gmt),
            "post_parent": item.parent_id,
            "post_type": item.content_type,
            "post_mime_type": item.mime_type,
            "permalink": item.permalink,
            "terms": {
                taxonomy: [term.to_payload() for term in terms]
                for taxonomy, terms in self.terms.items()
            },
            "post_meta": dict(self.meta),
            "site_id": self.tenant_id,
        }


@dataclass(frozen=True)
class IndexResponse:
    """Response of a successful index call.

    Any instance counts as an acknowledged write, even without a document id;
    index clients signal an empty response by returning None.

    Attributes:
        document_id: Identifier the index assigned to the document, if the
            backend reported one.
    """

    document_id: str | None = None


@dataclass(frozen=True)
class SyncCursor:
    """Bulk-sync progress for one tenant.

    Attributes:
        start_time: When the bulk sync was scheduled. None means no sync is
            scheduled.
        posts_processed: Offset into the tenant's publishable listing.

    Raises:
        ValueError: If posts_processed is negative.
    """

    start_time: datetime | None = None
    posts_processed: int = 0

    def __post_init__(self) -> None:
        """Validate cursor after initialization."""
        if self.posts_processed < 0:
            raise ValueError(
                f"posts_processed cannot be negative, got {self.posts_processed}"
            )

    @property
    def is_scheduled(self) -> bool:
        return self.start_time is not None

    def scheduled_at(self, when: datetime) -> SyncCursor:
        return SyncCursor(start_time=when, posts_processed=self.posts_processed)

    def advanced(self) -> SyncCursor:
        return SyncCursor(
            start_time=self.start_time, posts_processed=self.posts_processed + 1
        )


@dataclass
class SyncResult:
    """Result of a single decide-and-sync call.

    Attributes:
        item_id: The content item that was processed.
        tenant_id: Tenant the marker is keyed on.
        target_index_id: Index the document was routed to.
        outcome: What happened.
        document_id: Document id returned by the index, if any.
        error: Error message if the index call failed, None otherwise.
        error_type: Classification of the error for programmatic handling.
    """

    item_id: int
    tenant_id: int
    target_index_id: int | None = None
    outcome: SyncOutcome = SyncOutcome.SKIPPED
    document_id: str | None = None
    error: str | None = None
    error_type: SyncErrorType = field(default=SyncErrorType.NONE)

    @property
    def succeeded(self) -> bool:
        return self.outcome in (SyncOutcome.INDEXED, SyncOutcome.UPDATED)


@dataclass
class TenantSyncReport:
    """Outcome of one tenant's share of a bulk sync run.

    Attributes:
        tenant_id: The tenant.
        processed: Items whose cursor checkpoint was written.
        indexed: Items whose index call succeeded.
        failed: Items whose index call failed.
        completed: True if the listing was exhausted and the cursor reset.
        error: Message of the exception that aborted this tenant, if any.
        error_type: Classification of that exception.
    """

    tenant_id: int
    processed: int = 0
    indexed: int = 0
    failed: int = 0
    completed: bool = False
    error: str | None = None
    error_type: SyncErrorType = field(default=SyncErrorType.NONE)

    @property
    def success(self) -> bool:
        return self.error is None


@dataclass
class BulkSyncReport:
    """Outcome of a run_pending_syncs call across all tenants."""

    tenants: list[TenantSyncReport] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return sum(t.processed for t in self.tenants)

    @property
    def completed_tenants(self) -> list[int]:
        return [t.tenant_id for t in self.tenants if t.completed]

    @property
    def failed_tenants(self) -> list[int]:
        return [t.tenant_id for t in self.tenants if not t.success]

    @property
    def success(self) -> bool:
        return not self.failed_tenants
