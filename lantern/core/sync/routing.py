"""Index routing decisions.

A document is written either to its tenant's own index or, when cross-tenant
search is switched on fleet-wide, to the shared global index. The switch lives
on the global tenant's config; the per-tenant flag never affects routing.
"""

from lantern.domain.config import GLOBAL_TENANT_ID
from lantern.ports.config import TenantConfigSource


class IndexRouter:
    """Resolves which tenant index receives writes and deletes."""

    def __init__(self, tenant_configs: TenantConfigSource) -> None:
        self._tenant_configs = tenant_configs

    def cross_tenant_search_active(self) -> bool:
        """Check the fleet-wide cross-tenant search switch."""
        return self._tenant_configs.get_tenant_config(
            GLOBAL_TENANT_ID
        ).cross_tenant_search_active

    def host_tenant(self) -> int | None:
        """Host tenant for event-triggered writes.

        Returns:
            GLOBAL_TENANT_ID when cross-tenant search is active, None
            (meaning "the item's own tenant") otherwise.
        """
        return GLOBAL_TENANT_ID if self.cross_tenant_search_active() else None

    def target_index(self, item_tenant_id: int, host_tenant_id: int | None = None) -> int:
        """Resolve the index a document is routed to.

        Args:
            item_tenant_id: Tenant the content item belongs to.
            host_tenant_id: Tenant requested by the caller. None falls back to
                the item's tenant. 0 is the global tenant, not "unset".

        Returns:
            The target tenant index id.
        """
        if self.cross_tenant_search_active():
            return GLOBAL_TENANT_ID
        if host_tenant_id is not None:
            return host_tenant_id
        return item_tenant_id
