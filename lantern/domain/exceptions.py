"""Domain exceptions for Lantern business logic.

These exceptions represent business rule violations and domain-level errors.
They should be caught at the application boundary (CLI, event gateway) and
converted to appropriate user-facing error messages or log records.
"""


class LanternDomainError(Exception):
    """Base exception for all domain errors.

    Attributes:
        message: User-facing error message.
        hint: Optional actionable suggestion.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class UnknownTenantError(LanternDomainError):
    """Raised when a tenant id is not known to the content store."""

    def __init__(self, tenant_id: int) -> None:
        super().__init__(
            f"Unknown tenant {tenant_id}",
            hint="Run 'lantern status' to list known tenants",
        )
        self.tenant_id = tenant_id
