"""
Typed exceptions for the time-tracking and billing engine.

Every error carries a machine-readable ``code`` so routers and callers can
branch on the type rather than on message text:

    BillingEngineError (base)
    |
    +-- NotFoundError        unknown entry, invoice or project id
    +-- InvalidStateError    operation illegal for the entry's lifecycle state
    +-- ConflictError        mutating or deleting a billed entry
    +-- InvalidInputError    malformed or cross-project id list for invoicing
"""
from typing import Any, Iterable, Optional


class BillingEngineError(Exception):
    """Base class for all engine errors."""

    code: str = "BILLING_ENGINE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        """Structured representation used in API error bodies."""
        return {"code": self.code, "message": self.message}


class NotFoundError(BillingEngineError):
    """Referenced entity does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({"entity": self.entity, "entity_id": self.entity_id})
        return data


class InvalidStateError(BillingEngineError):
    """Operation is not allowed in the entry's current state."""

    code = "INVALID_STATE"


class ConflictError(BillingEngineError):
    """Entry is billed and can no longer be changed."""

    code = "CONFLICT"


class InvalidInputError(BillingEngineError):
    """Invoice request references ids that cannot be billed."""

    code = "INVALID_INPUT"

    def __init__(self, message: str, invalid_ids: Optional[Iterable[int]] = None):
        super().__init__(message)
        self.invalid_ids = list(invalid_ids or [])

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["invalid_ids"] = self.invalid_ids
        return data
