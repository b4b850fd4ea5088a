"""
Lifecycle errors - surfaced unchanged to callers; the API layer maps them to HTTP codes
"""

from typing import Optional
from uuid import UUID


class LifecycleError(Exception):
    """Base class for offer lifecycle errors"""
    code = "LIFECYCLE_ERROR"

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = {k: v for k, v in details.items() if v is not None}


class ConflictError(LifecycleError):
    """Raised on a duplicate active item, an incompatible gate decision, or a decision on a terminal item"""
    code = "CONFLICT"

    def __init__(self, message: str, conflicting_item_id: Optional[UUID] = None, **details):
        super().__init__(message, conflicting_item_id=conflicting_item_id, **details)
        self.conflicting_item_id = conflicting_item_id


class AuthorizationError(LifecycleError):
    """Raised when the acting party is not the expected approver for a gate"""
    code = "FORBIDDEN"


class NotFoundError(LifecycleError):
    """Raised when an item or gate is unknown"""
    code = "NOT_FOUND"


class InconsistentStateError(LifecycleError):
    """Raised when a gate recorded as not_required belongs to a party that has an advisor"""
    code = "INCONSISTENT_STATE"


class ValidationError(LifecycleError):
    """Raised when submitted terms are invalid"""
    code = "VALIDATION_ERROR"
