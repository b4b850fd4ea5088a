"""
Services layer - Application business logic
"""

from offerflow.services.lifecycle import (
    OfferLifecycleEngine,
    LifecycleError,
    ConflictError,
    AuthorizationError,
    NotFoundError,
    InconsistentStateError,
    ValidationError,
)

__all__ = [
    "OfferLifecycleEngine",
    "LifecycleError",
    "ConflictError",
    "AuthorizationError",
    "NotFoundError",
    "InconsistentStateError",
    "ValidationError",
]
