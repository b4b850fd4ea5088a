"""
Offer lifecycle engine - stage resolution, gate decisions and visibility for
plain offers, co-investment opportunities and co-investment offers
"""

from offerflow.services.lifecycle.errors import (
    LifecycleError,
    ConflictError,
    AuthorizationError,
    NotFoundError,
    InconsistentStateError,
    ValidationError,
)
from offerflow.services.lifecycle.chains import (
    CHAINS,
    ChainDescriptor,
    GateDefinition,
    FinalGateDefinition,
    Party,
    chain_for,
)
from offerflow.services.lifecycle.stage_resolver import Resolution, resolve_stage
from offerflow.services.lifecycle.gate_processor import DecisionOutcome
from offerflow.services.lifecycle.engine import OfferLifecycleEngine

__all__ = [
    "LifecycleError",
    "ConflictError",
    "AuthorizationError",
    "NotFoundError",
    "InconsistentStateError",
    "ValidationError",
    "CHAINS",
    "ChainDescriptor",
    "GateDefinition",
    "FinalGateDefinition",
    "Party",
    "chain_for",
    "Resolution",
    "resolve_stage",
    "DecisionOutcome",
    "OfferLifecycleEngine",
]
