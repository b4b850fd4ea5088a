"""
Approval status registry
"""

from offerflow.core.approvals.statuses import (
    GateStatus,
    Gate,
    Decision,
    ItemKind,
    ViewerRole,
    OfferStatus,
    CoInvestmentOfferStatus,
    OpportunityStatus,
    REJECTED_OFFER_STATUSES,
    REJECTED_CO_INVESTMENT_OFFER_STATUSES,
    parse_enum,
    parse_gate_status,
)

__all__ = [
    "GateStatus",
    "Gate",
    "Decision",
    "ItemKind",
    "ViewerRole",
    "OfferStatus",
    "CoInvestmentOfferStatus",
    "OpportunityStatus",
    "REJECTED_OFFER_STATUSES",
    "REJECTED_CO_INVESTMENT_OFFER_STATUSES",
    "parse_enum",
    "parse_gate_status",
]
