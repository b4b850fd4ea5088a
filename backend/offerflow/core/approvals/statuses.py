"""
Approval status registry

Closed enumerations for every gate, decision and overall status label used by
the offer lifecycle. Values are stored verbatim in the database; anything that
is not a member of the relevant enum is refused by `parse_*` rather than coerced.
"""

import enum
from typing import Optional, Type, TypeVar

E = TypeVar("E", bound=enum.Enum)


class GateStatus(str, enum.Enum):
    """Status of one approval gate"""
    NOT_REQUIRED = "not_required"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Gate(str, enum.Enum):
    """Named checkpoints an item can pass through"""
    INVESTOR_ADVISOR = "investor_advisor"
    LEAD_INVESTOR = "lead_investor"
    STARTUP_ADVISOR = "startup_advisor"
    STARTUP_FINAL = "startup_final"


class Decision(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ItemKind(str, enum.Enum):
    """Item kinds handled by the lifecycle engine"""
    OFFER = "offer"
    CO_INVESTMENT_OPPORTUNITY = "co_investment_opportunity"
    CO_INVESTMENT_OFFER = "co_investment_offer"


class ViewerRole(str, enum.Enum):
    """Roles a caller can list items as"""
    STARTUP = "startup"
    INVESTOR = "investor"
    LEAD_INVESTOR = "lead_investor"
    ADVISOR = "advisor"


class OfferStatus(str, enum.Enum):
    """Overall status of a plain investment offer"""
    PENDING_INVESTOR_ADVISOR_APPROVAL = "pending_investor_advisor_approval"
    PENDING_STARTUP_ADVISOR_APPROVAL = "pending_startup_advisor_approval"
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    INVESTOR_ADVISOR_REJECTED = "investor_advisor_rejected"
    STARTUP_ADVISOR_REJECTED = "startup_advisor_rejected"


class CoInvestmentOfferStatus(str, enum.Enum):
    """Overall status of a co-investor's ticket"""
    PENDING_INVESTOR_ADVISOR_APPROVAL = "pending_investor_advisor_approval"
    PENDING_LEAD_INVESTOR_APPROVAL = "pending_lead_investor_approval"
    PENDING_STARTUP_APPROVAL = "pending_startup_approval"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    INVESTOR_ADVISOR_REJECTED = "investor_advisor_rejected"
    LEAD_INVESTOR_REJECTED = "lead_investor_rejected"


class OpportunityStatus(str, enum.Enum):
    """Lifecycle status of a co-investment opportunity listing"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


REJECTED_OFFER_STATUSES = frozenset({
    OfferStatus.REJECTED,
    OfferStatus.INVESTOR_ADVISOR_REJECTED,
    OfferStatus.STARTUP_ADVISOR_REJECTED,
})

REJECTED_CO_INVESTMENT_OFFER_STATUSES = frozenset({
    CoInvestmentOfferStatus.REJECTED,
    CoInvestmentOfferStatus.INVESTOR_ADVISOR_REJECTED,
    CoInvestmentOfferStatus.LEAD_INVESTOR_REJECTED,
})


def enum_values(enum_cls: Type[enum.Enum]) -> list:
    """values_callable for SQLAlchemy Enum columns (store the lowercase value, not the name)"""
    return [member.value for member in enum_cls]


def parse_enum(enum_cls: Type[E], value) -> E:
    """
    Parse a raw value into `enum_cls`.

    Raises ValueError for None, blanks and unknown labels; callers decide which
    domain error that maps to.
    """
    if isinstance(value, enum_cls):
        return value
    if value is None:
        raise ValueError(f"{enum_cls.__name__} value is missing")
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        raise ValueError(f"Unknown {enum_cls.__name__} value: {value!r}") from None


def parse_gate_status(value) -> GateStatus:
    return parse_enum(GateStatus, value)


def parse_optional(enum_cls: Type[E], value) -> Optional[E]:
    if value is None:
        return None
    return parse_enum(enum_cls, value)
