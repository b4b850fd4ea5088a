"""
Chain descriptors

Each lifecycle item kind is described by one ChainDescriptor: the ordered
gates run before the startup sees the item, the final startup gate, the row
attributes holding each party, and the status label written at each point.
The stage resolver and gate processor are written against this description
only, so every kind shares the same code path.
"""

import enum
from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from offerflow.core.approvals.statuses import (
    Gate,
    GateStatus,
    ItemKind,
    OfferStatus,
    CoInvestmentOfferStatus,
    OpportunityStatus,
)
from offerflow.core.offers.models import InvestmentOffer
from offerflow.core.co_investment.models import CoInvestmentOpportunity, CoInvestmentOffer

STARTUP_REVIEW_STAGE = 3
ACCEPTED_STAGE = 4


class Party(str, enum.Enum):
    """Participants an item row refers to"""
    INVESTOR = "investor"
    CO_INVESTOR = "co_investor"
    LEAD_INVESTOR = "lead_investor"
    STARTUP = "startup"


class Approver(str, enum.Enum):
    """Who decides a gate: the party's advisor, or the party itself"""
    ADVISOR = "advisor"
    PARTY = "party"


@dataclass(frozen=True)
class GateDefinition:
    gate: Gate
    status_field: str
    party: Party
    stage: int
    pending_label: Optional[str]
    rejected_label: str
    conditional: bool = True
    approver: Approver = Approver.ADVISOR


@dataclass(frozen=True)
class FinalGateDefinition:
    """The startup's own accept/reject decision, taken at stage 3"""
    status_field: str
    pending_label: Optional[str]
    accepted_label: Optional[str]
    rejected_label: str
    gate: Gate = Gate.STARTUP_FINAL
    party: Party = Party.STARTUP
    stage: int = STARTUP_REVIEW_STAGE


@dataclass(frozen=True)
class ChainDescriptor:
    kind: ItemKind
    model: type
    submitter: Party
    parties: Mapping[Party, str]
    gates: Tuple[GateDefinition, ...]
    final: FinalGateDefinition
    status_enum: type
    terminal_statuses: frozenset = field(default_factory=frozenset)
    accepted_is_exclusive: bool = True  # One accepted deal per (investor, startup)

    def gate_definition(self, gate: Gate):
        """Return the GateDefinition / FinalGateDefinition for `gate`, or None if the chain has no such gate"""
        if gate == self.final.gate:
            return self.final
        for definition in self.gates:
            if definition.gate == gate:
                return definition
        return None

    def gate_for_stage(self, stage: int) -> Optional[GateDefinition]:
        for definition in self.gates:
            if definition.stage == stage:
                return definition
        return None

    def party_id(self, item, party: Party):
        return getattr(item, self.parties[party])

    def status_fields(self) -> Tuple[str, ...]:
        return tuple(d.status_field for d in self.gates) + (self.final.status_field,)


OFFER_CHAIN = ChainDescriptor(
    kind=ItemKind.OFFER,
    model=InvestmentOffer,
    submitter=Party.INVESTOR,
    parties={Party.INVESTOR: "investor_id", Party.STARTUP: "startup_id"},
    gates=(
        GateDefinition(
            gate=Gate.INVESTOR_ADVISOR,
            status_field="investor_advisor_approval",
            party=Party.INVESTOR,
            stage=1,
            pending_label=OfferStatus.PENDING_INVESTOR_ADVISOR_APPROVAL.value,
            rejected_label=OfferStatus.INVESTOR_ADVISOR_REJECTED.value,
        ),
        GateDefinition(
            gate=Gate.STARTUP_ADVISOR,
            status_field="startup_advisor_approval",
            party=Party.STARTUP,
            stage=2,
            pending_label=OfferStatus.PENDING_STARTUP_ADVISOR_APPROVAL.value,
            rejected_label=OfferStatus.STARTUP_ADVISOR_REJECTED.value,
        ),
    ),
    final=FinalGateDefinition(
        status_field="startup_approval_status",
        pending_label=OfferStatus.PENDING.value,
        accepted_label=OfferStatus.ACCEPTED.value,
        rejected_label=OfferStatus.REJECTED.value,
    ),
    status_enum=OfferStatus,
    terminal_statuses=frozenset({
        OfferStatus.ACCEPTED.value,
        OfferStatus.REJECTED.value,
        OfferStatus.INVESTOR_ADVISOR_REJECTED.value,
        OfferStatus.STARTUP_ADVISOR_REJECTED.value,
    }),
)

# The opportunity keeps status=active while its gates run; only a rejection changes it
OPPORTUNITY_CHAIN = ChainDescriptor(
    kind=ItemKind.CO_INVESTMENT_OPPORTUNITY,
    model=CoInvestmentOpportunity,
    submitter=Party.LEAD_INVESTOR,
    parties={Party.LEAD_INVESTOR: "lead_investor_id", Party.STARTUP: "startup_id"},
    gates=(
        GateDefinition(
            gate=Gate.INVESTOR_ADVISOR,
            status_field="lead_investor_advisor_approval",
            party=Party.LEAD_INVESTOR,
            stage=1,
            pending_label=None,
            rejected_label=OpportunityStatus.CANCELLED.value,
        ),
        GateDefinition(
            gate=Gate.STARTUP_ADVISOR,
            status_field="startup_advisor_approval",
            party=Party.STARTUP,
            stage=2,
            pending_label=None,
            rejected_label=OpportunityStatus.CANCELLED.value,
        ),
    ),
    final=FinalGateDefinition(
        status_field="startup_approval_status",
        pending_label=None,
        accepted_label=None,
        rejected_label=OpportunityStatus.CANCELLED.value,
    ),
    status_enum=OpportunityStatus,
    terminal_statuses=frozenset({
        OpportunityStatus.COMPLETED.value,
        OpportunityStatus.CANCELLED.value,
    }),
    accepted_is_exclusive=False,
)

CO_INVESTMENT_OFFER_CHAIN = ChainDescriptor(
    kind=ItemKind.CO_INVESTMENT_OFFER,
    model=CoInvestmentOffer,
    submitter=Party.CO_INVESTOR,
    parties={
        Party.CO_INVESTOR: "co_investor_id",
        Party.LEAD_INVESTOR: "lead_investor_id",
        Party.STARTUP: "startup_id",
    },
    gates=(
        GateDefinition(
            gate=Gate.INVESTOR_ADVISOR,
            status_field="investor_advisor_approval_status",
            party=Party.CO_INVESTOR,
            stage=1,
            pending_label=CoInvestmentOfferStatus.PENDING_INVESTOR_ADVISOR_APPROVAL.value,
            rejected_label=CoInvestmentOfferStatus.INVESTOR_ADVISOR_REJECTED.value,
        ),
        GateDefinition(
            gate=Gate.LEAD_INVESTOR,
            status_field="lead_investor_approval_status",
            party=Party.LEAD_INVESTOR,
            stage=2,
            pending_label=CoInvestmentOfferStatus.PENDING_LEAD_INVESTOR_APPROVAL.value,
            rejected_label=CoInvestmentOfferStatus.LEAD_INVESTOR_REJECTED.value,
            conditional=False,
            approver=Approver.PARTY,
        ),
    ),
    final=FinalGateDefinition(
        status_field="startup_approval_status",
        pending_label=CoInvestmentOfferStatus.PENDING_STARTUP_APPROVAL.value,
        accepted_label=CoInvestmentOfferStatus.ACCEPTED.value,
        rejected_label=CoInvestmentOfferStatus.REJECTED.value,
    ),
    status_enum=CoInvestmentOfferStatus,
    terminal_statuses=frozenset({
        CoInvestmentOfferStatus.ACCEPTED.value,
        CoInvestmentOfferStatus.REJECTED.value,
        CoInvestmentOfferStatus.INVESTOR_ADVISOR_REJECTED.value,
        CoInvestmentOfferStatus.LEAD_INVESTOR_REJECTED.value,
    }),
)

CHAINS: Mapping[ItemKind, ChainDescriptor] = {
    ItemKind.OFFER: OFFER_CHAIN,
    ItemKind.CO_INVESTMENT_OPPORTUNITY: OPPORTUNITY_CHAIN,
    ItemKind.CO_INVESTMENT_OFFER: CO_INVESTMENT_OFFER_CHAIN,
}


def chain_for(kind) -> ChainDescriptor:
    return CHAINS[ItemKind(kind)]


def status_value(item) -> str:
    """Overall status of a row as a plain string"""
    status = item.status
    return status.value if isinstance(status, enum.Enum) else status


def is_terminal(chain: ChainDescriptor, item) -> bool:
    """Accepted, rejected at any gate, or closed by the lead investor"""
    if item.stage >= ACCEPTED_STAGE or status_value(item) in chain.terminal_statuses:
        return True
    return any(GateStatus(getattr(item, f)) == GateStatus.REJECTED for f in chain.status_fields())
