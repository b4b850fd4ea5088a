"""
Offer models - Plain investment offers and the lifecycle activity trail
"""

from sqlalchemy import (
    Column, String, ForeignKey, Enum as SQLEnum, Numeric, Integer, Boolean, Index,
    CheckConstraint, UniqueConstraint, Uuid, JSON,
)
from sqlalchemy.orm import relationship
from offerflow.core.common.base_model import BaseModel
from offerflow.core.approvals.statuses import (
    GateStatus,
    OfferStatus,
    Gate,
    Decision,
    ItemKind,
    enum_values,
)


def gate_status_column(default: GateStatus = GateStatus.NOT_REQUIRED, name: str = "gate_status") -> Column:
    """Approval gate column shared by every item kind"""
    return Column(
        SQLEnum(GateStatus, name=name, values_callable=enum_values),
        nullable=False,
        default=default,
    )


class InvestmentOffer(BaseModel):
    """
    InvestmentOffer model - one investor's proposed terms for one startup

    Workflow fields:
    - stage: 1 (investor advisor), 2 (startup advisor), 3 (startup review), 4 (accepted)
    - investor_advisor_approval / startup_advisor_approval: advisor gates
    - startup_approval_status: final gate, decided by the startup owner at stage 3
    - status: overall label derived from the gates

    At most one offer exists per (investor, startup); a rejected one is deleted
    when the investor resubmits.
    """

    __tablename__ = "investment_offers"

    investor_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_investment_offers_investor_id"), nullable=False, index=True)
    startup_id = Column(Uuid(as_uuid=True), ForeignKey("startups.id", name="fk_investment_offers_startup_id"), nullable=False, index=True)
    listing_id = Column(Uuid(as_uuid=True), ForeignKey("listings.id", name="fk_investment_offers_listing_id"), nullable=True, index=True)
    opportunity_id = Column(Uuid(as_uuid=True), ForeignKey("co_investment_opportunities.id", name="fk_investment_offers_opportunity_id"), nullable=True)  # Source opportunity, if any

    offer_amount = Column(Numeric(24, 2), nullable=False)
    equity_percentage = Column(Numeric(7, 4), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")  # ISO 4217

    stage = Column(Integer, nullable=False, default=1)
    status = Column(SQLEnum(OfferStatus, name="investment_offer_status", values_callable=enum_values, create_constraint=True), nullable=False, default=OfferStatus.PENDING, index=True)
    investor_advisor_approval = gate_status_column()
    startup_advisor_approval = gate_status_column()
    startup_approval_status = gate_status_column(default=GateStatus.PENDING)
    contact_details_revealed = Column(Boolean, nullable=False, default=False)

    investor = relationship("User", foreign_keys=[investor_id], lazy="select")
    startup = relationship("Startup", foreign_keys=[startup_id], lazy="select")

    __table_args__ = (
        UniqueConstraint('investor_id', 'startup_id', name='uq_investment_offers_investor_startup'),
        CheckConstraint('stage >= 1 AND stage <= 4', name='check_investment_offer_stage_range'),
        CheckConstraint('offer_amount > 0', name='check_investment_offer_amount_positive'),
        CheckConstraint('equity_percentage >= 0 AND equity_percentage <= 100', name='check_investment_offer_equity_range'),
        Index('idx_investment_offers_startup_stage', 'startup_id', 'stage'),
    )


class OfferEvent(BaseModel):
    """
    OfferEvent model - append-only activity trail for lifecycle items

    One row per submission, gate decision, edit, contact reveal and opportunity
    status change. item_id is not a foreign key: the trail outlives deleted offers.
    """

    __tablename__ = "offer_events"

    item_kind = Column(SQLEnum(ItemKind, name="lifecycle_item_kind", values_callable=enum_values, create_constraint=True), nullable=False)
    item_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    action = Column(String(50), nullable=False)  # submitted, decided, edited, contact_revealed, status_changed, deleted
    gate = Column(SQLEnum(Gate, name="lifecycle_gate", values_callable=enum_values, create_constraint=True), nullable=True)
    decision = Column(SQLEnum(Decision, name="lifecycle_decision", values_callable=enum_values, create_constraint=True), nullable=True)
    actor_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    stage_before = Column(Integer, nullable=True)
    stage_after = Column(Integer, nullable=True)
    status_after = Column(String(50), nullable=True)
    details = Column(JSON, nullable=True)
    sequence = Column(Integer, nullable=False, default=0)  # Per-item ordering; created_at ties within one transaction

    __table_args__ = (
        Index('idx_offer_events_item', 'item_kind', 'item_id', 'sequence'),
    )
