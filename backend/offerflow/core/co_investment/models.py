"""
Co-investment models - Lead investor opportunities and co-investor tickets
"""

from sqlalchemy import (
    Column, String, ForeignKey, Enum as SQLEnum, Numeric, Integer, Text, Index,
    CheckConstraint, Uuid, text,
)
from sqlalchemy.orm import relationship
from offerflow.core.common.base_model import BaseModel
from offerflow.core.approvals.statuses import (
    GateStatus,
    CoInvestmentOfferStatus,
    OpportunityStatus,
    enum_values,
)
from offerflow.core.offers.models import gate_status_column


class CoInvestmentOpportunity(BaseModel):
    """
    CoInvestmentOpportunity model - remaining round capacity a lead investor opens to co-investors

    Runs its own approval chain (lead investor's advisor, startup advisor, startup).
    status stays ACTIVE while gates run; any rejection cancels it. Only one ACTIVE
    opportunity may exist per (startup, lead investor).
    """

    __tablename__ = "co_investment_opportunities"

    startup_id = Column(Uuid(as_uuid=True), ForeignKey("startups.id", name="fk_co_investment_opportunities_startup_id"), nullable=False, index=True)
    lead_investor_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_co_investment_opportunities_lead_investor_id"), nullable=False, index=True)
    listing_id = Column(Uuid(as_uuid=True), ForeignKey("listings.id", name="fk_co_investment_opportunities_listing_id"), nullable=True)

    investment_amount = Column(Numeric(24, 2), nullable=False)  # Total ask
    equity_percentage = Column(Numeric(7, 4), nullable=False)
    minimum_co_investment = Column(Numeric(24, 2), nullable=True)
    maximum_co_investment = Column(Numeric(24, 2), nullable=True)
    currency = Column(String(3), nullable=False, default="USD")
    description = Column(Text, nullable=True)

    stage = Column(Integer, nullable=False, default=1)
    status = Column(SQLEnum(OpportunityStatus, name="co_investment_opportunity_status", values_callable=enum_values, create_constraint=True), nullable=False, default=OpportunityStatus.ACTIVE, index=True)
    lead_investor_advisor_approval = gate_status_column()
    startup_advisor_approval = gate_status_column()
    startup_approval_status = gate_status_column(default=GateStatus.PENDING)

    lead_investor = relationship("User", foreign_keys=[lead_investor_id], lazy="select")
    startup = relationship("Startup", foreign_keys=[startup_id], lazy="select")
    offers = relationship("CoInvestmentOffer", back_populates="opportunity", lazy="select")

    __table_args__ = (
        CheckConstraint('stage >= 1 AND stage <= 4', name='check_co_investment_opportunity_stage_range'),
        CheckConstraint('investment_amount > 0', name='check_co_investment_opportunity_amount_positive'),
        CheckConstraint(
            'minimum_co_investment IS NULL OR maximum_co_investment IS NULL OR minimum_co_investment <= maximum_co_investment',
            name='check_co_investment_opportunity_ticket_bounds',
        ),
        Index(
            'uq_co_investment_opportunities_active_pair',
            'startup_id',
            'lead_investor_id',
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )


class CoInvestmentOffer(BaseModel):
    """
    CoInvestmentOffer model - a co-investor's ticket against an open opportunity

    Chain: co-investor's advisor (if any) -> lead investor -> startup.
    lead_investor_id and startup_id are copied from the opportunity at submission.
    Rejected tickets are kept as history.
    """

    __tablename__ = "co_investment_offers"

    opportunity_id = Column(Uuid(as_uuid=True), ForeignKey("co_investment_opportunities.id", name="fk_co_investment_offers_opportunity_id"), nullable=False, index=True)
    co_investor_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_co_investment_offers_co_investor_id"), nullable=False, index=True)
    lead_investor_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_co_investment_offers_lead_investor_id"), nullable=False, index=True)
    startup_id = Column(Uuid(as_uuid=True), ForeignKey("startups.id", name="fk_co_investment_offers_startup_id"), nullable=False, index=True)

    offer_amount = Column(Numeric(24, 2), nullable=False)
    equity_percentage = Column(Numeric(7, 4), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")

    stage = Column(Integer, nullable=False, default=1)
    status = Column(SQLEnum(CoInvestmentOfferStatus, name="co_investment_offer_status", values_callable=enum_values, create_constraint=True), nullable=False, default=CoInvestmentOfferStatus.PENDING_LEAD_INVESTOR_APPROVAL, index=True)
    investor_advisor_approval_status = gate_status_column()
    lead_investor_approval_status = gate_status_column(default=GateStatus.PENDING)
    startup_approval_status = gate_status_column(default=GateStatus.PENDING)

    opportunity = relationship("CoInvestmentOpportunity", back_populates="offers", lazy="select")

    __table_args__ = (
        CheckConstraint('stage >= 1 AND stage <= 4', name='check_co_investment_offer_stage_range'),
        CheckConstraint('offer_amount > 0', name='check_co_investment_offer_amount_positive'),
        Index('idx_co_investment_offers_opportunity_status', 'opportunity_id', 'status'),
    )
