"""
Pydantic schemas for co-investment opportunities and offers
"""

from pydantic import BaseModel, Field, model_validator
from decimal import Decimal
from datetime import datetime
from typing import Optional
from uuid import UUID

from offerflow.core.approvals.statuses import (
    CoInvestmentOfferStatus,
    GateStatus,
    OpportunityStatus,
)


# Request schemas
class SubmitOpportunityRequest(BaseModel):
    startup_id: UUID
    investment_amount: Decimal = Field(..., gt=0, description="Total ask")
    equity_percentage: Decimal = Field(..., ge=0, le=100)
    minimum_co_investment: Optional[Decimal] = Field(None, gt=0)
    maximum_co_investment: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)

    @model_validator(mode="after")
    def check_ticket_bounds(self):
        if (
            self.minimum_co_investment is not None
            and self.maximum_co_investment is not None
            and self.minimum_co_investment > self.maximum_co_investment
        ):
            raise ValueError("minimum_co_investment cannot exceed maximum_co_investment")
        return self


class EditOpportunityRequest(BaseModel):
    investment_amount: Optional[Decimal] = Field(None, gt=0)
    equity_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    minimum_co_investment: Optional[Decimal] = Field(None, gt=0)
    maximum_co_investment: Optional[Decimal] = Field(None, gt=0)
    description: Optional[str] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class UpdateOpportunityStatusRequest(BaseModel):
    status: OpportunityStatus


class SubmitCoInvestmentOfferRequest(BaseModel):
    opportunity_id: UUID
    offer_amount: Decimal = Field(..., gt=0)
    equity_percentage: Decimal = Field(..., ge=0, le=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


class EditCoInvestmentOfferRequest(BaseModel):
    offer_amount: Optional[Decimal] = Field(None, gt=0)
    equity_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


# Response schemas
class OpportunityResponse(BaseModel):
    id: UUID
    startup_id: UUID
    lead_investor_id: UUID
    listing_id: Optional[UUID] = None
    investment_amount: Decimal
    equity_percentage: Decimal
    minimum_co_investment: Optional[Decimal] = None
    maximum_co_investment: Optional[Decimal] = None
    currency: str
    description: Optional[str] = None
    stage: int
    status: OpportunityStatus
    lead_investor_advisor_approval: GateStatus
    startup_advisor_approval: GateStatus
    startup_approval_status: GateStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CoInvestmentOfferResponse(BaseModel):
    id: UUID
    opportunity_id: UUID
    co_investor_id: UUID
    lead_investor_id: UUID
    startup_id: UUID
    offer_amount: Decimal
    equity_percentage: Decimal
    currency: str
    stage: int
    status: CoInvestmentOfferStatus
    investor_advisor_approval_status: GateStatus
    lead_investor_approval_status: GateStatus
    startup_approval_status: GateStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
