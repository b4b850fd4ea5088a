"""
Pydantic schemas for plain investment offers
"""

from pydantic import BaseModel, Field
from decimal import Decimal
from datetime import datetime
from typing import Optional
from uuid import UUID

from offerflow.core.approvals.statuses import GateStatus, OfferStatus


# Request schemas
class SubmitOfferRequest(BaseModel):
    startup_id: UUID = Field(..., description="Startup the offer targets")
    offer_amount: Decimal = Field(..., gt=0, description="Offered amount")
    equity_percentage: Decimal = Field(..., ge=0, le=100, description="Equity requested (percent)")
    currency: Optional[str] = Field(None, min_length=3, max_length=3, description="ISO 4217 code (default: DEFAULT_CURRENCY)")
    opportunity_id: Optional[UUID] = Field(None, description="Source co-investment opportunity, if any")


class EditOfferRequest(BaseModel):
    offer_amount: Optional[Decimal] = Field(None, gt=0)
    equity_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)


# Response schemas
class OfferResponse(BaseModel):
    id: UUID
    investor_id: UUID
    startup_id: UUID
    listing_id: Optional[UUID] = None
    opportunity_id: Optional[UUID] = None
    offer_amount: Decimal
    equity_percentage: Decimal
    currency: str
    stage: int
    status: OfferStatus
    investor_advisor_approval: GateStatus
    startup_advisor_approval: GateStatus
    startup_approval_status: GateStatus
    contact_details_revealed: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
