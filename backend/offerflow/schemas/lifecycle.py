"""
Pydantic schemas shared by every lifecycle item kind
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from offerflow.core.approvals.statuses import Decision, Gate, ItemKind


class DecisionRequest(BaseModel):
    gate: Gate = Field(..., description="investor_advisor | lead_investor | startup_advisor | startup_final")
    decision: Decision = Field(..., description="approve | reject")


class DecisionResponse(BaseModel):
    item_kind: ItemKind
    item_id: UUID
    gate: Gate
    decision: Decision
    changed: bool = Field(..., description="False when the same decision had already been applied")
    stage_before: int
    stage_after: int
    status: str


class OfferEventResponse(BaseModel):
    id: UUID
    item_kind: ItemKind
    item_id: UUID
    action: str
    gate: Optional[Gate] = None
    decision: Optional[Decision] = None
    actor_id: Optional[UUID] = None
    stage_before: Optional[int] = None
    stage_after: Optional[int] = None
    status_after: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    sequence: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
