"""
Client API - Gate decisions and activity trail (any item kind)
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from offerflow.auth.dependencies import get_acting_party_id
from offerflow.core.approvals.statuses import ItemKind, ViewerRole
from offerflow.infrastructure.database import get_db
from offerflow.schemas.lifecycle import DecisionRequest, DecisionResponse, OfferEventResponse
from offerflow.services.lifecycle import LifecycleError, OfferLifecycleEngine
from offerflow.services.lifecycle.chains import status_value
from offerflow.api.v1.dependencies import get_engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["decisions"])


def run_decision(
    *,
    db: Session,
    engine: OfferLifecycleEngine,
    item_id: UUID,
    request: DecisionRequest,
    acting_party_id: UUID,
    item_kind: Optional[ItemKind] = None,
) -> DecisionResponse:
    """Apply a decision and commit; roll back and re-raise on any lifecycle error"""
    logger.info(
        "Decision request",
        extra={
            "item_id": str(item_id),
            "gate": request.gate.value,
            "decision": request.decision.value,
            "actor_id": str(acting_party_id),
        },
    )
    try:
        outcome = engine.decide(
            item_id,
            request.gate,
            request.decision,
            acting_party_id,
            item_kind=item_kind,
        )
        db.commit()
    except LifecycleError:
        db.rollback()
        raise

    item = outcome.item
    return DecisionResponse(
        item_kind=outcome.item_kind,
        item_id=item.id,
        gate=outcome.gate,
        decision=outcome.decision,
        changed=outcome.changed,
        stage_before=outcome.stage_before,
        stage_after=outcome.stage_after,
        status=status_value(item),
    )


@router.post(
    "/items/{item_id}/decisions",
    response_model=DecisionResponse,
    summary="Decide a gate on any lifecycle item",
    description="Approve or reject one gate. The item kind is looked up from the id.",
)
async def decide_item(
    item_id: UUID,
    request: DecisionRequest,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    acting_party_id: UUID = Depends(get_acting_party_id),
) -> DecisionResponse:
    return run_decision(
        db=db,
        engine=engine,
        item_id=item_id,
        request=request,
        acting_party_id=acting_party_id,
    )


@router.get(
    "/items/{item_id}/events",
    response_model=List[OfferEventResponse],
    summary="Activity trail of a lifecycle item",
    description="Only returned to viewers who can see the item under the given role.",
)
async def list_item_events(
    item_id: UUID,
    role: ViewerRole = Query(...),
    engine: OfferLifecycleEngine = Depends(get_engine),
    party_id: UUID = Depends(get_acting_party_id),
) -> List[OfferEventResponse]:
    events = engine.list_events(item_id, role, party_id)
    return [OfferEventResponse.model_validate(e) for e in events]
