"""
Client API - Plain investment offers
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from offerflow.auth.dependencies import get_acting_party_id
from offerflow.core.approvals.statuses import ItemKind, ViewerRole
from offerflow.infrastructure.database import get_db
from offerflow.schemas.offers import EditOfferRequest, OfferResponse, SubmitOfferRequest
from offerflow.schemas.lifecycle import DecisionRequest, DecisionResponse, OfferEventResponse
from offerflow.services.lifecycle import LifecycleError, OfferLifecycleEngine
from offerflow.api.v1.decisions import run_decision
from offerflow.api.v1.dependencies import get_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/offers", tags=["offers"])


@router.post(
    "",
    response_model=OfferResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an investment offer",
    description="Submit an offer to a startup. The offer is routed through the investor's and the startup's advisors when they have one.",
)
async def submit_offer(
    request: SubmitOfferRequest,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    investor_id: UUID = Depends(get_acting_party_id),
) -> OfferResponse:
    logger.info(
        "Offer submission",
        extra={"investor_id": str(investor_id), "startup_id": str(request.startup_id)},
    )
    try:
        offer = engine.submit_offer(
            investor_id=investor_id,
            startup_id=request.startup_id,
            offer_amount=request.offer_amount,
            equity_percentage=request.equity_percentage,
            currency=request.currency,
            opportunity_id=request.opportunity_id,
        )
        db.commit()
    except LifecycleError:
        db.rollback()
        raise
    return OfferResponse.model_validate(offer)


@router.get(
    "",
    response_model=List[OfferResponse],
    summary="List offers visible to the caller",
)
async def list_offers(
    role: ViewerRole = Query(..., description="startup | investor | lead_investor | advisor"),
    engine: OfferLifecycleEngine = Depends(get_engine),
    party_id: UUID = Depends(get_acting_party_id),
) -> List[OfferResponse]:
    offers = engine.list_visible(ItemKind.OFFER, role, party_id)
    return [OfferResponse.model_validate(o) for o in offers]


@router.get(
    "/{offer_id}",
    response_model=OfferResponse,
    summary="Get one offer as seen by a role",
)
async def get_offer(
    offer_id: UUID,
    role: ViewerRole = Query(...),
    engine: OfferLifecycleEngine = Depends(get_engine),
    party_id: UUID = Depends(get_acting_party_id),
) -> OfferResponse:
    return OfferResponse.model_validate(engine.get_for_role(ItemKind.OFFER, offer_id, role, party_id))


@router.patch(
    "/{offer_id}",
    response_model=OfferResponse,
    summary="Edit the terms of an offer in progress",
)
async def edit_offer(
    offer_id: UUID,
    request: EditOfferRequest,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    investor_id: UUID = Depends(get_acting_party_id),
) -> OfferResponse:
    try:
        offer = engine.edit(ItemKind.OFFER, offer_id, investor_id, request.model_dump(exclude_unset=True))
        db.commit()
    except LifecycleError:
        db.rollback()
        raise
    return OfferResponse.model_validate(offer)


@router.post(
    "/{offer_id}/decisions",
    response_model=DecisionResponse,
    summary="Approve or reject a gate of an offer",
)
async def decide_offer(
    offer_id: UUID,
    request: DecisionRequest,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    acting_party_id: UUID = Depends(get_acting_party_id),
) -> DecisionResponse:
    return run_decision(
        db=db,
        engine=engine,
        item_id=offer_id,
        request=request,
        acting_party_id=acting_party_id,
        item_kind=ItemKind.OFFER,
    )


@router.post(
    "/{offer_id}/reveal-contact",
    response_model=OfferResponse,
    summary="Reveal contact details on an accepted offer",
)
async def reveal_contact_details(
    offer_id: UUID,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    acting_party_id: UUID = Depends(get_acting_party_id),
) -> OfferResponse:
    try:
        offer = engine.reveal_contact_details(offer_id, acting_party_id)
        db.commit()
    except LifecycleError:
        db.rollback()
        raise
    return OfferResponse.model_validate(offer)


@router.get(
    "/{offer_id}/events",
    response_model=List[OfferEventResponse],
    summary="Activity trail of an offer",
)
async def list_offer_events(
    offer_id: UUID,
    role: ViewerRole = Query(...),
    engine: OfferLifecycleEngine = Depends(get_engine),
    party_id: UUID = Depends(get_acting_party_id),
) -> List[OfferEventResponse]:
    events = engine.list_events(offer_id, role, party_id, item_kind=ItemKind.OFFER)
    return [OfferEventResponse.model_validate(e) for e in events]
