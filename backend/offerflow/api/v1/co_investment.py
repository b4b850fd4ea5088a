"""
Client API - Co-investment opportunities and co-investment offers
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from offerflow.auth.dependencies import get_acting_party_id
from offerflow.core.approvals.statuses import ItemKind, ViewerRole
from offerflow.infrastructure.database import get_db
from offerflow.schemas.co_investment import (
    CoInvestmentOfferResponse,
    EditCoInvestmentOfferRequest,
    EditOpportunityRequest,
    OpportunityResponse,
    SubmitCoInvestmentOfferRequest,
    SubmitOpportunityRequest,
    UpdateOpportunityStatusRequest,
)
from offerflow.schemas.lifecycle import DecisionRequest, DecisionResponse
from offerflow.services.lifecycle import LifecycleError, OfferLifecycleEngine
from offerflow.api.v1.decisions import run_decision
from offerflow.api.v1.dependencies import get_engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/co-investment", tags=["co-investment"])


# ----------------------------------------------------------------------
# Opportunities
# ----------------------------------------------------------------------

@router.post(
    "/opportunities",
    response_model=OpportunityResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a co-investment opportunity",
)
async def submit_opportunity(
    request: SubmitOpportunityRequest,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    lead_investor_id: UUID = Depends(get_acting_party_id),
) -> OpportunityResponse:
    logger.info(
        "Opportunity submission",
        extra={"lead_investor_id": str(lead_investor_id), "startup_id": str(request.startup_id)},
    )
    try:
        opportunity = engine.submit_opportunity(
            lead_investor_id=lead_investor_id,
            **request.model_dump(),
        )
        db.commit()
    except LifecycleError:
        db.rollback()
        raise
    return OpportunityResponse.model_validate(opportunity)


@router.get("/opportunities", response_model=List[OpportunityResponse])
async def list_opportunities(
    role: ViewerRole = Query(...),
    engine: OfferLifecycleEngine = Depends(get_engine),
    party_id: UUID = Depends(get_acting_party_id),
) -> List[OpportunityResponse]:
    items = engine.list_visible(ItemKind.CO_INVESTMENT_OPPORTUNITY, role, party_id)
    return [OpportunityResponse.model_validate(o) for o in items]


@router.get("/opportunities/{opportunity_id}", response_model=OpportunityResponse)
async def get_opportunity(
    opportunity_id: UUID,
    role: ViewerRole = Query(...),
    engine: OfferLifecycleEngine = Depends(get_engine),
    party_id: UUID = Depends(get_acting_party_id),
) -> OpportunityResponse:
    item = engine.get_for_role(ItemKind.CO_INVESTMENT_OPPORTUNITY, opportunity_id, role, party_id)
    return OpportunityResponse.model_validate(item)


@router.patch("/opportunities/{opportunity_id}", response_model=OpportunityResponse)
async def edit_opportunity(
    opportunity_id: UUID,
    request: EditOpportunityRequest,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    lead_investor_id: UUID = Depends(get_acting_party_id),
) -> OpportunityResponse:
    try:
        item = engine.edit(
            ItemKind.CO_INVESTMENT_OPPORTUNITY,
            opportunity_id,
            lead_investor_id,
            request.model_dump(exclude_unset=True),
        )
        db.commit()
    except LifecycleError:
        db.rollback()
        raise
    return OpportunityResponse.model_validate(item)


@router.post(
    "/opportunities/{opportunity_id}/status",
    response_model=OpportunityResponse,
    summary="Activate, deactivate, complete or cancel an opportunity",
)
async def update_opportunity_status(
    opportunity_id: UUID,
    request: UpdateOpportunityStatusRequest,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    lead_investor_id: UUID = Depends(get_acting_party_id),
) -> OpportunityResponse:
    try:
        item = engine.update_opportunity_status(opportunity_id, request.status, lead_investor_id)
        db.commit()
    except LifecycleError:
        db.rollback()
        raise
    return OpportunityResponse.model_validate(item)


@router.post("/opportunities/{opportunity_id}/decisions", response_model=DecisionResponse)
async def decide_opportunity(
    opportunity_id: UUID,
    request: DecisionRequest,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    acting_party_id: UUID = Depends(get_acting_party_id),
) -> DecisionResponse:
    return run_decision(
        db=db,
        engine=engine,
        item_id=opportunity_id,
        request=request,
        acting_party_id=acting_party_id,
        item_kind=ItemKind.CO_INVESTMENT_OPPORTUNITY,
    )


# ----------------------------------------------------------------------
# Co-investment offers
# ----------------------------------------------------------------------

@router.post(
    "/offers",
    response_model=CoInvestmentOfferResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a co-investment offer against an open opportunity",
)
async def submit_co_investment_offer(
    request: SubmitCoInvestmentOfferRequest,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    co_investor_id: UUID = Depends(get_acting_party_id),
) -> CoInvestmentOfferResponse:
    logger.info(
        "Co-investment offer submission",
        extra={"co_investor_id": str(co_investor_id), "opportunity_id": str(request.opportunity_id)},
    )
    try:
        item = engine.submit_co_investment_offer(
            co_investor_id=co_investor_id,
            **request.model_dump(),
        )
        db.commit()
    except LifecycleError:
        db.rollback()
        raise
    return CoInvestmentOfferResponse.model_validate(item)


@router.get("/offers", response_model=List[CoInvestmentOfferResponse])
async def list_co_investment_offers(
    role: ViewerRole = Query(...),
    engine: OfferLifecycleEngine = Depends(get_engine),
    party_id: UUID = Depends(get_acting_party_id),
) -> List[CoInvestmentOfferResponse]:
    items = engine.list_visible(ItemKind.CO_INVESTMENT_OFFER, role, party_id)
    return [CoInvestmentOfferResponse.model_validate(o) for o in items]


@router.get("/offers/{offer_id}", response_model=CoInvestmentOfferResponse)
async def get_co_investment_offer(
    offer_id: UUID,
    role: ViewerRole = Query(...),
    engine: OfferLifecycleEngine = Depends(get_engine),
    party_id: UUID = Depends(get_acting_party_id),
) -> CoInvestmentOfferResponse:
    item = engine.get_for_role(ItemKind.CO_INVESTMENT_OFFER, offer_id, role, party_id)
    return CoInvestmentOfferResponse.model_validate(item)


@router.patch("/offers/{offer_id}", response_model=CoInvestmentOfferResponse)
async def edit_co_investment_offer(
    offer_id: UUID,
    request: EditCoInvestmentOfferRequest,
    db: Session = Depends(get_db),
    engine: OfferLifecycleEngine = Depends(get_engine),
    co_investor_id: UUID = Depends(get_acting_party_id),
) -> CoInvestmentOfferResponse:
    try:
        item = engine.edit(
            ItemKind.CO_INVESTMENT_OFFER,
            offer_id,
            co_investor_id,
            request.model_dump(exclude_unset=True),
        )
        db.commit()
    except LifecycleError:
        db.rollback()
        raise
    return CoInvestmentOfferResponse.model_validate(item)


@router.post("/offers/{offer_id}/decisions", response_model=DecisionResponse)
async def decide_co_investment_offer(
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
        item_kind=ItemKind.CO_INVESTMENT_OFFER,
    )
