"""
Cross-item conflict lookups shared by submission and the startup's final accept
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from offerflow.core.approvals.statuses import (
    OfferStatus,
    CoInvestmentOfferStatus,
    OpportunityStatus,
    REJECTED_OFFER_STATUSES,
    REJECTED_CO_INVESTMENT_OFFER_STATUSES,
)
from offerflow.core.offers.models import InvestmentOffer
from offerflow.core.co_investment.models import CoInvestmentOpportunity, CoInvestmentOffer


def find_accepted_item(
    db: Session,
    investor_id: UUID,
    startup_id: UUID,
    exclude_id: Optional[UUID] = None,
) -> Optional[UUID]:
    """Id of an accepted offer or co-investment offer for (investor, startup), other than exclude_id"""
    offer_query = select(InvestmentOffer.id).where(
        InvestmentOffer.investor_id == investor_id,
        InvestmentOffer.startup_id == startup_id,
        InvestmentOffer.status == OfferStatus.ACCEPTED,
    )
    co_offer_query = select(CoInvestmentOffer.id).where(
        CoInvestmentOffer.co_investor_id == investor_id,
        CoInvestmentOffer.startup_id == startup_id,
        CoInvestmentOffer.status == CoInvestmentOfferStatus.ACCEPTED,
    )
    if exclude_id is not None:
        offer_query = offer_query.where(InvestmentOffer.id != exclude_id)
        co_offer_query = co_offer_query.where(CoInvestmentOffer.id != exclude_id)

    return (
        db.execute(offer_query.limit(1)).scalar_one_or_none()
        or db.execute(co_offer_query.limit(1)).scalar_one_or_none()
    )


def find_existing_offer(db: Session, investor_id: UUID, startup_id: UUID) -> Optional[InvestmentOffer]:
    """The single plain offer slot for (investor, startup), locked"""
    return db.execute(
        select(InvestmentOffer)
        .where(
            InvestmentOffer.investor_id == investor_id,
            InvestmentOffer.startup_id == startup_id,
        )
        .with_for_update()
    ).scalar_one_or_none()


def find_active_opportunity(
    db: Session,
    startup_id: UUID,
    lead_investor_id: UUID,
    exclude_id: Optional[UUID] = None,
) -> Optional[UUID]:
    query = select(CoInvestmentOpportunity.id).where(
        CoInvestmentOpportunity.startup_id == startup_id,
        CoInvestmentOpportunity.lead_investor_id == lead_investor_id,
        CoInvestmentOpportunity.status == OpportunityStatus.ACTIVE,
    )
    if exclude_id is not None:
        query = query.where(CoInvestmentOpportunity.id != exclude_id)
    return db.execute(query.limit(1)).scalar_one_or_none()


def find_open_co_investment_offer(db: Session, co_investor_id: UUID, startup_id: UUID) -> Optional[UUID]:
    """A non-rejected co-investment offer by the co-investor on any opportunity of the startup"""
    return db.execute(
        select(CoInvestmentOffer.id)
        .where(
            CoInvestmentOffer.co_investor_id == co_investor_id,
            CoInvestmentOffer.startup_id == startup_id,
            CoInvestmentOffer.status.notin_(list(REJECTED_CO_INVESTMENT_OFFER_STATUSES)),
        )
        .limit(1)
    ).scalar_one_or_none()


def is_rejected_offer(offer: InvestmentOffer) -> bool:
    return OfferStatus(offer.status) in REJECTED_OFFER_STATUSES


def find_open_offer(db: Session, investor_id: UUID, startup_id: UUID) -> Optional[UUID]:
    """A non-rejected plain offer by the investor to the startup"""
    return db.execute(
        select(InvestmentOffer.id)
        .where(
            InvestmentOffer.investor_id == investor_id,
            InvestmentOffer.startup_id == startup_id,
            InvestmentOffer.status.notin_(list(REJECTED_OFFER_STATUSES)),
        )
        .limit(1)
    ).scalar_one_or_none()
