"""
Listing store - idempotent lookup-or-create of the listing an offer targets
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from offerflow.core.listings.models import Listing
from offerflow.core.startups.models import Startup
from offerflow.infrastructure.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ListingDefaults:
    """Fundraising terms used when a startup has no listing yet"""
    name: Optional[str] = None
    investment_type: str = "Seed"
    investment_value: Decimal = Decimal("1000000")
    equity_allocation: Decimal = Decimal("10")
    sector: Optional[str] = "Technology"

    @classmethod
    def from_settings(cls) -> "ListingDefaults":
        settings = get_settings()
        return cls(
            investment_type=settings.DEFAULT_LISTING_INVESTMENT_TYPE,
            investment_value=settings.DEFAULT_LISTING_INVESTMENT_VALUE,
            equity_allocation=settings.DEFAULT_LISTING_EQUITY_ALLOCATION,
            sector=settings.DEFAULT_LISTING_SECTOR,
        )


class ListingStore(Protocol):
    def find_or_create_listing(self, target_id: UUID, defaults: ListingDefaults) -> UUID:
        ...


class SqlListingStore:
    """ListingStore keyed by startup id (one listing per startup)"""

    def __init__(self, db: Session):
        self.db = db

    def _find(self, startup_id: UUID) -> Optional[Listing]:
        return self.db.execute(
            select(Listing).where(Listing.startup_id == startup_id)
        ).scalar_one_or_none()

    def find_or_create_listing(self, target_id: UUID, defaults: ListingDefaults) -> UUID:
        """
        Return the listing id for startup `target_id`, creating it from `defaults` if missing.

        The insert runs in a SAVEPOINT; if a concurrent caller created the
        listing first, the unique constraint fires and the existing row is returned.
        """
        existing = self._find(target_id)
        if existing is not None:
            return existing.id

        startup = self.db.get(Startup, target_id)
        listing = Listing(
            startup_id=target_id,
            name=defaults.name or (startup.name if startup is not None else str(target_id)),
            investment_type=defaults.investment_type,
            investment_value=defaults.investment_value,
            equity_allocation=defaults.equity_allocation,
            sector=(startup.sector if startup is not None and startup.sector else defaults.sector),
        )
        try:
            with self.db.begin_nested():
                self.db.add(listing)
                self.db.flush()
        except IntegrityError:
            existing = self._find(target_id)
            if existing is None:
                raise
            return existing.id

        logger.info(
            "Listing created for startup",
            extra={"listing_id": str(listing.id), "startup_id": str(target_id)},
        )
        return listing.id
