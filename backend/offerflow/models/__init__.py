"""
Models registry - Import all models here to ensure Base.metadata is complete

Used by Alembic and by the test suite's create_all. Import order follows
foreign key dependencies.
"""

from offerflow.infrastructure.database import Base

# 1. Parties
from offerflow.core.users.models import User, UserRole
from offerflow.core.startups.models import Startup

# 2. Listings (depends on Startup)
from offerflow.core.listings.models import Listing

# 3. Lifecycle items
from offerflow.core.co_investment.models import CoInvestmentOpportunity, CoInvestmentOffer
from offerflow.core.offers.models import InvestmentOffer, OfferEvent

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Startup",
    "Listing",
    "CoInvestmentOpportunity",
    "CoInvestmentOffer",
    "InvestmentOffer",
    "OfferEvent",
]
