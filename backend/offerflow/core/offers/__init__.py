"""
Offers domain
"""

from offerflow.core.offers.models import InvestmentOffer, OfferEvent

__all__ = ["InvestmentOffer", "OfferEvent"]
