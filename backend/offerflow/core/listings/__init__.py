"""
Listings domain
"""

from offerflow.core.listings.models import Listing

__all__ = ["Listing"]
