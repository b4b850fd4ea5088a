"""
Co-investment domain
"""

from offerflow.core.co_investment.models import CoInvestmentOpportunity, CoInvestmentOffer

__all__ = ["CoInvestmentOpportunity", "CoInvestmentOffer"]
