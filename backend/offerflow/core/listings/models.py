"""
Listing model - the backing record an offer targets
"""

from sqlalchemy import Column, String, ForeignKey, Numeric, Uuid, UniqueConstraint
from offerflow.core.common.base_model import BaseModel


class Listing(BaseModel):
    """
    Listing model - one catalog entry per startup

    Created lazily the first time an offer targets a startup that has no listing.
    """

    __tablename__ = "listings"

    startup_id = Column(Uuid(as_uuid=True), ForeignKey("startups.id", name="fk_listings_startup_id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    investment_type = Column(String(50), nullable=False)
    investment_value = Column(Numeric(24, 2), nullable=False)
    equity_allocation = Column(Numeric(7, 4), nullable=False)
    sector = Column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint('startup_id', name='uq_listings_startup_id'),
    )
