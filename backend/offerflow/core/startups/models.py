"""
Startup model
"""

from sqlalchemy import Column, String, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from offerflow.core.common.base_model import BaseModel


class Startup(BaseModel):
    """Startup raising a round; owned by one startup user"""

    __tablename__ = "startups"

    name = Column(String(255), nullable=False, index=True)
    sector = Column(String(100), nullable=True)
    owner_user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", name="fk_startups_owner_user_id"), nullable=False, index=True)
    investment_advisor_code = Column(String(50), nullable=True, index=True)  # Blank means no advisor

    owner = relationship("User", foreign_keys=[owner_user_id], lazy="select")
