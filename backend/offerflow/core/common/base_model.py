"""
Shared columns for every persisted lifecycle entity
"""

import uuid
from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.sql import func
from offerflow.infrastructure.database import Base


class BaseModel(Base):
    """
    Abstract base: UUID primary key plus creation / last-change timestamps.
    """
    __abstract__ = True

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"
