"""
Shared dependencies for the v1 lifecycle routers
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from offerflow.infrastructure.database import get_db
from offerflow.services.lifecycle import OfferLifecycleEngine


def get_engine(db: Session = Depends(get_db)) -> OfferLifecycleEngine:
    """Lifecycle engine bound to the request's session"""
    return OfferLifecycleEngine(db)
