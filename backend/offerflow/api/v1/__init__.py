"""
API v1 routes - lifecycle surface
"""

from fastapi import APIRouter
from offerflow.infrastructure.settings import get_settings
from offerflow.api.v1.offers import router as offers_router
from offerflow.api.v1.co_investment import router as co_investment_router
from offerflow.api.v1.decisions import router as decisions_router

settings = get_settings()
router = APIRouter(prefix=settings.API_V1_PREFIX)

router.include_router(offers_router)
router.include_router(co_investment_router)
router.include_router(decisions_router)
