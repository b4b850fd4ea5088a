"""
Health check endpoints
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from offerflow.infrastructure.database import get_db
from offerflow.services.lifecycle.chains import CHAINS
from offerflow.core.offers.models import OfferEvent

router = APIRouter(tags=["health"])

# Tables the lifecycle engine writes to; missing ones mean migrations have not run
LIFECYCLE_TABLES = sorted(
    {chain.model.__tablename__ for chain in CHAINS.values()} | {OfferEvent.__tablename__}
)


@router.get("/health")
async def health():
    """Liveness: the process answers"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(db: Session = Depends(get_db)):
    """
    Readiness: database reachable and lifecycle schema present

    Returns:
    - 200 with {"status": "ok", "database": "connected", "schema": "ok"}
    - 503 with the failing check otherwise
    """
    checks = {
        "status": "ok",
        "database": "unknown",
        "schema": "unknown",
    }

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = "connected"
        existing = set(inspect(db.connection()).get_table_names())
        missing = [name for name in LIFECYCLE_TABLES if name not in existing]
        if missing:
            checks["schema"] = f"missing tables: {', '.join(missing)}"
            checks["status"] = "not_ready"
        else:
            checks["schema"] = "ok"
    except SQLAlchemyError as e:
        checks["database"] = f"error: {str(e)}"
        checks["status"] = "not_ready"

    status_code = 200 if checks["status"] == "ok" else 503
    return JSONResponse(status_code=status_code, content=checks)
