"""
Prometheus metrics endpoint
"""

import logging
from typing import Optional
from fastapi import APIRouter, Request, HTTPException, status, Header, Depends
from fastapi.responses import Response
import jwt as pyjwt

from offerflow.infrastructure.settings import get_settings
from offerflow.utils.metrics import get_metrics_output, METRICS_CONTENT_TYPE

logger = logging.getLogger(__name__)

router = APIRouter(tags=["metrics"])


async def verify_metrics_access(
    request: Request,
    x_metrics_token: Optional[str] = Header(None, alias="X-Metrics-Token"),
) -> bool:
    """
    Verify access to metrics endpoint.

    Access is granted if:
    - METRICS_PUBLIC=true, OR
    - METRICS_TOKEN is set and matches X-Metrics-Token header, OR
    - the bearer token carries the admin role
    """
    settings = get_settings()

    if settings.METRICS_PUBLIC:
        return True

    if settings.METRICS_TOKEN and x_metrics_token == settings.METRICS_TOKEN:
        return True

    authorization = request.headers.get("Authorization", "")
    if authorization.startswith("Bearer "):
        token = authorization.split(" ", 1)[1]
        try:
            payload = pyjwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
        except pyjwt.InvalidTokenError:
            payload = {}
        if any(str(r).lower() == "admin" for r in payload.get("roles") or []):
            return True

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access to metrics endpoint denied. Set METRICS_PUBLIC=true or provide a valid METRICS_TOKEN or admin token.",
    )


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    description="Expose Prometheus metrics for observability. Protected by default (METRICS_PUBLIC=false).",
)
async def get_metrics(
    _: bool = Depends(verify_metrics_access),
) -> Response:
    """Prometheus metrics in exposition format"""
    return Response(
        content=get_metrics_output(),
        media_type=METRICS_CONTENT_TYPE,
    )
