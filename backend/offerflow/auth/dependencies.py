"""
Authentication dependencies for FastAPI

The acting party of every lifecycle call is the subject of an HS256 bearer token.
"""

from typing import Optional
from uuid import UUID
from fastapi import Depends, HTTPException, Request, status, Header
from sqlalchemy.orm import Session
import jwt as pyjwt

from offerflow.auth.principal import Principal
from offerflow.infrastructure.settings import get_settings
from offerflow.infrastructure.database import get_db
from offerflow.infrastructure.logging_config import trace_id_context
from offerflow.core.users.models import User


def _unauthorized(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={
            "error": {
                "code": code,
                "message": message,
                "trace_id": trace_id_context.get() or "auth-check",
            }
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_principal(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Principal:
    """
    Extract Principal from the JWT in the Authorization header.

    The subject must be the UUID of an existing user; the user's role is
    added to the principal's roles.
    """
    if not authorization:
        raise _unauthorized("AUTHORIZATION_MISSING", "Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise _unauthorized("INVALID_AUTHORIZATION", "Invalid authorization header format")
    if scheme.lower() != "bearer":
        raise _unauthorized("INVALID_AUTHORIZATION", "Invalid authentication scheme")

    settings = get_settings()
    try:
        payload = pyjwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except pyjwt.ExpiredSignatureError:
        raise _unauthorized("TOKEN_EXPIRED", "Token expired")
    except pyjwt.InvalidTokenError as e:
        raise _unauthorized("INVALID_TOKEN", f"Invalid token: {str(e)}")

    subject = payload.get("sub")
    try:
        user_id = UUID(str(subject))
    except (ValueError, TypeError):
        raise _unauthorized("INVALID_TOKEN", "Token subject is not a user id")

    user = db.get(User, user_id)
    if user is None:
        raise _unauthorized("USER_NOT_FOUND", "Token subject does not match a user")

    roles = list(payload.get("roles") or [])
    role_value = user.role.value if hasattr(user.role, "value") else user.role
    if role_value not in roles:
        roles.append(role_value)

    principal = Principal(
        subject=str(user_id),
        email=payload.get("email") or user.email,
        roles=roles,
        raw_claims=payload,
    )
    request.state.principal = principal
    return principal


def get_acting_party_id(principal: Principal = Depends(get_current_principal)) -> UUID:
    """User id of the caller; used as acting_party_id for lifecycle operations"""
    return principal.user_id
