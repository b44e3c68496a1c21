"""Request-scoped dependencies shared by the routers."""

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.config import settings
from backend.app.db import get_db
from backend.app.models.user import User
from backend.app.services.access import Denial, Outcome, Principal, Role
from backend.app.services.auth import decode_token

# Transport status for each denial kind
DENIAL_STATUS = {
    Denial.UNAUTHENTICATED: 401,
    Denial.FORBIDDEN: 403,
    Denial.NOT_FOUND: 404,
    Denial.INVALID_INPUT: 400,
    Denial.CONFLICT: 409,
}


def _read_token(request: Request) -> str | None:
    token = request.cookies.get(settings.cookie_name)
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User | None:
    """Resolve the signed-in user from the session cookie or bearer token."""
    token = _read_token(request)
    if not token:
        return None
    claims = decode_token(token)
    if claims is None:
        return None
    return await db.get(User, claims["sub"])


async def get_principal(user: User | None = Depends(get_current_user)) -> Principal | None:
    if user is None:
        return None
    return Principal(id=user.id, role=Role(user.role))


def raise_for(outcome: Outcome):
    """Return the outcome's value, or raise the matching HTTPException."""
    if not outcome.ok:
        raise HTTPException(status_code=DENIAL_STATUS[outcome.denial], detail=outcome.detail)
    return outcome.value
