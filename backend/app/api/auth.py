"""Registration, login & session endpoints."""

import logging
import uuid
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.deps import get_current_user
from backend.app.config import settings
from backend.app.db import get_db
from backend.app.models.user import User
from backend.app.schemas.user import SessionResponse, UserLogin, UserRegister, UserResponse
from backend.app.services.auth import hash_password, issue_token, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        max_age=settings.token_ttl_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(data: UserRegister, db: AsyncSession = Depends(get_db)) -> User:
    result = await db.execute(select(User).where(User.email == data.email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=409, detail="User already exists")

    admin_emails = {email.lower() for email in settings.admin_emails}
    user = User(
        id=str(uuid.uuid4()),
        email=data.email,
        password_hash=hash_password(data.password),
        role="admin" if data.email in admin_emails else "user",
        name=data.name,
        created_at=datetime.now(UTC).isoformat(),
    )
    db.add(user)
    await db.flush()
    logger.info("Registered %s (%s)", user.email, user.role)
    return user


@router.post("/login", response_model=SessionResponse)
async def login(
    data: UserLogin, response: Response, db: AsyncSession = Depends(get_db)
) -> dict:
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()
    # Same answer for unknown email and wrong password
    if not user or not verify_password(data.password, user.password_hash):
        logger.info("Failed login for %s", data.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    _set_session_cookie(response, issue_token(user))
    logger.info("Login for %s", user.email)
    return {"user": user}


@router.post("/logout")
async def logout(response: Response) -> dict[str, str]:
    response.delete_cookie(key=settings.cookie_name, path="/")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
async def me(user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


@router.get("/session", response_model=SessionResponse)
async def session(user: User | None = Depends(get_current_user)) -> dict:
    return {"user": user}
