"""Authentication routes."""

import logging

from fastapi import APIRouter, HTTPException, Request, status
from sqlalchemy import select

from storeroom.core.rate_limit import limiter
from storeroom.core.rbac import CurrentUser
from storeroom.core.security import create_access_token, user_claims, verify_password
from storeroom.db.session import DbSession
from storeroom.models.user import User
from storeroom.schemas.auth import LoginRequest, Token, UserResponse

logger = logging.getLogger("auth")

router = APIRouter()


@router.post("/login", response_model=Token)
@limiter.limit("5/minute")
def login(request: Request, login_request: LoginRequest, db: DbSession):
    """Authenticate by username and password and return a JWT."""
    client_ip = request.client.host if request.client else "unknown"
    username = login_request.username.strip()
    user = db.execute(select(User).where(User.username == username)).scalar_one_or_none()

    if not user or not verify_password(login_request.password, user.password_hash):
        logger.warning(f"Failed login attempt for username: {username} from IP: {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    if not user.is_active:
        logger.warning(f"Login attempt for inactive user: {username} (ID: {user.id}) from IP: {client_ip}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    logger.info(f"Successful login: {user.username} (ID: {user.id}, role: {user.role.value}) from IP: {client_ip}")
    token = create_access_token(data=user_claims(user))
    return Token(access_token=token, user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def read_current_user(db: DbSession, current_user: CurrentUser):
    """Return the authenticated user's account."""
    return db.get(User, current_user.user_id)
