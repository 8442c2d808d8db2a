"""Role-Based Access Control (RBAC) utilities."""

from enum import Enum
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from storeroom.core.security import decode_access_token
from storeroom.db.session import DbSession


class UserRole(str, Enum):
    """User roles for RBAC."""

    ADMIN = "admin"
    STOREKEEPER = "storekeeper"
    VIEWER = "viewer"


class TokenData:
    """Decoded token data.

    Attributes:
        user_id: The user's database ID.
        username: The user's login name.
        role: The user's role (admin/storekeeper/viewer).
        id: Alias for user_id.
    """

    def __init__(self, user_id: int, username: str, role: UserRole):
        self.user_id = user_id
        self.id = user_id
        self.username = username
        self.role = role


def get_current_user(request: Request, db: DbSession) -> TokenData:
    """Get the current authenticated user from the Bearer token.

    The token must decode, carry a known role, and belong to a user who is
    still active.
    """
    payload = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1]
        if token:
            payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    username = payload.get("username")
    role = payload.get("role")

    if user_id is None or username is None or role is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        user_role = UserRole(role)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid role in token",
        )

    try:
        user_pk = int(user_id)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid subject in token",
        )

    from storeroom.models.user import User
    user = db.get(User, user_pk)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is disabled",
        )

    return TokenData(user_id=user.id, username=username, role=user_role)


def require_roles(*roles: UserRole):
    """Dependency that admits only the listed roles."""

    def role_checker(
        current_user: Annotated[TokenData, Depends(get_current_user)]
    ) -> TokenData:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires one of roles: {', '.join(r.value for r in roles)}",
            )
        return current_user

    return role_checker


# Common role dependencies
RequireStorekeeper = Annotated[
    TokenData, Depends(require_roles(UserRole.ADMIN, UserRole.STOREKEEPER))
]
CurrentUser = Annotated[TokenData, Depends(get_current_user)]
