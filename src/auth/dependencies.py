"""FastAPI dependencies for authentication.

Provides dependency injection for:
- Current actor extraction from JWT
- Role-based access control
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError

from src.auth.permissions import Actor, UserRole, has_permission
from src.auth.security import decode_access_token
from src.core.context import set_user_id


def get_token_from_header(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Returns:
        Token string or None if not present
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    expected_parts = 2
    parts = auth_header.split()
    if len(parts) != expected_parts or parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_current_user(
    token: Annotated[str | None, Depends(get_token_from_header)],
) -> Actor:
    """Get current authenticated actor from JWT token.

    Raises:
        HTTPException(401): If token is missing, invalid, or expired
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
        actor = Actor(id=UUID(payload["sub"]), role=UserRole(payload["role"]))
    except (JWTError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    # Set user_id in context for logging
    set_user_id(str(actor.id))

    return actor


def require_role(*allowed_roles: UserRole):
    """Create dependency requiring specific role(s) (exact match).

    Example:
        @router.post("/request")
        async def request_endpoint(
            user: Annotated[Actor, Depends(require_role(UserRole.STUDENT))]
        ):
            ...
    """

    async def role_checker(
        user: Annotated[Actor, Depends(get_current_user)],
    ) -> Actor:
        if user.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

        return user

    return role_checker


def require_permission(required_role: UserRole):
    """Create dependency requiring at least a permission level.

    Uses hierarchical comparison: ADMIN >= TEACHER >= STUDENT >= USER
    """

    async def permission_checker(
        user: Annotated[Actor, Depends(get_current_user)],
    ) -> Actor:
        if not has_permission(user.role, required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

        return user

    return permission_checker


# ==============================================================================
# Type Aliases for Cleaner Code
# ==============================================================================

CurrentUser = Annotated[Actor, Depends(get_current_user)]

# Students only: requesting access and recording progress
StudentUser = Annotated[Actor, Depends(require_role(UserRole.STUDENT))]

# TEACHER or ADMIN: course management (ownership is checked by the workflow)
TeacherUser = Annotated[Actor, Depends(require_permission(UserRole.TEACHER))]
