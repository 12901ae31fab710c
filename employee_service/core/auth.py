"""
Authentication and authorization for employee service.

Validates JWT tokens issued by the auth service and implements role-based
access control per endpoint.
"""

from enum import Enum
from typing import Callable, List, Optional

import jwt
import structlog
from fastapi import Depends, HTTPException, Path, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..config import settings

logger = structlog.get_logger(__name__)
security = HTTPBearer(auto_error=False)


class Role(str, Enum):
    """Roles carried in the token ``roles`` claim."""

    ADMIN = "ROLE_ADMIN"
    HR = "ROLE_HR"


class User:
    """
    User model for authenticated requests.

    Attributes:
        id: Subject of the token; for employees this is their employee id
        email: User email address
        roles: Granted roles
    """

    def __init__(self, id: str, email: Optional[str], roles: List[str]):
        self.id = id
        self.email = email
        self.roles = roles

    def has_any_role(self, *roles: Role) -> bool:
        """Check whether the user holds at least one of the roles."""
        return any(role.value in self.roles for role in roles)

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, roles={self.roles})"


def decode_jwt_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Args:
        token: JWT token string

    Returns:
        Decoded payload if valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Token has expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token", error=str(e))
        return None

    # Only access tokens grant API access
    if payload.get("type", "access") != "access":
        logger.warning("Invalid token type", token_type=payload.get("type"))
        return None

    return payload


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[User]:
    """
    Validate JWT token and return user.

    Returns None for requests without a valid token.

    Args:
        credentials: HTTP Bearer token from Authorization header

    Returns:
        User object if authenticated, None if not authenticated
    """
    if not credentials:
        logger.debug("No credentials provided")
        return None

    payload = decode_jwt_token(credentials.credentials)
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("Invalid token payload - missing subject")
        return None

    roles = payload.get("roles") or []
    if isinstance(roles, str):
        roles = [roles]

    return User(id=str(user_id), email=payload.get("email"), roles=list(roles))


async def require_authentication(
    user: Optional[User] = Depends(get_current_user),
) -> User:
    """
    Require authenticated user.

    Raises:
        HTTPException: 401 if user is not authenticated
    """
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_roles(*roles: Role) -> Callable:
    """
    Build a dependency that admits users holding any of the roles.

    Example:
        @router.delete("/{id}")
        async def delete(user: User = Depends(require_roles(Role.ADMIN))): ...
    """

    async def dependency(user: User = Depends(require_authentication)) -> User:
        if not user.has_any_role(*roles):
            logger.warning(
                "Access denied", user_id=user.id, required=[r.value for r in roles]
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return dependency


async def require_staff_or_owner(
    employee_id: str = Path(...),
    user: User = Depends(require_authentication),
) -> User:
    """
    Admit administrators, HR, or the employee the record belongs to.

    Raises:
        HTTPException: 403 if none applies
    """
    if user.has_any_role(Role.ADMIN, Role.HR) or user.id == employee_id:
        return user

    logger.warning("Access denied to employee record", user_id=user.id, employee_id=employee_id)
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Insufficient permissions",
    )


require_admin = require_roles(Role.ADMIN)
require_admin_or_hr = require_roles(Role.ADMIN, Role.HR)
