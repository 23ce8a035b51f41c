"""Bearer-token authentication.

Tokens are issued elsewhere; this service only verifies HS256 JWTs signed
with the domain's ``JWT_SECRET`` and reads the caller from their claims.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from protean.utils.globals import current_domain

ADMIN_ROLE = "admin"

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    id: str
    name: str | None = None
    email: str | None = None
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def decode_token(token: str) -> Principal:
    claims = jwt.decode(
        token,
        current_domain.JWT_SECRET,
        algorithms=[current_domain.JWT_ALGORITHM],
    )
    subject = claims.get("sub")
    if not subject:
        raise JWTError("Token has no subject")
    return Principal(
        id=str(subject),
        name=claims.get("name"),
        email=claims.get("email"),
        role=claims.get("role", "user"),
    )


def get_current_user(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> Principal:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return decode_token(credentials.credentials)
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def require_admin(user: Principal = Depends(get_current_user)) -> Principal:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user
