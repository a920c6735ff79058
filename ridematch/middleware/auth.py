import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader, HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from ridematch.config import get_settings

settings = get_settings()
bearer_scheme = HTTPBearer(auto_error=False)
service_key_scheme = APIKeyHeader(name="X-Service-Key", auto_error=False)


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    """Sign a JWT with the configured secret (HS256)."""
    to_encode = dict(data)
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    to_encode["exp"] = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    """Decode and validate the JWT Bearer token."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not payload.get("sub"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return payload


def _require_role(token_data: dict, role: str) -> str:
    if token_data.get("role") != role:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"{role} role required")
    return str(token_data["sub"])


async def get_current_passenger(token_data: dict = Depends(get_current_user)) -> str:
    """Extract passenger_id from token payload."""
    return _require_role(token_data, "passenger")


async def get_current_driver(token_data: dict = Depends(get_current_user)) -> str:
    """Extract driver_id from token payload."""
    return _require_role(token_data, "driver")


async def get_current_admin(token_data: dict = Depends(get_current_user)) -> str:
    return _require_role(token_data, "admin")


async def require_identity_service(api_key: Optional[str] = Depends(service_key_scheme)) -> None:
    """Only the identity service, after its password check, may open a login session."""
    expected = settings.identity_service_key
    if not expected or not api_key or not secrets.compare_digest(api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Identity service credential required",
        )
