"""
Caller identity.

Authentication and role storage live outside this service. Callers present a
JWT (cookie or bearer header) issued elsewhere; its ``sub`` names a row in
``users`` and its ``capabilities`` claim lists what the caller may do.
"""

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.orm import Session
from mediahub.core.database import get_db
from mediahub.core.config import settings
from mediahub.models.user import User
from typing import Iterable, List, Optional
from datetime import datetime, timedelta, timezone
import logging
import uuid

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60

# Capability names checked by the API layer
CAP_PUBLICATIONS_UPDATE = "publications.update"
CAP_PUBLICATIONS_APPROVE = "publications.approve"
CAP_PUBLICATIONS_DELETE = "publications.delete"
CAP_CATEGORIES_MANAGE = "categories.manage"
CAP_FILES_MANAGE = "files.manage"


def create_access_token(
    data: dict,
    capabilities: Optional[Iterable[str]] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Token payload data
        capabilities: Capability names granted to the caller
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()
    # Ensure sub is a string (RFC 7519)
    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update(
        {
            "exp": expire,
            "iat": datetime.now(timezone.utc),
            "jti": str(uuid.uuid4()),
            "type": "access",
            "capabilities": sorted(set(capabilities or [])),
        }
    )

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Decode and validate an access token.

    Raises:
        HTTPException: If token is invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.warning("Token expired")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


def _extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    token = request.cookies.get("auth_token")
    if not token and credentials:
        token = credentials.credentials
    return token


def _load_user(db: Session, payload: dict) -> User:
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        )

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
        )

    # Capabilities come from the token, not from local storage
    user.capabilities = list(payload.get("capabilities") or [])
    return user


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get the current authenticated user from JWT token (cookie or Authorization header)."""
    token = _extract_token(request, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _load_user(db, decode_token(token))


async def get_current_user_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Get the current user if authenticated, otherwise return None."""
    token = _extract_token(request, credentials)
    if not token:
        return None

    try:
        return _load_user(db, decode_token(token))
    except HTTPException:
        return None


def require_capability(*required: str):
    """Dependency factory: the caller must hold every listed capability."""

    async def _checker(current_user: User = Depends(get_current_user)) -> User:
        granted: List[str] = getattr(current_user, "capabilities", [])
        missing = [cap for cap in required if cap not in granted]
        if missing:
            logger.warning(
                f"User {current_user.id} lacks capabilities {missing}",
                extra={"user_id": current_user.id},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing capability: {', '.join(missing)}",
            )
        return current_user

    return _checker
