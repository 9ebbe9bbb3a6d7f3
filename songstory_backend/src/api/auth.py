"""
Admin authentication: server-side password check and JWT handling.

Regular users have no credentials; only admin-only operations (such as
unpublishing a story) require:
- POST /api/admin/login -> token
- Authorization: Bearer <token> with role "admin"
"""

from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from src.api import settings

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
_bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_ROLE = "admin"


def _jwt_secret() -> str:
    secret = settings.jwt_secret()
    if not secret:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="JWT_SECRET is not configured.")
    return secret


# PUBLIC_INTERFACE
def hash_password(password: str) -> str:
    """Hash a plain-text password (used to produce ADMIN_PASSWORD_HASH)."""
    return _pwd_context.hash(password)


# PUBLIC_INTERFACE
def verify_admin_password(password: str) -> bool:
    """Check a password against ADMIN_PASSWORD_HASH, or ADMIN_PASSWORD when no hash is set."""
    password_hash = settings.admin_password_hash()
    if password_hash:
        return _pwd_context.verify(password, password_hash)
    plain = settings.admin_password()
    if plain:
        return hmac.compare_digest(password.encode(), plain.encode())
    return False


# PUBLIC_INTERFACE
def create_access_token(*, subject: str, role: str = ADMIN_ROLE) -> str:
    """
    Create a signed JWT access token.

    Token contains:
      - sub: subject ("admin")
      - role
      - iat, exp
    """
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=settings.jwt_exp_minutes())
    payload: Dict[str, Any] = {
        "sub": subject,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, _jwt_secret(), algorithm=settings.jwt_algorithm())


def _decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, _jwt_secret(), algorithms=[settings.jwt_algorithm()])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token.",
        )


# PUBLIC_INTERFACE
def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> Dict[str, Any]:
    """
    FastAPI dependency that returns the admin token claims.

    Raises 401 if the token is missing/invalid, 403 if it is not an admin token.
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated.")

    payload = _decode_token(credentials.credentials)
    if payload.get("role") != ADMIN_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required.")
    return payload
