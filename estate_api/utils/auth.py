"""
JWT issuing and verification.

Access tokens carry ``sub``, ``email``, ``role`` and ``type="access"``; refresh
tokens omit the role and carry ``type="refresh"``. A token of one type is never
accepted where the other is expected.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from estate_api.config import settings
from estate_api.models.user import UserRole
import uuid

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    email: str
    role: Optional[str]
    exp: datetime

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "TokenPayload":
        return cls(
            user_id=claims["sub"],
            email=claims["email"],
            role=claims.get("role"),
            exp=datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        )


def _issue(claims: Dict[str, Any], lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    return jwt.encode(
        {**claims, "iat": now, "exp": now + lifetime},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: UserRole,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Args:
        expires_delta: Overrides ``ACCESS_TOKEN_EXPIRE_MINUTES``
    """
    return _issue(
        {"sub": str(user_id), "email": email, "role": role.value, "type": ACCESS},
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )


def create_refresh_token(
    user_id: uuid.UUID,
    email: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    return _issue(
        {"sub": str(user_id), "email": email, "type": REFRESH},
        expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    )


def verify_token(token: str, token_type: str = ACCESS) -> TokenPayload:
    """
    Decode ``token`` and check its type and required claims.

    Raises:
        JWTError: Bad signature, expired, wrong type or missing claims.
            python-jose reports expiry as "Signature has expired."
    """
    claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])

    if claims.get("type") != token_type:
        raise JWTError(f"Invalid token type. Expected {token_type}")
    if not claims.get("sub") or not claims.get("email"):
        raise JWTError("Invalid token payload")

    return TokenPayload.from_claims(claims)
