"""JWT access and refresh tokens identifying a provider."""

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from marketplace.config import settings
from marketplace.errors import UnauthorizedError


def _encode(provider_id: str, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload = {"sub": provider_id, "iat": now, "exp": now + lifetime, "type": token_type}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(provider_id: str, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token for ``provider_id``.

    Defaults to ``settings.jwt_access_token_expire_minutes`` minutes.
    """
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(provider_id, "access", lifetime)


def create_refresh_token(provider_id: str, expires_delta: timedelta | None = None) -> str:
    """Create a long-lived refresh token for ``provider_id``.

    Defaults to ``settings.jwt_refresh_token_expire_days`` days.
    """
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(provider_id, "refresh", lifetime)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def principal_from_token(token: str, expected_type: str = "access") -> uuid.UUID:
    """Return the provider ID a token was issued to.

    Raises:
        UnauthorizedError: bad signature, expired, wrong token type, or a
            subject that is not a UUID.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise UnauthorizedError("Could not validate credentials") from None

    if payload.get("type") != expected_type:
        raise UnauthorizedError("Invalid token type")

    sub = payload.get("sub")
    if sub is None:
        raise UnauthorizedError("Invalid token payload")
    try:
        return uuid.UUID(sub)
    except ValueError:
        raise UnauthorizedError("Invalid token payload") from None


def create_token_pair(provider_id: str) -> dict[str, str]:
    """Create both access and refresh tokens for a provider."""
    return {
        "access_token": create_access_token(provider_id),
        "refresh_token": create_refresh_token(provider_id),
        "token_type": "bearer",
    }
