"""Auth API router — provider sign-up, login, refresh, me, and Google sign-in."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.api.errors import to_http_exception
from marketplace.auth.dependencies import get_current_provider
from marketplace.auth.jwt import create_token_pair, principal_from_token
from marketplace.auth.oauth import google_identity, oauth
from marketplace.auth.passwords import hash_password, verify_password
from marketplace.config import settings
from marketplace.database import get_db
from marketplace.errors import UnauthorizedError
from marketplace.models.provider import Provider
from marketplace.schemas.auth import (
    AuthResponse,
    LoginRequest,
    ProviderResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


async def _find_or_create_federated_provider(
    db: AsyncSession,
    email: str,
    name: str,
    provider: str,
    provider_id: str,
) -> Provider:
    """Look up a provider by email; create one without a password if missing."""
    result = await db.execute(select(Provider).where(Provider.email == email))
    account = result.scalar_one_or_none()

    if account is not None:
        account.auth_provider = provider
        account.auth_provider_id = provider_id
        await db.flush()
        return account

    account = Provider(
        email=email,
        name=name or email,
        auth_provider=provider,
        auth_provider_id=provider_id,
        hashed_password=None,
    )
    db.add(account)
    await db.flush()
    await db.refresh(account)
    logger.info("Created provider %s from %s sign-in", account.id, provider)
    return account


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Register a new provider with email and password."""
    result = await db.execute(select(Provider).where(Provider.email == body.email))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    account = Provider(
        email=body.email,
        hashed_password=hash_password(body.password),
        name=body.name,
        auth_provider="local",
    )
    db.add(account)
    await db.flush()
    await db.refresh(account)

    tokens = create_token_pair(str(account.id))
    return AuthResponse(
        provider=ProviderResponse.model_validate(account),
        tokens=TokenResponse(**tokens),
    )


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Authenticate with email and password."""
    result = await db.execute(select(Provider).where(Provider.email == body.email))
    account = result.scalar_one_or_none()

    # Federated-only accounts have no hash, so verify_password rejects them too
    if account is None or not verify_password(body.password, account.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not account.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )

    tokens = create_token_pair(str(account.id))
    return AuthResponse(
        provider=ProviderResponse.model_validate(account),
        tokens=TokenResponse(**tokens),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange a valid refresh token for a new token pair."""
    try:
        provider_id = principal_from_token(body.refresh_token, expected_type="refresh")
    except UnauthorizedError as e:
        raise to_http_exception(e) from None

    result = await db.execute(select(Provider).where(Provider.id == provider_id))
    account = result.scalar_one_or_none()

    if account is None or not account.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Provider not found or inactive",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(**create_token_pair(str(account.id)))


@router.get("/me", response_model=ProviderResponse)
async def me(current_provider: Provider = Depends(get_current_provider)) -> ProviderResponse:
    """Return the authenticated provider's profile."""
    return ProviderResponse.model_validate(current_provider)


@router.get("/google")
async def google_login(request: Request) -> RedirectResponse:
    """Redirect to Google's consent screen."""
    return await oauth.google.authorize_redirect(request, settings.google_redirect_uri)  # type: ignore[return-value]


@router.get("/google/callback")
async def google_callback(request: Request, db: AsyncSession = Depends(get_db)) -> RedirectResponse:
    """Handle the Google callback: find or create the provider, hand tokens to the frontend."""
    try:
        token = await oauth.google.authorize_access_token(request)
    except Exception as exc:
        logger.warning("Google sign-in callback failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Google authentication failed. Please try again.",
        ) from None

    identity = google_identity(token)
    if not identity["email"] or not identity["provider_id"]:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Google did not return a verified identity.",
        )

    account = await _find_or_create_federated_provider(
        db=db,
        email=identity["email"],
        name=identity["name"],
        provider=identity["provider"],
        provider_id=identity["provider_id"],
    )

    tokens = create_token_pair(str(account.id))
    redirect_url = (
        f"{settings.frontend_url}/auth/callback"
        f"?access_token={tokens['access_token']}"
        f"&refresh_token={tokens['refresh_token']}"
    )
    return RedirectResponse(url=redirect_url)
