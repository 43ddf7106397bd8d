"""Google sign-in (OpenID Connect) using the authlib Starlette integration."""

from authlib.integrations.starlette_client import OAuth

from marketplace.config import settings

oauth = OAuth()

oauth.register(
    name="google",
    client_id=settings.google_client_id,
    client_secret=settings.google_client_secret,
    server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
    client_kwargs={"scope": "openid email profile"},
)


def google_identity(token: dict) -> dict:
    """Pull the federated identity out of a Google token response.

    The ID token's ``userinfo`` claim already carries the verified profile,
    so no extra API call is needed.

    Returns:
        dict with keys: email, name, provider, provider_id
    """
    userinfo = token.get("userinfo") or {}
    return {
        "email": userinfo.get("email", ""),
        "name": userinfo.get("name") or userinfo.get("email", ""),
        "provider": "google",
        "provider_id": userinfo.get("sub", ""),
    }
