from __future__ import annotations

from dataclasses import dataclass
import logging
from urllib.parse import urlencode

import requests

from geosoft.core.config import get_settings
from geosoft.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
SCOPES = [
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]


class GoogleOAuthError(RuntimeError):
    pass


@dataclass(frozen=True)
class GoogleProfile:
    id: str | None
    email: str | None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None
    verified_email: bool = False


def _client_credentials() -> tuple[str, str]:
    settings = get_settings()
    if not settings.google_client_id or not settings.google_client_secret:
        raise ConfigurationError("Google OAuth is not configured")
    return settings.google_client_id, settings.google_client_secret


def build_auth_url(state: str | None = None) -> str:
    settings = get_settings()
    client_id, _ = _client_credentials()
    params = {
        "client_id": client_id,
        "redirect_uri": settings.google_redirect_uri,
        "response_type": "code",
        "scope": " ".join(SCOPES),
        "access_type": "offline",
        "prompt": "consent",
    }
    if state:
        params["state"] = state
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


def exchange_code(code: str) -> dict:
    settings = get_settings()
    client_id, client_secret = _client_credentials()
    resp = requests.post(
        GOOGLE_TOKEN_URL,
        data={
            "code": code,
            "client_id": client_id,
            "client_secret": client_secret,
            "redirect_uri": settings.google_redirect_uri,
            "grant_type": "authorization_code",
        },
        timeout=settings.google_http_timeout_seconds,
    )
    if resp.status_code != 200:
        logger.warning("Google token exchange failed with status %s: %s", resp.status_code, resp.text)
        raise GoogleOAuthError("Failed to exchange authorization code with Google")
    return resp.json()


def fetch_profile(access_token: str) -> GoogleProfile:
    settings = get_settings()
    resp = requests.get(
        GOOGLE_USERINFO_URL,
        headers={"Authorization": f"Bearer {access_token}"},
        timeout=settings.google_http_timeout_seconds,
    )
    if resp.status_code != 200:
        logger.warning("Google userinfo request failed with status %s", resp.status_code)
        raise GoogleOAuthError("Failed to get user info from Google")
    data = resp.json()
    return GoogleProfile(
        id=data.get("id"),
        email=data.get("email"),
        given_name=data.get("given_name"),
        family_name=data.get("family_name"),
        picture=data.get("picture"),
        verified_email=bool(data.get("verified_email", False)),
    )


def profile_from_code(code: str) -> GoogleProfile:
    tokens = exchange_code(code)
    access_token = tokens.get("access_token")
    if not access_token:
        raise GoogleOAuthError("Google did not return an access token")
    return fetch_profile(access_token)
