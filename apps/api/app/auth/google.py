from __future__ import annotations

from functools import lru_cache
from urllib.parse import urlencode

import httpx
import structlog

from app.core.config import settings
from app.services.users_service import GoogleProfile

logger = structlog.get_logger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = ("openid", "email", "profile")


class GoogleOAuthError(Exception):
    pass


class GoogleOAuthClient:
    """Authorization-code flow against Google's OpenID endpoints."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._http = httpx.Client(timeout=timeout, transport=transport)

    def authorization_url(self, state: str) -> str:
        query = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{AUTHORIZE_URL}?{urlencode(query)}"

    def fetch_profile(self, code: str) -> GoogleProfile:
        try:
            token_resp = self._http.post(
                TOKEN_URL,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
            token_resp.raise_for_status()
            access_token = token_resp.json().get("access_token")
            if not access_token:
                raise GoogleOAuthError("token response without access_token")

            info_resp = self._http.get(
                USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
            )
            info_resp.raise_for_status()
            info = info_resp.json()
        except httpx.HTTPError as exc:
            raise GoogleOAuthError(str(exc)) from exc

        if not info.get("sub"):
            raise GoogleOAuthError("userinfo without subject")

        return GoogleProfile(
            sub=str(info["sub"]),
            email=info.get("email"),
            given_name=info.get("given_name"),
            family_name=info.get("family_name"),
            picture=info.get("picture"),
        )

    def close(self) -> None:
        self._http.close()


@lru_cache
def _client() -> GoogleOAuthClient:
    return GoogleOAuthClient(
        client_id=settings.google_client_id or "",
        client_secret=settings.google_client_secret or "",
        redirect_uri=settings.google_redirect_uri,
        timeout=settings.notification_timeout_seconds,
    )


def get_google_client() -> GoogleOAuthClient | None:
    if not settings.google_oauth_enabled:
        return None
    return _client()
