"""Google OAuth 2.0 / OpenID Connect client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlencode

import httpx

from pixshelf.domain.users import OAuthProfile

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class IdentityProviderClient(Protocol):
    """Interface for an external OAuth identity provider."""

    def authorization_url(self, state: str | None = None) -> str:
        """Return the provider consent URL to redirect the browser to."""

    async def exchange_code(self, code: str) -> OAuthProfile:
        """Exchange an authorization code for the user's verified profile."""

    async def close(self) -> None:
        """Release any held resources."""


@dataclass
class HttpxGoogleIdentityClient(IdentityProviderClient):
    """HTTPX-backed Google identity client."""

    client_id: str
    client_secret: str
    redirect_uri: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(
        cls, client_id: str, client_secret: str, redirect_uri: str
    ) -> "HttpxGoogleIdentityClient":
        """Create a Google client with a managed httpx session."""
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            http_client=httpx.AsyncClient(),
        )

    def authorization_url(self, state: str | None = None) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": "openid email profile",
            "access_type": "online",
            "prompt": "select_account",
        }
        if state:
            params["state"] = state
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> OAuthProfile:
        """Exchange a code for tokens and read the OpenID userinfo."""
        token_response = await self.http_client.post(
            TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
            timeout=15,
        )
        token_response.raise_for_status()
        access_token = token_response.json().get("access_token")
        if not access_token:
            raise RuntimeError("Google token response did not include an access token")

        userinfo_response = await self.http_client.get(
            USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=15,
        )
        userinfo_response.raise_for_status()
        return OAuthProfile.from_userinfo(userinfo_response.json())

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
