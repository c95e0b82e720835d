"""Service-account bearer tokens for Google Cloud APIs."""

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any

import httpx
import jwt

from wordimport.config import ConfigurationError, settings

logger = logging.getLogger(__name__)

AUTH_ENDPOINT = "https://oauth2.googleapis.com/token"
GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"


def load_credentials(path: Path | None = None) -> dict[str, Any]:
    """Read a service-account JSON key file."""
    path = path or settings.google_credentials_file
    if path is None:
        raise ConfigurationError("GOOGLE_CREDENTIALS_FILE must be set")
    try:
        credentials: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Failed to load Google credentials from {path}: {e}") from e

    missing = {"client_email", "private_key"} - credentials.keys()
    if missing:
        raise ConfigurationError(f"Google credentials {path} lack {', '.join(sorted(missing))}")
    return credentials


class TokenManager:
    """Mint and cache an OAuth access token from service-account credentials."""

    # Google tokens live for an hour, refresh at 45 minutes
    TOKEN_LIFETIME = 45 * 60

    def __init__(
        self,
        credentials: dict[str, Any],
        scopes: list[str],
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._credentials = credentials
        self._scopes = " ".join(scopes)
        self._client = client or httpx.AsyncClient(timeout=settings.http_timeout)
        self._token: str | None = None
        self._expires_at: float = 0
        self._lock = asyncio.Lock()

    async def close(self) -> None:
        await self._client.aclose()

    def _assertion(self, now: int) -> str:
        """Build the signed JWT exchanged for an access token."""
        claims = {
            "iss": self._credentials["client_email"],
            "scope": self._scopes,
            "aud": AUTH_ENDPOINT,
            "iat": now,
            "exp": now + self.TOKEN_LIFETIME,
        }
        return jwt.encode(claims, self._credentials["private_key"], algorithm="RS256")

    async def _refresh(self) -> str:
        now = int(time.time())
        response = await self._client.post(
            AUTH_ENDPOINT,
            data={"grant_type": GRANT_TYPE, "assertion": self._assertion(now)},
        )
        response.raise_for_status()

        self._token = f"Bearer {response.json()['access_token']}"
        self._expires_at = now + self.TOKEN_LIFETIME
        logger.debug("Refreshed Google access token")
        return self._token

    async def token(self) -> str:
        """Return a valid ``Authorization`` header value, refreshing if necessary."""
        async with self._lock:
            if self._token and time.time() < self._expires_at:
                return self._token
            return await self._refresh()
