"""Google Cloud Translation client."""

import logging

import httpx

from wordimport.config import settings
from wordimport.services.google_auth import TokenManager, load_credentials

logger = logging.getLogger(__name__)

ENDPOINT = "https://translation.googleapis.com/language/translate/v2"
SCOPE = "https://www.googleapis.com/auth/cloud-translation"


class TranslationError(Exception):
    """The translation service gave no usable translation."""


class GoogleTranslator:
    """Translate single words with the Translation v2 REST API."""

    def __init__(
        self,
        token_manager: TokenManager | None = None,
        client: httpx.AsyncClient | None = None,
        source: str | None = None,
        target: str | None = None,
    ) -> None:
        self.tokens = token_manager or TokenManager(load_credentials(), [SCOPE])
        self._client = client or httpx.AsyncClient(timeout=settings.http_timeout)
        self.source = source or settings.translate_source
        self.target = target or settings.translate_target

    async def close(self) -> None:
        await self._client.aclose()
        await self.tokens.close()

    async def translate(self, text: str) -> str:
        logger.info(f"Google translate query: '{text}'")

        try:
            response = await self._client.post(
                ENDPOINT,
                headers={"Authorization": await self.tokens.token()},
                json={"q": text, "source": self.source, "target": self.target, "format": "text"},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise TranslationError(
                f"Google translate returned HTTP {e.response.status_code} for '{text}'"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise TranslationError(f"Google translate request failed for '{text}': {e}") from e

        translations = (data.get("data") or {}).get("translations") or []
        translated = translations[0].get("translatedText") if translations else None
        if not translated:
            raise TranslationError(f"No translation for '{text}'")
        return str(translated)
