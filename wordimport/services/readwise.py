"""Readwise client: books and the highlighted words in them."""

import logging
import re

from wordimport.config import ConfigurationError, settings
from wordimport.models import Book, Word
from wordimport.services.http import RateLimitedFetcher

logger = logging.getLogger(__name__)

_NON_WORD_CHARS = re.compile(r"[^A-Za-z\s-]")


def normalize_highlight(text: str) -> str:
    """Lowercase a highlight and keep only letters, whitespace and hyphens."""
    return _NON_WORD_CHARS.sub("", text.lower())


class ReadwiseClient:
    """List books and tagged word highlights from Readwise."""

    def __init__(
        self,
        fetcher: RateLimitedFetcher | None = None,
        token: str | None = None,
        tag: str | None = None,
    ) -> None:
        if fetcher is None:
            token = token or settings.readwise_token
            if not token:
                raise ConfigurationError("READWISE_TOKEN must be set")
            fetcher = RateLimitedFetcher(
                settings.readwise_url,
                headers={"Accept": "application/json", "Authorization": f"Token {token}"},
            )
        self.fetcher = fetcher
        self.tag = tag or settings.readwise_tag

    async def close(self) -> None:
        await self.fetcher.close()

    async def list_books(self) -> list[Book]:
        results = await self.fetcher.get_all_pages("/books")
        return [
            Book(id=int(item["id"]), title=item["title"], author=item.get("author"))
            for item in results
        ]

    async def list_words(self, book_id: int) -> list[Word]:
        """
        Return the book's highlights carrying the word tag, as new Words.

        Highlights are normalized and deduplicated, keeping first-seen order.
        """
        highlights = await self.fetcher.get_all_pages("/highlights", {"book_id": book_id})

        texts: dict[str, None] = {}
        for highlight in highlights:
            tags = {tag.get("name") for tag in highlight.get("tags") or []}
            if self.tag not in tags:
                continue
            text = normalize_highlight(highlight.get("text", ""))
            if text.strip():
                texts.setdefault(text, None)

        logger.info(f"Found {len(texts)} '{self.tag}' words in book {book_id}")
        return [Word.from_text(text) for text in texts]
