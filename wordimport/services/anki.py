"""AnkiConnect service for exporting enriched words as flashcards."""

import logging
from html import escape
from typing import Any

import httpx

from wordimport.config import settings
from wordimport.models import Book, Word

logger = logging.getLogger(__name__)


class AnkiError(Exception):
    """AnkiConnect rejected a request."""


def render_back(word: Word) -> str:
    """Render the back of a card: translation, then definitions by category."""
    parts = [f"<p>{escape(word.translation or '')}</p>", '<ol type="I">']

    for category, definitions in (word.definitions or {}).items():
        parts.append(f"<li><p>{escape(str(category))}</p>")
        parts.append('<ol type="1">')
        for definition in definitions:
            parts.append(f"<li><p>{escape(definition.text or '')}</p>")
            if definition.examples:
                parts.append("<ul>")
                parts.extend(f"<li>{escape(example)}</li>" for example in definition.examples)
                parts.append("</ul>")
            parts.append("</li>")
        parts.append("</ol></li>")

    parts.append("</ol>")
    return "".join(parts)


class AnkiService:
    """Create one deck per book in Anki via AnkiConnect."""

    def __init__(
        self,
        url: str | None = None,
        note_type: str | None = None,
    ) -> None:
        self.url = url or settings.anki_connect_url
        self.note_type = note_type or settings.anki_note_type

    async def _invoke(self, action: str, **params: Any) -> Any:
        """Invoke an AnkiConnect action."""
        payload = {
            "action": action,
            "version": 6,
            "params": params,
        }

        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
            result = response.json()

        if result.get("error"):
            raise AnkiError(f"AnkiConnect error: {result['error']}")

        return result.get("result")

    async def is_available(self) -> bool:
        """Check if AnkiConnect is available."""
        try:
            await self._invoke("version")
            return True
        except Exception as e:
            logger.warning(f"AnkiConnect not available: {e}")
            return False

    async def ensure_deck(self, deck: str) -> None:
        """Create the deck unless it already exists."""
        deck_names: list[str] = await self._invoke("deckNames")
        if deck not in deck_names:
            logger.info(f"Creating deck '{deck}'")
            await self._invoke("createDeck", deck=deck)

    async def delete_deck(self, deck: str) -> None:
        logger.info(f"Deleting deck '{deck}' and its cards")
        await self._invoke("deleteDecks", decks=[deck], cardsToo=True)

    async def add_note(self, deck: str, word: Word) -> int | None:
        """
        Add a word to the deck as a new note.

        Returns the note ID, or None if the deck already has this word.
        """
        note = {
            "deckName": deck,
            "modelName": self.note_type,
            "fields": {
                "Front": word.current_text,
                "Back": render_back(word),
            },
            "options": {
                "allowDuplicate": False,
                "duplicateScope": "deck",
                "duplicateScopeOptions": {"deckName": deck},
            },
            "tags": ["wordimport"],
        }

        try:
            note_id: int = await self._invoke("addNote", note=note)
        except AnkiError as e:
            if "duplicate" in str(e).lower():
                logger.info(f"Note for '{word.current_text}' already in '{deck}'")
                return None
            raise

        logger.info(f"Added note {note_id} for word '{word.current_text}'")
        return note_id

    async def store_book(self, book: Book, words: list[Word], force: bool = False) -> int:
        """
        Export a book's words into a deck named after the book.

        With ``force`` the deck is recreated from scratch. Returns the number
        of notes added.
        """
        if force:
            await self.delete_deck(book.title)
        await self.ensure_deck(book.title)

        added = 0
        for word in words:
            if not word.is_enriched:
                logger.warning(f"Skipping '{word.original_text}': not enriched")
                continue
            if await self.add_note(book.title, word) is not None:
                added += 1
        return added
