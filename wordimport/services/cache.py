"""Per-book cache of enriched words, stored as JSON files."""

import json
import logging
import re
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from wordimport.config import settings
from wordimport.models import Category, Definition, Word

logger = logging.getLogger(__name__)

_NON_SLUG_CHARS = re.compile(r"[^a-z\s]")


class CacheError(Exception):
    """The cache file could not be read or written."""


def book_slug(title: str) -> str:
    """Turn a book title into a filesystem-safe file stem."""
    return _NON_SLUG_CHARS.sub("", title.lower()).replace(" ", "_")


def _serialize_word(word: Word) -> dict[str, Any]:
    """Serialize a Word to a JSON-compatible dict."""
    definitions = None
    if word.definitions is not None:
        definitions = {
            category.value: [
                {"definition": d.text, "examples": d.examples} for d in category_definitions
            ]
            for category, category_definitions in word.definitions.items()
        }
    return {
        "text": word.current_text,
        "original_text": word.original_text,
        "translation": word.translation,
        "definitions": definitions,
    }


def _deserialize_word(obj: dict[str, Any]) -> Word:
    """Deserialize a dict produced by _serialize_word."""
    definitions = None
    if obj.get("definitions") is not None:
        definitions = {
            Category(category): [
                Definition(text=d.get("definition"), examples=d.get("examples", []))
                for d in category_definitions
            ]
            for category, category_definitions in obj["definitions"].items()
        }
    return Word(
        current_text=obj["text"],
        original_text=obj["original_text"],
        translation=obj.get("translation"),
        definitions=definitions,
    )


class WordCache:
    """
    Enriched words per book, keyed by their original highlight text.

    Each book is one JSON file, read whole and replaced whole.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = directory or settings.cache_dir

    def path_for(self, book_title: str) -> Path:
        return self.directory / f"{book_slug(book_title)}.json"

    def load(self, book_title: str) -> dict[str, Word]:
        """Return cached words by original text; a missing file is an empty cache."""
        path = self.path_for(book_title)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No cache file for '{book_title}' at {path}")
            return {}
        except OSError as e:
            raise CacheError(f"Failed to read cache file {path}: {e}") from e

        try:
            words = [_deserialize_word(obj) for obj in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as e:
            raise CacheError(f"Malformed cache file {path}: {e}") from e

        logger.info(f"Loaded {len(words)} cached words for '{book_title}'")
        return {word.original_text: word for word in words}

    def save(self, book_title: str, words: Iterable[Word]) -> Path:
        """Replace the book's cache file with ``words``."""
        path = self.path_for(book_title)
        unique = {word.original_text: word for word in words}
        serialized = json.dumps(
            [_serialize_word(word) for word in unique.values()], ensure_ascii=False, indent=2
        )

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_handle = tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=path.parent, suffix=".tmp", delete=False
            )
            try:
                with tmp_handle as handle:
                    handle.write(serialized)
                    handle.flush()
                Path(tmp_handle.name).replace(path)
            except Exception:
                Path(tmp_handle.name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CacheError(f"Failed to write cache file {path}: {e}") from e

        logger.info(f"Saved {len(unique)} words for '{book_title}' to {path}")
        return path
