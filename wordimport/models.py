"""Domain models for books, words and their dictionary definitions."""

from dataclasses import dataclass, field
from enum import Enum


class Category(str, Enum):
    """Grammatical category a group of definitions belongs to."""

    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PREPOSITION = "preposition"
    INTERJECTION = "interjection"
    IDIOMATIC = "idiomatic"
    PRONOUN = "pronoun"

    def __str__(self) -> str:
        return self.value


@dataclass
class Definition:
    """A single dictionary sense with its usage examples."""

    text: str | None = None
    examples: list[str] = field(default_factory=list)


Definitions = dict[Category, list[Definition]]


@dataclass(eq=False)
class Word:
    """
    A highlighted word moving through enrichment.

    ``original_text`` is the highlight as imported and identifies the word;
    ``current_text`` changes when the word is stemmed or redacted.
    """

    current_text: str
    original_text: str
    translation: str | None = None
    definitions: Definitions | None = None

    @classmethod
    def from_text(cls, text: str) -> "Word":
        return cls(current_text=text, original_text=text)

    @property
    def is_enriched(self) -> bool:
        return self.translation is not None and self.definitions is not None

    def reset(self) -> None:
        """Forget enrichment so the word is resolved from scratch."""
        self.translation = None
        self.definitions = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Word):
            return NotImplemented
        return self.original_text == other.original_text

    def __hash__(self) -> int:
        return hash(self.original_text)


@dataclass
class Book:
    """A book from the highlight source."""

    id: int
    title: str
    author: str | None = None

    def __str__(self) -> str:
        return f"{self.author or 'N/A'}: {self.title}"

    @property
    def sort_key(self) -> tuple[int, str, str]:
        """Books with an author first (by author, then title), then the rest by title."""
        if self.author:
            return (0, self.author, self.title.lower())
        return (1, "", self.title.lower())
