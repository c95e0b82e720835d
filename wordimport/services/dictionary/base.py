"""Base classes, intermediate results and errors for dictionary resolution."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

from wordimport.models import Category, Definition, Definitions


class ResolutionError(Exception):
    """A word could not be resolved to dictionary definitions."""


class NoStem(ResolutionError):
    """The lemma lookup returned no inflection targets."""


class NoEntries(ResolutionError):
    """The entries lookup returned no results."""


class UnknownCategory(ResolutionError):
    """A lexical category outside the supported set."""


class NoDefinitions(ResolutionError):
    """A lexical entry had neither definitions nor leads to follow."""


class NoLeads(ResolutionError):
    """No lexical entry resolved and none pointed elsewhere."""


class LeadCycle(ResolutionError):
    """Following leads revisited a word or went too deep."""


class CompositeError(ResolutionError):
    """Several independent failures, all kept for diagnosis."""

    def __init__(self, errors: Sequence[BaseException]) -> None:
        self.errors = list(errors)
        super().__init__("\n".join(str(e) for e in self.errors))


CATEGORY_TABLE: dict[str, Category] = {category.value: category for category in Category}


def parse_category(raw: str) -> Category:
    """Map a dictionary's lexical category text onto a Category."""
    key = raw.strip().lower()
    try:
        return CATEGORY_TABLE[key]
    except KeyError:
        raise UnknownCategory(f"Failed to convert lexical category from '{key}'") from None


@dataclass
class LexicalEntry:
    """One grammatical-category group of senses, as parsed from an entry."""

    category: Category
    definitions: list[Definition] = field(default_factory=list)
    other_sources: list[str] = field(default_factory=list)
    derivative_of: list[str] = field(default_factory=list)


@dataclass
class Resolved:
    """Definitions found for a word id."""

    word_id: str
    definitions: Definitions


@dataclass
class OtherSources:
    """No definitions here, but these word ids might have them."""

    candidates: list[str]


ResolutionOutcome = Resolved | OtherSources


@dataclass
class ResolvedWord:
    """Result of resolving a stem: the dictionary's word id and its definitions."""

    word_id: str
    definitions: Definitions


def merge_definitions(groups: Sequence[tuple[Category, list[Definition]]]) -> Definitions:
    """Concatenate definition lists that share a category, keeping their order."""
    merged: Definitions = {}
    for category, definitions in groups:
        merged.setdefault(category, []).extend(definitions)
    return merged


class DictionaryBackend(ABC):
    """Abstract base class for dictionary backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this dictionary backend."""
        ...  # pragma: no cover

    @abstractmethod
    async def stem(self, word: str) -> str:
        """
        Return the canonical headword for an inflected word.

        Raises:
            NoStem: if the dictionary knows no lemma for the word
        """
        ...  # pragma: no cover

    @abstractmethod
    async def resolve(self, word_stem: str) -> ResolvedWord:
        """
        Resolve a stem to its categorized definitions.

        Raises:
            ResolutionError: if no definitions could be found
        """
        ...  # pragma: no cover
