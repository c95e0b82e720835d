"""Oxford Dictionaries backend: lemma lookup and recursive definition resolution."""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from wordimport.config import ConfigurationError, settings
from wordimport.models import Definition
from wordimport.services.dictionary.base import (
    CompositeError,
    DictionaryBackend,
    LeadCycle,
    LexicalEntry,
    NoDefinitions,
    NoEntries,
    NoLeads,
    NoStem,
    OtherSources,
    Resolved,
    ResolutionError,
    ResolutionOutcome,
    ResolvedWord,
    merge_definitions,
    parse_category,
)
from wordimport.services.http import FetchError, RateLimitedFetcher, TransportError

logger = logging.getLogger(__name__)

# Raised by response bodies that do not have the documented shape
MALFORMED = (KeyError, TypeError, AttributeError, IndexError)


class OxfordDictionary(DictionaryBackend):
    """
    Resolve words against the Oxford Dictionaries API.

    Many entries are indirections ("see X") rather than definitions, so
    resolution follows cross-references and derivative-of links until it
    reaches an entry that actually defines something.
    """

    DIALECTS = ("en-us", "en-gb")

    def __init__(
        self,
        fetcher: RateLimitedFetcher | None = None,
        app_id: str | None = None,
        app_key: str | None = None,
        max_depth: int | None = None,
    ) -> None:
        if fetcher is None:
            app_id = app_id or settings.oxford_app_id
            app_key = app_key or settings.oxford_app_key
            if not app_id or not app_key:
                raise ConfigurationError("OXFORD_APP_ID and OXFORD_APP_KEY must be set")
            fetcher = RateLimitedFetcher(
                settings.oxford_url,
                headers={"Accept": "application/json", "app_id": app_id, "app_key": app_key},
            )
        self.fetcher = fetcher
        self.max_depth = max_depth if max_depth is not None else settings.max_lead_depth

    @property
    def name(self) -> str:
        return "oxford"

    async def close(self) -> None:
        await self.fetcher.close()

    async def stem(self, word: str) -> str:
        """
        Look up the lemma of ``word``.

        When several lemmas come back, the word itself wins if it is one of
        them (it is already a headword); otherwise the first one does.
        """
        data = await self.fetcher.get(f"/lemmas/en/{word}")

        try:
            inflections = _unique(
                inflection["text"]
                for result in data.get("results") or []
                for lexical_entry in result.get("lexicalEntries") or []
                for inflection in lexical_entry.get("inflectionOf") or []
            )
        except MALFORMED as e:
            raise TransportError(f"Malformed lemmas response for '{word}': {e!r}") from e

        if not inflections:
            raise NoStem(f"No inflections found for '{word}'")
        if len(inflections) > 1 and word in inflections:
            return word
        return inflections[0]

    async def resolve(self, word_stem: str) -> ResolvedWord:
        """Fetch definitions, trying American then British English."""
        errors: list[Exception] = []

        for dialect in self.DIALECTS:
            try:
                return await self.fetch_entries(word_stem, dialect)
            except (ResolutionError, FetchError) as e:
                logger.info(f"No {dialect} definitions for '{word_stem}': {e}")
                errors.append(e)

        raise CompositeError(errors)

    async def fetch_entries(
        self,
        word_id: str,
        dialect: str,
        _trail: tuple[str, ...] = (),
    ) -> ResolvedWord:
        """
        Resolve ``word_id`` in one dialect, following leads when needed.

        Definitions found through a lead are returned under ``word_id``.
        Only the first lead is followed.
        """
        trail = (*_trail, word_id)
        data = await self.fetcher.get(f"/entries/{dialect}/{word_id}")

        try:
            outcomes, failures = _collect_outcomes(word_id, dialect, data)
        except MALFORMED as e:
            raise TransportError(
                f"Malformed entries response for '{word_id}' ({dialect}): {e!r}"
            ) from e

        if failures:
            raise CompositeError(failures)

        resolved = [o for o in outcomes if isinstance(o, Resolved)]
        leads = [c for o in outcomes if isinstance(o, OtherSources) for c in o.candidates]

        if resolved:
            if leads:
                logger.warning(f"other sources are not empty for '{word_id}': {leads}")
            return ResolvedWord(
                word_id=word_id,
                definitions=merge_definitions(
                    [(category, defs) for r in resolved for category, defs in r.definitions.items()]
                ),
            )

        if not leads:
            raise NoLeads(f"Definition entries and other sources are empty for '{word_id}'")

        # TODO: fan out over every lead instead of only the first one
        lead = leads[0]
        if lead in trail:
            raise LeadCycle(f"Lead '{lead}' for '{word_id}' loops back: {' -> '.join(trail)}")
        if len(trail) > self.max_depth:
            raise LeadCycle(f"Gave up on '{trail[0]}' after {self.max_depth} leads")

        logger.info(
            f"Failed to get definition for '{word_id}', getting it from other source: '{lead}'"
        )
        found = await self.fetch_entries(lead, dialect, trail)
        return ResolvedWord(word_id=word_id, definitions=found.definitions)


def _collect_outcomes(
    word_id: str, dialect: str, data: Any
) -> tuple[list[ResolutionOutcome], list[ResolutionError]]:
    """Parse every lexical entry of an entries response, keeping per-entry failures."""
    results = data.get("results")
    if not results:
        raise NoEntries(f"Entries results array is empty for '{word_id}' ({dialect})")

    outcomes: list[ResolutionOutcome] = []
    failures: list[ResolutionError] = []
    for result in results:
        for raw_entry in result.get("lexicalEntries") or []:
            try:
                entry = parse_lexical_entry(raw_entry)
                outcomes.append(_outcome(word_id, entry))
            except ResolutionError as e:
                failures.append(e)
    return outcomes, failures


def parse_lexical_entry(raw: dict[str, Any]) -> LexicalEntry:
    """Collect definitions and leads from one raw lexical entry."""
    category = parse_category((raw.get("lexicalCategory") or {}).get("text", ""))
    entry = LexicalEntry(category=category)

    for raw_entry in raw.get("entries") or []:
        for sense in raw_entry.get("senses") or []:
            for built in _walk_senses(sense):
                if isinstance(built, Definition):
                    if built.text:
                        entry.definitions.append(built)
                else:
                    entry.other_sources.extend(built)

    entry.derivative_of = [d["text"] for d in raw.get("derivativeOf") or []]
    return entry


def _outcome(word_id: str, entry: LexicalEntry) -> ResolutionOutcome:
    if entry.definitions:
        if entry.other_sources:
            logger.warning(f"other sources are not empty for {word_id}: {entry.other_sources}")
        return Resolved(word_id=word_id, definitions={entry.category: entry.definitions})

    leads = entry.other_sources + entry.derivative_of
    if leads:
        return OtherSources(candidates=leads)

    raise NoDefinitions(
        f"Failed to find definitions or other sources for word '{word_id}' "
        f"and category '{entry.category}'"
    )


def _walk_senses(sense: dict[str, Any]) -> Iterator[Definition | list[str]]:
    """Yield the sense itself, then its sub-senses depth first."""
    yield _build_definition(sense)
    for subsense in sense.get("subsenses") or []:
        yield from _walk_senses(subsense)


def _build_definition(sense: dict[str, Any]) -> Definition | list[str]:
    """
    Build a Definition from a sense, preferring the short definition.

    A sense without any definition text but with cross-references becomes a
    list of (lower-cased) words to look up instead.
    """
    texts = sense.get("shortDefinitions") or sense.get("definitions") or []
    text = texts[0] if texts else None

    cross_references = sense.get("crossReferences") or []
    if text is None and cross_references:
        return [ref["text"].lower() for ref in cross_references]

    examples = [example["text"] for example in sense.get("examples") or []]
    return Definition(text=text, examples=examples)


def _unique(items: Iterable[str]) -> list[str]:
    """Drop duplicates, keeping the first occurrence of each item."""
    return list(dict.fromkeys(items))
