"""Batch enrichment of highlighted words with definitions and translations."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol

from wordimport.models import Word
from wordimport.services.cache import WordCache
from wordimport.services.dictionary import CompositeError, DictionaryBackend, ResolutionError
from wordimport.services.http import FetchError

logger = logging.getLogger(__name__)

Redactor = Callable[[list[Word]], Awaitable[list[Word]]]
ProgressCallback = Callable[[Word, bool], None]


class Translator(Protocol):
    async def translate(self, text: str) -> str: ...


@dataclass
class PipelineResult:
    """Outcome of one pipeline run for a book."""

    cached: list[Word] = field(default_factory=list)
    resolved: list[Word] = field(default_factory=list)
    abandoned: list[Word] = field(default_factory=list)
    rounds: int = 0

    @property
    def words(self) -> list[Word]:
        """Every enriched word of the batch, cached ones first."""
        return [*self.cached, *self.resolved]


class EnrichmentPipeline:
    """
    Enrich a book's words, reusing earlier results from the word cache.

    Words that fail are handed to the redactor once the whole round has been
    attempted; whatever it returns is retried as a new round. The cache is
    written once, after the last round.
    """

    def __init__(
        self,
        dictionary: DictionaryBackend,
        translator: Translator,
        cache: WordCache,
        redactor: Redactor | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.dictionary = dictionary
        self.translator = translator
        self.cache = cache
        self.redactor = redactor
        self.on_progress = on_progress

    @staticmethod
    def partition(
        words: Iterable[Word], known: dict[str, Word], force: bool = False
    ) -> tuple[list[Word], list[Word]]:
        """Split words into (cached, pending); with ``force`` nothing counts as cached."""
        cached: list[Word] = []
        pending: list[Word] = []
        for word in words:
            hit = None if force else known.get(word.original_text)
            if hit is not None:
                cached.append(hit)
            else:
                pending.append(word)
        return cached, pending

    async def process_word(self, word: Word) -> Word:
        """
        Stem, define and translate a single word in place.

        A failed stem lookup is not fatal: the word's current text is used
        as the stem. Definitions and translation are fetched concurrently and
        both must succeed.
        """
        try:
            stem = await self.dictionary.stem(word.current_text)
        except (ResolutionError, FetchError) as e:
            logger.info(f"No stem for '{word.current_text}', using it as is: {e}")
            stem = word.current_text

        resolved, translation = await asyncio.gather(
            self.dictionary.resolve(stem),
            self.translator.translate(stem),
            return_exceptions=True,
        )
        errors = [r for r in (resolved, translation) if isinstance(r, BaseException)]
        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise CompositeError(errors)

        word.current_text = resolved.word_id
        word.translation = translation
        word.definitions = resolved.definitions
        return word

    async def _process_round(self, pending: list[Word]) -> tuple[list[Word], list[Word]]:
        resolved: list[Word] = []
        failed: list[Word] = []

        for word in pending:
            try:
                resolved.append(await self.process_word(word))
                ok = True
            except Exception as e:
                logger.error(f"Failed to process '{word.current_text}': {e}")
                failed.append(word)
                ok = False
            if self.on_progress is not None:
                self.on_progress(word, ok)

        return resolved, failed

    async def run(
        self,
        book_title: str,
        words: Iterable[Word],
        force: bool = False,
        known: dict[str, Word] | None = None,
    ) -> PipelineResult:
        """
        Enrich ``words`` for ``book_title`` and persist the result.

        ``known`` is the book's cache as already loaded by the caller; when
        omitted it is read here.

        Raises:
            CacheError: if the cache cannot be read or written
        """
        if known is None:
            known = self.cache.load(book_title)
        cached, pending = self.partition(words, known, force)
        result = PipelineResult(cached=cached)
        logger.info(f"{len(cached)} words cached, {len(pending)} to process")

        while pending:
            result.rounds += 1
            resolved, failed = await self._process_round(pending)
            result.resolved.extend(resolved)
            logger.info(
                f"Round {result.rounds}: {len(resolved)} resolved, {len(failed)} failed"
            )

            if not failed:
                break

            retry = await self.redactor(failed) if self.redactor is not None else []
            retried = {word.original_text for word in retry}
            result.abandoned.extend(w for w in failed if w.original_text not in retried)

            for word in retry:
                word.reset()
            pending = retry

        self.cache.save(book_title, [*known.values(), *result.words])
        return result
