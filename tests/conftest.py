"""Pytest configuration and fixtures."""

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from wordimport.models import Category, Definition, Word
from wordimport.services.cache import WordCache
from wordimport.services.http import RateLimitedFetcher

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def sleep() -> AsyncMock:
    """Stand-in for asyncio.sleep that returns immediately."""
    return AsyncMock()


@pytest.fixture
def make_fetcher(sleep: AsyncMock) -> Callable[[Handler], RateLimitedFetcher]:
    """Build a RateLimitedFetcher whose requests are answered by ``handler``."""

    def factory(handler: Handler) -> RateLimitedFetcher:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url="https://api.test",
        )
        return RateLimitedFetcher(client=client, sleep=sleep, max_attempts=3)

    return factory


@pytest.fixture
def word_cache(tmp_path: Path) -> WordCache:
    """A word cache in a temporary directory."""
    return WordCache(tmp_path / "words")


@pytest.fixture
def enriched_word() -> Word:
    """A fully enriched word."""
    return Word(
        current_text="run",
        original_text="running",
        translation="бежать",
        definitions={
            Category.VERB: [
                Definition(text="move at a speed faster than a walk", examples=["she ran off"]),
                Definition(text="be in charge of", examples=[]),
            ],
            Category.NOUN: [Definition(text="an act of running", examples=["a morning run"])],
        },
    )


@pytest.fixture
def sample_highlights() -> list[dict[str, Any]]:
    """Readwise highlights, some tagged as words."""
    return [
        {"text": "Serendipity,", "tags": [{"name": "pink"}]},
        {"text": "a long sentence that is not a word", "tags": []},
        {"text": "well-being!", "tags": [{"name": "pink"}, {"name": "favorite"}]},
        {"text": "serendipity", "tags": [{"name": "pink"}]},
        {"text": "Ephemeral", "tags": [{"name": "blue"}]},
    ]
