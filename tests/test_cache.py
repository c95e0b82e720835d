"""Tests for the per-book word cache."""

import json

import pytest

from wordimport.models import Word
from wordimport.services.cache import (
    CacheError,
    WordCache,
    _deserialize_word,
    _serialize_word,
    book_slug,
)


class TestBookSlug:
    """Tests for book_slug."""

    def test_strips_and_underscores(self):
        """Should lowercase, drop non-letters and join words with underscores."""
        assert book_slug("The Name of the Wind") == "the_name_of_the_wind"
        assert book_slug("Catch-22: A Novel!") == "catch_a_novel"

    def test_path_uses_slug(self, word_cache):
        """Should place the file in the cache directory."""
        assert word_cache.path_for("Dune") == word_cache.directory / "dune.json"


class TestSerialization:
    """Tests for the on-disk word format."""

    def test_field_names(self, enriched_word):
        """Should write the established JSON field names."""
        data = _serialize_word(enriched_word)

        assert data["text"] == "run"
        assert data["original_text"] == "running"
        assert data["definitions"]["verb"][0] == {
            "definition": "move at a speed faster than a walk",
            "examples": ["she ran off"],
        }

    def test_unenriched_word(self):
        """Should keep missing translation and definitions as null."""
        word = _deserialize_word(_serialize_word(Word.from_text("hello")))

        assert word.translation is None
        assert word.definitions is None


class TestWordCache:
    """Tests for WordCache load and save."""

    def test_missing_file_is_empty(self, word_cache):
        """Should treat a missing cache file as an empty cache."""
        assert word_cache.load("Never Saved") == {}

    def test_round_trip(self, word_cache, enriched_word):
        """Should load exactly what was saved, keyed by original text."""
        plain = Word(current_text="hello", original_text="hello", translation="привет", definitions={})
        word_cache.save("Dune", [enriched_word, plain])

        loaded = word_cache.load("Dune")

        assert set(loaded) == {"running", "hello"}
        restored = loaded["running"]
        assert restored.current_text == enriched_word.current_text
        assert restored.translation == enriched_word.translation
        assert restored.definitions == enriched_word.definitions
        assert loaded["hello"].definitions == {}

    def test_save_replaces_whole_file(self, word_cache, enriched_word):
        """Should overwrite the previous contents."""
        word_cache.save("Dune", [Word.from_text("old")])
        word_cache.save("Dune", [enriched_word])

        assert list(word_cache.load("Dune")) == ["running"]

    def test_save_collapses_duplicates(self, word_cache):
        """Should keep the last word for a repeated original text."""
        first = Word(current_text="a", original_text="x")
        second = Word(current_text="b", original_text="x")

        path = word_cache.save("Dune", [first, second])

        data = json.loads(path.read_text(encoding="utf-8"))
        assert len(data) == 1
        assert data[0]["text"] == "b"

    def test_save_leaves_no_temp_files(self, word_cache, enriched_word):
        """Should leave only the cache file behind."""
        word_cache.save("Dune", [enriched_word])

        assert [p.name for p in word_cache.directory.iterdir()] == ["dune.json"]

    def test_malformed_file_is_fatal(self, word_cache):
        """Should raise CacheError for a file that is not valid JSON."""
        word_cache.directory.mkdir(parents=True)
        word_cache.path_for("Dune").write_text("{not json", encoding="utf-8")

        with pytest.raises(CacheError, match="Malformed"):
            word_cache.load("Dune")

    def test_unreadable_file_is_fatal(self, word_cache):
        """Should raise CacheError for read errors other than a missing file."""
        word_cache.path_for("Dune").mkdir(parents=True)

        with pytest.raises(CacheError, match="Failed to read"):
            word_cache.load("Dune")

    def test_unwritable_directory_is_fatal(self, tmp_path, enriched_word):
        """Should raise CacheError when the file cannot be written."""
        blocker = tmp_path / "words"
        blocker.write_text("not a directory", encoding="utf-8")

        with pytest.raises(CacheError, match="Failed to write"):
            WordCache(blocker).save("Dune", [enriched_word])
