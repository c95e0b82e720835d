"""Tests for CLI commands and operator prompts."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from wordimport.cli.commands.books import select_book
from wordimport.cli.commands.define import format_word
from wordimport.cli.commands.process import parse_selection, prompt_redactions
from wordimport.cli.main import app
from wordimport.config import settings
from wordimport.models import Book, Category, Definition, Word
from wordimport.services.cache import WordCache
from wordimport.services.dictionary import ResolvedWord

runner = CliRunner()


class TestParseSelection:
    """Tests for parse_selection."""

    def test_parses_numbers(self):
        """Should return zero-based indices in the order given, without repeats."""
        assert parse_selection("3, 1,3", 4) == [2, 0]

    def test_ignores_invalid(self):
        """Should drop out-of-range and non-numeric entries."""
        assert parse_selection("0, 5, x, 2", 4) == [1]

    def test_empty(self):
        """Should select nothing for an empty answer."""
        assert parse_selection("", 4) == []


class TestPromptRedactions:
    """Tests for prompt_redactions."""

    def test_returns_edited_words(self):
        """Should retry only the selected words with their new text."""
        failed = [Word.from_text("mouze"), Word.from_text("teh")]

        with patch("wordimport.cli.commands.process.Prompt.ask", side_effect=["2", "the"]):
            retry = prompt_redactions(failed)

        assert retry == [failed[1]]
        assert retry[0].current_text == "the"
        assert retry[0].original_text == "teh"
        assert failed[0].current_text == "mouze"

    def test_empty_answer_retries_nothing(self):
        """Should end redaction when the operator selects nothing."""
        with patch("wordimport.cli.commands.process.Prompt.ask", return_value=""):
            assert prompt_redactions([Word.from_text("teh")]) == []

    def test_blank_redaction_is_dropped(self):
        """Should not retry a word redacted to nothing."""
        with patch("wordimport.cli.commands.process.Prompt.ask", side_effect=["1", "  "]):
            assert prompt_redactions([Word.from_text("teh")]) == []


class TestFormatWord:
    """Tests for format_word."""

    def test_lists_categories_and_examples(self, enriched_word):
        """Should show translation, numbered definitions and examples."""
        text = format_word(enriched_word)

        assert "бежать" in text
        assert "1. move at a speed faster than a walk" in text
        assert "- she ran off" in text
        assert text.index("verb") < text.index("noun")


class TestCommands:
    """Tests for the typer application."""

    def test_help_lists_commands(self):
        """Should register every command."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("books", "define", "process"):
            assert command in result.output

    def test_define(self, monkeypatch, tmp_path):
        """Should print the resolved word."""
        monkeypatch.setattr(settings, "data_dir", tmp_path)
        dictionary = MagicMock(
            stem=AsyncMock(return_value="cat"),
            resolve=AsyncMock(
                return_value=ResolvedWord(
                    word_id="cat",
                    definitions={Category.NOUN: [Definition(text="a small feline")]},
                )
            ),
            close=AsyncMock(),
        )
        translator = MagicMock(translate=AsyncMock(return_value="кошка"), close=AsyncMock())

        with (
            patch("wordimport.cli.commands.define.OxfordDictionary", return_value=dictionary),
            patch("wordimport.cli.commands.define.GoogleTranslator", return_value=translator),
        ):
            result = runner.invoke(app, ["define", "Cats!"])

        assert result.exit_code == 0, result.output
        assert "кошка" in result.output
        assert "a small feline" in result.output
        dictionary.stem.assert_awaited_once_with("cats")
        dictionary.close.assert_awaited_once()

    @pytest.mark.parametrize("command", [["books"], ["define", "cat"], ["process"]])
    def test_missing_configuration_exits(self, monkeypatch, tmp_path, command):
        """Should exit with status 1 when credentials are missing."""
        monkeypatch.setattr(settings, "data_dir", tmp_path)
        monkeypatch.setattr(settings, "readwise_token", "")
        monkeypatch.setattr(settings, "oxford_app_id", "")
        monkeypatch.setattr(settings, "oxford_app_key", "")

        result = runner.invoke(app, command)

        assert result.exit_code == 1


class TestProcessCommand:
    """Tests for the process command."""

    @staticmethod
    def clients(books):
        readwise = MagicMock(
            list_books=AsyncMock(return_value=books),
            list_words=AsyncMock(return_value=[Word.from_text("cats")]),
            close=AsyncMock(),
        )
        dictionary = MagicMock(
            stem=AsyncMock(return_value="cat"),
            resolve=AsyncMock(
                return_value=ResolvedWord(
                    word_id="cat",
                    definitions={Category.NOUN: [Definition(text="a small feline")]},
                )
            ),
            close=AsyncMock(),
        )
        translator = MagicMock(translate=AsyncMock(return_value="кошка"), close=AsyncMock())
        return readwise, dictionary, translator

    def invoke(self, args, readwise, dictionary, translator):
        with (
            patch("wordimport.cli.commands.process.ReadwiseClient", return_value=readwise),
            patch("wordimport.cli.commands.process.OxfordDictionary", return_value=dictionary),
            patch("wordimport.cli.commands.process.GoogleTranslator", return_value=translator),
        ):
            return runner.invoke(app, ["process", *args])

    def test_no_books_exits_without_prompting(self, monkeypatch, tmp_path):
        """Should stop with an error instead of asking for a book that cannot exist."""
        monkeypatch.setattr(settings, "data_dir", tmp_path)
        readwise, dictionary, translator = self.clients([])

        with patch("wordimport.cli.commands.books.IntPrompt.ask") as ask:
            result = self.invoke([], readwise, dictionary, translator)

        assert result.exit_code == 1
        ask.assert_not_called()
        readwise.close.assert_awaited_once()

    def test_reads_cache_once(self, monkeypatch, tmp_path):
        """Should load the book's cache a single time per run."""
        monkeypatch.setattr(settings, "data_dir", tmp_path)
        readwise, dictionary, translator = self.clients([Book(id=7, title="Dune")])
        original_load = WordCache.load

        with patch.object(WordCache, "load", autospec=True, side_effect=original_load) as load:
            result = self.invoke(
                ["--book-id", "7", "--no-export"], readwise, dictionary, translator
            )

        assert result.exit_code == 0, result.output
        assert load.call_count == 1
        assert set(WordCache(tmp_path / "words").load("Dune")) == {"cats"}


class TestSelectBook:
    """Tests for select_book."""

    def test_empty_list_is_rejected(self):
        """Should refuse to prompt when there is nothing to choose."""
        with patch("wordimport.cli.commands.books.IntPrompt.ask") as ask:
            with pytest.raises(ValueError):
                select_book([])

        ask.assert_not_called()
