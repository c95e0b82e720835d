"""Single-word lookup command."""

import typer
from rich.panel import Panel

from wordimport.cli.utils.async_runner import run_async
from wordimport.cli.utils.console import console, error_console
from wordimport.config import ConfigurationError
from wordimport.models import Word
from wordimport.services.cache import WordCache
from wordimport.services.dictionary import OxfordDictionary
from wordimport.services.pipeline import EnrichmentPipeline
from wordimport.services.readwise import normalize_highlight
from wordimport.services.translate import GoogleTranslator


def format_word(word: Word) -> str:
    lines = [f"[bold]Translation:[/] {word.translation or 'None'}"]
    for category, definitions in (word.definitions or {}).items():
        lines.append(f"\n[category]{category}[/]")
        for i, definition in enumerate(definitions, 1):
            lines.append(f"  {i}. {definition.text}")
            lines.extend(f"     [dim]- {example}[/]" for example in definition.examples)
    return "\n".join(lines)


def define(word: str = typer.Argument(..., help="Word to look up")) -> None:
    """Look up and translate a single word without touching the cache."""
    run_async(_define(word))


async def _define(text: str) -> None:
    """Async implementation of define command."""
    try:
        dictionary = OxfordDictionary()
        translator = GoogleTranslator()
    except ConfigurationError as e:
        error_console.print(f"[error]{e}[/]")
        raise typer.Exit(1) from None

    pipeline = EnrichmentPipeline(dictionary, translator, WordCache())
    try:
        word = await pipeline.process_word(Word.from_text(normalize_highlight(text)))
    except Exception as e:
        error_console.print(f"[error]Failed to define '{text}':[/]\n{e}")
        raise typer.Exit(1) from None
    finally:
        await dictionary.close()
        await translator.close()

    console.print(Panel(format_word(word), title=f"[word]{word.current_text}[/]", border_style="blue"))
