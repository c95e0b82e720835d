"""Book processing command: enrich highlighted words and export them to Anki."""

import logging

import typer
from rich.prompt import Prompt
from rich.table import Table

from wordimport.cli.commands.books import select_book
from wordimport.cli.utils.async_runner import run_async
from wordimport.cli.utils.console import console, error_console
from wordimport.cli.utils.progress import create_progress
from wordimport.config import ConfigurationError
from wordimport.models import Word
from wordimport.services.anki import AnkiError, AnkiService
from wordimport.services.cache import CacheError, WordCache
from wordimport.services.dictionary import OxfordDictionary
from wordimport.services.http import FetchError
from wordimport.services.pipeline import EnrichmentPipeline
from wordimport.services.readwise import ReadwiseClient
from wordimport.services.translate import GoogleTranslator

logger = logging.getLogger(__name__)


def parse_selection(answer: str, count: int) -> list[int]:
    """Turn "1, 3,3, 7" into zero-based indices, dropping anything out of range."""
    indices: list[int] = []
    for part in answer.split(","):
        part = part.strip()
        if not part:
            continue
        if not part.isdigit() or not 1 <= int(part) <= count:
            console.print(f"[warning]Ignoring '{part}'[/]")
            continue
        index = int(part) - 1
        if index not in indices:
            indices.append(index)
    return indices


def prompt_redactions(failed: list[Word]) -> list[Word]:
    """
    Let the operator fix words that could not be resolved.

    Returns the edited words to retry; an empty answer retries nothing.
    """
    table = Table(title=f"Failed Words ({len(failed)})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Word", style="word")
    table.add_column("Highlight", style="dim")
    for i, word in enumerate(failed, 1):
        table.add_row(str(i), word.current_text, word.original_text)
    console.print(table)

    answer = Prompt.ask("Words to redact (comma-separated numbers, empty to finish)", default="")

    retry: list[Word] = []
    for index in parse_selection(answer, len(failed)):
        word = failed[index]
        text = Prompt.ask("Redact", default=word.current_text).strip()
        if text:
            word.current_text = text
            retry.append(word)
    return retry


def process(
    book_id: int | None = typer.Option(
        None, "--book-id", "-b", help="Readwise book ID (prompted if omitted)"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Ignore cached words and recreate the Anki deck"
    ),
    export: bool = typer.Option(True, "--export/--no-export", help="Export the words to Anki"),
) -> None:
    """Enrich a book's highlighted words and export them to Anki."""
    run_async(_process(book_id, force, export))


async def _process(book_id: int | None, force: bool, export: bool) -> None:
    """Async implementation of process command."""
    try:
        readwise = ReadwiseClient()
        dictionary = OxfordDictionary()
        translator = GoogleTranslator()
    except ConfigurationError as e:
        error_console.print(f"[error]{e}[/]")
        raise typer.Exit(1) from None

    cache = WordCache()
    try:
        books = sorted(await readwise.list_books(), key=lambda book: book.sort_key)
        if not books:
            error_console.print("[error]No books found in Readwise[/]")
            raise typer.Exit(1)
        if book_id is None:
            book = select_book(books)
        else:
            matches = [b for b in books if b.id == book_id]
            if not matches:
                error_console.print(f"[error]Book {book_id} not found[/]")
                raise typer.Exit(1)
            book = matches[0]

        console.print(f"\n[bold]Processing:[/] {book}\n")
        words = await readwise.list_words(book.id)
        known = cache.load(book.title)
        _, pending = EnrichmentPipeline.partition(words, known, force)

        with create_progress() as progress:
            task = progress.add_task("Enriching...", total=len(pending))

            def on_progress(word: Word, ok: bool) -> None:
                if ok:
                    description = f"[green]Resolved: {word.current_text}[/]"
                else:
                    description = f"[red]Failed: {word.current_text}[/]"
                progress.update(task, advance=1, description=description)

            async def redactor(failed: list[Word]) -> list[Word]:
                progress.stop()
                retry = prompt_redactions(failed)
                if retry:
                    progress.update(task, total=progress.tasks[0].total + len(retry))
                    progress.start()
                return retry

            pipeline = EnrichmentPipeline(dictionary, translator, cache, redactor, on_progress)
            result = await pipeline.run(book.title, words, force=force, known=known)
    except FetchError as e:
        error_console.print(f"[error]Failed to load highlights: {e}[/]")
        raise typer.Exit(1) from None
    except CacheError as e:
        error_console.print(f"[error]{e}[/]")
        raise typer.Exit(1) from None
    finally:
        await readwise.close()
        await dictionary.close()
        await translator.close()

    console.print(
        f"\n[success]{len(result.resolved)} resolved[/], {len(result.cached)} from cache"
        + (f", [warning]{len(result.abandoned)} abandoned[/]" if result.abandoned else "")
    )

    if not export:
        return

    anki = AnkiService()
    if not await anki.is_available():
        error_console.print("[error]Anki is not running or AnkiConnect is not installed.[/]")
        error_console.print("[dim]Words are cached; rerun to export them.[/]")
        raise typer.Exit(1)

    try:
        added = await anki.store_book(book, result.words, force=force)
    except AnkiError as e:
        error_console.print(f"[error]Failed to export to Anki: {e}[/]")
        raise typer.Exit(1) from None

    console.print(f"[success]Added {added} notes to deck '{book.title}'[/]")
