"""Book listing command and interactive book selection."""

import typer
from rich.prompt import IntPrompt
from rich.table import Table

from wordimport.cli.utils.async_runner import run_async
from wordimport.cli.utils.console import console, error_console
from wordimport.config import ConfigurationError
from wordimport.models import Book
from wordimport.services.http import FetchError
from wordimport.services.readwise import ReadwiseClient


def books_table(books: list[Book]) -> Table:
    table = Table(title=f"Books ({len(books)})")
    table.add_column("#", style="dim", justify="right")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Author")
    table.add_column("Title", style="bold")

    for i, book in enumerate(books, 1):
        table.add_row(str(i), str(book.id), book.author or "[dim]N/A[/]", book.title)
    return table


def select_book(books: list[Book]) -> Book:
    """Ask the operator to pick one of ``books`` by its row number."""
    if not books:
        raise ValueError("No books to select from")
    console.print(books_table(books))
    while True:
        choice = IntPrompt.ask("Select the book to import")
        if 1 <= choice <= len(books):
            return books[choice - 1]
        console.print(f"[warning]Pick a number between 1 and {len(books)}[/]")


def list_books() -> None:
    """List books available in Readwise."""
    run_async(_list_books())


async def _list_books() -> None:
    """Async implementation of books command."""
    try:
        readwise = ReadwiseClient()
    except ConfigurationError as e:
        error_console.print(f"[error]{e}[/]")
        raise typer.Exit(1) from None

    try:
        books = sorted(await readwise.list_books(), key=lambda book: book.sort_key)
    except FetchError as e:
        error_console.print(f"[error]Failed to list books: {e}[/]")
        raise typer.Exit(1) from None
    finally:
        await readwise.close()

    if not books:
        console.print("[dim]No books found.[/]")
        return

    console.print(books_table(books))
