"""Main CLI application entry point."""

import typer

from wordimport.cli.commands import books, define, process
from wordimport.config import settings
from wordimport.logging_config import setup_logging

app = typer.Typer(
    name="wordimport",
    help="Enrich highlighted words with definitions and translations, then export to Anki",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def startup() -> None:
    """Initialize application on startup."""
    setup_logging()
    settings.data_dir.mkdir(parents=True, exist_ok=True)


app.command(name="books", help="List books available in Readwise")(books.list_books)

app.command(name="define", help="Look up and translate a single word")(define.define)

app.command(name="process", help="Enrich a book's highlighted words and export them to Anki")(
    process.process
)


if __name__ == "__main__":
    app()
