"""CLI utility modules."""

from wordimport.cli.utils.async_runner import run_async
from wordimport.cli.utils.console import console, error_console
from wordimport.cli.utils.progress import create_progress

__all__ = ["run_async", "console", "error_console", "create_progress"]
