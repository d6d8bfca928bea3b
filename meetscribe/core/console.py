import logging
from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.panel import Panel
from rich.theme import Theme

from .providers import ProgressReporter

logger = logging.getLogger("MeetScribe.Console")

meetscribe_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
})


class ConsoleManager:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConsoleManager, cls).__new__(cls)
            cls._instance.initialized = False
        return cls._instance

    def __init__(self):
        if self.initialized:
            return

        self.console = Console(theme=meetscribe_theme)
        self.output_mode = "standard"
        self.initialized = True

    def configure(self, output_mode: str = "standard", debug: bool = False):
        """
        output_mode: 'standard', 'verbose', 'silent'
        """
        self.output_mode = output_mode.lower()
        if debug:
            self.output_mode = "verbose"

    def print(self, *args, **kwargs):
        if self.output_mode != "silent":
            self.console.print(*args, **kwargs)

    def log(self, message: str, style: str = "info"):
        if self.output_mode == "silent":
            return
        self.console.print(message, style=style)

    def success(self, message: str):
        if self.output_mode != "silent":
            self.console.print(f"✅ {message}", style="success")

    def warning(self, message: str):
        if self.output_mode != "silent":
            self.console.print(f"⚠️ {message}", style="warning")

    def error_panel(self, message: str, title: str = "Error"):
        if self.output_mode != "silent":
            self.console.print(Panel(message, title=title, border_style="red", expand=False))

    @contextmanager
    def status(self, message: str) -> Iterator[None]:
        """
        Show a spinner status in standard mode.
        In verbose mode, just log start/end.
        In silent mode, do nothing.
        """
        if self.output_mode == "silent":
            yield
            return

        if self.output_mode == "verbose":
            self.console.log(f"Started: {message}")
            try:
                yield
            finally:
                self.console.log(f"Finished: {message}")
            return

        with self.console.status(f"[bold cyan]{message}", spinner="dots"):
            yield


class ConsoleProgressReporter(ProgressReporter):
    """Prints pipeline progress messages to the console."""

    def __init__(self, manager: "ConsoleManager" = None):
        self.manager = manager or console

    def report(self, message: str) -> None:
        logger.debug(message)
        self.manager.log(message)


# Global instance
console = ConsoleManager()
