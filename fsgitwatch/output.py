"""Output handler implementations: console and null."""

from __future__ import annotations

import io

from colorama import AnsiToWin32, Fore, Style
from tqdm import tqdm

SECTION_WIDTH = 50


class ConsoleOutputHandler:
    """Console output, written with tqdm.write so it never tears the progress bar.

    debug() messages are only printed when verbose is set; color=False drops
    the ANSI styling (e.g. when stdout is not a terminal).
    """

    def __init__(self, verbose: bool = False, color: bool = True):
        """Create a console handler. Set verbose=True to enable debug output."""
        self.verbose = verbose
        self.color = color

    def _emit(self, message: str, indent: int = 0, style: str = '') -> None:
        if style and self.color:
            message = f"{style}{message}{Style.RESET_ALL}"
        elif not self.color:
            message = _strip_ansi(message)
        tqdm.write("  " * indent + message)

    def info(self, message: str, indent: int = 0) -> None:
        """Print an informational message."""
        self._emit(message, indent)

    def success(self, message: str, indent: int = 0) -> None:
        """Print a green success message."""
        self._emit(message, indent, Fore.GREEN)

    def warning(self, message: str, indent: int = 0) -> None:
        """Print a yellow warning message."""
        self._emit(message, indent, Fore.YELLOW)

    def error(self, message: str, indent: int = 0) -> None:
        """Print a red error message."""
        self._emit(message, indent, Fore.RED)

    def section(self, title: str) -> None:
        """Print a bright section header with a divider line."""
        self._emit("")
        self._emit(title, style=Style.BRIGHT)
        self._emit("-" * SECTION_WIDTH)

    def debug(self, message: str) -> None:
        """Print a cyan debug message (only when verbose is enabled)."""
        if self.verbose:
            self._emit(f"[DEBUG] {message}", style=Fore.CYAN)


def _strip_ansi(message: str) -> str:
    buffer = io.StringIO()
    AnsiToWin32(buffer, convert=False, strip=True).write(message)
    return buffer.getvalue()


class NullOutputHandler:
    """Silent output handler for tests and JSON mode."""

    def info(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def success(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def warning(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def error(self, message: str, indent: int = 0) -> None:
        """No-op."""
        pass

    def section(self, title: str) -> None:
        """No-op."""
        pass

    def debug(self, message: str) -> None:
        """No-op."""
        pass
