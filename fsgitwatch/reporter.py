"""SummaryReporter: renders the final search outcome."""

from __future__ import annotations

from colorama import Fore, Style

from fsgitwatch.models import ScanOutcome
from fsgitwatch.output import SECTION_WIDTH
from fsgitwatch.protocols import OutputHandler


def _plural(count: int) -> str:
    return "repository" if count == 1 else "repositories"


class SummaryReporter:
    """Generates and displays result listings and summaries"""

    def __init__(self, output: OutputHandler):
        """Create a reporter that writes to the given output handler."""
        self.output = output

    def print_results(self, outcome: ScanOutcome) -> None:
        """Print every match with its remotes (used when nothing was streamed)."""
        pattern = str(outcome.pattern)
        if not outcome.has_matches():
            self.output.warning(f"{Style.BRIGHT}No repositories found matching '{pattern}'")
            self._print_footer(outcome)
            return

        count = len(outcome.matches)
        self.output.info(
            f"Found {Fore.GREEN}{Style.BRIGHT}{count}{Style.RESET_ALL} matching "
            f"{_plural(count)} for '{Fore.CYAN}{pattern}{Style.RESET_ALL}':"
        )
        self.output.info("")
        for index, match in enumerate(outcome.matches, start=1):
            self.output.info(f"{Fore.YELLOW}{index}.{Style.RESET_ALL} {Style.BRIGHT}{match.path}{Style.RESET_ALL}")
            for remote in match.remotes:
                self.output.info(f"{Fore.BLUE}{remote.name}{Style.RESET_ALL}: {remote.url}", indent=1)
            self.output.info("")
        self._print_footer(outcome)

    def print_summary(self, outcome: ScanOutcome) -> None:
        """Print the one-line summary shown after matches were streamed live."""
        pattern = str(outcome.pattern)
        self.output.info("")
        if not outcome.has_matches():
            self.output.warning(f"{Style.BRIGHT}No repositories found matching '{pattern}'")
        else:
            count = len(outcome.matches)
            self.output.success(
                f"{Style.BRIGHT}Found{Style.NORMAL} {count} {_plural(count)} "
                f"matching '{Fore.CYAN}{pattern}{Fore.GREEN}'"
            )
        self._print_footer(outcome)

    def _print_footer(self, outcome: ScanOutcome) -> None:
        """Print scan statistics and, if relevant, the cancellation notice."""
        self.output.debug("-" * SECTION_WIDTH)
        self.output.debug(
            f"Scanned {outcome.directories_visited} directories, "
            f"{outcome.repositories_found} repositories inspected, "
            f"{len(outcome.warnings)} warnings"
        )
        if outcome.cancelled:
            self.output.warning("Scan was interrupted; results are incomplete")
