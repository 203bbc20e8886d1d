"""Progress channel (scanner workers -> one consumer) and the consumer itself."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from colorama import Fore, Style
from tqdm import tqdm

from fsgitwatch.errors import ChannelClosedError
from fsgitwatch.models import (
    DEFAULT_CHANNEL_CAPACITY,
    TERMINAL_EVENTS,
    DirectoryVisited,
    RepositoryFound,
    RepositoryMatch,
    RepositoryMatched,
    RepositoryRejected,
    ScanCancelled,
    ScanEvent,
    ScanFinished,
    ScanOutcome,
    ScanWarning,
    SearchPattern,
    Verbosity,
)
from fsgitwatch.protocols import OutputHandler


class ProgressChannel:
    """Bounded fan-in event stream from many scanner tasks to one consumer.

    send() suspends while the queue is full, so a slow consumer throttles the
    producers instead of letting events pile up. close() and cancel() never
    block: if the queue is full the terminal signal is parked and handed out
    once the consumer has drained everything before it.
    """

    def __init__(self, capacity: int = DEFAULT_CHANNEL_CAPACITY):
        """Create a channel holding at most capacity undelivered events."""
        if capacity < 1:
            raise ValueError(f"channel capacity must be at least 1, got {capacity}")
        self._queue: asyncio.Queue[ScanEvent] = asyncio.Queue(maxsize=capacity)
        self._terminal: ScanEvent | None = None
        self._parked: ScanEvent | None = None

    @property
    def capacity(self) -> int:
        """Maximum number of undelivered events."""
        return self._queue.maxsize

    @property
    def is_terminated(self) -> bool:
        """True once close() or cancel() has been called."""
        return self._terminal is not None

    @property
    def was_cancelled(self) -> bool:
        """True if the stream ended with ScanCancelled."""
        return isinstance(self._terminal, ScanCancelled)

    def pending(self) -> int:
        """Number of events queued but not yet received."""
        return self._queue.qsize()

    async def send(self, event: ScanEvent) -> None:
        """Queue an event, waiting for room if the consumer is behind."""
        if self._terminal is not None:
            raise ChannelClosedError(f"cannot send {type(event).__name__} on a terminated channel")
        await self._queue.put(event)

    def close(self) -> None:
        """Signal normal end of stream."""
        self._terminate(ScanFinished())

    def cancel(self) -> None:
        """Signal that the scan was abandoned."""
        self._terminate(ScanCancelled())

    def _terminate(self, signal: ScanEvent) -> None:
        if self._terminal is not None:
            return
        self._terminal = signal
        try:
            self._queue.put_nowait(signal)
        except asyncio.QueueFull:
            self._parked = signal

    async def receive(self) -> ScanEvent:
        """Return the next event; after termination, keep returning the terminal signal."""
        if self._parked is not None and self._queue.empty():
            return self._parked
        event = await self._queue.get()
        if isinstance(event, TERMINAL_EVENTS):
            # Later receives return it again without touching the queue
            self._parked = event
        return event

    def __aiter__(self) -> AsyncIterator[ScanEvent]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ScanEvent]:
        while True:
            event = await self.receive()
            if isinstance(event, TERMINAL_EVENTS):
                return
            yield event


class ProgressTracker:
    """Single consumer of the progress channel.

    Owns every aggregate counter, renders live progress with tqdm and
    accumulates matches into the final ScanOutcome.
    """

    def __init__(
        self,
        channel: ProgressChannel,
        pattern: SearchPattern,
        output: OutputHandler,
        verbosity: Verbosity = Verbosity.QUIET,
        show_progress: bool = True,
    ):
        """Create a tracker consuming channel and reporting through output."""
        self.channel = channel
        self.pattern = pattern
        self.output = output
        self.verbosity = verbosity
        self.show_progress = show_progress
        self._logger = logging.getLogger(__name__)

        self.matches: list[RepositoryMatch] = []
        self.warnings: list[ScanWarning] = []
        self.directories_visited = 0
        self.repositories_found = 0
        self.repositories_rejected = 0

    async def run(self) -> ScanOutcome:
        """Consume events until a terminal signal arrives and build the outcome."""
        cancelled = False
        with tqdm(desc="Scanning", unit="dir", disable=not self.show_progress, leave=False) as pbar:
            while True:
                event = await self.channel.receive()
                if isinstance(event, ScanFinished):
                    break
                if isinstance(event, ScanCancelled):
                    cancelled = True
                    break
                self._handle(event, pbar)

        self._logger.debug(
            "Scan %s: %d directories scanned, %d matches found",
            "cancelled" if cancelled else "complete",
            self.directories_visited, len(self.matches),
        )
        return ScanOutcome(
            pattern=self.pattern,
            matches=tuple(self.matches),
            directories_visited=self.directories_visited,
            repositories_found=self.repositories_found,
            repositories_rejected=self.repositories_rejected,
            warnings=tuple(self.warnings),
            cancelled=cancelled,
        )

    def _handle(self, event: ScanEvent, pbar: tqdm) -> None:
        if isinstance(event, DirectoryVisited):
            self.directories_visited += 1
            if self.verbosity >= Verbosity.TRACE:
                self.output.debug(f"Scanning: {event.path}")
            pbar.update(1)
        elif isinstance(event, RepositoryFound):
            self.repositories_found += 1
        elif isinstance(event, RepositoryMatched):
            self.matches.append(event.match)
            if self.show_progress:
                self.print_match(event.match, len(self.matches))
            pbar.set_postfix_str(f"{len(self.matches)} matches", refresh=False)
        elif isinstance(event, RepositoryRejected):
            self.repositories_rejected += 1
            if self.verbosity >= Verbosity.TRACE:
                self.output.debug(f"No matching remote: {event.path}")
        elif isinstance(event, ScanWarning):
            self.warnings.append(event)
            if self.verbosity >= Verbosity.WARNINGS:
                self.output.warning(str(event))

    def print_match(self, match: RepositoryMatch, index: int) -> None:
        """Print a single match as soon as it arrives."""
        self.output.info("")
        self.output.info(f"{Fore.YELLOW}{index}.{Style.RESET_ALL} {Style.BRIGHT}{match.path}{Style.RESET_ALL}")
        for remote in match.remotes:
            self.output.info(f"{Fore.BLUE}{remote.name}{Style.RESET_ALL}: {remote.url}", indent=1)
