"""SearchOrchestrator: wires scanner, progress channel and consumer together."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fsgitwatch.errors import ConfigurationError, InvalidConcurrencyError, InvalidRootError
from fsgitwatch.models import DEFAULT_MAX_CONCURRENT, ScanConfig, ScanOutcome, SearchPattern
from fsgitwatch.output import NullOutputHandler
from fsgitwatch.progress import ProgressChannel, ProgressTracker
from fsgitwatch.protocols import OutputHandler, RemoteInspector
from fsgitwatch.repository import GitRemoteInspector
from fsgitwatch.scanner import RepositoryScanner


class SearchOrchestrator:
    """Main orchestrator - runs one search from validated config to outcome"""

    def __init__(
        self,
        config: ScanConfig,
        output: OutputHandler,
        inspector: RemoteInspector | None = None,
    ):
        """Create an orchestrator. A GitRemoteInspector is created when none is given."""
        self.config = config
        self.output = output
        self._inspector = inspector
        self._scan_task: asyncio.Task | None = None
        self._logger = logging.getLogger(__name__)

    def validate(self, root: Path) -> SearchPattern:
        """Check every precondition of the search before anything is scanned."""
        if not root.exists():
            raise InvalidRootError(root, "does not exist")
        if not root.is_dir():
            raise InvalidRootError(root, "is not a directory")
        if self.config.max_concurrent < 1:
            raise InvalidConcurrencyError(self.config.max_concurrent)
        if self.config.channel_capacity < 1:
            raise ConfigurationError(
                f"Invalid channel capacity {self.config.channel_capacity}: must be at least 1"
            )
        return SearchPattern.parse(self.config.pattern)

    def run(self, root: Path) -> ScanOutcome:
        """Synchronous entry point: run the search on a fresh event loop."""
        return asyncio.run(self.search(root))

    async def search(self, root: Path) -> ScanOutcome:
        """Validate, scan root and return the accumulated outcome.

        root is resolved first, so every reported match path is absolute.

        The scan runs as a background task while this coroutine consumes the
        progress channel. Cancelling this coroutine, or calling cancel(),
        abandons the scan as a unit.
        """
        root = Path(root).expanduser().resolve()
        pattern = self.validate(root)

        owns_inspector = self._inspector is None
        inspector = self._inspector or GitRemoteInspector(
            max_workers=min(self.config.max_concurrent, 32)
        )
        channel = ProgressChannel(self.config.channel_capacity)
        scanner = RepositoryScanner(pattern, inspector, self.config.max_concurrent)
        tracker = ProgressTracker(
            channel,
            pattern,
            self.output,
            verbosity=self.config.verbosity,
            show_progress=self.config.show_progress,
        )

        self._scan_task = asyncio.create_task(scanner.scan(root, channel))
        consumer = asyncio.create_task(tracker.run())
        try:
            # Shielded so the consumer still sees ScanCancelled when we are cancelled
            outcome = await asyncio.shield(consumer)
            await self._reap_scan_task()
            return outcome
        except asyncio.CancelledError:
            self._scan_task.cancel()
            await self._reap_scan_task()
            await consumer
            raise
        finally:
            self._scan_task = None
            if owns_inspector:
                inspector.close(wait=not channel.was_cancelled)

    def cancel(self) -> bool:
        """Abandon the running scan. Returns False if no scan is running."""
        if self._scan_task is None or self._scan_task.done():
            return False
        self._logger.debug("Cancelling scan")
        return self._scan_task.cancel()

    async def _reap_scan_task(self) -> None:
        """Wait for the scan task, re-raising anything other than its cancellation."""
        task = self._scan_task
        if task is None:
            return
        results = await asyncio.gather(task, return_exceptions=True)
        error = results[0]
        if isinstance(error, BaseException) and not isinstance(error, asyncio.CancelledError):
            raise error


async def search(
    root: Path,
    pattern: str,
    max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    output: OutputHandler | None = None,
) -> ScanOutcome:
    """Convenience coroutine: search root for repositories matching pattern."""
    config = ScanConfig(pattern=pattern, max_concurrent=max_concurrent, show_progress=False)
    orchestrator = SearchOrchestrator(config, output or NullOutputHandler())
    return await orchestrator.search(Path(root))
