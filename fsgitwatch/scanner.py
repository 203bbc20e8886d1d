"""Repository scanner: concurrent, pruning search for matching git repos."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from fsgitwatch.errors import InvalidConcurrencyError, RepositoryReadError
from fsgitwatch.matcher import remote_matches
from fsgitwatch.models import (
    DEFAULT_MAX_CONCURRENT,
    DirectoryVisited,
    RepositoryFound,
    RepositoryMatch,
    RepositoryMatched,
    RepositoryRejected,
    ScanEvent,
    ScanWarning,
    SearchPattern,
)
from fsgitwatch.progress import ProgressChannel
from fsgitwatch.protocols import RemoteInspector

GIT_METADATA_NAME = '.git'


@dataclass
class DirectoryListing:
    """Immediate contents of one directory that matter to the scanner"""
    is_repository: bool = False
    subdirectories: list[Path] = field(default_factory=list)


def read_directory(path: Path) -> DirectoryListing:
    """Blocking listing of path. Raises OSError if the directory is unreadable.

    A '.git' entry of any kind (directory, or gitlink file for worktrees and
    submodules) marks a repository root; subdirectories are then irrelevant.
    Symlinked directories are not reported.
    """
    listing = DirectoryListing()
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.name == GIT_METADATA_NAME:
                listing.is_repository = True
                listing.subdirectories.clear()
                return listing
            try:
                if entry.is_dir(follow_symlinks=False):
                    listing.subdirectories.append(Path(entry.path))
            except OSError:
                continue
    return listing


class RepositoryScanner:
    """Responsible for finding repositories whose remotes match a pattern"""

    def __init__(
        self,
        pattern: SearchPattern,
        inspector: RemoteInspector,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
    ):
        """Create a scanner gating directory reads and inspections at max_concurrent."""
        if max_concurrent < 1:
            raise InvalidConcurrencyError(max_concurrent)
        self.pattern = pattern
        self.inspector = inspector
        self.max_concurrent = max_concurrent
        self._logger = logging.getLogger(__name__)

    async def scan(self, root: Path, channel: ProgressChannel) -> None:
        """Walk root, streaming events into channel, then close it.

        On cancellation the channel receives a ScanCancelled signal instead of
        normal closure and the CancelledError propagates.
        """
        gate = asyncio.Semaphore(self.max_concurrent)
        self._logger.debug("Scanning %s for %s (max_concurrent=%d)",
                           root, self.pattern, self.max_concurrent)
        try:
            await self._visit(root, gate, channel)
        except asyncio.CancelledError:
            self._logger.debug("Scan of %s cancelled", root)
            channel.cancel()
            raise
        except Exception:
            self._logger.debug("Scan of %s aborted", root, exc_info=True)
            channel.cancel()
            raise
        channel.close()
        self._logger.debug("Scan of %s complete", root)

    async def _visit(self, path: Path, gate: asyncio.Semaphore, channel: ProgressChannel) -> None:
        """Visit one directory; subdirectories become their own tasks."""
        await channel.send(DirectoryVisited(path))

        async with gate:
            try:
                listing = await asyncio.get_running_loop().run_in_executor(None, read_directory, path)
            except OSError as e:
                await channel.send(ScanWarning(path, f"Cannot read directory: {e.strerror or e}"))
                return

            if listing.is_repository:
                await channel.send(RepositoryFound(path))
                await channel.send(await self._classify(path))
                return

        if not listing.subdirectories:
            return
        children = [
            asyncio.create_task(self._visit(subdir, gate, channel))
            for subdir in listing.subdirectories
        ]
        try:
            await asyncio.gather(*children)
        except BaseException:
            # One failed child abandons the whole subtree
            for child in children:
                child.cancel()
            await asyncio.gather(*children, return_exceptions=True)
            raise

    async def _classify(self, path: Path) -> ScanEvent:
        """Inspect a repository root and decide whether it matches."""
        try:
            remotes = await self.inspector.inspect(path)
        except RepositoryReadError as e:
            self._logger.debug("Inspector failed for %s: %s", path, e.reason)
            return ScanWarning(path, f"Failed to read remotes: {e.reason}")

        if any(remote_matches(remote.url, self.pattern) for remote in remotes):
            return RepositoryMatched(RepositoryMatch(path=path, remotes=tuple(remotes)))
        return RepositoryRejected(path)
