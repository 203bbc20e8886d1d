"""Exception taxonomy.

Configuration errors are fatal and raised before any scanning starts.
RepositoryReadError is recoverable: the scanner turns it into a ScanWarning.
"""

from __future__ import annotations

from pathlib import Path


class FsgitwatchError(Exception):
    """Base class for all fsgitwatch errors"""


class ConfigurationError(FsgitwatchError):
    """A precondition of the search failed; the scan never starts"""


class InvalidPatternError(ConfigurationError):
    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(f"Invalid search pattern: '{pattern}'. Expected format: owner/repo")


class InvalidRootError(ConfigurationError):
    def __init__(self, root: Path, reason: str):
        self.root = root
        self.reason = reason
        super().__init__(f"Invalid search path '{root}': {reason}")


class InvalidConcurrencyError(ConfigurationError):
    def __init__(self, value: int):
        self.value = value
        super().__init__(f"Invalid concurrency bound {value}: must be at least 1")


class RepositoryReadError(FsgitwatchError):
    """Repository metadata exists but cannot be read"""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read remotes from git repo at {path}: {reason}")


class ChannelClosedError(FsgitwatchError):
    """An event was sent after the progress channel was terminated"""
