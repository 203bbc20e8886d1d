"""Domain models: search pattern, remotes, scan events, and configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any

from fsgitwatch.errors import InvalidPatternError

DEFAULT_MAX_CONCURRENT = 100
DEFAULT_CHANNEL_CAPACITY = 1024


class Verbosity(IntEnum):
    """How much diagnostic output the consumer surfaces"""
    QUIET = 0
    WARNINGS = 1
    TRACE = 2

    @classmethod
    def from_count(cls, count: int) -> Verbosity:
        """Map a repeated -v flag count onto a verbosity level."""
        if count <= 0:
            return cls.QUIET
        if count == 1:
            return cls.WARNINGS
        return cls.TRACE


@dataclass(frozen=True)
class SearchPattern:
    """The owner/repo identity being searched for"""
    owner: str
    repo: str

    @classmethod
    def parse(cls, text: str) -> SearchPattern:
        """Parse 'owner/repo'. Raises InvalidPatternError on anything else."""
        parts = text.split('/')
        if len(parts) != 2:
            raise InvalidPatternError(text)
        owner, repo = parts[0].strip(), parts[1].strip()
        if not owner or not repo:
            raise InvalidPatternError(text)
        return cls(owner=owner, repo=repo)

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class RemoteReference:
    """A named remote as configured in a repository"""
    name: str
    url: str


@dataclass(frozen=True)
class NormalizedIdentity:
    """Canonical (owner, repo) pair extracted from a remote URL"""
    owner: str
    repo: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class RepositoryMatch:
    """A repository with at least one remote matching the pattern"""
    path: Path
    remotes: tuple[RemoteReference, ...]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'path': str(self.path),
            'remotes': [{'name': r.name, 'url': r.url} for r in self.remotes],
        }


# ---------------------------------------------------------------------------
# Scan events
# ---------------------------------------------------------------------------

class ScanEvent:
    """Base class for everything that travels through the progress channel."""

    __slots__ = ()


@dataclass(frozen=True)
class DirectoryVisited(ScanEvent):
    path: Path


@dataclass(frozen=True)
class RepositoryFound(ScanEvent):
    path: Path


@dataclass(frozen=True)
class RepositoryMatched(ScanEvent):
    match: RepositoryMatch


@dataclass(frozen=True)
class RepositoryRejected(ScanEvent):
    path: Path


@dataclass(frozen=True)
class ScanWarning(ScanEvent):
    """A recoverable per-directory problem; the scan continues elsewhere."""
    path: Path
    reason: str

    def __str__(self) -> str:
        return f"Warning: {self.path}: {self.reason}"


@dataclass(frozen=True)
class ScanFinished(ScanEvent):
    """Terminal signal: every traversal task completed."""


@dataclass(frozen=True)
class ScanCancelled(ScanEvent):
    """Terminal signal: the scan was abandoned before completion."""


TERMINAL_EVENTS = (ScanFinished, ScanCancelled)


@dataclass(frozen=True)
class ScanOutcome:
    """Terminal, immutable result of one search"""
    pattern: SearchPattern
    matches: tuple[RepositoryMatch, ...] = ()
    directories_visited: int = 0
    repositories_found: int = 0
    repositories_rejected: int = 0
    warnings: tuple[ScanWarning, ...] = ()
    cancelled: bool = False

    @property
    def matched_paths(self) -> set[Path]:
        """Set of matched repository paths (order-independent view)."""
        return {m.path for m in self.matches}

    def has_matches(self) -> bool:
        """Return True if at least one repository matched."""
        return len(self.matches) > 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'pattern': str(self.pattern),
            'count': len(self.matches),
            'repositories': [m.to_dict() for m in self.matches],
            'directories_visited': self.directories_visited,
            'repositories_found': self.repositories_found,
            'warnings': [{'path': str(w.path), 'reason': w.reason} for w in self.warnings],
            'cancelled': self.cancelled,
        }


@dataclass(frozen=True)
class ScanConfig:
    """Configuration for one search invocation"""
    pattern: str = ''
    max_concurrent: int = DEFAULT_MAX_CONCURRENT
    verbosity: Verbosity = Verbosity.QUIET
    json_output: bool = False
    show_progress: bool = True
    channel_capacity: int = DEFAULT_CHANNEL_CAPACITY

    def with_updates(self, **kwargs) -> ScanConfig:
        """Return a new ScanConfig with the given fields replaced."""
        current = {f.name: getattr(self, f.name) for f in self.__dataclass_fields__.values()}
        current.update(kwargs)
        return ScanConfig(**current)
