"""
fsgitwatch: find git repositories by owner/repo

Concurrently scans a directory tree for git working copies whose remotes
(SSH or HTTPS, any remote name) point at a given owner/repo.
"""

from colorama import init as colorama_init

colorama_init(autoreset=True)

__version__ = "0.2.0"

# Re-export public API so `from fsgitwatch import X` keeps working.
from fsgitwatch.cli import main  # noqa: E402
from fsgitwatch.config import create_argument_parser, load_config_file  # noqa: E402
from fsgitwatch.errors import (  # noqa: E402
    ChannelClosedError,
    ConfigurationError,
    FsgitwatchError,
    InvalidConcurrencyError,
    InvalidPatternError,
    InvalidRootError,
    RepositoryReadError,
)
from fsgitwatch.matcher import matches, normalize_remote_url, remote_matches  # noqa: E402
from fsgitwatch.models import (  # noqa: E402
    DirectoryVisited,
    NormalizedIdentity,
    RemoteReference,
    RepositoryFound,
    RepositoryMatch,
    RepositoryMatched,
    RepositoryRejected,
    ScanCancelled,
    ScanConfig,
    ScanEvent,
    ScanFinished,
    ScanOutcome,
    ScanWarning,
    SearchPattern,
    Verbosity,
)
from fsgitwatch.orchestrator import SearchOrchestrator, search  # noqa: E402
from fsgitwatch.output import SECTION_WIDTH, ConsoleOutputHandler, NullOutputHandler  # noqa: E402
from fsgitwatch.progress import ProgressChannel, ProgressTracker  # noqa: E402
from fsgitwatch.protocols import OutputHandler, RemoteInspector  # noqa: E402
from fsgitwatch.reporter import SummaryReporter  # noqa: E402
from fsgitwatch.repository import GitRemoteInspector  # noqa: E402
from fsgitwatch.scanner import RepositoryScanner, read_directory  # noqa: E402

__all__ = [
    "__version__",
    # Models
    "DirectoryVisited",
    "NormalizedIdentity",
    "RemoteReference",
    "RepositoryFound",
    "RepositoryMatch",
    "RepositoryMatched",
    "RepositoryRejected",
    "ScanCancelled",
    "ScanConfig",
    "ScanEvent",
    "ScanFinished",
    "ScanOutcome",
    "ScanWarning",
    "SearchPattern",
    "Verbosity",
    # Errors
    "ChannelClosedError",
    "ConfigurationError",
    "FsgitwatchError",
    "InvalidConcurrencyError",
    "InvalidPatternError",
    "InvalidRootError",
    "RepositoryReadError",
    # Protocols
    "OutputHandler",
    "RemoteInspector",
    # Matching
    "matches",
    "normalize_remote_url",
    "remote_matches",
    # Implementations
    "GitRemoteInspector",
    "ConsoleOutputHandler",
    "NullOutputHandler",
    "SECTION_WIDTH",
    "ProgressChannel",
    "ProgressTracker",
    # Services
    "RepositoryScanner",
    "read_directory",
    "SearchOrchestrator",
    "SummaryReporter",
    "search",
    # Config / CLI
    "create_argument_parser",
    "load_config_file",
    "main",
]
