"""Configuration: argument parser and config file loader."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path
from typing import Any

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from fsgitwatch.errors import ConfigurationError
from fsgitwatch.models import DEFAULT_CHANNEL_CAPACITY, DEFAULT_MAX_CONCURRENT

CONFIG_FILENAME = '.fsgitwatchrc.toml'
INTEGER_KEYS = ('max_concurrent', 'verbose', 'channel_capacity')
BOOLEAN_KEYS = ('json_output', 'progress', 'color')


def create_argument_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all fsgitwatch flags."""
    # Lazy import to avoid circular dependency with __init__.py
    from fsgitwatch import __version__

    parser = argparse.ArgumentParser(
        prog='fsgitwatch',
        description="Find git repositories whose remotes match an owner/repo pattern",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Both SSH (git@github.com:owner/repo.git) and HTTPS
(https://github.com/owner/repo.git) remotes are recognized, on every remote
name (origin, upstream, ...). Repository subtrees are never descended into.

Examples:
  %(prog)s anthropics/claude-code                 # Search current directory
  %(prog)s anthropics/claude-code ~/src -j 16     # Limit concurrent reads
  %(prog)s anthropics/claude-code ~/src --json    # Machine-readable output
  %(prog)s anthropics/claude-code ~/src -vv       # Trace every directory
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('pattern', metavar='PATTERN',
                        help="Repository pattern in owner/repo format")
    parser.add_argument('directory', metavar='PATH', nargs='?', default='.',
                        help='Directory to search (default: current)')
    parser.add_argument('-j', '--max-concurrent', type=int, default=DEFAULT_MAX_CONCURRENT,
                        help=f'Maximum concurrent directory reads (default: {DEFAULT_MAX_CONCURRENT})')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Show warnings (-v) or every scanned directory (-vv)')
    parser.add_argument('--json', dest='json_output', action='store_true',
                        help='Output results as JSON (suppresses normal output)')
    parser.add_argument('--no-progress', dest='progress', action='store_false',
                        help='Do not show the live progress display')
    parser.add_argument('--no-color', dest='color', action='store_false',
                        help='Disable colored output')
    parser.add_argument('--config', type=str, default=None,
                        help=f'Path to config file (default: {CONFIG_FILENAME} in search dir or home)')

    return parser


def explicit_destinations(parser: argparse.ArgumentParser, argv: Sequence[str]) -> set[str]:
    """Return the dest names of options the user actually typed on the command line."""
    explicit = set()
    for action in parser._actions:
        if action.dest in ('help', 'version') or not action.option_strings:
            continue
        for opt_string in action.option_strings:
            if any(_mentions(arg, opt_string) for arg in argv):
                explicit.add(action.dest)
                break
    return explicit


def _mentions(arg: str, opt_string: str) -> bool:
    if arg == opt_string or arg.startswith(opt_string + '='):
        return True
    # Short options may be bundled or carry their value: -vv, -j8
    return (len(opt_string) == 2 and not arg.startswith('--')
            and arg.startswith(opt_string))


def load_config_file(search_dir: Path, config_path: str | None = None) -> dict[str, Any]:
    """Load .fsgitwatchrc.toml from explicit path, search dir, or home dir.

    Returns empty dict if not found or unparsable.
    """
    candidates = [Path(config_path)] if config_path else [search_dir / CONFIG_FILENAME, Path.home() / CONFIG_FILENAME]
    for path in candidates:
        if path.is_file():
            try:
                with open(path, 'rb') as f:
                    return tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                print(f"Warning: Failed to parse {path}: {e}")
                return {}
    if config_path:
        print(f"Warning: Config file '{config_path}' not found. Ignoring.")
    return {}


def file_defaults() -> dict[str, Any]:
    """Defaults for keys that only the config file can set."""
    return {'channel_capacity': DEFAULT_CHANNEL_CAPACITY}


def check_config_values(file_config: dict[str, Any]) -> None:
    """Raise ConfigurationError naming the first config file key with a value of the wrong type."""
    for key in INTEGER_KEYS:
        value = file_config.get(key)
        if key in file_config and (isinstance(value, bool) or not isinstance(value, int)):
            raise ConfigurationError(
                f"Invalid value for '{key}' in config file: expected an integer, got {value!r}"
            )
    for key in BOOLEAN_KEYS:
        value = file_config.get(key)
        if key in file_config and not isinstance(value, bool):
            raise ConfigurationError(
                f"Invalid value for '{key}' in config file: expected true or false, got {value!r}"
            )
