"""CLI entry point: main() function."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from colorama import Fore, Style

from fsgitwatch.config import (
    check_config_values,
    create_argument_parser,
    explicit_destinations,
    file_defaults,
    load_config_file,
)
from fsgitwatch.errors import ConfigurationError
from fsgitwatch.models import ScanConfig, Verbosity
from fsgitwatch.orchestrator import SearchOrchestrator
from fsgitwatch.output import ConsoleOutputHandler, NullOutputHandler
from fsgitwatch.reporter import SummaryReporter

EXIT_FOUND = 0
EXIT_NOT_FOUND = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def build_config(argv: Sequence[str]) -> tuple[ScanConfig, Path, bool]:
    """Merge CLI flags, config file and defaults. Returns (config, root, color)."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    search_dir = Path(args.directory).expanduser().resolve()
    file_config = load_config_file(search_dir, args.config)
    check_config_values(file_config)
    cli_explicit = explicit_destinations(parser, argv)

    def effective(dest: str, toml_key: str, transform=None):
        if dest in cli_explicit:
            val = getattr(args, dest)
        elif toml_key in file_config:
            val = file_config[toml_key]
        else:
            val = getattr(args, dest, file_defaults().get(toml_key))
        return transform(val) if transform else val

    config = ScanConfig(
        pattern=args.pattern,
        max_concurrent=effective('max_concurrent', 'max_concurrent', int),
        verbosity=effective('verbose', 'verbose', lambda v: Verbosity.from_count(int(v))),
        json_output=effective('json_output', 'json_output', bool),
        show_progress=effective('progress', 'progress', bool),
        channel_capacity=effective('channel_capacity', 'channel_capacity', int),
    )
    if config.json_output:
        config = config.with_updates(show_progress=False)
    if not sys.stdout.isatty():
        config = config.with_updates(show_progress=False)
    return config, search_dir, effective('color', 'color', bool)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point"""
    if argv is None:
        argv = sys.argv[1:]

    try:
        config, search_dir, color = build_config(argv)
    except ConfigurationError as e:
        print(f"{Fore.RED}Error: {e}{Style.RESET_ALL}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    logging.basicConfig(
        level=logging.DEBUG if config.verbosity >= Verbosity.TRACE else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if config.json_output:
        output = NullOutputHandler()
    else:
        output = ConsoleOutputHandler(verbose=config.verbosity >= Verbosity.TRACE, color=color)

    orchestrator = SearchOrchestrator(config, output)

    try:
        outcome = orchestrator.run(search_dir)
    except ConfigurationError as e:
        if config.json_output:
            print(json.dumps({'error': str(e)}, indent=2))
        else:
            print(f"{Fore.RED}Error: {e}{Style.RESET_ALL}", file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        if not config.json_output:
            output.warning("\n\nInterrupted by user")
        return EXIT_INTERRUPTED

    if config.json_output:
        print(json.dumps(outcome.to_dict(), indent=2))
    else:
        reporter = SummaryReporter(output)
        if config.show_progress:
            reporter.print_summary(outcome)
        else:
            reporter.print_results(outcome)

    if outcome.cancelled:
        return EXIT_INTERRUPTED
    return EXIT_FOUND if outcome.has_matches() else EXIT_NOT_FOUND


def run() -> None:
    """Console-script wrapper around main()."""
    sys.exit(main())
