"""Command-line interface for mac-icon-fetcher.

Usage:
    mac-icon-fetcher --only-missing       # only records without a valid icon
    mac-icon-fetcher --all --verbose      # every record, with progress logs
    mac-icon-fetcher -m --json            # JSON summary on stdout

Without --only-missing/--all the mode is asked for interactively.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Prompt

from .. import __version__
from ..config import DEFAULT_DATA_PATH, DEFAULT_OUTPUT_DIR, FetcherConfig
from ..core.data_file import load_data_file
from ..errors import DataFileError, EnvironmentCheckError
from ..services.environment import check_environment
from ..services.orchestrator import BatchOrchestrator
from .logging_config import log_timing, setup_logging
from .report import print_progress, print_summary

MODE_MISSING = "missing"
MODE_ALL = "all"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mac-icon-fetcher",
        description=(
            "Find installed macOS applications listed in the site's data file, "
            "extract their icons and write icon names back into the data file."
        ),
        epilog="Without --only-missing or --all an interactive menu asks for the mode.",
    )
    parser.add_argument("--version", action="version", version=f"mac-icon-fetcher {__version__}")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--only-missing", "-m",
        dest="mode", action="store_const", const=MODE_MISSING,
        help="Only process applications without a valid icon"
    )
    mode.add_argument(
        "--all", "-a",
        dest="mode", action="store_const", const=MODE_ALL,
        help="Process all applications"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging (INFO level)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level, includes verbose)"
    )

    parser.add_argument("--data", type=Path, default=DEFAULT_DATA_PATH,
                        help=f"Data file to update (default: {DEFAULT_DATA_PATH})")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT_DIR,
                        help=f"Icon output directory (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("--size", type=int, default=64, help="Icon size in pixels (default: 64)")
    parser.add_argument("--concurrency", "-j", type=int, default=10,
                        help="Applications processed concurrently (default: 10)")
    parser.add_argument("--retries", type=int, default=2,
                        help="Retries per application after a failure (default: 2)")
    parser.add_argument("--json", action="store_true",
                        help="Print the run summary as JSON on stdout (other output goes to stderr)")
    return parser


def ask_mode(console: Console) -> Optional[str]:
    """Interactive mode menu; None when the user cancels."""
    console.print("[bold cyan]Mac application icon fetcher[/bold cyan]")
    console.print(f"  [bold]{MODE_MISSING}[/bold]  only applications without an icon")
    console.print(f"  [bold]{MODE_ALL}[/bold]      all applications")
    try:
        return Prompt.ask(
            "Select processing mode",
            choices=[MODE_MISSING, MODE_ALL],
            default=MODE_MISSING,
            console=console,
        )
    except (KeyboardInterrupt, EOFError):
        return None


def resolve_mode(args: argparse.Namespace, console: Console) -> Optional[str]:
    if args.mode:
        return args.mode
    if not sys.stdin.isatty():
        return MODE_MISSING
    return ask_mode(console)


def config_from_args(args: argparse.Namespace, mode: str) -> FetcherConfig:
    return FetcherConfig(
        data_path=args.data,
        output_dir=args.output,
        icon_size=args.size,
        concurrency=args.concurrency,
        retry_attempts=args.retries,
        only_missing_icons=(mode == MODE_MISSING),
        verbose=args.verbose,
        debug=args.debug,
    )


async def run_fetch(config: FetcherConfig, console: Console, json_output: bool = False) -> int:
    """Run one batch against the configured data file."""
    logger = logging.getLogger(__name__)

    check_environment(config)

    with log_timing("Load data file", logger):
        source = load_data_file(config.data_path)
    if source.record_count == 0:
        logger.warning("No application records found in the data file")

    orchestrator = BatchOrchestrator(
        config,
        on_progress=lambda snapshot: print_progress(console, snapshot),
    )
    result = await orchestrator.run(source)

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print_summary(console, result, source.categories, max_examples=config.failure_examples)
    return 0


def cli_main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, debug=args.debug)
    logger = logging.getLogger(__name__)
    # Keep stdout clean for the JSON document
    console = Console(stderr=args.json)

    mode = resolve_mode(args, console)
    if mode is None:
        console.print("Cancelled")
        return 0
    console.print(
        f"[cyan]Mode: {'only applications without icons' if mode == MODE_MISSING else 'all applications'}[/cyan]"
    )

    try:
        config = config_from_args(args, mode)
    except ValidationError as e:
        console.print(f"[red]Invalid options:[/red] {e}", highlight=False)
        return 1

    try:
        return asyncio.run(run_fetch(config, console, json_output=args.json))
    except (EnvironmentCheckError, DataFileError) as e:
        if args.json:
            print(json.dumps({"error": e.to_dict()}, indent=2))
        console.print(f"[red]Error:[/red] {e.message}", highlight=False)
        if e.suggestion:
            console.print(f"[dim]{e.suggestion}[/dim]")
        return 1
    except KeyboardInterrupt:
        console.print("\nInterrupted")
        return 130
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        console.print(f"[red]Unexpected error:[/red] {e}", highlight=False)
        return 1


if __name__ == "__main__":
    sys.exit(cli_main())
