"""
Command-line interface for photoreorg.
"""

import argparse
import os
import re
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress

from .cancellation import CancellationToken, install_signal_handlers
from .config import Config
from .constants import DEFAULT_PATTERN, PROGRAM, get_console
from .core import PhotoReorganizer
from .errors import ConfigurationError
from .progress import ProgressContext


def create_parser(config: Config) -> argparse.ArgumentParser:
    """Create argument parser with dynamic defaults from config."""
    last_source = config.get_last_source()
    last_dest = config.get_last_dest()
    pattern = config.get_pattern()

    source_help = "Source directory searched recursively for photos"
    dest_help = "Destination directory for the year/month/day tree"
    regex_help = "Case-insensitive extended regex selecting files on source"

    if last_source:
        source_help += f" (default: {last_source})"
    if last_dest:
        dest_help += f" (default: {last_dest})"
    regex_help += f" (default: {pattern or DEFAULT_PATTERN})"

    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description="Copy photo files from source to destination, organized by the "
                    "date of the photo (from metadata)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Dates read from CreateDate or GPS metadata go to YYYY/MM/DD. Dates that only
come from modification or filesystem timestamps go to YYYY_/MM/DD. Files with
no date at all go to unknown_date.

Examples:
  {PROGRAM} -s ~/Card -d ~/Pictures -r '\\.jpg$|\\.jpeg$|\\.tiff$|\\.tif$'
  {PROGRAM} -s ~/Card -d ~/Raw -r '\\.nef$|\\.raf$|\\.dng$' --dry-run -v
        """
    )

    parser.add_argument(
        "source", nargs="?",
        help=source_help
    )
    parser.add_argument(
        "dest", nargs="?",
        help=dest_help
    )
    parser.add_argument(
        "--source", "-s", dest="source_override",
        help="Override source directory"
    )
    parser.add_argument(
        "--dest", "-d", dest="dest_override",
        help="Override destination directory"
    )
    parser.add_argument(
        "--regex", "-r", metavar="PATTERN",
        help=regex_help
    )
    parser.add_argument(
        "--dry-run", "-n", action="store_true",
        help="Preview operations without making changes"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Report each copy and every renamed collision"
    )
    parser.add_argument(
        "--version", "-V", action="store_true",
        help=f"Display the version number of {PROGRAM} and exit"
    )

    return parser


def validate_pattern(pattern: str) -> str:
    """Ensure the selection pattern is a valid regular expression."""
    try:
        re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise ConfigurationError(f"Invalid regex pattern {pattern!r}: {e}")
    return pattern


def validate_directories(source: Path, dest: Path) -> None:
    """Check that source is a readable directory and dest a writable one."""
    if not source.is_dir():
        raise ConfigurationError(f"The source directory {source} must exist.")
    if not dest.is_dir():
        raise ConfigurationError(f"The destination directory {dest} must exist.")
    if not os.access(source, os.R_OK | os.X_OK):
        raise ConfigurationError(f"The source directory {source} must be readable.")
    if not os.access(dest, os.W_OK | os.X_OK):
        raise ConfigurationError(f"The destination directory {dest} must be writable.")
    if source == dest:
        raise ConfigurationError(f"Source and destination are the same directory: {source}")


def show_processing_plan(source: Path, dest: Path, pattern: str, dry_run: bool,
                         verbose: bool, console: Console) -> None:
    """Display the processing plan before execution."""
    mode = "DRY RUN" if dry_run else "COPY"

    console.print("\n[bold]Processing Plan:[/bold]")
    if verbose:
        console.print(f"  Source:          [blue]{escape(str(source))}[/blue]")
        console.print(f"  Destination:     [blue]{escape(str(dest))}[/blue]")
    console.print(f"  Pattern:         [cyan]{escape(pattern)}[/cyan]")
    console.print(f"  Processing Mode: [cyan]{mode}[/cyan]")
    console.print()


def main(config_path: Optional[Path] = None) -> int:
    """Main entry point.

    Args:
        config_path: Optional path to config file (for testing)
    """
    config = Config(config_path=config_path)
    parser = create_parser(config)
    args = parser.parse_args()

    if args.version:
        from . import __version__
        print(__version__)
        return 0

    source_path = args.source_override or args.source or config.get_last_source()
    dest_path = args.dest_override or args.dest or config.get_last_dest()
    pattern = args.regex or config.get_pattern()

    if not source_path:
        parser.error("the source folder must be specified.")
    if not dest_path:
        parser.error("the destination folder must be specified.")
    if not pattern:
        pattern = DEFAULT_PATTERN

    source = Path(source_path).expanduser().resolve()
    dest = Path(dest_path).expanduser().resolve()

    try:
        validate_pattern(pattern)
        validate_directories(source, dest)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config.update_run(str(source), str(dest), pattern)

    console = get_console()
    show_processing_plan(source, dest, pattern, args.dry_run, args.verbose, console)

    sorter = PhotoReorganizer(
        source=source,
        dest=dest,
        pattern=pattern,
        root_dir=config.program_root,
        dry_run=args.dry_run,
        verbose=args.verbose
    )

    try:
        files = sorter.find_source_files()
        if not files:
            print("There are no matching files on source folder.", file=sys.stderr)
            return 0

        console.print(f"Found {len(files)} files to process")

        token = CancellationToken()
        with install_signal_handlers(token):
            with Progress(console=console, transient=True) as progress:
                task = progress.add_task("Placing files...", total=len(files))
                sorter.process_files(files, ProgressContext(progress, task), token)

        sorter.print_summary()

        if token.cancelled:
            status = "CANCELLED"
        elif sorter.stats_manager.has_errors():
            status = "PARTIAL"
        else:
            status = "SUCCESS"
        sorter.history_manager.log_run_summary(source, dest, sorter.stats_manager, status)

        return 0 if status == "SUCCESS" else 1

    except KeyboardInterrupt:
        console.print("\n[red]Operation cancelled by user[/red]")
        return 1
    finally:
        sorter.close()


if __name__ == "__main__":
    sys.exit(main())
