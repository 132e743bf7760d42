"""
Command-line interface for the home folder migrator.

This module is responsible for:
- Parsing command-line arguments using argparse
- Configuring console and rolling file logging for the run
- Orchestrating the overall workflow
- Mapping fatal conditions to exit codes
"""

import argparse
import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from . import __version__, PRODUCT_NAME, PRODUCT_DESCRIPTION
from .config import (
    MigrationSettings,
    SettingsError,
    default_settings_path,
    load_settings,
)
from .mapping import load_account_mapping
from .migrator import (
    HomeMigrator,
    MissingResourceError,
    ensure_destination_root,
    scan_home_folders,
    validate_settings,
)
from .report import ReportWriter

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "migration.log"
LOG_RETENTION_DAYS = 7

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_UNIT_FAILURES = 2
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="home-migrator",
        description=f"""
{PRODUCT_NAME} - {PRODUCT_DESCRIPTION}

Migrate per-user home folders and optional <account>.V2 profile folders
to a new share layout, using a CSV that maps legacy accounts to emails.
        """.strip(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with appsettings.json from the current directory
  %(prog)s

  # Use a specific settings file
  %(prog)s --config C:\\Migration\\appsettings.json

  # Preview with dry-run and write a report
  %(prog)s --dry-run --report preview.csv

Notes:
  - Existing destination files are always overwritten
  - Failed operations are retried up to MaxRetries times
  - Logs are written to the console and to <log-dir>/migration.log (kept 7 days)
        """
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        metavar="JSON_FILE",
        help="Path to settings file (default: appsettings.json beside the executable)"
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        default=Path("logs"),
        metavar="DIR",
        help="Directory for rolling log files (default: logs)"
    )
    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Preview operations without creating or copying anything"
    )
    parser.add_argument(
        "-r", "--report",
        type=Path,
        default=None,
        metavar="CSV_FILE",
        help="Write a CSV report of per-user outcomes"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase output verbosity (-v for DEBUG)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=__version__
    )

    return parser


def configure_logging(verbosity: int, log_dir: Path) -> List[logging.Handler]:
    """
    Attach console and daily rolling file handlers to the root logger.

    Returns:
        The handlers that were added, for later teardown
    """
    level = logging.DEBUG if verbosity >= 1 else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler()
    file_handler = TimedRotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        when="midnight",
        # The live file counts toward the retained total
        backupCount=LOG_RETENTION_DAYS - 1,
        encoding="utf-8",
    )

    root = logging.getLogger()
    root.setLevel(level)
    for handler in (console, file_handler):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    return [console, file_handler]


@contextmanager
def logging_session(verbosity: int = 0, log_dir: Path = Path("logs")) -> Iterator[None]:
    """
    Install run logging and always flush and close it on exit.
    """
    root = logging.getLogger()
    previous_level = root.level
    handlers = configure_logging(verbosity, log_dir)
    try:
        yield
    finally:
        for handler in handlers:
            handler.flush()
            root.removeHandler(handler)
            handler.close()
        root.setLevel(previous_level)


def get_run_parameters(
    args: argparse.Namespace,
    settings_path: Path,
    settings: MigrationSettings
) -> Dict[str, str]:
    """
    Get run parameters as a dictionary for traceability.

    Returns:
        Dictionary of parameter names to values
    """
    return {
        "version": __version__,
        "timestamp": datetime.now().isoformat(),
        "config": str(settings_path),
        "source_path": settings.source_path,
        "rprofiles_path": settings.rprofiles_path,
        "destination_path": settings.destination_path,
        "csv_file_path": settings.csv_file_path,
        "user_home_folder_name": settings.user_home_folder_name,
        "trim_token": settings.trim_token,
        "max_retries": str(settings.max_retries),
        "dry_run": str(args.dry_run),
    }


def run(args: argparse.Namespace) -> int:
    """
    Run a migration with logging already configured.

    Returns:
        Exit code
    """
    logger.info("--- Migration Started ---")
    logger.info(f"{PRODUCT_NAME} v{__version__}")

    settings_path = args.config or default_settings_path()
    try:
        settings = load_settings(settings_path)
    except SettingsError as e:
        logger.critical(f"Unable to load {settings_path}. Exiting. ({e})")
        return EXIT_FATAL

    try:
        validate_settings(settings)
    except MissingResourceError as e:
        logger.critical(str(e))
        return EXIT_FATAL

    run_params = get_run_parameters(args, settings_path, settings)
    logger.debug("Run parameters:")
    for key, value in run_params.items():
        if value:
            logger.debug(f"  {key}: {value}")

    if not args.dry_run:
        ensure_destination_root(settings)

    mapping = load_account_mapping(settings.csv_file_path)
    logger.info(f"Loaded {len(mapping)} user mappings from CSV")

    folders = scan_home_folders(settings.source_path)
    logger.info(f"Found {len(folders)} folders in Home.")

    migrator = HomeMigrator(settings, mapping, dry_run=args.dry_run)

    if args.report:
        with ReportWriter(args.report) as writer:
            writer.write_parameters(run_params)
            migrator.migrate_all(folders, result_callback=writer.write_unit_result)
            logger.info(f"Report rows by status: {writer.get_stats()}")
    else:
        migrator.migrate_all(folders)

    logger.info(migrator.get_summary())
    logger.info("Migration completed.")

    if migrator.has_failures():
        return EXIT_UNIT_FAILURES
    return EXIT_OK


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        with logging_session(args.verbose, args.log_dir):
            try:
                return run(args)

            except KeyboardInterrupt:
                logger.critical("Migration cancelled by user.")
                return EXIT_INTERRUPTED

            except Exception as e:
                logger.critical(f"Unhandled error during migration: {e}", exc_info=True)
                return EXIT_FATAL

    except OSError as e:
        print(f"Error: cannot set up logging in {args.log_dir}: {e}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
