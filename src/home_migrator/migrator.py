"""
Migration orchestration for home and profile folders.

This module is responsible for:
- Validating that the configured source locations exist
- Listing the home folders directly under the source root
- Resolving each folder's destination from the account mapping
- Creating destination folders and copying home/profile trees with retries
- Supporting dry-run mode (no changes made)
- Returning detailed per-user results for logging and reporting
"""

import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from .config import MigrationSettings
from .copier import copy_directory
from .mapping import AccountMapping
from .resolver import resolve_folder_name
from .retry import execute_with_retry
from .types import FolderEntry, MigrationUnit, RetryOutcome, UnitResult, UnitStatus

logger = logging.getLogger(__name__)

# Suffix of the profile folder that belongs to a legacy account
PROFILE_SUFFIX = ".V2"


class MissingResourceError(Exception):
    """Raised when a required source path or file does not exist."""
    pass


def validate_settings(settings: MigrationSettings) -> None:
    """
    Check that the required inputs exist and a destination is configured.

    Checks run in order and stop at the first failure.

    Raises:
        MissingResourceError: Describing the first missing resource
    """
    if not settings.source_path or not os.path.isdir(settings.source_path):
        raise MissingResourceError(
            f"Home source path does not exist: {settings.source_path}"
        )

    if not settings.rprofiles_path or not os.path.isdir(settings.rprofiles_path):
        raise MissingResourceError(
            f"RProfiles path does not exist: {settings.rprofiles_path}"
        )

    if not settings.csv_file_path or not os.path.isfile(settings.csv_file_path):
        raise MissingResourceError(
            f"CSV file not found at {settings.csv_file_path}"
        )

    if not settings.destination_path or not settings.destination_path.strip():
        raise MissingResourceError("Destination path is not configured")


def ensure_destination_root(settings: MigrationSettings) -> Path:
    """Create the destination root if it does not exist yet."""
    dest_root = Path(settings.destination_path)
    dest_root.mkdir(parents=True, exist_ok=True)
    return dest_root


def scan_home_folders(source_root: Union[str, Path]) -> List[FolderEntry]:
    """
    List the folders directly under the source root.

    Order follows the filesystem's enumeration order and is not sorted.

    Args:
        source_root: Folder holding one subfolder per legacy account

    Returns:
        List of FolderEntry objects

    Raises:
        OSError: If the source root cannot be listed
    """
    folders: List[FolderEntry] = []

    with os.scandir(source_root) as entries:
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False) and entry.name:
                    folders.append(FolderEntry(name=entry.name, path=entry.path))
            except OSError as e:
                logger.warning(f"Cannot access {entry.path}: {e}")

    return folders


class HomeMigrator:
    """
    Migrates home folders (and their profiles) into the destination layout.

    Each home folder is handled independently: failures are logged and
    recorded in the returned results, and processing moves on to the
    next folder.
    """

    def __init__(
        self,
        settings: MigrationSettings,
        mapping: AccountMapping,
        dry_run: bool = False
    ):
        """
        Initialize the migrator.

        Args:
            settings: Loaded migration settings
            mapping: Legacy account id -> email mapping
            dry_run: If True, log what would happen without touching disk
        """
        self.settings = settings
        self.mapping = mapping
        self.dry_run = dry_run

        self.dest_root = Path(settings.destination_path)
        self.profiles_root = Path(settings.rprofiles_path)

        # Statistics
        self._stats: Dict[UnitStatus, int] = {status: 0 for status in UnitStatus}

    def plan_unit(self, folder: FolderEntry) -> Union[MigrationUnit, UnitResult]:
        """
        Work out where a home folder goes.

        Returns:
            A MigrationUnit, or a skipped UnitResult when the folder has no
            mapping or no usable destination name
        """
        account_id = folder.name
        email = self.mapping.get(account_id)

        if not email:
            logger.warning(f"No CSV mapping found for ShadowAccount {account_id}. Skipping.")
            return UnitResult(
                account_id=account_id,
                source_path=folder.path,
                dest_path=None,
                status=UnitStatus.SKIPPED_NO_MAPPING,
                message="No CSV mapping for this account"
            )

        dest_name = resolve_folder_name(email, account_id, self.settings.trim_token)
        if not dest_name:
            logger.warning(f"Invalid email {email} for ShadowAccount {account_id}. Skipping.")
            return UnitResult(
                account_id=account_id,
                source_path=folder.path,
                dest_path=None,
                status=UnitStatus.SKIPPED_INVALID_NAME,
                message=f"Could not derive destination folder name from {email}"
            )

        dest_user_root = self.dest_root / dest_name
        return MigrationUnit(
            account_id=account_id,
            email=email,
            dest_folder_name=dest_name,
            home_source=Path(folder.path),
            dest_user_root=dest_user_root,
            dest_home_path=dest_user_root / self.settings.user_home_folder_name,
            profile_source=self.profiles_root / f"{account_id}{PROFILE_SUFFIX}",
        )

    def _retry(self, operation: Callable[[], object], label: str) -> RetryOutcome:
        return execute_with_retry(operation, label, self.settings.max_retries)

    def migrate_unit(self, folder: FolderEntry) -> UnitResult:
        """
        Migrate a single home folder.

        Steps:
        - Create <destination>/<name>/<home subfolder>
        - Copy the home folder into it
        - Copy <account>.V2 from the profiles root into <destination>/<name>,
          if that profile folder exists

        If the home destination cannot be created, the copies are not
        attempted. A failed home copy does not prevent the profile copy.

        Args:
            folder: The home folder to migrate

        Returns:
            UnitResult describing the outcome
        """
        planned = self.plan_unit(folder)
        if isinstance(planned, UnitResult):
            self._stats[planned.status] += 1
            return planned

        unit = planned
        has_profile = unit.profile_source.is_dir()
        profile_path = str(unit.profile_source) if has_profile else None

        if self.dry_run:
            logger.info(f"[DRY RUN] Home: {unit.home_source} -> {unit.dest_home_path}")
            if has_profile:
                logger.info(f"[DRY RUN] RProfiles: {unit.profile_source} -> {unit.dest_user_root}")
            result = UnitResult(
                account_id=unit.account_id,
                source_path=str(unit.home_source),
                dest_path=str(unit.dest_home_path),
                status=UnitStatus.DRY_RUN,
                message=f"Would migrate to {unit.dest_user_root}"
                        + (" (with RProfiles)" if has_profile else ""),
                profile_path=profile_path,
            )
            self._stats[result.status] += 1
            return result

        created = self._retry(
            lambda: unit.dest_home_path.mkdir(parents=True, exist_ok=True),
            f"CreateDirectory:{unit.dest_home_path}"
        )
        if not created.succeeded:
            result = UnitResult(
                account_id=unit.account_id,
                source_path=str(unit.home_source),
                dest_path=str(unit.dest_home_path),
                status=UnitStatus.ERROR,
                message=f"Cannot create destination folder: {created.error}",
                profile_path=profile_path,
            )
            self._stats[result.status] += 1
            return result

        failures: List[RetryOutcome] = []

        home = self._retry(
            lambda: copy_directory(unit.home_source, unit.dest_home_path),
            f"CopyDirectory:Home:{unit.home_source}"
        )
        if not home.succeeded:
            failures.append(home)

        if has_profile:
            profile = self._retry(
                lambda: copy_directory(unit.profile_source, unit.dest_user_root),
                f"CopyDirectory:RProfiles:{unit.profile_source}"
            )
            if not profile.succeeded:
                failures.append(profile)
        else:
            logger.info(
                f"RProfiles not found for user {unit.dest_folder_name}. "
                f"Skipping RProfiles migration."
            )

        if failures:
            status = UnitStatus.PARTIAL
            message = "; ".join(
                f"{f.label} failed after {f.attempts} attempts: {f.error}"
                for f in failures
            )
        else:
            status = UnitStatus.MIGRATED
            message = f"Migrated to {unit.dest_user_root}" + (
                " (with RProfiles)" if has_profile else ""
            )

        result = UnitResult(
            account_id=unit.account_id,
            source_path=str(unit.home_source),
            dest_path=str(unit.dest_home_path),
            status=status,
            message=message,
            profile_path=profile_path,
        )
        self._stats[result.status] += 1
        return result

    def migrate_all(
        self,
        folders: List[FolderEntry],
        result_callback: Optional[Callable[[UnitResult], None]] = None
    ) -> List[UnitResult]:
        """
        Migrate every home folder in order.

        Args:
            folders: Home folders to process
            result_callback: Optional callable(result) run as each folder finishes

        Returns:
            List of UnitResult objects, one per folder
        """
        results: List[UnitResult] = []
        total = len(folders)

        for i, folder in enumerate(folders):
            logger.info(f"Processing Home folder: {folder.name}")
            result = self.migrate_unit(folder)
            results.append(result)

            if result_callback:
                result_callback(result)

            # Log progress every 100 processed
            if (i + 1) % 100 == 0:
                logger.info(f"Processed {i + 1}/{total} home folders...")

        return results

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about processed units.

        Returns:
            Dictionary mapping status names to counts
        """
        return {status.value: count for status, count in self._stats.items()}

    def has_failures(self) -> bool:
        """True if any unit ended in ERROR or PARTIAL."""
        return bool(self._stats[UnitStatus.ERROR] or self._stats[UnitStatus.PARTIAL])

    def get_summary(self) -> str:
        """
        Get a human-readable summary of the run.

        Returns:
            Formatted summary string
        """
        stats = self.get_stats()
        total = sum(stats.values())

        lines = [f"Migration Summary ({total} home folders):"]

        if self.dry_run:
            lines.append(f"  Would migrate: {stats.get('dry_run', 0)}")
        else:
            lines.append(f"  Migrated: {stats.get('migrated', 0)}")
            if stats.get("partial", 0):
                lines.append(f"  Partially migrated: {stats.get('partial', 0)}")

        skipped = stats.get("skipped_no_mapping", 0) + stats.get("skipped_invalid_name", 0)
        if skipped:
            lines.append(f"  Skipped: {skipped}")
            if stats.get("skipped_no_mapping", 0):
                lines.append(f"    (no CSV mapping: {stats.get('skipped_no_mapping', 0)})")
            if stats.get("skipped_invalid_name", 0):
                lines.append(f"    (invalid email: {stats.get('skipped_invalid_name', 0)})")

        if stats.get("error", 0):
            lines.append(f"  Errors: {stats.get('error', 0)}")

        return "\n".join(lines)
