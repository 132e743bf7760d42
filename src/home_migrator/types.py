"""
Type definitions and data classes for the home folder migrator.

This module defines:
- FolderEntry: Data class for a scanned home folder (name + path)
- MigrationUnit: Data class describing everything needed to migrate one user
- RetryOutcome: Data class for the result of a retried operation
- UnitStatus: Enum for per-user migration outcomes
- UnitResult: Data class representing the result of migrating one user
- ReportStatus / ReportEntry: CSV report status values and rows
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


@dataclass(slots=True)
class FolderEntry:
    """
    Represents a home folder discovered under the source root.

    Attributes:
        name: The folder's basename, which is the legacy account id
        path: The full path to the folder
    """
    name: str
    path: str


@dataclass(frozen=True)
class MigrationUnit:
    """
    Everything needed to migrate a single user.

    Attributes:
        account_id: Legacy account id (the home folder's name)
        email: Email address looked up from the CSV mapping
        dest_folder_name: Resolved destination folder name
        home_source: The user's home folder under the source root
        dest_user_root: <destination>/<dest_folder_name>
        dest_home_path: <dest_user_root>/<home subfolder name>
        profile_source: <profiles root>/<account_id>.V2 (may not exist)
    """
    account_id: str
    email: str
    dest_folder_name: str
    home_source: Path
    dest_user_root: Path
    dest_home_path: Path
    profile_source: Path


@dataclass
class RetryOutcome:
    """Result of an operation run through execute_with_retry."""
    label: str
    attempts: int
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class UnitStatus(Enum):
    """Status of a single user's migration."""
    MIGRATED = "migrated"                  # All steps succeeded
    PARTIAL = "partial"                    # At least one copy gave up after retries
    ERROR = "error"                        # Destination could not be created
    SKIPPED_NO_MAPPING = "skipped_no_mapping"      # Account missing from CSV
    SKIPPED_INVALID_NAME = "skipped_invalid_name"  # No folder name could be derived
    DRY_RUN = "dry_run"                    # Would migrate (dry run mode)


@dataclass
class UnitResult:
    """Result of migrating one home folder."""
    account_id: str
    source_path: str
    dest_path: Optional[str]
    status: UnitStatus
    message: str
    profile_path: Optional[str] = None


class ReportStatus(Enum):
    """Status values for CSV report (human-readable)."""
    MIGRATED = "MIGRATED"
    PARTIAL = "PARTIAL"
    ERROR = "ERROR"
    SKIPPED_NO_MAPPING = "SKIPPED_NO_MAPPING"
    SKIPPED_INVALID_NAME = "SKIPPED_INVALID_NAME"
    FOUND_DRYRUN = "FOUND_DRYRUN"

    @classmethod
    def from_unit_status(cls, status: UnitStatus):
        """Convert UnitStatus to ReportStatus."""
        mapping = {
            UnitStatus.MIGRATED: cls.MIGRATED,
            UnitStatus.PARTIAL: cls.PARTIAL,
            UnitStatus.ERROR: cls.ERROR,
            UnitStatus.SKIPPED_NO_MAPPING: cls.SKIPPED_NO_MAPPING,
            UnitStatus.SKIPPED_INVALID_NAME: cls.SKIPPED_INVALID_NAME,
            UnitStatus.DRY_RUN: cls.FOUND_DRYRUN,
        }
        return mapping.get(status, cls.ERROR)


@dataclass
class ReportEntry:
    """Entry for the CSV report."""
    timestamp: str
    account_id: str
    status: str
    source_path: str
    dest_path: str
    message: str
