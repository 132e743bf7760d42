"""
CSV loader for the ShadowAccount -> email mapping.

The mapping file is plain comma-separated text:

    Email,ShadowAccount
    jdoeATSYMcontoso.com,jdoe_sa
    msmith@contoso.com,msmith

The first line is always treated as a header. There is no quoting support;
each line is split on literal commas.
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class AccountMapping:
    """
    Case-insensitive mapping of legacy account id to email address.

    The first email recorded for an account id wins; later duplicates are
    ignored.
    """

    def __init__(self):
        # casefolded id -> (original id, email)
        self._entries: Dict[str, Tuple[str, str]] = {}

    @staticmethod
    def _key(account_id: str) -> str:
        return account_id.casefold()

    def add(self, account_id: str, email: str) -> bool:
        """
        Record an email for an account id unless one is already present.

        Returns:
            True if the entry was added, False if the id was already mapped
        """
        key = self._key(account_id)
        if key in self._entries:
            return False
        self._entries[key] = (account_id, email)
        return True

    def get(self, account_id: str, default: Optional[str] = None) -> Optional[str]:
        entry = self._entries.get(self._key(account_id))
        return entry[1] if entry is not None else default

    def __getitem__(self, account_id: str) -> str:
        return self._entries[self._key(account_id)][1]

    def __contains__(self, account_id: object) -> bool:
        return isinstance(account_id, str) and self._key(account_id) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._entries.values())

    def __repr__(self) -> str:
        return f"AccountMapping({len(self)} accounts)"


def load_account_mapping(csv_path: Union[str, Path]) -> AccountMapping:
    """
    Load the account mapping from a CSV file.

    Column 0 is the email and column 1 the legacy account id; both are
    stripped of surrounding whitespace. Rows with fewer than two fields are
    skipped.

    Args:
        csv_path: Path to the mapping CSV

    Returns:
        AccountMapping built from every data row

    Raises:
        OSError: If the file cannot be read
    """
    csv_path = Path(csv_path)
    mapping = AccountMapping()

    logger.info(f"Loading account mapping from: {csv_path}")

    # Universal newlines turn \r and \r\n into \n; other separators such as
    # form feeds stay inside the row
    with open(csv_path, "r", encoding="utf-8-sig", newline=None) as f:
        lines = f.read().split("\n")

    malformed = 0
    duplicates = 0

    for line in lines[1:]:  # skip header
        cols = line.split(",")
        if len(cols) < 2:
            malformed += 1
            continue

        email = cols[0].strip()
        account_id = cols[1].strip()

        if not mapping.add(account_id, email):
            duplicates += 1

    if malformed:
        logger.debug(f"Skipped {malformed} rows with fewer than 2 columns")
    if duplicates:
        logger.debug(f"Ignored {duplicates} duplicate account rows")

    return mapping
