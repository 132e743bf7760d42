"""
Destination folder naming rules.

Emails in the mapping file use the literal token "atsym" in place of an
at-sign. When an email carries that token and ".com", the destination folder
is the legacy account id cut off at the trim token; any other email is used
as the folder name as-is.
"""

import re
from typing import Optional

AT_SIGN_TOKEN = "atsym"
DOMAIN_SUFFIX = ".com"


def is_well_formed_email(email: str) -> bool:
    """True if the email contains both "atsym" and ".com" (case-insensitive)."""
    lowered = email.lower()
    return AT_SIGN_TOKEN in lowered and DOMAIN_SUFFIX in lowered


def resolve_folder_name(
    email: Optional[str],
    account_id: Optional[str],
    trim_token: str
) -> Optional[str]:
    """
    Derive the destination folder name for a user.

    Args:
        email: Email address from the mapping file
        account_id: Legacy account id (home folder name)
        trim_token: Substring marking where the account id is cut off

    Returns:
        The folder name, or None if either input is blank or the
        truncated account id would be empty. If the trim token does not
        occur in the account id, the account id is returned whole.
    """
    if not email or not email.strip() or not account_id or not account_id.strip():
        return None

    email = email.strip()
    account_id = account_id.strip()

    if not is_well_formed_email(email):
        return email

    match = re.search(re.escape(trim_token or ""), account_id, re.IGNORECASE)
    if match is None:
        return account_id

    return account_id[:match.start()] or None
