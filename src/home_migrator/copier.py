"""
Recursive directory copy for migrating home and profile folders.

This module is responsible for:
- Mirroring a source folder tree into a destination folder
- Overwriting files that already exist at the destination
- Creating destination subfolders as needed

Errors (permissions, disk full, locked files) are not caught here; callers
wrap copies in execute_with_retry.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def _copy_tree(src_dir: str, dest_dir: str) -> int:
    """Copy the contents of src_dir into dest_dir, returning files copied."""
    copied = 0
    subdirs = []

    with os.scandir(src_dir) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                subdirs.append(entry)
            elif entry.is_file():
                shutil.copy2(entry.path, os.path.join(dest_dir, entry.name))
                copied += 1

    for entry in subdirs:
        dest_sub = os.path.join(dest_dir, entry.name)
        os.makedirs(dest_sub, exist_ok=True)
        copied += _copy_tree(entry.path, dest_sub)

    return copied


def copy_directory(
    source_dir: Union[str, Path],
    dest_dir: Union[str, Path]
) -> int:
    """
    Copy a folder tree into a destination folder.

    Files directly inside source_dir are copied under the same name,
    replacing any existing file. Subfolders are created and copied
    recursively. Existing destination content not present in the source
    is left alone.

    Args:
        source_dir: Folder to copy from
        dest_dir: Folder to copy into (created if missing)

    Returns:
        Number of files copied

    Raises:
        OSError: On any filesystem failure
    """
    src_str = os.fspath(source_dir)
    dest_str = os.fspath(dest_dir)

    if not os.path.exists(src_str):
        raise FileNotFoundError(f"Source folder not found: {src_str}")
    if not os.path.isdir(src_str):
        raise NotADirectoryError(f"Source is not a directory: {src_str}")

    os.makedirs(dest_str, exist_ok=True)
    copied = _copy_tree(src_str, dest_str)

    logger.info(f"Copied {copied} files from {src_str} to {dest_str}")
    return copied
