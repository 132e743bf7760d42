"""
Home Folder Migrator - Legacy File Share Migration Utility

A CLI tool for migrating per-user home folders to a new share layout.

This package provides functionality to:
- Read a CSV mapping of legacy accounts (ShadowAccount) to email addresses
- Derive each user's destination folder name from the email and account id
- Copy each home folder into <destination>/<name>/<home subfolder>
- Copy the optional <account>.V2 profile folder into <destination>/<name>
- Retry failed filesystem operations a bounded number of times
- Generate CSV reports of per-user outcomes
"""

# Product identity constants
PRODUCT_NAME = "Home Folder Migrator"
PRODUCT_VERSION = "1.0.0"
PRODUCT_DESCRIPTION = "Legacy File Share Migration Utility"

__version__ = PRODUCT_VERSION
__author__ = "Home Folder Migrator Team"
