#!/usr/bin/env python3
"""
PyInstaller entry point for Home Folder Migrator.

The bundled executable reads appsettings.json from its own folder.
"""

import sys

# Add src to path for PyInstaller to find the package
import os
if getattr(sys, 'frozen', False):
    # Running as compiled exe
    pass
else:
    # Running as script - add src to path
    src_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'src')
    if src_dir not in sys.path:
        sys.path.insert(0, src_dir)

from home_migrator.cli import main

if __name__ == "__main__":
    sys.exit(main())
