"""Viewer Settings Sync - main entry point.

Run this file to start the app:
    python main.py [LOCATOR] [--read-only]

Or run it as a module:
    python -m viewer_settings
"""

import sys
from pathlib import Path

# Add src to the import path
src_path = Path(__file__).parent / "src"
sys.path.insert(0, str(src_path))

from viewer_settings.app import main

if __name__ == "__main__":
    main()
