"""
Entry point for the Sponsor Watch application.

This module serves as the main entry point when running the package as a module:
    python -m sponsor_watch
"""

import sys
from sponsor_watch.cli import main

if __name__ == "__main__":
    sys.exit(main())
