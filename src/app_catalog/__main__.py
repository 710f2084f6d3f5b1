"""Entry point for python -m app_catalog."""

import sys

from app_catalog.cli import main

if __name__ == "__main__":
    sys.exit(main())
