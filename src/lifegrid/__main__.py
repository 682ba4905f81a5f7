"""Allow running the terminal frontend with ``python -m lifegrid``."""

import sys

from .frontends.cli import main

if __name__ == "__main__":
    sys.exit(main())
