"""Command-line entry point for the ragrouter chat loop."""

import sys

from ragrouter.cli import main

if __name__ == "__main__":
    sys.exit(main())
