"""CLI entrypoint for the word path puzzle generator."""

from __future__ import annotations

import sys

from wordpath.cli import main


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
