"""Entry point: ``python -m jobhunt <command>``."""
from __future__ import annotations

import sys

from jobhunt.cli import main

if __name__ == "__main__":
    sys.exit(main())
