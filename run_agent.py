#!/usr/bin/env python3
"""Entry point to run jobsieve from a source checkout (same commands as the `jobsieve` script)."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobsieve.cli import main

if __name__ == "__main__":
    sys.exit(main())
