#!/usr/bin/env python3
"""Check that the shipped pension settings resolve on every change date.

Without arguments every date on which a setting starts or ends is validated;
any arguments are passed to the validator CLI unchanged.
"""

from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from rentencheck.backend.config.validator import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:] or ["--all-windows"]))
