"""Local runner for the scan CLI with src/ layout.

Usage: uv run python run_scan.py [--simulate] [--method camera]
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> int:
    # Ensure src/ is on sys.path so `import ppgvitals` resolves
    root = Path(__file__).resolve().parent
    src = root / "src"
    if src.exists():
        sys.path.insert(0, str(src))
    from ppgvitals.cli import main as cli_main  # type: ignore

    return cli_main()


if __name__ == "__main__":
    raise SystemExit(main())
