#!/usr/bin/env python3
"""Check formatting, lint lightcull and run the tests.

Usage: python run_all_linters.py [--fix]

With --fix, black and isort rewrite files instead of only checking them.
Exits non-zero if any step fails.
"""

from pathlib import Path
import subprocess
import sys

ROOT = Path(__file__).parent
TARGETS = ["lightcull", "tests"]


def steps(fix: bool) -> list[tuple[str, list[str]]]:
    """Commands to run, as (label, argv) in order."""
    py = [sys.executable, "-m"]
    return [
        ("black", py + ["black", *TARGETS] + ([] if fix else ["--check"])),
        ("isort", py + ["isort", *TARGETS] + ([] if fix else ["--check-only"])),
        ("ruff", py + ["ruff", "check", *TARGETS]),
        ("pylint", py + ["pylint", "lightcull"]),
        ("pytest", py + ["pytest", "-q"]),
    ]


def main() -> int:
    failed = []
    for label, cmd in steps("--fix" in sys.argv[1:]):
        print(f"==> {label}: {' '.join(cmd[2:])}", flush=True)
        try:
            code = subprocess.run(cmd, cwd=ROOT, check=False).returncode
        except OSError as e:
            print(f"could not run {label}: {e}")
            code = 1
        if code:
            failed.append(label)

    print("\nall checks passed" if not failed else f"\nfailed: {', '.join(failed)}")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
