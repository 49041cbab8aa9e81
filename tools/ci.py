#!/usr/bin/env python3
# Copyright 2026 DeriveKit Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run the CI checks locally: format, lint, type check, tests, smoke expansion and build.

Pass step names (e.g. ``tests lint``) to run only those steps.
"""

import subprocess
import sys
import time
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############

STEPS: list[tuple[str, list[str]]] = [
    ("format", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    ("lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    ("types", ["uv", "run", "ty", "check", "src/"]),
    ("tests", ["uv", "run", "pytest", "--cov=derivekit", "--cov-report=term-missing"]),
    (
        "smoke",
        ["uv", "run", "derivekit", "expand", "examples/point.rs", "--recipe", "examples/describe.yaml"],
    ),
    ("build", ["uv", "build"]),
]


def main(argv: list[str]) -> int:
    """Run the selected CI steps (all by default) and report results."""
    unknown = [name for name in argv if name not in dict(STEPS)]
    if unknown:
        print(chalk.red(f"Unknown step(s): {', '.join(unknown)}"))
        print(f"Available steps: {', '.join(name for name, _ in STEPS)}")
        return 2
    selected = [(name, cmd) for name, cmd in STEPS if not argv or name in argv]

    results: list[tuple[str, bool, float]] = []
    for name, cmd in selected:
        sep = chalk.blue("=" * 60)
        print(f"\n{sep}")
        print(chalk.blue(name.capitalize()))
        print(sep)
        start = time.monotonic()
        proc = subprocess.run(cmd, cwd=_REPO_ROOT)
        results.append((name, proc.returncode == 0, time.monotonic() - start))

    sep = "=" * 60
    print(f"\n{chalk.blue(sep)}")
    print(chalk.blue("  Summary"))
    print(chalk.blue(sep))
    for name, passed, elapsed in results:
        if passed:
            print(chalk.green(f"  PASS  {name} ({elapsed:.1f}s)"))
        else:
            print(chalk.red(f"  FAIL  {name} ({elapsed:.1f}s)"))

    print()
    return 0 if all(passed for _, passed, _ in results) else 1


# ################
# Implementation
# ################

_REPO_ROOT = Path(__file__).resolve().parent.parent


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
