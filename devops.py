"""DevOps tasks for tcsweep.

Usage: uv run devops.py <task>
Tasks: fmt, lint, test, clean

Works the same from PowerShell, cmd and POSIX shells.
"""

import shutil
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent


def _run(commands: list[list[str]]) -> None:
    """Execute a sequence of commands, exiting on first failure."""
    for cmd in commands:
        try:
            subprocess.run(cmd, check=True, cwd=ROOT)  # nosec: B603, B607
        except subprocess.CalledProcessError as e:
            print(f"Command failed: {' '.join(e.cmd)}", file=sys.stderr)
            sys.exit(e.returncode)
        except FileNotFoundError:
            print(f"Command not found: {cmd[0]}", file=sys.stderr)
            sys.exit(127)


def format_code() -> None:
    """Format the codebase with Ruff."""
    print("🎨 [Native Task] Formatting with Ruff...\n")
    _run(
        [
            ["ruff", "format", "."],
            ["ruff", "check", "--fix", "."],
        ]
    )
    print("\n🟢 Made everything pretty → ✅ Code clean.")


def lint() -> None:
    """Check formatting and lint rules without modifying files."""
    print("🔎 [Native Task] Linting with Ruff...\n")
    _run(
        [
            ["ruff", "format", "--check", "."],
            ["ruff", "check", "."],
        ]
    )
    print("\n🟢 Lint → ✅ No findings.")


def test() -> None:
    """Run tests with PyTest."""
    print("🧪 [Native Task] Testing with PyTest...\n")
    _run([["uv", "run", "pytest", "-q"]])
    print("\n🟢 Tests → ✅ All green")


def clean() -> None:
    """Remove caches and build artifacts."""
    print("🧹 [Native Task] Cleaning the Project...\n")
    for pattern in ("**/__pycache__", ".pytest_cache", ".ruff_cache", "dist", "build"):
        for path in ROOT.glob(pattern):
            shutil.rmtree(path, ignore_errors=True)
    for path in ROOT.glob("**/*.pyc"):
        path.unlink(missing_ok=True)
    print("\n🟢 Caches & Artifacts → ✅ All fresh now")


TASKS = {
    "fmt": format_code,
    "lint": lint,
    "test": test,
    "clean": clean,
}


if __name__ == "__main__":
    if len(sys.argv) != 2 or sys.argv[1] not in TASKS:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    TASKS[sys.argv[1]]()
