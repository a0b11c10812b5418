#!/usr/bin/env python3
"""
Test runner for the blocker engine.

Runs the pytest suite, and optionally ruff and pyright, with the current
interpreter.
"""

import sys
import subprocess
import argparse
from pathlib import Path


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command and report whether it succeeded."""
    print(f"=== {description} ===")
    print(f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(cmd, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as e:
        print(f"FAILED: {description} exited with code {e.returncode}")
        print("STDOUT:", e.stdout)
        print("STDERR:", e.stderr)
        print()
        return False

    print(result.stdout)
    if result.stderr:
        print("STDERR:", result.stderr)
    print(f"OK: {description}\n")
    return True


def run_unit_tests(verbose: bool = True) -> bool:
    """Run the whole test suite."""
    cmd = [sys.executable, "-m", "pytest", "tests/"]
    if verbose:
        cmd.append("-v")
    return run_command(cmd, "Unit Tests")


def find_test_file(name: str) -> str:
    """Locate a test module anywhere under tests/ by its short name."""
    if not name.startswith("test_"):
        name = f"test_{name}"
    if not name.endswith(".py"):
        name = f"{name}.py"
    matches = sorted(Path("tests").rglob(name))
    return str(matches[0]) if matches else f"tests/{name}"


def run_specific_test(test_name: str, verbose: bool = True) -> bool:
    """Run a single test module."""
    test_file = find_test_file(test_name)
    cmd = [sys.executable, "-m", "pytest", test_file]
    if verbose:
        cmd.append("-v")
    return run_command(cmd, f"Test: {test_file}")


def run_lint_check() -> bool:
    """Run code linting with ruff."""
    return run_command([sys.executable, "-m", "ruff", "check", "."], "Code Linting (Ruff)")


def run_type_check() -> bool:
    """Run type checking with pyright."""
    return run_command([sys.executable, "-m", "pyright", "blocker"], "Type Checking (Pyright)")


def main():
    parser = argparse.ArgumentParser(
        description="Test runner for the blocker engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_tests.py                    # Run all tests
  python run_tests.py --quiet            # Run tests with minimal output
  python run_tests.py --test session     # Run tests/**/test_session.py
  python run_tests.py --lint             # Run linting only
  python run_tests.py --types            # Run type checking only
  python run_tests.py --all              # Run tests, linting, and type checking
        """
    )
    parser.add_argument("--test", help="Run one test module (e.g. 'dice' for test_dice.py)")
    parser.add_argument("--quiet", "-q", action="store_true", help="Run with minimal output")
    parser.add_argument("--lint", action="store_true", help="Run code linting only")
    parser.add_argument("--types", action="store_true", help="Run type checking only")
    parser.add_argument("--all", action="store_true", help="Run tests, linting, and type checking")
    args = parser.parse_args()

    verbose = not args.quiet

    if args.test:
        success = run_specific_test(args.test, verbose)
    elif args.lint:
        success = run_lint_check()
    elif args.types:
        success = run_type_check()
    elif args.all:
        success = run_unit_tests(verbose) and run_lint_check() and run_type_check()
    else:
        success = run_unit_tests(verbose)

    if success:
        print("All operations completed successfully!")
        sys.exit(0)
    print("Some operations failed. See output above for details.")
    sys.exit(1)


if __name__ == "__main__":
    main()
