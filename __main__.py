"""CLI entry point for dbrunner.

Entry point for `python .`: manage local development databases.
Database commands are delegated to `dbrunner.runner.cli`; `test` runs pytest.
"""

import subprocess
import sys

from dotenv import load_dotenv

from dbrunner.config import EnvVar, get_environment
from dbrunner.core import get_logger, setup_logging
from dbrunner.runner.cli import handle_runner_command

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


# =============================================================================
# Test Command
# =============================================================================


def cmd_test(extra_args: list[str]) -> int:
    """Run pytest with provided arguments and test tier options.

    Usage:
        python . test                # Run all tests
        python . test --unit         # Run only unit tests (fast, no dependencies)
        python . test --integration  # Run CLI/filesystem tests (no Docker)
        python . test --docker       # Run tests against a real Docker daemon
        python . test -k "stop"      # Run tests matching pattern

    Test Tiers:
        unit        - Fast tests; docker is replaced by a fake
        integration - In-process CLI runs against temp directories
        docker      - Real containers (auto-skipped without a daemon)
    """
    tier_markers = {
        "--unit": ["-m", "unit"],
        "--integration": ["-m", "integration and not docker"],
        "--docker": ["-m", "docker"],
        "--all": [],
    }

    pytest_args: list[str] = []
    remaining_args: list[str] = []

    for arg in extra_args:
        if arg in tier_markers:
            pytest_args.extend(tier_markers[arg])
        else:
            remaining_args.append(arg)

    cmd = [sys.executable, "-m", "pytest", *pytest_args, *remaining_args]
    logger.info(f"Running: {' '.join(cmd)}")

    try:
        return subprocess.call(cmd)
    except KeyboardInterrupt:
        return 130


# =============================================================================
# Main
# =============================================================================


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Databases ===")
    print("  list       List databases with status, port, image and volume")
    print("  start      Start a database container")
    print("  stop       Stop a database container")
    print("  status     Show whether a database is running")
    print("  logs       Show recent container logs")
    print("\n=== Configuration ===")
    print("  volume     Show, set or reset the host volume path")
    print("  tag        Show, set or reset the image tag")
    print("  connect    Print connection strings")
    print("  compose    Print the generated compose file")
    print("  env        List supported environment variables")
    print("\n=== Development ===")
    print("  test       Run the test suite (--unit, --integration, --docker)")
    print("\nExamples:")
    print("  python . start postgresql")
    print("  python . tag postgresql 16-alpine")
    print("  python . volume redis ~/data/redis")
    print("  python . connect mysql --json")
    print("  python . logs mongodb -n 50")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    setup_logging(get_environment(EnvVar.LOG_LEVEL))

    if command == "test":
        return cmd_test(rest_args)

    return handle_runner_command(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
