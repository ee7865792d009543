"""Database management CLI for dbrunner.

This module provides the `python . {list,start,stop,...}` commands. Each
command is a thin wrapper over `DatabaseRunner`; results are printed as-is and
reflected in the exit code.
"""

import argparse
import json
from typing import Callable

from dbrunner.catalog import DatabaseKind
from dbrunner.config import get_environment_info, list_environment_variables
from dbrunner.core import get_logger

from .lib import CommandResult, DatabaseRunner

logger = get_logger("cli")

KIND_CHOICES = [kind.value for kind in DatabaseKind]


def _report(result: CommandResult) -> int:
    if result.success:
        logger.info(result.message)
        print(result.message)
        return 0
    logger.error(result.message)
    print(result.message)
    return 1


def _kind_arg(value: str) -> DatabaseKind:
    try:
        return DatabaseKind.from_name(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


# =============================================================================
# Command Handlers
# =============================================================================


def cmd_list(runner: DatabaseRunner, args: argparse.Namespace) -> int:
    """Handle `list`."""
    rows = runner.list_databases()

    if args.json:
        print(json.dumps([row.to_dict() for row in rows], indent=2))
        return 0

    print(f"{'DATABASE':<12} {'STATUS':<8} {'PORT':<6} {'IMAGE':<24} VOLUME")
    for row in rows:
        volume = row.volume_path or "(named volume)"
        print(f"{row.name:<12} {row.status:<8} {row.port:<6} {row.image:<24} {volume}")
    return 0


def cmd_start(runner: DatabaseRunner, args: argparse.Namespace) -> int:
    """Handle `start`."""
    return _report(runner.start(args.kind))


def cmd_stop(runner: DatabaseRunner, args: argparse.Namespace) -> int:
    """Handle `stop`."""
    return _report(runner.stop(args.kind))


def cmd_status(runner: DatabaseRunner, args: argparse.Namespace) -> int:
    """Handle `status`."""
    print(runner.status(args.kind))
    return 0


def cmd_logs(runner: DatabaseRunner, args: argparse.Namespace) -> int:
    """Handle `logs`."""
    print(runner.logs(args.kind, args.tail))
    return 0


def cmd_volume(runner: DatabaseRunner, args: argparse.Namespace) -> int:
    """Handle `volume`: show, set or reset the host volume path."""
    if args.reset:
        return _report(runner.set_volume_path(args.kind, ""))
    if args.path is None:
        print(runner.get_volume_path(args.kind) or "(default named volume)")
        return 0
    return _report(runner.set_volume_path(args.kind, args.path))


def cmd_tag(runner: DatabaseRunner, args: argparse.Namespace) -> int:
    """Handle `tag`: show, set or reset the image tag."""
    if args.reset:
        return _report(runner.set_image_tag(args.kind, ""))
    if args.tag is None:
        print(runner.store.resolve_image(args.kind))
        return 0
    return _report(runner.set_image_tag(args.kind, args.tag))


def cmd_connect(runner: DatabaseRunner, args: argparse.Namespace) -> int:
    """Handle `connect`: print connection strings."""
    info = runner.connection_info(args.kind, args.port)

    if args.json:
        print(json.dumps(info.to_dict(), indent=2))
        return 0

    width = max(len(key) for key in info.to_dict())
    for key, value in info.to_dict().items():
        print(f"{key:<{width}}  {value}")
    return 0


def cmd_compose(runner: DatabaseRunner, args: argparse.Namespace) -> int:
    """Handle `compose`: print the compose file `start` would write."""
    print(runner.compose_preview(args.kind), end="")
    return 0


def cmd_env(_runner: DatabaseRunner, args: argparse.Namespace) -> int:
    """Handle `env`: list supported environment variables."""
    for var in list_environment_variables(args.category):
        info = get_environment_info(var)
        default = "(computed)" if info.default is None else info.default
        print(f"{info.name:<24} [{info.category}] default={default}")
        print(f"    {info.description}")
    return 0


# =============================================================================
# Parser
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for database commands."""
    parser = argparse.ArgumentParser(
        prog="python .",
        description="Run local development databases with Docker Compose",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    def add_kind(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "kind",
            type=_kind_arg,
            help=f"Database ({', '.join(KIND_CHOICES)})",
        )

    # list
    list_parser = subparsers.add_parser("list", help="List databases and their status")
    list_parser.add_argument("--json", action="store_true", help="Output JSON")
    list_parser.set_defaults(func=cmd_list)

    # start / stop / status
    for name, func, help_text in (
        ("start", cmd_start, "Start a database"),
        ("stop", cmd_stop, "Stop a database"),
        ("status", cmd_status, "Show whether a database is running"),
        ("compose", cmd_compose, "Print the generated compose file"),
    ):
        p = subparsers.add_parser(name, help=help_text)
        add_kind(p)
        p.set_defaults(func=func)

    # logs
    logs_parser = subparsers.add_parser("logs", help="Show recent container logs")
    add_kind(logs_parser)
    logs_parser.add_argument(
        "-n", "--tail", type=int, default=None, help="Number of lines (default: 100)"
    )
    logs_parser.set_defaults(func=cmd_logs)

    # volume
    volume_parser = subparsers.add_parser("volume", help="Show or set the host volume path")
    add_kind(volume_parser)
    volume_parser.add_argument("path", nargs="?", help="Existing host directory")
    volume_parser.add_argument(
        "--reset", action="store_true", help="Use the default named volume"
    )
    volume_parser.set_defaults(func=cmd_volume)

    # tag
    tag_parser = subparsers.add_parser("tag", help="Show or set the image tag")
    add_kind(tag_parser)
    tag_parser.add_argument("tag", nargs="?", help="Tag only, e.g. 16-alpine")
    tag_parser.add_argument("--reset", action="store_true", help="Use the default tag")
    tag_parser.set_defaults(func=cmd_tag)

    # connect
    connect_parser = subparsers.add_parser("connect", help="Print connection strings")
    add_kind(connect_parser)
    connect_parser.add_argument("--port", type=int, default=None, help="Override port")
    connect_parser.add_argument("--json", action="store_true", help="Output JSON")
    connect_parser.set_defaults(func=cmd_connect)

    # env
    env_parser = subparsers.add_parser("env", help="List supported environment variables")
    env_parser.add_argument(
        "--category", choices=["paths", "docker", "logging"], help="Filter by category"
    )
    env_parser.set_defaults(func=cmd_env)

    return parser


def handle_runner_command(
    argv: list[str],
    runner_factory: Callable[[], DatabaseRunner] = DatabaseRunner.default,
) -> int:
    """Parse database commands and dispatch them.

    Args:
        argv: Arguments after the program name.
        runner_factory: Builds the runner; replaced in tests.

    Returns:
        Process exit code.
    """
    parser = build_parser()

    if not argv:
        parser.print_help()
        return 1

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    runner = runner_factory()
    warning = runner.take_config_warning()
    if warning:
        logger.warning(warning)
        print(f"Warning: {warning}. Using defaults.")

    return args.func(runner, args)


__all__ = ["build_parser", "handle_runner_command"]
