"""Command-line interface for astkit.

This module provides the main CLI entrypoint with subcommands for:
- show: Read an object file and print it in the show format
- inspect: Print the class and attribute values of an object file
- check: Verify that an object file can be read
- types: List the classes the channel can read
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from astkit import __version__
from astkit.common.logging import (
    setup_logging,
    get_logger,
    print_banner,
    print_success,
    print_error,
    print_warning,
    print_info,
    console,
)

logger = get_logger(__name__)


def main() -> int:
    """Main CLI entrypoint."""
    parser = create_parser()
    args = parser.parse_args()

    log_level = logging.DEBUG if getattr(args, "verbose", False) else logging.WARNING
    setup_logging(level=log_level, log_file=getattr(args, "log_file", None))

    if hasattr(args, "func"):
        try:
            return args.func(args)
        except Exception as e:
            print_error(f"Error: {escape(str(e))}")
            if getattr(args, "verbose", False):
                console.print_exception()
            return 1
    else:
        parser.print_help()
        return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="astkit",
        description="astkit - Read, check and show astrometric object files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print an object without comments
  astkit show frame.ast --no-comments

  # Show the attributes of an object
  astkit inspect frame.ast

  # Check that a file can be read
  astkit check frame.ast
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write log records to this file",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    show_parser = subparsers.add_parser(
        "show",
        help="Read an object file and print it in the show format",
    )
    show_parser.add_argument(
        "file",
        type=Path,
        help="Path to the object file",
    )
    show_parser.add_argument(
        "--no-comments",
        action="store_true",
        help="Omit comments and defaulted attributes",
    )
    show_parser.add_argument(
        "--config",
        type=Path,
        help="YAML file with channel output settings",
    )
    show_parser.add_argument(
        "--out",
        type=Path,
        help="Write to this file instead of standard output",
    )
    show_parser.set_defaults(func=cmd_show)

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Print the class and attribute values of an object file",
    )
    inspect_parser.add_argument(
        "file",
        type=Path,
        help="Path to the object file",
    )
    inspect_parser.add_argument(
        "--json",
        type=Path,
        dest="json_path",
        help="Also export a JSON report to this path",
    )
    inspect_parser.set_defaults(func=cmd_inspect)

    check_parser = subparsers.add_parser(
        "check",
        help="Verify that an object file can be read",
    )
    check_parser.add_argument(
        "file",
        type=Path,
        help="Path to the object file",
    )
    check_parser.set_defaults(func=cmd_check)

    types_parser = subparsers.add_parser(
        "types",
        help="List the classes the channel can read",
    )
    types_parser.set_defaults(func=cmd_types)

    return parser


def cmd_show(args: argparse.Namespace) -> int:
    """Run show command."""
    from astkit.io.config import ChannelConfig
    from astkit.io.export import load_object, save_object

    if args.config is not None:
        config = ChannelConfig.from_yaml(args.config)
    else:
        config = ChannelConfig.for_show(True)
    if args.no_comments:
        if args.config is not None:
            print_warning("--no-comments overrides the comment and full settings of --config")
        config.comment = False
        config.full = False

    obj = load_object(args.file)

    if args.out is not None:
        path = save_object(obj, args.out, config)
        print_success(f"Exported: {path}")
        return 0

    from astkit.io.channel import Channel
    from astkit.io.stream import StringStream

    stream = StringStream()
    Channel(stream, config).write(obj)
    # Raw text: no Rich markup or line wrapping
    sys.stdout.write(stream.get_sink_string())
    return 0


def cmd_inspect(args: argparse.Namespace) -> int:
    """Run inspect command."""
    from astkit.io.export import load_object, export_object_json

    print_banner()

    obj = load_object(args.file)

    console.print(f"[bold]Class:[/bold] [classname]{obj.class_name}[/classname]")
    console.print(f"[bold]Size:[/bold] {obj.obj_size} bytes")

    table = Table(title="Attributes")
    table.add_column("Name", style="cyan")
    table.add_column("Value")
    table.add_column("Set", justify="center")

    for spec in type(obj).attribute_specs().values():
        value = obj._attr(spec.key)
        is_set = obj.test(spec.name)
        table.add_row(spec.name, repr(value), "yes" if is_set else "")

    console.print(table)

    if args.json_path is not None:
        path = export_object_json(obj, args.json_path)
        print_success(f"Exported: {path}")

    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Run check command."""
    from astkit.io.export import load_object
    from astkit.objects.object import Object

    obj = load_object(args.file)
    logger.debug(f"Read {obj.class_name} from {args.file}, checking round trip")

    # A successful read must survive another show/read cycle unchanged
    if Object.from_string(obj.show()) != obj:
        print_error(f"{args.file}: {obj.class_name} does not round-trip")
        return 1

    print_success(f"{args.file}: valid {obj.class_name}")
    return 0


def cmd_types(args: argparse.Namespace) -> int:
    """Run types command."""
    from astkit.io.registry import default_registry

    print_banner()

    registry = default_registry()
    print_info(f"{len(registry)} registered classes")
    for name in registry.names():
        console.print(f"  [classname]{name}[/classname]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
