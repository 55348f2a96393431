# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for optiloop.

A single root command, every operation is a subcommand. The global options
(--config, --log-level, --dry-run, --seed) are inherited by every subcommand
through argparse's parent parser mechanism.

Usage:
    optiloop <subcommand> [options]
    optiloop run --config configs/rosenbrock.yaml
    optiloop harness
    optiloop implementors --output docs/implementors
    optiloop workflow
    optiloop info
"""

import argparse
import sys

from optiloop.cli.commands import (
    handle_harness,
    handle_implementors,
    handle_info,
    handle_run,
    handle_workflow,
)
from optiloop.cli.exit_codes import USER_ERROR


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    A separate parent parser (add_help=False) keeps help text from colliding
    between the parent and the subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level.",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Simulate the command without making changes.",
    )
    parent.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override the random seed (takes precedence over config).",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    commands = [
        ("run", "Run the optimization described by the config.", handle_run),
        ("info", "Display environment and config info.", handle_info),
        ("implementors", "Write the interface implementor manifests.", handle_implementors),
        ("harness", "Generate tests from the book's code samples.", handle_harness),
        ("workflow", "Validate the book CI workflow file.", handle_workflow),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler)

    subparsers.choices["run"].add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the result summary as JSON.",
    )
    subparsers.choices["implementors"].add_argument(
        "--output",
        type=str,
        default=None,
        help="Directory for the manifests (overrides docs.implementors_directory).",
    )
    harness = subparsers.choices["harness"]
    harness.add_argument("--book", type=str, default=None, help="Book directory (overrides docs.book_directory).")
    harness.add_argument("--output", type=str, default=None, help="Harness directory (overrides docs.harness_directory).")
    subparsers.choices["workflow"].add_argument(
        "--file",
        type=str,
        default=None,
        help="Workflow file to validate (overrides docs.workflow_file).",
    )


def main() -> None:
    """
    Main CLI entrypoint, referenced by [project.scripts].

    If no subcommand is given, show help and exit with USER_ERROR.
    """
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="optiloop",
        description="optiloop — iterative optimization with observers and checkpointing.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)

    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
