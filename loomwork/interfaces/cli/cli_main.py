#!/usr/bin/env python3
"""
Main CLI entry point with argument parser and command dispatch.
"""

from __future__ import annotations

import argparse

from loomwork.__version__ import __version__
from loomwork.helpers.logging_helper import configure_logging
from loomwork.interfaces.cli.commands.plan_cli import cmd_plan
from loomwork.interfaces.cli.commands.weave_cli import cmd_weave


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    p = argparse.ArgumentParser(
        prog="loomwork",
        description="loomwork - weave generated glue code into multi-target projects",
        epilog="Examples:\n"
        "  loomwork plan app.architecture                   # Show matched generation tasks\n"
        "  loomwork weave app.architecture                  # Generate and patch files\n"
        "  loomwork weave arch.py --package android         # Only tasks matching 'android'\n"
        "  loomwork weave arch.py --dry-run --verbose       # Preview without writing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    sub = p.add_subparsers(
        dest="cmd",
        title="commands",
        description="Available commands (use 'loomwork <command> --help' for command-specific help)",
    )

    # weave: Run a generation pass
    s = sub.add_parser("weave", help="Generate files, patch marker blocks and sweep orphans")
    s.add_argument("module", help="architecture module (dotted name or path to a .py file)")
    s.add_argument("--workspace", metavar="DIR", help="workspace root (default: configured or current directory)")
    s.add_argument("--package", metavar="NAME", help="only run tasks whose export, type or package contains NAME")
    s.add_argument("--verbose", "-v", action="store_true", help="log unmatched edges and per-file writes")
    s.add_argument("--workers", type=int, metavar="N", help="run up to N tasks concurrently")
    s.add_argument("--dry-run", action="store_true", help="compute results without writing any file")
    s.set_defaults(func=cmd_weave)

    # plan: Show the plan only
    s = sub.add_parser("plan", help="Show the generation tasks a weave would run")
    s.add_argument("module", help="architecture module (dotted name or path to a .py file)")
    s.add_argument("--verbose", "-v", action="store_true", help="log unmatched edges")
    s.set_defaults(func=cmd_plan)

    return p


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # If no command provided, show help
    if args.cmd is None:
        parser.print_help()
        return 0

    if getattr(args, "workers", None) is not None and args.workers < 1:
        parser.error("--workers must be at least 1")

    configure_logging(verbose=getattr(args, "verbose", False))
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    raise SystemExit(main())
