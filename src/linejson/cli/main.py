"""Cyclopts CLI entry point for linejson."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from cyclopts import App

from linejson import __version__
from linejson.cli.format_cmd import register_format_command

if TYPE_CHECKING:
    from collections.abc import Sequence

app = App(
    name="linejson",
    help="Convert structured log records into newline-delimited JSON.",
    version=__version__,
)
register_format_command(app)


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point used by `linejson` and `python -m linejson`."""

    from linejson.lib.logging import configure_logging

    args = list(sys.argv[1:] if argv is None else argv)

    # Configure logging before parsing so every diagnostic lands on stderr.
    json_mode = "--log-json" in args
    verbose_count = args.count("--verbose") + args.count("-v")
    configure_logging(json_mode=json_mode, verbosity=verbose_count)

    try:
        app(args)
    except (KeyError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1) from None
