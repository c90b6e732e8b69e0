"""`linejson format`: reformat JSON records read one per line."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Annotated, Any, TextIO

import structlog
from cyclopts import Parameter

from linejson.lib.config import describe_policy, options_from_env, parse_keys, parse_space
from linejson.lib.errors import RecordFormatError
from linejson.lib.formatter import Formatter

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class FormatStats:
    lines_read: int = 0
    records_written: int = 0
    malformed: int = 0
    failed: int = 0

    @property
    def ok(self) -> bool:
        return self.malformed == 0 and self.failed == 0


def _parse_records(lines: Iterable[str], stats: FormatStats) -> Iterator[object]:
    for line_number, line in enumerate(lines, start=1):
        stats.lines_read += 1
        stripped = line.strip()
        if not stripped:
            continue
        try:
            yield json.loads(stripped)
        except json.JSONDecodeError as exc:
            stats.malformed += 1
            logger.warning("Skipping malformed input line.", line=line_number, error=str(exc))


def format_lines(formatter: Formatter, source: Iterable[str], sink: TextIO) -> FormatStats:
    """Format every record in ``source`` onto ``sink``, one flush per line."""

    stats = FormatStats()

    def _on_error(error: RecordFormatError) -> None:
        stats.failed += 1
        logger.warning("Failed to format record.", error=str(error))

    for line in formatter.iter_lines(_parse_records(source, stats), on_error=_on_error):
        sink.write(line)
        sink.flush()
        stats.records_written += 1
    return stats


def _build_options(space: str | None, keys: str | None) -> dict[str, object]:
    options = options_from_env()
    if space is not None:
        options["space"] = parse_space(space)
    if keys is not None:
        options["replacer"] = parse_keys(keys)
    return options


def format_command(
    space: Annotated[
        str | None,
        Parameter(name="--space", help="Indent width, or a literal indent string."),
    ] = None,
    keys: Annotated[
        str | None,
        Parameter(name="--keys", help="Comma-separated allow-list of keys to keep."),
    ] = None,
    # main() reads --verbose and --log-json before parsing; declared so cyclopts accepts them.
    verbose: Annotated[
        bool,
        Parameter(name=["--verbose", "-v"], help="Log progress to stderr."),
    ] = False,
    log_json: Annotated[
        bool,
        Parameter(name="--log-json", help="Emit stderr diagnostics as JSON lines."),
    ] = False,
) -> None:
    """Read JSON records from stdin and write one formatted line per record."""

    _ = (verbose, log_json)
    formatter = Formatter(_build_options(space, keys))
    logger.info("Formatting records.", replacer=describe_policy(formatter.config))

    stats = format_lines(formatter, sys.stdin, sys.stdout)
    logger.info(
        "Finished formatting.",
        lines_read=stats.lines_read,
        records_written=stats.records_written,
        malformed=stats.malformed,
        failed=stats.failed,
    )
    if not stats.ok:
        raise SystemExit(1)


def register_format_command(app: Any) -> None:
    app.command(format_command, name="format")
