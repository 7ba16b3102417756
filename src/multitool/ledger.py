"""Pass/fail accounting for test scripts, persisted to an append-only record file.

Each script run keeps its own in-memory :class:`RunCounters`. When a run
finishes it appends a summary line to the shared record file; a later run
can replay the file to rebuild the aggregate across every run since the
last reset marker.

Record file format, one entry per line::

    <name> total <N> pass <N> fail <N> -- <epoch millis>
    ! Resetting counters at <free text>
    # comment
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path
from typing import Iterator, Union

import typer

from multitool.console import amber, blue, counts_line, green, red

DEFAULT_RECORD_FILE = "passFail.txt"

COMMENT_PREFIX = "#"
RESET_PREFIX = "!"
RESET_TEXT = "Resetting counters at"

# token positions in a summary line after whitespace splitting
_KEYWORDS = {1: "total", 3: "pass", 5: "fail"}


class LedgerError(Exception):
    """Base class for ledger failures."""


class InconsistentCountersError(LedgerError):
    """Counters about to be persisted do not satisfy total == pass + fail."""


class CorruptHistoryError(LedgerError):
    """Replaying the record file produced counters that do not add up."""


class RecordFileUnavailableError(LedgerError):
    """The record file could not be opened, read or appended to."""


@dataclass
class RunCounters:
    total: int = 0
    passed: int = 0
    failed: int = 0

    def is_consistent(self) -> bool:
        return self.total == self.passed + self.failed

    def reset(self) -> None:
        self.total = 0
        self.passed = 0
        self.failed = 0

    def copy(self) -> RunCounters:
        return replace(self)


def _parse_count(token: str) -> int | None:
    if not (token.isascii() and token.isdigit()):
        return None
    return int(token)


@dataclass(frozen=True)
class SummaryLine:
    """A persisted snapshot of counters for one named test or batch."""

    name: str
    total: int
    passed: int
    failed: int
    timestamp_ms: int | None = None
    line_no: int | None = None

    def format(self) -> str:
        text = f"{self.name} total {self.total} pass {self.passed} fail {self.failed}"
        if self.timestamp_ms is not None:
            text += f" -- {self.timestamp_ms}"
        return text

    @classmethod
    def parse(cls, text: str, line_no: int | None = None) -> SummaryLine | None:
        """Parse one record line, or return None if it is malformed.

        The keywords must sit at their fixed positions and every count
        must be a non-negative integer; a line failing either check is
        rejected whole so it never reaches the counters.
        """
        tokens = text.split()
        if len(tokens) < 7:
            return None
        for pos, word in _KEYWORDS.items():
            if tokens[pos] != word:
                return None

        counts = [_parse_count(tokens[pos]) for pos in (2, 4, 6)]
        if any(c is None for c in counts):
            return None
        total, passed, failed = counts

        timestamp_ms = None
        if len(tokens) >= 9 and tokens[7] == "--":
            timestamp_ms = _parse_count(tokens[8])

        return cls(
            name=tokens[0],
            total=total,
            passed=passed,
            failed=failed,
            timestamp_ms=timestamp_ms,
            line_no=line_no,
        )


@dataclass(frozen=True)
class ResetMarker:
    """Tells a replay to zero the running totals at this point."""

    label: str
    line_no: int | None = None

    def format(self) -> str:
        return f"{RESET_PREFIX} {RESET_TEXT} {self.label}"


RecordEntry = Union[SummaryLine, ResetMarker]


def now_millis() -> int:
    return time.time_ns() // 1_000_000


def now_label() -> str:
    return datetime.now().astimezone().strftime("%a %b %d %Y %H:%M:%S %Z")


def _safe_name(name: str) -> str:
    name = "_".join(name.split()) or "-"
    # a leading comment or reset prefix would change how the line replays
    if name.startswith((COMMENT_PREFIX, RESET_PREFIX)):
        name = "_" + name
    return name


class Ledger:
    """Counts assertions for the current run and persists run summaries."""

    def __init__(
        self,
        record_file: str | Path = DEFAULT_RECORD_FILE,
        logger: logging.Logger | None = None,
    ):
        self.record_file = Path(record_file)
        self.logger = logger or logging.getLogger("multitool")
        self.counters = RunCounters()

    def record_assertion(
        self, condition: object, pass_label: str = "", fail_label: str = ""
    ) -> bool:
        """Count one assertion and echo its outcome. Returns the outcome."""
        if not fail_label:
            fail_label = pass_label

        ok = bool(condition)
        self.counters.total += 1
        if ok:
            self.counters.passed += 1
            typer.echo(amber("assertion: ") + green(f"{pass_label} -- PASS"))
        else:
            self.counters.failed += 1
            typer.echo(amber("assertion: ") + red(f"{fail_label} -- FAIL"))
        return ok

    def reset_counters(self) -> None:
        self.counters.reset()

    def append_summary(
        self,
        name: str = "-",
        counters: RunCounters | None = None,
        timestamp_ms: int | None = None,
    ) -> SummaryLine:
        """Append a summary of *counters* (default: this run's) to the record file."""
        counters = counters if counters is not None else self.counters
        if not counters.is_consistent():
            raise InconsistentCountersError(
                f"inconsistent pass-fail-total statistics: total {counters.total}, "
                f"pass {counters.passed}, fail {counters.failed}"
            )

        line = SummaryLine(
            name=_safe_name(name),
            total=counters.total,
            passed=counters.passed,
            failed=counters.failed,
            timestamp_ms=now_millis() if timestamp_ms is None else timestamp_ms,
        )
        self._append(line.format())
        self.logger.debug(f"Appended summary to {self.record_file}: {line.format()}")
        return line

    def append_reset_marker(self, label: str | None = None) -> ResetMarker:
        marker = ResetMarker(label=label if label is not None else now_label())
        self._append(marker.format())
        self.logger.debug(f"Appended reset marker to {self.record_file}")
        return marker

    def _append(self, text: str) -> None:
        try:
            with open(self.record_file, "a", encoding="utf-8") as f:
                f.write(text + "\n")
        except OSError as exc:
            raise RecordFileUnavailableError(
                f"cannot append to record file {self.record_file}: {exc}"
            ) from exc

    def read_entries(self) -> Iterator[RecordEntry]:
        """Yield summary lines and reset markers in file order.

        Blank lines, comments and malformed lines are skipped.
        """
        try:
            with open(self.record_file, encoding="utf-8", errors="replace") as f:
                lines = f.read().splitlines()
        except OSError as exc:
            raise RecordFileUnavailableError(
                f"cannot read record file {self.record_file}: {exc}"
            ) from exc

        for line_no, raw in enumerate(lines, start=1):
            text = raw.strip()
            if not text or text.startswith(COMMENT_PREFIX):
                continue
            if text.startswith(RESET_PREFIX):
                label = text[len(RESET_PREFIX):].strip()
                if label.startswith(RESET_TEXT):
                    label = label[len(RESET_TEXT):].strip()
                yield ResetMarker(label=label, line_no=line_no)
                continue
            entry = SummaryLine.parse(text, line_no=line_no)
            if entry is None:
                self.logger.debug(f"Skipping bad record at line {line_no}: {raw!r}")
                continue
            yield entry

    def entries_since_reset(self) -> list[SummaryLine]:
        entries: list[SummaryLine] = []
        for entry in self.read_entries():
            if isinstance(entry, ResetMarker):
                entries.clear()
            else:
                entries.append(entry)
        return entries

    def replay_record_file(self, clear_first: bool = False) -> RunCounters:
        """Add every summary since the last reset marker into the counters."""
        if clear_first:
            self.reset_counters()

        c = self.counters
        for entry in self.read_entries():
            if isinstance(entry, ResetMarker):
                typer.echo(blue("==> ") + counts_line(c.total, c.passed, c.failed))
                typer.echo(blue(f"==> {entry.format()}"))
                self.logger.debug(f"Reset marker at line {entry.line_no}")
                self.reset_counters()
                continue

            c.total += entry.total
            c.passed += entry.passed
            c.failed += entry.failed
            if not c.is_consistent():
                raise CorruptHistoryError(
                    f"pass, fail, and total don't add up after line {entry.line_no} "
                    f"of {self.record_file}: total {c.total}, pass {c.passed}, "
                    f"fail {c.failed}"
                )
            typer.echo(
                f"==> {entry.name}: "
                + counts_line(entry.total, entry.passed, entry.failed)
            )

        return c.copy()

    def report(
        self, name: str = "-", read_first: bool = False, write_after: bool = True
    ) -> RunCounters:
        """Print a testing report, optionally replaying and persisting first/after."""
        if read_first:
            self.replay_record_file()

        c = self.counters
        typer.echo(amber("=" * 37))
        title = f"{name} TESTING REPORT"
        typer.echo(typer.style(title, fg=typer.colors.BLUE, bg=typer.colors.GREEN))
        typer.echo(amber("=" * 37))
        typer.echo(f"Total tests: [{amber(c.total)}]")
        typer.echo(f"pass total: [{green(c.passed)}]  fail total: [{red(c.failed)}]")

        if write_after:
            typer.echo("writing report...")
            self.append_summary(name)
        return c.copy()
