"""Tests for assertion counting and the pass/fail record file."""

from __future__ import annotations

import pytest

from multitool.ledger import (
    CorruptHistoryError,
    InconsistentCountersError,
    Ledger,
    RecordFileUnavailableError,
    ResetMarker,
    RunCounters,
    SummaryLine,
)


@pytest.fixture
def ledger(record_file) -> Ledger:
    return Ledger(record_file)


# --- record_assertion ---


def test_record_assertion_counts_every_call(ledger):
    outcomes = [True, False, True, True, False, True, True]
    for i, ok in enumerate(outcomes):
        ledger.record_assertion(ok, f"check {i}")

    c = ledger.counters
    assert c.total == len(outcomes)
    assert c.passed == 5
    assert c.failed == 2
    assert c.total == c.passed + c.failed


def test_record_assertion_returns_outcome_and_echoes(ledger, capsys):
    assert ledger.record_assertion(1 + 1 == 2, "math works") is True
    assert ledger.record_assertion([], "non-empty", "list was empty") is False

    out = capsys.readouterr().out
    assert "assertion: math works -- PASS" in out
    assert "assertion: list was empty -- FAIL" in out


def test_fail_label_defaults_to_pass_label(ledger, capsys):
    ledger.record_assertion(False, "balance matches")
    assert "balance matches -- FAIL" in capsys.readouterr().out


# --- reset_counters ---


def test_reset_counters_is_idempotent(ledger):
    ledger.record_assertion(True, "a")
    ledger.record_assertion(False, "b")

    ledger.reset_counters()
    once = ledger.counters.copy()
    ledger.reset_counters()

    assert once == RunCounters(0, 0, 0)
    assert ledger.counters == once


# --- append_summary ---


def test_append_summary_writes_record_line(ledger, record_file):
    ledger.append_summary("tokenTEST", RunCounters(5, 3, 2), timestamp_ms=1643800000000)

    assert record_file.read_text() == (
        "tokenTEST total 5 pass 3 fail 2 -- 1643800000000\n"
    )


def test_append_summary_appends_rather_than_overwrites(ledger, record_file):
    ledger.append_summary("first", RunCounters(1, 1, 0))
    Ledger(record_file).append_summary("second", RunCounters(2, 1, 1))

    lines = record_file.read_text().splitlines()
    assert [line.split()[0] for line in lines] == ["first", "second"]


def test_append_summary_defaults_to_own_counters_and_now(ledger, record_file):
    ledger.record_assertion(True, "ok")
    line = ledger.append_summary("run")

    assert (line.total, line.passed, line.failed) == (1, 1, 0)
    assert line.timestamp_ms is not None and line.timestamp_ms > 1_600_000_000_000
    assert record_file.read_text().startswith("run total 1 pass 1 fail 0 -- ")


def test_append_summary_inconsistent_counts_leave_file_untouched(ledger, write_record):
    path = write_record("earlier total 1 pass 1 fail 0 -- 1")
    before = path.read_text()

    with pytest.raises(InconsistentCountersError):
        ledger.append_summary("bad", RunCounters(total=5, passed=2, failed=2))

    assert path.read_text() == before


def test_append_summary_inconsistent_counts_do_not_create_file(ledger, record_file):
    with pytest.raises(InconsistentCountersError):
        ledger.append_summary("bad", RunCounters(total=5, passed=2, failed=2))
    assert not record_file.exists()


def test_append_summary_name_with_spaces_still_parses(ledger):
    ledger.append_summary("my test run", RunCounters(3, 3, 0))

    entries = list(ledger.read_entries())
    assert len(entries) == 1
    assert entries[0].name == "my_test_run"
    assert entries[0].total == 3


def test_append_summary_names_with_marker_prefixes_replay_as_summaries(ledger, record_file):
    ledger.append_summary("ok", RunCounters(2, 2, 0))
    ledger.append_summary("!urgentTEST", RunCounters(3, 1, 2))
    ledger.append_summary("#hashTEST", RunCounters(4, 4, 0))

    names = [line.split()[0] for line in record_file.read_text().splitlines()]
    assert names == ["ok", "_!urgentTEST", "_#hashTEST"]
    assert Ledger(record_file).replay_record_file(clear_first=True) == RunCounters(9, 7, 2)


def test_append_to_unwritable_location_raises(tmp_path):
    ledger = Ledger(tmp_path / "missing-dir" / "passFail.txt")
    with pytest.raises(RecordFileUnavailableError):
        ledger.append_summary("x", RunCounters(1, 1, 0))


# --- append_reset_marker ---


def test_append_reset_marker_format(ledger, record_file):
    marker = ledger.append_reset_marker("Wed Feb 02 2022")

    assert isinstance(marker, ResetMarker)
    assert record_file.read_text() == "! Resetting counters at Wed Feb 02 2022\n"


def test_append_reset_marker_default_label(ledger, record_file):
    ledger.append_reset_marker()
    text = record_file.read_text()
    assert text.startswith("! Resetting counters at ")
    assert len(text.strip()) > len("! Resetting counters at")


# --- replay_record_file ---


def test_summary_survives_replay(ledger, record_file):
    ledger.append_summary("aTEST", RunCounters(7, 4, 3))

    replayed = Ledger(record_file).replay_record_file(clear_first=True)

    assert replayed == RunCounters(7, 4, 3)


def test_replay_sums_all_summaries(ledger, write_record):
    write_record(
        "aTEST total 5 pass 3 fail 2 -- 1",
        "bTEST total 4 pass 4 fail 0 -- 2",
    )
    assert ledger.replay_record_file() == RunCounters(9, 7, 2)


def test_replay_counts_only_after_last_reset(ledger, write_record):
    write_record(
        "blockA total 5 pass 3 fail 2 -- 1",
        "! Resetting counters at Wed Feb 02 2022",
        "blockB total 2 pass 2 fail 0 -- 2",
    )
    assert ledger.replay_record_file(clear_first=True) == RunCounters(2, 2, 0)


def test_replay_echoes_totals_at_reset_marker(ledger, write_record, capsys):
    write_record(
        "blockA total 5 pass 3 fail 2 -- 1",
        "! Resetting counters at Wed Feb 02 2022",
    )
    ledger.replay_record_file()

    out = capsys.readouterr().out
    assert "==> blockA: total [5] pass [3] fail [2]" in out
    assert "==> total [5] pass [3] fail [2]" in out
    assert "==> ! Resetting counters at Wed Feb 02 2022" in out


def test_replay_skips_line_without_pass_keyword(ledger, write_record):
    write_record(
        "good total 3 pass 2 fail 1 -- 1",
        "stray total 4 passed 4 fail 0 -- 2",
    )
    assert ledger.replay_record_file() == RunCounters(3, 2, 1)


def test_replay_skips_non_numeric_counts(ledger, write_record):
    write_record(
        "good total 3 pass 2 fail 1 -- 1",
        "typo total five pass 3 fail 2 -- 2",
        "negative total -1 pass 0 fail -1 -- 3",
    )
    assert ledger.replay_record_file() == RunCounters(3, 2, 1)


def test_replay_skips_comments_blank_and_short_lines(ledger, write_record):
    write_record(
        "# batch started by hand",
        "",
        "   ",
        "truncated total 3 pass",
        "good total 1 pass 1 fail 0 -- 1",
    )
    assert ledger.replay_record_file() == RunCounters(1, 1, 0)


def test_replay_accepts_crlf_and_missing_timestamp(ledger, record_file):
    record_file.write_bytes(b"win total 2 pass 1 fail 1\r\nwin2 total 1 pass 1 fail 0 -- 5\r\n")
    assert ledger.replay_record_file() == RunCounters(3, 2, 1)


def test_replay_adds_onto_existing_counters_unless_cleared(ledger, write_record):
    write_record("a total 2 pass 2 fail 0 -- 1")
    ledger.record_assertion(False, "local")

    assert ledger.replay_record_file() == RunCounters(3, 2, 1)
    assert ledger.replay_record_file(clear_first=True) == RunCounters(2, 2, 0)


def test_replay_inconsistent_history_is_fatal(ledger, write_record):
    write_record(
        "ok total 1 pass 1 fail 0 -- 1",
        "broken total 5 pass 2 fail 2 -- 2",
        "later total 1 pass 1 fail 0 -- 3",
    )
    with pytest.raises(CorruptHistoryError, match="line 2"):
        ledger.replay_record_file()


def test_replay_missing_file_raises(tmp_path):
    ledger = Ledger(tmp_path / "nope.txt")
    with pytest.raises(RecordFileUnavailableError):
        ledger.replay_record_file()


def test_replay_skips_undecodable_bytes(ledger, record_file):
    record_file.write_bytes(
        b"a total 1 pass 1 fail 0 -- 1\n\xff\xfe stray\nb total 2 pass 1 fail 1 -- 2\n"
    )
    assert ledger.replay_record_file() == RunCounters(3, 2, 1)


def test_replay_returns_snapshot(ledger, write_record):
    write_record("a total 1 pass 1 fail 0 -- 1")
    result = ledger.replay_record_file()
    ledger.record_assertion(True, "more")
    assert result == RunCounters(1, 1, 0)


def test_malformed_lines_are_logged(ledger, write_record, caplog):
    write_record("garbage line here")
    with caplog.at_level("DEBUG", logger="multitool"):
        ledger.replay_record_file()
    assert "Skipping bad record at line 1" in caplog.text


# --- entries_since_reset ---


def test_entries_since_reset(ledger, write_record):
    write_record(
        "old total 1 pass 1 fail 0 -- 1",
        "! Resetting counters at then",
        "newA total 2 pass 1 fail 1 -- 2",
        "newB total 3 pass 3 fail 0 -- 3",
    )
    entries = ledger.entries_since_reset()
    assert [e.name for e in entries] == ["newA", "newB"]
    assert entries[0].line_no == 3


# --- report ---


def test_report_prints_and_writes_summary(ledger, record_file, capsys):
    ledger.record_assertion(True, "a")
    ledger.record_assertion(False, "b")

    result = ledger.report("transferTEST")

    out = capsys.readouterr().out
    assert "transferTEST TESTING REPORT" in out
    assert "Total tests: [2]" in out
    assert "pass total: [1]  fail total: [1]" in out
    assert "writing report..." in out
    assert result == RunCounters(2, 1, 1)
    assert record_file.read_text().startswith("transferTEST total 2 pass 1 fail 1 -- ")


def test_report_read_only_does_not_write(ledger, write_record):
    path = write_record(
        "a total 2 pass 2 fail 0 -- 1",
        "b total 3 pass 1 fail 2 -- 2",
    )
    before = path.read_text()

    result = ledger.report("SUMMARY", read_first=True, write_after=False)

    assert result == RunCounters(5, 3, 2)
    assert path.read_text() == before


# --- SummaryLine ---


def test_summary_line_parse_fields():
    line = SummaryLine.parse("aTEST   total 4\tpass 3 fail 1 -- 1643800000000", line_no=9)
    assert line == SummaryLine("aTEST", 4, 3, 1, 1643800000000, 9)


def test_summary_line_parse_bad_timestamp_is_kept_without_it():
    line = SummaryLine.parse("aTEST total 4 pass 3 fail 1 -- soon")
    assert line is not None
    assert line.timestamp_ms is None


@pytest.mark.parametrize(
    "text",
    [
        "aTEST sum 4 pass 3 fail 1 -- 1",
        "aTEST total 4 pass 3 failed 1 -- 1",
        "aTEST total 4 pass 3.0 fail 1 -- 1",
        "aTEST total 4 pass 3",
    ],
)
def test_summary_line_parse_rejects_malformed(text):
    assert SummaryLine.parse(text) is None
