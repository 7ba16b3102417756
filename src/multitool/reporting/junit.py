from __future__ import annotations

from pathlib import Path
from typing import Iterable

from junitparser import Failure, JUnitXml, TestCase, TestSuite

from multitool.ledger import SummaryLine


def write_junit(
    entries: Iterable[SummaryLine], path: Path, suite_name: str = "multitool"
) -> Path:
    """Write one test case per summary line to a junit.xml, return path."""
    entries = list(entries)
    xml = JUnitXml()
    suite = TestSuite(suite_name)

    suite.add_property("total", str(sum(e.total for e in entries)))
    suite.add_property("pass", str(sum(e.passed for e in entries)))
    suite.add_property("fail", str(sum(e.failed for e in entries)))

    for entry in entries:
        case = TestCase(entry.name)
        case.classname = suite_name
        if entry.failed:
            case.result = Failure(f"{entry.failed} of {entry.total} assertions failed")
        suite.add_testcase(case)
    suite.update_statistics()

    # Use append (not +=) to preserve properties
    xml.append(suite)

    path.parent.mkdir(parents=True, exist_ok=True)
    xml.write(str(path), pretty=True)
    return path
