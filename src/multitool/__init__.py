"""Helpers for scripting contract deployments and tracking test results."""

from multitool.closeness import BIG_EPSILON, SMALL_EPSILON, big_close, close, to_eth
from multitool.ledger import (
    CorruptHistoryError,
    InconsistentCountersError,
    Ledger,
    LedgerError,
    RecordFileUnavailableError,
    RunCounters,
)
from multitool.outcomes import OperationOutcome, OutcomeKind, expect_revert

__all__ = [
    "BIG_EPSILON",
    "SMALL_EPSILON",
    "CorruptHistoryError",
    "InconsistentCountersError",
    "Ledger",
    "LedgerError",
    "OperationOutcome",
    "OutcomeKind",
    "RecordFileUnavailableError",
    "RunCounters",
    "big_close",
    "close",
    "expect_revert",
    "to_eth",
]
