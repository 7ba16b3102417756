"""Classify what an operation under test did, and assert on expected reverts."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from multitool.ledger import Ledger


class OutcomeKind(str, Enum):
    SUCCEEDED = "succeeded"
    REVERTED_WITH_MESSAGE = "reverted_with_message"
    REVERTED_UNRECOGNIZED = "reverted_unrecognized"
    DID_NOT_REVERT = "did_not_revert"


@dataclass(frozen=True)
class OperationOutcome:
    """Result of running an operation.

    Attributes:
        kind: What happened.
        message: Revert text for REVERTED_WITH_MESSAGE, else None.
        value: Return value when the operation completed normally.
        error: The exception raised, if any.
    """

    kind: OutcomeKind
    message: str | None = None
    value: Any = None
    error: Exception | None = None

    @property
    def reverted(self) -> bool:
        return self.kind in (
            OutcomeKind.REVERTED_WITH_MESSAGE,
            OutcomeKind.REVERTED_UNRECOGNIZED,
        )


def revert_message(exc: BaseException) -> str | None:
    """Return the message a client error carries, or None.

    Node clients commonly wrap the revert reason in an ``error`` attribute;
    that takes precedence over the exception's own text.
    """
    inner = getattr(exc, "error", None)
    if inner is not None:
        text = str(inner)
        if text:
            return text
    text = str(exc)
    return text or None


def run_operation(
    action: Callable[[], Any], expect_revert: bool = False
) -> OperationOutcome:
    try:
        value = action()
    except Exception as exc:
        message = revert_message(exc)
        if message is None:
            return OperationOutcome(OutcomeKind.REVERTED_UNRECOGNIZED, error=exc)
        return OperationOutcome(
            OutcomeKind.REVERTED_WITH_MESSAGE, message=message, error=exc
        )

    kind = OutcomeKind.DID_NOT_REVERT if expect_revert else OutcomeKind.SUCCEEDED
    return OperationOutcome(kind, value=value)


def expect_revert(
    ledger: Ledger,
    action: Callable[[], Any],
    expected_message: str,
    pass_label: str = "",
) -> OperationOutcome:
    """Run *action* and record one assertion that it reverted with *expected_message*."""
    outcome = run_operation(action, expect_revert=True)

    if outcome.kind is OutcomeKind.REVERTED_WITH_MESSAGE:
        ledger.record_assertion(
            expected_message in outcome.message,
            pass_label,
            f"incorrect exception: {outcome.message} - {pass_label}",
        )
    elif outcome.kind is OutcomeKind.DID_NOT_REVERT:
        ledger.record_assertion(False, pass_label, f"no exception: {pass_label}")
    else:
        ledger.record_assertion(False, pass_label, f"bad exception type: {pass_label}")
    return outcome
