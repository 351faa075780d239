"""Base data structures for the assertion system."""

from dataclasses import dataclass


@dataclass
class AssertionRecord:
    """Result of evaluating a single assertion.

    Records are built per call, reported, and then dropped; the tally keeps
    only the counts.

    Attributes:
        expression: Source text of the check as shown in the report.
        line: Line number of the call site.
        passed: Outcome of the check.
        fatal: True for ``must`` checks, whose failure ends the run.
        signum: Signal caught inside the guarded window, if any.
        error: Exception raised inside the guarded window, if any.
    """

    expression: str
    line: int
    passed: bool
    fatal: bool = False
    signum: int | None = None
    error: BaseException | None = None

    @property
    def interrupted(self) -> bool:
        return self.signum is not None
