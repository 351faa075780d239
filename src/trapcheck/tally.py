"""Pass/fail counters for one suite run."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Tally:
    """Running count of passed and failed assertions."""

    passed: int = 0
    failed: int = 0

    def record(self, outcome: bool) -> bool:
        if outcome:
            self.passed += 1
        else:
            self.failed += 1
        return outcome

    @property
    def total(self) -> int:
        return self.passed + self.failed

    def summary(self) -> str:
        return f"{self.passed}/{self.total}"
