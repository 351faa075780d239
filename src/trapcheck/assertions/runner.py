"""Guarded execution of individual checks."""

from __future__ import annotations

import logging
from typing import Any, Callable

from trapcheck.assertions.base import AssertionRecord
from trapcheck.reporter import Reporter
from trapcheck.tally import Tally
from trapcheck.trap import SignalTrap, signal_name


class SuiteAborted(Exception):
    """A ``must`` check failed; the run cannot meaningfully continue."""

    def __init__(self, record: AssertionRecord) -> None:
        super().__init__(f"must failed: {record.expression} (line {record.line})")
        self.record = record


class AssertionRunner:
    """Evaluates checks inside the trap and feeds the tally and reporter."""

    def __init__(
        self,
        tally: Tally,
        reporter: Reporter,
        trap: SignalTrap,
        logger: logging.Logger,
    ) -> None:
        self.tally = tally
        self.reporter = reporter
        self.trap = trap
        self.logger = logger

    def _evaluate(
        self, expression: str, evaluate: Callable[[], Any], line: int, fatal: bool
    ) -> AssertionRecord:
        try:
            guarded = self.trap.guard(evaluate)
        except Exception as e:
            self.logger.debug(f"Check at line {line} raised {type(e).__name__}: {e}")
            return AssertionRecord(expression, line, False, fatal=fatal, error=e)

        if guarded.interrupted:
            return AssertionRecord(
                expression, line, False, fatal=fatal, signum=guarded.signum
            )
        return AssertionRecord(expression, line, bool(guarded.value), fatal=fatal)

    def _record(self, record: AssertionRecord) -> bool:
        self.tally.record(record.passed)
        if record.passed:
            self.reporter.ok(record.expression)
        else:
            if record.signum is not None:
                self.reporter.caught_signal(signal_name(record.signum), record.signum)
            elif record.error is not None:
                self.reporter.raised(record.error)
            self.reporter.failed(record.expression, record.line)
        self.logger.debug(
            f"{'ok' if record.passed else 'FAILED'}: {record.expression} "
            f"(line {record.line}, tally {self.tally.summary()})"
        )
        return record.passed

    def test(self, expression: str, evaluate: Callable[[], Any], line: int) -> bool:
        """Run one check; a failure is recorded and the suite goes on."""
        record = self._evaluate(expression, evaluate, line, fatal=False)
        return self._record(record)

    def must(self, expression: str, evaluate: Callable[[], Any], line: int) -> bool:
        """Run a precondition check; raises SuiteAborted when it fails."""
        self.reporter.must(expression)
        record = self._evaluate(expression, evaluate, line, fatal=True)
        if not self._record(record):
            raise SuiteAborted(record)
        return True

    def statement(self, label: str, action: Callable[[], Any]) -> Any:
        """Print and run a setup action. Not guarded: crashes propagate."""
        self.reporter.state(label)
        self.logger.debug(f"state: {label}")
        return action()
