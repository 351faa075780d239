"""The context value every phase receives."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from trapcheck.assertions.runner import AssertionRunner
from trapcheck.config import HarnessConfig
from trapcheck.reporter import Reporter
from trapcheck.tally import Tally
from trapcheck.trap import SignalTrap
from trapcheck.workspace import ArtifactDir


@dataclass
class Harness:
    """Tally, reporter, trap and artifacts for one run.

    Owned by the SuiteDriver and passed explicitly to each phase, so two
    harnesses never share counters. The line number of a check defaults to
    the line of the calling ``test``/``must``.
    """

    config: HarnessConfig
    tally: Tally
    reporter: Reporter
    trap: SignalTrap
    artifacts: ArtifactDir
    logger: logging.Logger

    def __post_init__(self) -> None:
        self.runner = AssertionRunner(
            tally=self.tally, reporter=self.reporter, trap=self.trap, logger=self.logger
        )

    @property
    def keep_artifacts(self) -> bool:
        return self.artifacts.keep

    def artifact(self, name: str) -> Path:
        return self.artifacts.path(name)

    def note(self, text: str) -> None:
        self.reporter.note(text)

    def state(self, label: str, action: Callable[[], Any]) -> Any:
        return self.runner.statement(label, action)

    def test(
        self, expression: str, evaluate: Callable[[], Any], line: int | None = None
    ) -> bool:
        if line is None:
            line = sys._getframe(1).f_lineno
        return self.runner.test(expression, evaluate, line)

    def must(
        self, expression: str, evaluate: Callable[[], Any], line: int | None = None
    ) -> bool:
        if line is None:
            line = sys._getframe(1).f_lineno
        return self.runner.must(expression, evaluate, line)
