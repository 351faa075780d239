from __future__ import annotations

import time
from enum import Enum
from typing import TextIO

from trapcheck.assertions.base import AssertionRecord
from trapcheck.assertions.runner import SuiteAborted
from trapcheck.config import HarnessConfig
from trapcheck.harness import Harness
from trapcheck.reporter import Reporter
from trapcheck.suite import Suite
from trapcheck.tally import Tally
from trapcheck.trap import SignalTrap
from trapcheck.verbose import close_logger, setup_logger
from trapcheck.workspace import ArtifactDir

# Returned by run() when a must check failed; 255 as a process exit code.
FATAL_STATUS = -1
# Failed counts above this are clamped so they never alias FATAL_STATUS or 0.
MAX_FAILED_STATUS = 254


class SuiteState(str, Enum):
    NOT_STARTED = "not-started"
    RUNNING = "running"
    ENDED = "ended"


class HarnessStateError(RuntimeError):
    """start/end called out of order."""


def exit_status(status: int) -> int:
    """Map a run() result to a process exit code."""
    if status < 0:
        return status
    return min(status, MAX_FAILED_STATUS)


class SuiteDriver:
    """Runs the phases of one suite against a fresh harness."""

    def __init__(
        self,
        suite: Suite,
        config: HarnessConfig | None = None,
        stream: TextIO | None = None,
    ):
        self.suite = suite
        self.config = config or HarnessConfig()
        self.state = SuiteState.NOT_STARTED
        self.tally = Tally()
        self.reporter = Reporter(
            self.tally,
            silent=self.config.silent,
            color=self.config.color,
            stream=stream,
        )
        self.artifacts = ArtifactDir(
            base_dir=self.config.artifact_dir, keep=self.config.keep_artifacts
        )
        self.harness: Harness | None = None
        self.aborted: AssertionRecord | None = None
        self.duration: float | None = None
        self._start_time = 0.0

    def start(self) -> Harness:
        """Prepare the harness, install the trap, print the banner."""
        if self.state is not SuiteState.NOT_STARTED:
            raise HarnessStateError(f"suite '{self.suite.name}' already started")

        root = self.artifacts.create()
        # note: logger name must be unique per driver so independent harnesses don't share handlers
        logger = setup_logger(
            root / "debug.log",
            verbose=self.config.verbose,
            logger_name=f"trapcheck_{self.suite.name}_{id(self)}",
        )
        trap = SignalTrap(self.config.signal_numbers(), logger=logger)
        self.harness = Harness(
            config=self.config,
            tally=self.tally,
            reporter=self.reporter,
            trap=trap,
            artifacts=self.artifacts,
            logger=logger,
        )
        trap.install_handler()

        self._start_time = time.perf_counter()
        self.reporter.banner(self.suite.name)
        logger.debug(
            f"Starting suite '{self.suite.name}' with {len(self.suite.phases)} phase(s), "
            f"trapping {', '.join(self.config.trapped_signals)}"
        )
        self.state = SuiteState.RUNNING
        return self.harness

    def end(self) -> int:
        """Print the summary and return the failed count."""
        if self.state is not SuiteState.RUNNING:
            raise HarnessStateError(f"suite '{self.suite.name}' is not running")

        self.duration = time.perf_counter() - self._start_time
        self.reporter.summary(self.suite.name, self.duration)
        self.state = SuiteState.ENDED
        if self.harness is not None:
            self.harness.logger.info(
                f"Suite '{self.suite.name}' ended: passed {self.tally.summary()} "
                f"in {self.duration:.3f}s"
            )
        return self.tally.failed

    def run(self) -> int:
        """Run every phase in order.

        Returns the failed count, or FATAL_STATUS when a must check failed.
        A failed must stops the remaining phases and skips the summary.
        """
        try:
            harness = self.start()
            for phase in self.suite.phases:
                harness.logger.debug(f"Phase '{phase.name}'")
                phase.body(harness)
            return self.end()
        except SuiteAborted as aborted:
            self.aborted = aborted.record
            if self.harness is not None:
                self.harness.logger.error(
                    f"{aborted}; {self.tally.summary()} recorded before abort"
                )
            return FATAL_STATUS
        finally:
            self.teardown()

    def teardown(self) -> None:
        """Restore signal dispositions, close the log, drop artifacts."""
        if self.harness is None:
            self.artifacts.cleanup()
            return
        self.harness.trap.restore()
        if self.artifacts.keep:
            self.harness.logger.info(f"Artifacts kept in {self.artifacts.root}")
        close_logger(self.harness.logger)
        self.artifacts.cleanup()
