"""Human-readable progress lines for a suite run."""

from __future__ import annotations

import sys
import time
from typing import TextIO

import typer

from trapcheck.tally import Tally


class Reporter:
    """Writes state/must/ok/FAILED lines to a text stream.

    Silent mode suppresses every line but leaves the tally alone. Color mode
    only wraps the leading keyword in ANSI codes.
    """

    def __init__(
        self,
        tally: Tally,
        silent: bool = False,
        color: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self.tally = tally
        self.silent = silent
        self.color = color
        self.stream = stream

    def _style(self, text: str, fg: str) -> str:
        if not self.color:
            return text
        return typer.style(text, fg=fg)

    def _emit(self, line: str) -> None:
        if self.silent:
            return
        print(line, file=self.stream or sys.stdout)

    def banner(self, name: str) -> None:
        self._emit(f"{name} unit tests\n{time.asctime()}\nbegin:\n")

    def note(self, text: str) -> None:
        self._emit(self._style(text, typer.colors.YELLOW))

    def state(self, label: str) -> None:
        self._emit(f"   {self._style('state', typer.colors.BLUE)}:\t{label}")

    def must(self, expression: str) -> None:
        self._emit(f"    {self._style('must', typer.colors.BLUE)}:\t{expression}")

    def ok(self, expression: str) -> None:
        self._emit(f"      {self._style('ok', typer.colors.GREEN)}:\t{expression}")

    def failed(self, expression: str, line: int) -> None:
        self._emit(
            f"  {self._style('FAILED', typer.colors.RED)}:\t{expression} (line {line})"
        )

    def caught_signal(self, name: str, signum: int) -> None:
        self._emit(f"caught {name} (signal number {signum})")

    def raised(self, error: BaseException) -> None:
        self._emit(f"raised {type(error).__name__}: {error}")

    def summary(self, name: str, duration: float) -> None:
        self._emit(
            f"\n\n{name} unit tests\n"
            f"passed  {self.tally.summary()}\n"
            f"time    {duration:f}s"
        )
