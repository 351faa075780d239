"""Recoverable abort-class signals.

The trap owns the process-wide disposition of the trapped signals and a single
recovery point. While armed, a trapped signal raises ``CaughtSignal`` from the
handler, which unwinds the guarded call back to the boundary that armed it.
While disarmed, the handler re-delivers the signal with the default
disposition so the process terminates as it would without a harness.

Only signals delivered through the interpreter are recoverable: an ``abort()``
called from C code inside an extension module never returns control to Python.
"""

from __future__ import annotations

import logging
import os
import signal
from dataclasses import dataclass
from typing import Any, Callable, Iterable

UNKNOWN_SIGNAL = "UNKNOWN SIGNAL"

SIGNAL_NAMES: dict[int, str] = {
    int(signal.SIGABRT): "SIGABRT",
    int(signal.SIGFPE): "SIGFPE",
    int(signal.SIGILL): "SIGILL",
    int(signal.SIGINT): "SIGINT",
    int(signal.SIGSEGV): "SIGSEGV",
    int(signal.SIGTERM): "SIGTERM",
}


def signal_name(signum: int | None) -> str:
    """Return the symbolic name of a diagnosable signal, or UNKNOWN SIGNAL."""
    if signum is None:
        return UNKNOWN_SIGNAL
    return SIGNAL_NAMES.get(int(signum), UNKNOWN_SIGNAL)


def signal_number(name: str) -> int:
    """Inverse of signal_name for the fixed lookup table."""
    for signum, known in SIGNAL_NAMES.items():
        if known == name:
            return signum
    raise ValueError(f"'{name}' is not a recognized signal name")


class HarnessSetupError(RuntimeError):
    """The harness could not prepare the process for guarded execution."""


class CaughtSignal(BaseException):
    """Raised by the trap handler to unwind to the armed recovery point.

    Derives from BaseException so an ``except Exception`` inside the
    component under test cannot swallow it.
    """

    def __init__(self, signum: int, point: int) -> None:
        super().__init__(f"caught {signal_name(signum)} (signal number {signum})")
        self.signum = signum
        self.point = point


@dataclass
class Guarded:
    """Outcome of one guarded evaluation."""

    value: Any = None
    interrupted: bool = False
    signum: int | None = None


class SignalTrap:
    def __init__(
        self,
        signals: Iterable[int] = (signal.SIGABRT,),
        logger: logging.Logger | None = None,
    ) -> None:
        self.signals = tuple(int(s) for s in signals)
        self.logger = logger or logging.getLogger("trapcheck")
        self.armed = False
        self.last_signal: int | None = None
        self._point = 0
        self._previous: dict[int, Any] = {}

    def install_handler(self) -> None:
        """Point every trapped signal at the trap handler.

        Raises HarnessSetupError when the OS or interpreter refuses, e.g. when
        called off the main thread.
        """
        for signum in self.signals:
            try:
                previous = signal.signal(signum, self._handle)
            except (OSError, ValueError) as e:
                raise HarnessSetupError(
                    f"signal handler installation failed for {signal_name(signum)}: {e}"
                ) from e
            # Keep the disposition from before the first install
            self._previous.setdefault(signum, previous)

    def restore(self) -> None:
        """Disarm and put back the dispositions seen before install_handler."""
        self.disarm()
        for signum, previous in self._previous.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()

    def arm(self) -> int:
        """Capture a new recovery point; replaces any live one."""
        if self.armed:
            self.logger.debug(f"Re-armed over recovery point {self._point}")
        self._point += 1
        self.armed = True
        return self._point

    def disarm(self) -> None:
        self.armed = False

    def _handle(self, signum: int, frame: Any) -> None:
        self.last_signal = signum
        if not self.armed:
            self.logger.error(
                f"{signal_name(signum)} outside a guarded window, terminating"
            )
            for handler in self.logger.handlers:
                handler.flush()
            signal.signal(signum, signal.SIG_DFL)
            os.kill(os.getpid(), signum)
            return
        self.armed = False
        raise CaughtSignal(signum, self._point)

    def guard(self, evaluate: Callable[[], Any]) -> Guarded:
        """Run evaluate inside an armed window.

        A trapped signal delivered inside the window comes back as an
        interrupted Guarded value instead of terminating the process. The
        innermost live boundary recovers it, including when evaluate armed a
        later point of its own.
        """
        point = self.arm()
        try:
            value = evaluate()
        except CaughtSignal as caught:
            # Points armed before this window belong to an outer boundary
            if caught.point < point:
                raise
            self.logger.warning(str(caught))
            self.install_handler()
            return Guarded(interrupted=True, signum=caught.signum)
        finally:
            self.disarm()
        return Guarded(value=value)
