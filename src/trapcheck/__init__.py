"""Crash-isolating unit test harness."""

from trapcheck.harness import Harness
from trapcheck.runner import FATAL_STATUS, SuiteDriver
from trapcheck.suite import Suite
from trapcheck.trap import CaughtSignal, HarnessSetupError, SignalTrap

__all__ = [
    "CaughtSignal",
    "FATAL_STATUS",
    "Harness",
    "HarnessSetupError",
    "SignalTrap",
    "Suite",
    "SuiteDriver",
]
