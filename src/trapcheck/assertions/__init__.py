"""Assertion system for exercising a component under test."""

from trapcheck.assertions.base import AssertionRecord
from trapcheck.assertions.runner import AssertionRunner, SuiteAborted

__all__ = ["AssertionRecord", "AssertionRunner", "SuiteAborted"]
