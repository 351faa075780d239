"""Small suites imported by the CLI and runner tests."""

import signal

from trapcheck.suite import Suite

passing = Suite("passing")


@passing.phase
def all_true(h):
    h.test("1 == 1", lambda: 1 == 1)
    h.test("'x'", lambda: "x")


failing = Suite("failing")


@failing.phase
def one_false(h):
    h.test("True", lambda: True)
    h.test("True", lambda: True)
    h.test("False", lambda: False)
    h.test("True", lambda: True)


fatal = Suite("fatal")


@fatal.phase
def must_fails(h):
    h.test("True", lambda: True)
    h.test("True", lambda: True)
    h.must("False", lambda: False)
    h.test("never recorded", lambda: True)


@fatal.phase
def never_runs(h):
    h.test("never recorded", lambda: True)


aborting = Suite("aborting")


@aborting.phase
def raises_abort(h):
    h.test("raise_signal(SIGABRT)", lambda: signal.raise_signal(signal.SIGABRT))
    h.test("still running", lambda: True)


rearming = Suite("rearming")


@rearming.phase
def rearms_then_aborts(h):
    h.test(
        "arm(); raise_signal(SIGABRT)",
        lambda: (h.trap.arm(), signal.raise_signal(signal.SIGABRT)),
    )
    h.test("after rearm", lambda: True)


not_a_suite = object()
