"""Tests for SuiteDriver."""

import signal

import pytest

from tests.suites import aborting, failing, fatal, passing, rearming
from trapcheck.reference.suite import suite as reference_suite
from trapcheck.runner import (
    FATAL_STATUS,
    MAX_FAILED_STATUS,
    HarnessStateError,
    SuiteState,
    exit_status,
)
from trapcheck.suite import Suite


def test_passing_suite_returns_zero(make_driver):
    driver, stream = make_driver(passing)
    assert driver.run() == 0
    assert driver.state is SuiteState.ENDED
    output = stream.getvalue()
    assert output.startswith("passing unit tests\n")
    assert "passed  2/2" in output
    assert "time    " in output


def test_failed_count_is_status(make_driver):
    driver, _ = make_driver(failing)
    assert driver.run() == 1
    assert driver.tally.passed == 3
    assert driver.tally.failed == 1


def test_must_failure_ends_run_immediately(make_driver):
    driver, stream = make_driver(fatal)
    assert driver.run() == FATAL_STATUS
    assert driver.state is SuiteState.RUNNING
    assert driver.aborted is not None
    assert driver.aborted.expression == "False"
    assert driver.tally.passed == 2
    assert driver.tally.failed == 1

    output = stream.getvalue()
    assert "never recorded" not in output
    assert output.rstrip("\n").endswith("FAILED:\tFalse (line 34)")


def test_caught_signal_does_not_stop_suite(make_driver):
    driver, stream = make_driver(aborting)
    assert driver.run() == 1
    assert driver.tally.passed == 1
    output = stream.getvalue()
    assert "caught SIGABRT" in output
    assert "ok:\tstill running" in output


def test_rearm_inside_check_is_recorded_failure(make_driver):
    driver, stream = make_driver(rearming)
    assert driver.run() == 1
    assert driver.state is SuiteState.ENDED
    assert driver.tally.failed == 1
    assert driver.tally.passed == 1
    output = stream.getvalue()
    assert "caught SIGABRT" in output
    assert "ok:\tafter rearm" in output
    assert "passed  1/2" in output


def test_silent_mode_same_status_no_output(make_driver):
    loud, loud_stream = make_driver(failing)
    quiet, quiet_stream = make_driver(failing, silent=True)
    assert loud.run() == quiet.run()
    assert loud_stream.getvalue() != ""
    assert quiet_stream.getvalue() == ""


def test_signal_disposition_restored_after_run(make_driver):
    before = signal.getsignal(signal.SIGABRT)
    driver, _ = make_driver(aborting)
    driver.run()
    assert signal.getsignal(signal.SIGABRT) == before


def test_artifacts_removed_by_default(make_driver):
    driver, _ = make_driver(passing)
    driver.run()
    assert driver.artifacts.root is None


def test_artifacts_kept_with_debug_log(make_driver):
    driver, _ = make_driver(failing, keep_artifacts=True)
    driver.run()
    root = driver.artifacts.root
    assert root is not None and root.exists()
    log = (root / "debug.log").read_text()
    assert "Starting suite 'failing'" in log
    assert "FAILED: False" in log
    assert "passed 3/4" in log


def test_fatal_record_logged(make_driver):
    driver, _ = make_driver(fatal, keep_artifacts=True)
    driver.run()
    log = (driver.artifacts.root / "debug.log").read_text()
    assert "must failed: False" in log


def test_start_twice_raises(make_driver):
    driver, _ = make_driver(passing)
    driver.start()
    try:
        with pytest.raises(HarnessStateError):
            driver.start()
    finally:
        driver.teardown()


def test_end_before_start_raises(make_driver):
    driver, _ = make_driver(passing)
    with pytest.raises(HarnessStateError):
        driver.end()


def test_phases_run_in_declared_order(make_driver):
    order = []
    suite = Suite("ordered")
    for name in ["first", "second", "third"]:
        suite.phase(lambda h, name=name: order.append(name), name=name)

    driver, _ = make_driver(suite)
    assert driver.run() == 0
    assert order == ["first", "second", "third"]
    assert [p.name for p in suite.phases] == ["first", "second", "third"]


def test_independent_drivers_do_not_share_tally(make_driver):
    first, _ = make_driver(failing)
    second, _ = make_driver(passing)
    first.run()
    second.run()
    assert first.tally.failed == 1
    assert second.tally.failed == 0


def test_reference_suite_passes(make_driver):
    driver, stream = make_driver(reference_suite)
    assert driver.run() == 0, stream.getvalue()
    assert driver.tally.failed == 0
    assert driver.tally.passed > 40


def test_reference_suite_keep_leaves_core_image(make_driver):
    driver, _ = make_driver(reference_suite, keep_artifacts=True)
    assert driver.run() == 0
    assert (driver.artifacts.root / "unit.core").exists()


def test_exit_status_clamps_and_keeps_fatal():
    assert exit_status(0) == 0
    assert exit_status(3) == 3
    assert exit_status(10_000) == MAX_FAILED_STATUS
    assert exit_status(FATAL_STATUS) == FATAL_STATUS
