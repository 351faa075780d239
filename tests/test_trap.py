"""Tests for SignalTrap."""

import signal
import subprocess
import sys
import textwrap
import threading

import pytest

from trapcheck.trap import (
    UNKNOWN_SIGNAL,
    CaughtSignal,
    HarnessSetupError,
    SignalTrap,
    signal_name,
    signal_number,
)


@pytest.fixture
def trap():
    t = SignalTrap()
    t.install_handler()
    yield t
    t.restore()


# --- signal names ---


def test_signal_name_known():
    assert signal_name(signal.SIGABRT) == "SIGABRT"
    assert signal_name(signal.SIGSEGV) == "SIGSEGV"
    assert signal_name(signal.SIGINT) == "SIGINT"


def test_signal_name_unknown():
    assert signal_name(0) == UNKNOWN_SIGNAL
    assert signal_name(9999) == UNKNOWN_SIGNAL
    assert signal_name(None) == UNKNOWN_SIGNAL


def test_signal_number_round_trip_for_table():
    assert signal_number("SIGFPE") == int(signal.SIGFPE)
    with pytest.raises(ValueError):
        signal_number("SIGWINCH")


# --- install / restore ---


def test_install_handler_replaces_disposition():
    t = SignalTrap()
    before = signal.getsignal(signal.SIGABRT)
    t.install_handler()
    try:
        assert signal.getsignal(signal.SIGABRT) == t._handle
    finally:
        t.restore()
    assert signal.getsignal(signal.SIGABRT) == before


def test_install_handler_off_main_thread_raises_setup_error():
    errors = []

    def install():
        try:
            SignalTrap().install_handler()
        except HarnessSetupError as e:
            errors.append(e)

    thread = threading.Thread(target=install)
    thread.start()
    thread.join()

    assert len(errors) == 1
    assert "SIGABRT" in str(errors[0])


# --- arm / disarm ---


def test_arm_and_disarm(trap):
    trap.arm()
    assert trap.armed
    trap.disarm()
    assert not trap.armed
    # idempotent
    trap.disarm()
    assert not trap.armed


def test_double_arm_later_point_wins(trap):
    first = trap.arm()
    second = trap.arm()
    assert second != first
    assert trap.armed

    with pytest.raises(CaughtSignal) as exc_info:
        signal.raise_signal(signal.SIGABRT)

    assert exc_info.value.point == second
    assert exc_info.value.signum == signal.SIGABRT
    assert not trap.armed


# --- guard ---


def test_guard_returns_value(trap):
    result = trap.guard(lambda: 42)
    assert result.value == 42
    assert not result.interrupted
    assert not trap.armed


def test_guard_catches_signal_inside_window(trap):
    result = trap.guard(lambda: signal.raise_signal(signal.SIGABRT))
    assert result.interrupted
    assert result.signum == signal.SIGABRT
    assert trap.last_signal == signal.SIGABRT
    assert not trap.armed


def test_guard_reinstalls_handler_after_catch(trap):
    trap.guard(lambda: signal.raise_signal(signal.SIGABRT))
    assert signal.getsignal(signal.SIGABRT) == trap._handle

    second = trap.guard(lambda: signal.raise_signal(signal.SIGABRT))
    assert second.interrupted


def test_guard_signal_not_swallowed_by_except_exception(trap):
    def component():
        try:
            signal.raise_signal(signal.SIGABRT)
        except Exception:
            return True
        return True

    result = trap.guard(component)
    assert result.interrupted


def test_guard_disarms_when_evaluate_raises(trap):
    with pytest.raises(ZeroDivisionError):
        trap.guard(lambda: 1 / 0)
    assert not trap.armed


def test_guard_recovers_signal_after_rearm_inside_window(trap):
    def rearm_then_abort():
        trap.arm()
        signal.raise_signal(signal.SIGABRT)

    result = trap.guard(rearm_then_abort)
    assert result.interrupted
    assert result.signum == signal.SIGABRT
    assert not trap.armed
    assert signal.getsignal(signal.SIGABRT) == trap._handle


def test_guard_propagates_earlier_recovery_point(trap):
    def raise_stale():
        raise CaughtSignal(signal.SIGABRT, 0)

    with pytest.raises(CaughtSignal):
        trap.guard(raise_stale)
    assert not trap.armed


def test_nested_guard_inner_boundary_catches(trap):
    def outer():
        inner = trap.guard(lambda: signal.raise_signal(signal.SIGABRT))
        return inner.interrupted

    result = trap.guard(outer)
    assert not result.interrupted
    assert result.value is True


def _run_script(body: str) -> subprocess.CompletedProcess:
    script = textwrap.dedent(body)
    return subprocess.run(
        [sys.executable, "-c", script], capture_output=True, text=True, timeout=30
    )


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signal semantics")
def test_signal_outside_window_terminates_process():
    result = _run_script("""
        import signal
        from trapcheck.trap import SignalTrap

        trap = SignalTrap()
        trap.install_handler()
        trap.guard(lambda: True)
        signal.raise_signal(signal.SIGABRT)
        print("survived")
    """)
    assert result.returncode == -signal.SIGABRT
    assert "survived" not in result.stdout


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signal semantics")
def test_signal_inside_window_does_not_terminate_process():
    result = _run_script("""
        import signal
        from trapcheck.trap import SignalTrap

        trap = SignalTrap()
        trap.install_handler()
        outcome = trap.guard(lambda: signal.raise_signal(signal.SIGABRT))
        print("survived", outcome.interrupted)
    """)
    assert result.returncode == 0
    assert "survived True" in result.stdout
