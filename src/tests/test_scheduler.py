"""Tests for the cooperative scheduler and the OnceInMs throttle."""

from utils import OnceInMs, Scheduler


def test_callbacks_run_in_due_order(clock, scheduler):
    ran = []
    scheduler.call_later(1.0, lambda: ran.append("late"))
    scheduler.call_later(0.5, lambda: ran.append("early"))
    scheduler.call_later(0.5, lambda: ran.append("early-second"))

    clock.advance(0.25)
    assert scheduler.run_due() == 0
    clock.advance(1.0)
    assert scheduler.run_due() == 3
    assert ran == ["early", "early-second", "late"]


def test_cancelled_callback_never_runs(clock, scheduler):
    ran = []
    handle = scheduler.call_later(0.5, lambda: ran.append(True), name="grace")
    handle.cancel()
    clock.advance(1.0)
    scheduler.run_due()
    assert ran == []
    assert not handle.active
    assert "cancelled" in repr(handle)


def test_callback_scheduled_while_running_is_picked_up_when_due(clock, scheduler):
    ran = []

    def first():
        ran.append("first")
        scheduler.call_later(0.0, lambda: ran.append("chained"))
        scheduler.call_later(5.0, lambda: ran.append("later"))

    scheduler.call_later(0.5, first)
    clock.advance(0.5)
    scheduler.run_due()
    assert ran == ["first", "chained"]
    assert scheduler.pending_count == 1


def test_cancel_all(clock, scheduler):
    ran = []
    scheduler.call_later(0.5, lambda: ran.append(1))
    scheduler.call_later(1.5, lambda: ran.append(2))
    scheduler.cancel_all()
    clock.advance(2.0)
    scheduler.run_due()
    assert ran == []
    assert scheduler.pending_count == 0


def test_negative_delay_runs_on_next_frame(clock):
    scheduler = Scheduler(clock=clock)
    ran = []
    handle = scheduler.call_later(-3.0, lambda: ran.append(True))
    scheduler.run_due()
    assert ran == [True]
    assert handle.fired


def test_once_in_ms_throttles(clock):
    throttle = OnceInMs(1000, clock=clock)
    assert throttle.should_execute()
    assert not throttle.should_execute()
    clock.advance(0.5)
    assert not throttle.should_execute()
    assert throttle.remaining_ms() == 500.0
    clock.advance(0.5)
    assert throttle.should_execute()

    throttle.reset()
    assert throttle.should_execute()
