from __future__ import annotations

from noirnote.domain.errors import StoreUnavailable
from noirnote.session.autosave import DebouncedSave
from noirnote.session.tasks import BackgroundTasks
from noirnote.util.time import ManualClock, format_duration


def test_jobs_run_in_submission_order_and_failures_are_contained():
    tasks = BackgroundTasks()
    ran = []

    def broken():
        raise ValueError("boom")

    tasks.submit("one", lambda: ran.append(1))
    tasks.submit("broken", broken)
    tasks.submit("two", lambda: ran.append(2))
    assert len(tasks) == 3
    assert tasks.run_pending() == 3
    assert ran == [1, 2]
    assert tasks.failures == ["broken"]
    assert len(tasks) == 0


def test_job_waiting_for_the_store_holds_the_queue():
    tasks = BackgroundTasks()
    ran = []
    reachable = {"store": False}

    def sync():
        if not reachable["store"]:
            raise StoreUnavailable("offline")
        ran.append("sync")

    tasks.submit("sync", sync)
    tasks.submit("after", lambda: ran.append("after"))
    assert tasks.run_pending() == 0
    assert tasks.run_pending() == 0
    assert ran == []
    assert len(tasks) == 2
    assert tasks.failures == []

    reachable["store"] = True
    assert tasks.run_pending() == 2
    assert ran == ["sync", "after"]
    assert len(tasks) == 0


def test_debounced_save_waits_for_quiet():
    clock = ManualClock(0)
    saves = []
    debounce = DebouncedSave(clock, lambda: saves.append(clock.now_ms()), delay_ms=500)
    assert debounce.poll() is False
    debounce.touch()
    clock.advance(400)
    debounce.touch()
    clock.advance(400)
    assert debounce.poll() is False
    clock.advance(100)
    assert debounce.poll() is True
    assert saves == [900]
    assert not debounce.dirty


def test_debounced_save_flush_and_cancel():
    clock = ManualClock(0)
    saves = []
    debounce = DebouncedSave(clock, lambda: saves.append(True))
    debounce.flush()
    assert saves == []
    debounce.touch()
    debounce.flush()
    assert saves == [True]
    debounce.touch()
    debounce.cancel()
    clock.advance(10_000)
    assert debounce.poll() is False
    assert saves == [True]


def test_format_duration():
    assert format_duration(0) == "00:00"
    assert format_duration(61_999) == "01:01"
    assert format_duration(3_723_000) == "1:02:03"
    assert format_duration(-5) == "00:00"
