# tests/test_task_scheduler.py

from __future__ import annotations

import asyncio
import time
from datetime import timedelta

import pytest

from taskbell.core.disabled import DisabledState
from taskbell.core.models import RuleSetConfiguration, Severity, StatusSnapshot
from taskbell.core.state import AppState
from taskbell.tasks.task_models import Task
from taskbell.tasks.task_scheduler import (
    FETCH_ERROR_MESSAGE,
    NagDispatcher,
    poll_once,
    run_state_poller,
    start_poller_in_background,
)

from .fakes import EXPLODING, PASSING, FakeNotifier, FakeTaskSource, failing_source

NAGGING = StatusSnapshot(status=Severity.OK, message="Write report", nagging_enabled=True)
QUIET = StatusSnapshot(status=Severity.OK, message="Write report", nagging_enabled=False)


# ---- poll_once ----


def test_poll_once_feeds_tasks_state(app_state: AppState, now) -> None:
    source = FakeTaskSource([Task(id="1", title="Write report", marked_current=True)])

    snapshot = poll_once(source, app_state, now=now)

    assert snapshot == app_state.get_snapshot()
    assert snapshot.status == Severity.OK
    assert snapshot.message == "Write report"


def test_poll_once_source_error_becomes_error_status(app_state: AppState, now) -> None:
    snapshot = poll_once(failing_source("Invalid Todoist token"), app_state, now=now)

    assert snapshot.status == Severity.ERROR
    assert snapshot.message == "Invalid Todoist token"


def test_poll_once_unexpected_source_crash_uses_generic_message(app_state: AppState, now) -> None:
    snapshot = poll_once(FakeTaskSource(error=KeyError("id")), app_state, now=now)

    assert snapshot.status == Severity.ERROR
    assert snapshot.message == FETCH_ERROR_MESSAGE


def test_poll_once_propagates_matcher_failure(matcher, now) -> None:
    app_state = AppState(matcher, RuleSetConfiguration(downtime_conditions=(EXPLODING,)))
    before = app_state.get_snapshot()

    with pytest.raises(RuntimeError):
        poll_once(FakeTaskSource([]), app_state, now=now)
    assert app_state.get_snapshot() == before


# ---- NagDispatcher ----


@pytest.mark.asyncio
async def test_nag_first_reminder_is_immediate_then_throttled(now) -> None:
    notifier = FakeNotifier()
    nagger = NagDispatcher(notifier, interval_seconds=300, title="taskbell")

    assert await nagger.maybe_nag(NAGGING, now) is True
    assert await nagger.maybe_nag(NAGGING, now + timedelta(seconds=299)) is False
    assert await nagger.maybe_nag(NAGGING, now + timedelta(seconds=300)) is True

    assert [(s.title, s.text) for s in notifier.sent] == [("taskbell", "Write report")] * 2


@pytest.mark.asyncio
async def test_nag_silent_when_off_or_disabled_and_resets(now) -> None:
    notifier = FakeNotifier()
    nagger = NagDispatcher(notifier, interval_seconds=300)

    assert await nagger.maybe_nag(QUIET, now) is False
    assert await nagger.maybe_nag(NAGGING, now) is True
    assert await nagger.maybe_nag(NAGGING, now + timedelta(seconds=10), disabled=True) is False
    # Timer was reset by the disabled round: next nag goes out right away.
    assert await nagger.maybe_nag(NAGGING, now + timedelta(seconds=20)) is True

    assert len(notifier.sent) == 2


@pytest.mark.asyncio
async def test_nag_failure_does_not_count_as_sent(now) -> None:
    notifier = FakeNotifier(fail=True)
    nagger = NagDispatcher(notifier, interval_seconds=300)

    with pytest.raises(ConnectionError):
        await nagger.maybe_nag(NAGGING, now)

    notifier.fail = False
    assert await nagger.maybe_nag(NAGGING, now + timedelta(seconds=1)) is True


# ---- run_state_poller ----


@pytest.mark.asyncio
async def test_poller_updates_state_and_nags(matcher, now) -> None:
    app_state = AppState(matcher, RuleSetConfiguration(nagging_conditions=(PASSING,)))
    source = FakeTaskSource([Task(id="1", title="Write report", marked_current=True)])
    notifier = FakeNotifier()
    stop = asyncio.Event()

    runner = asyncio.create_task(
        run_state_poller(
            source,
            app_state,
            NagDispatcher(notifier, interval_seconds=300),
            DisabledState(),
            interval_seconds=0.01,
            stop_event=stop,
            clock=lambda: now,
        )
    )

    await asyncio.sleep(0.05)
    stop.set()
    await asyncio.wait_for(runner, timeout=1.0)

    assert source.calls >= 2
    assert app_state.get_snapshot().nagging_enabled is True
    # Same clock value every round: only one reminder inside the interval.
    assert [s.text for s in notifier.sent] == ["Write report"]


@pytest.mark.asyncio
async def test_poller_survives_failing_rounds_and_respects_disabled(matcher, now) -> None:
    app_state = AppState(matcher, RuleSetConfiguration(nagging_conditions=(EXPLODING,)))
    notifier = FakeNotifier()
    disabled = DisabledState()
    disabled.disable_for_minutes(5, now)

    runner = asyncio.create_task(
        run_state_poller(
            FakeTaskSource([]),
            app_state,
            NagDispatcher(notifier),
            disabled,
            interval_seconds=0.01,
            clock=lambda: now,
        )
    )

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert app_state.get_snapshot() == StatusSnapshot()
    assert notifier.sent == []


# ---- background runner ----


def test_background_poller_starts_and_stops(app_state: AppState) -> None:
    source = FakeTaskSource([Task(id="1", title="Write report", marked_current=True)])

    runner = start_poller_in_background(
        source,
        app_state,
        NagDispatcher(FakeNotifier()),
        DisabledState(),
        interval_seconds=0.01,
    )
    assert runner is not None

    deadline = time.monotonic() + 5.0
    while source.calls == 0 and time.monotonic() < deadline:
        time.sleep(0.01)

    runner.stop()
    runner.join(timeout=5.0)

    assert not runner.thread.is_alive()
    assert source.calls >= 1
    assert app_state.get_snapshot().message == "Write report"
