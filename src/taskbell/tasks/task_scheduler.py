# src/taskbell/tasks/task_scheduler.py

"""
Status poller.

A small polling loop that:
- fetches the relevant tasks from the injected provider,
- feeds the tasks state (or the fetch error) into AppState,
- sends nag reminders through the injected notifier port.

Rendering the status (tray, console) belongs to the connector, not the poller.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from ..core.disabled import DisabledState
from ..core.models import StatusSnapshot
from ..core.ports import Notifier, TasksProvider
from ..core.state import AppState
from .task_source import TaskSourceError
from .tasks_state import calculate_tasks_state

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Problem fetching tasks"

Clock = Callable[[], datetime]


def local_now() -> datetime:
    return datetime.now().astimezone()


def poll_once(source: TasksProvider, app_state: AppState, *, now: datetime) -> StatusSnapshot:
    """
    One evaluation round. Provider failures become an error status;
    condition matching failures propagate and leave the previous snapshot in place.
    """
    try:
        tasks = source.get_relevant_tasks()
    except TaskSourceError as e:
        logger.info("Fetching tasks failed: %s", e)
        app_state.update_from_task_state_error(str(e), now)
        return app_state.get_snapshot()
    except Exception:
        logger.exception("get_relevant_tasks crashed")
        app_state.update_from_task_state_error(FETCH_ERROR_MESSAGE, now)
        return app_state.get_snapshot()

    app_state.update_from_tasks_state(calculate_tasks_state(tasks, now), now)
    return app_state.get_snapshot()


class NagDispatcher:
    """
    Decides when a nag reminder goes out.

    - first reminder right after nagging turns on
    - then at most once every interval_seconds while it stays on
    - nothing while nagging is off or the app is disabled (this also resets the timer)
    """

    def __init__(self, notifier: Notifier, *, interval_seconds: float = 300.0, title: str = "taskbell") -> None:
        self._notifier = notifier
        self._interval_seconds = max(1.0, float(interval_seconds))
        self._title = title
        self._last_nag_at: datetime | None = None

    async def maybe_nag(self, snapshot: StatusSnapshot, now: datetime, *, disabled: bool = False) -> bool:
        if disabled or not snapshot.nagging_enabled:
            self._last_nag_at = None
            return False

        if self._last_nag_at is not None:
            elapsed = (now - self._last_nag_at).total_seconds()
            if elapsed < self._interval_seconds:
                return False

        await self._notifier.notify(title=self._title, text=snapshot.message)
        self._last_nag_at = now
        logger.debug("Nag reminder sent: %r", snapshot.message)
        return True


async def run_state_poller(
        source: TasksProvider,
        app_state: AppState,
        nagger: NagDispatcher,
        disabled: DisabledState,
        *,
        interval_seconds: float = 60.0,
        stop_event: asyncio.Event | None = None,
        clock: Clock = local_now,
) -> None:
    """
    Every interval_seconds:
    - expire the snooze window if it is over
    - poll_once(...) (a failing round keeps the previous snapshot)
    - let the nag dispatcher send a reminder if due

    Stops when stop_event is set, or when the coroutine/task is cancelled.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while stop_event is None or not stop_event.is_set():
        now = clock()
        disabled.update(now)

        try:
            snapshot = poll_once(source, app_state, now=now)
        except Exception:
            logger.exception("Status update failed, keeping previous snapshot")
            snapshot = app_state.get_snapshot()

        try:
            await nagger.maybe_nag(snapshot, now, disabled=disabled.is_app_disabled())
        except Exception:
            logger.exception("Sending nag reminder failed")

        if stop_event is None:
            await asyncio.sleep(sleep_s)
        else:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)

    logger.info("Status poller stopped.")


@dataclass
class PollerBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Poller loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_poller_in_background(
        source: TasksProvider,
        app_state: AppState,
        nagger: NagDispatcher,
        disabled: DisabledState,
        *,
        interval_seconds: float = 60.0,
) -> PollerBackgroundRunner | None:
    """
    Start the poller on its own event loop in a background thread,
    so the blocking console REPL can run in the main thread.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_state_poller(
                    source,
                    app_state,
                    nagger,
                    disabled,
                    interval_seconds=interval_seconds,
                    stop_event=stop_event,
                )
            )
        finally:
            loop.close()

    t = threading.Thread(target=runner, name="taskbell-poller", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Poller thread did not initialize properly.")
        return None

    logger.info("Status poller started (interval=%ss).", interval_seconds)
    return PollerBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
