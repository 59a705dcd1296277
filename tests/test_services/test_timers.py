import asyncio

import pytest

from launchit.schemas.submission import Severity
from launchit.services.notifications import Notifier
from launchit.services.timers import AsyncioClock, Debouncer


@pytest.mark.asyncio
async def test_debouncer_fires_once_after_quiet_period(clock):
    fired = []

    async def action():
        fired.append(clock.now())

    debouncer = Debouncer(clock, 3.0, action)
    debouncer.trigger()
    await clock.advance(2)
    debouncer.trigger()
    await clock.advance(2)
    assert fired == []
    assert debouncer.pending

    await clock.advance(1)
    assert fired == [5.0]
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_debouncer_cancel(clock):
    fired = []

    async def action():
        fired.append(True)

    debouncer = Debouncer(clock, 1.0, action)
    debouncer.trigger()
    debouncer.cancel()
    await clock.advance(5)
    assert fired == []


@pytest.mark.asyncio
async def test_asyncio_clock_runs_callbacks_on_the_loop():
    done = asyncio.Event()

    async def callback():
        done.set()

    clock = AsyncioClock()
    clock.call_later(0.01, callback)
    await asyncio.wait_for(done.wait(), timeout=1)


@pytest.mark.asyncio
async def test_asyncio_clock_handles_can_be_cancelled():
    fired = []

    async def callback():
        fired.append(True)

    clock = AsyncioClock()
    handle = clock.call_later(0.01, callback)
    handle.cancel()
    await asyncio.sleep(0.05)
    assert fired == []


@pytest.mark.asyncio
async def test_notifier_replaces_and_dismisses(clock):
    changes = []
    notifier = Notifier(clock, 6.0, lambda: changes.append(notifier.current))

    notifier.notify("Saved", Severity.SUCCESS)
    notifier.notify("Oops", Severity.ERROR)
    assert notifier.current.message == "Oops"

    await clock.advance(6)
    assert notifier.current is None
    assert len(changes) == 3

    notifier.notify("Again")
    notifier.dismiss()
    assert notifier.current is None
