import asyncio

import pytest

from deskbridge.models.window import Platform
from deskbridge.platforms import linux
from deskbridge.platforms.factory import StrategyTable
from deskbridge.services.clipboard_monitor import ClipboardMonitor, ListenerHandle
from deskbridge.services.clipboard_service import ClipboardService

from helpers import FakeClipboard, FakeRunner, failed, ok


def run(coro):
    return asyncio.run(coro)


def test_baseline_is_not_notified_and_change_is_notified_once():
    clipboard = FakeClipboard("initial")
    monitor = ClipboardMonitor(clipboard)
    received = []
    monitor.add_listener(received.append)

    async def scenario():
        await monitor.start_monitoring(0.1)
        assert monitor.snapshot == "initial"
        clipboard.text = "copied text"
        await asyncio.sleep(0.3)
        monitor.stop_monitoring()

    run(scenario())
    assert received == ["copied text"]


def test_unchanged_clipboard_never_notifies():
    clipboard = FakeClipboard("same")
    monitor = ClipboardMonitor(clipboard)
    received = []
    monitor.add_listener(received.append)

    async def scenario():
        await monitor.start_monitoring(0.05)
        await asyncio.sleep(0.3)
        monitor.stop_monitoring()

    run(scenario())
    assert received == []
    assert clipboard.reads > 2


def test_listeners_are_called_in_registration_order():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard)
    order = []
    monitor.add_listener(lambda text: order.append(("first", text)))
    monitor.add_listener(lambda text: order.append(("second", text)))

    async def scenario():
        await monitor.start_monitoring(0.05)
        clipboard.text = "b"
        await asyncio.sleep(0.2)
        monitor.stop_monitoring()

    run(scenario())
    assert order == [("first", "b"), ("second", "b")]


def test_failing_listener_does_not_stop_others_or_the_loop():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard)
    received = []

    def broken(text):
        raise RuntimeError("listener bug")

    monitor.add_listener(broken)
    monitor.add_listener(received.append)

    async def scenario():
        await monitor.start_monitoring(0.05)
        clipboard.text = "b"
        await asyncio.sleep(0.2)
        clipboard.text = "c"
        await asyncio.sleep(0.2)
        assert monitor.is_monitoring
        monitor.stop_monitoring()

    run(scenario())
    assert received == ["b", "c"]


def test_removed_listener_receives_nothing_further():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard)
    kept, removed = [], []
    monitor.add_listener(kept.append)
    handle = monitor.add_listener(removed.append)

    async def scenario():
        await monitor.start_monitoring(0.05)
        clipboard.text = "b"
        await asyncio.sleep(0.2)
        monitor.remove_listener(handle)
        clipboard.text = "c"
        await asyncio.sleep(0.2)
        monitor.stop_monitoring()

    run(scenario())
    assert kept == ["b", "c"]
    assert removed == ["b"]


def test_listener_removed_mid_round_is_skipped():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard)
    late = []

    def remover(text):
        monitor.remove_listener(late.append)

    monitor.add_listener(remover)
    monitor.add_listener(late.append)

    async def scenario():
        await monitor.start_monitoring(0.05)
        clipboard.text = "b"
        await asyncio.sleep(0.2)
        monitor.stop_monitoring()

    run(scenario())
    assert late == []


def test_remove_listener_is_idempotent():
    monitor = ClipboardMonitor(FakeClipboard())

    def callback(text):
        pass

    monitor.remove_listener(callback)
    handle = monitor.add_listener(callback)
    monitor.remove_listener(callback)
    monitor.remove_listener(callback)
    monitor.remove_listener(handle)
    assert monitor.listeners == []


def test_adding_same_callback_twice_keeps_one_registration():
    monitor = ClipboardMonitor(FakeClipboard())

    def callback(text):
        pass

    first = monitor.add_listener(callback)
    second = monitor.add_listener(callback)

    assert first is second
    assert isinstance(first, ListenerHandle)
    assert len(monitor.listeners) == 1


def test_add_listener_rejects_non_callables():
    monitor = ClipboardMonitor(FakeClipboard())
    with pytest.raises(TypeError):
        monitor.add_listener("not callable")


def test_async_listener_is_awaited():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard)
    received = []

    async def listener(text):
        await asyncio.sleep(0.01)
        received.append(text)

    monitor.add_listener(listener)

    async def scenario():
        await monitor.start_monitoring(0.05)
        clipboard.text = "b"
        await asyncio.sleep(0.2)
        monitor.stop_monitoring()

    run(scenario())
    assert received == ["b"]


def test_ticks_never_overlap_slow_listeners():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard)
    state = {"busy": False, "overlaps": 0, "calls": 0}
    original_read = clipboard.read_text

    async def guarded_read():
        if state["busy"]:
            state["overlaps"] += 1
        return await original_read()

    clipboard.read_text = guarded_read

    async def slow_listener(text):
        state["busy"] = True
        state["calls"] += 1
        await asyncio.sleep(0.15)
        state["busy"] = False

    monitor.add_listener(slow_listener)

    async def scenario():
        await monitor.start_monitoring(0.02)
        clipboard.text = "b"
        await asyncio.sleep(0.1)
        clipboard.text = "c"
        await asyncio.sleep(0.4)
        monitor.stop_monitoring()

    run(scenario())
    assert state["overlaps"] == 0
    assert state["calls"] == 2


def test_restart_replaces_the_running_loop():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard)
    received = []
    monitor.add_listener(received.append)

    async def scenario():
        await monitor.start_monitoring(0.05)
        first_task = monitor._task
        await monitor.start_monitoring(0.05)
        await asyncio.sleep(0)
        assert first_task.cancelled() or first_task.done()
        clipboard.text = "b"
        await asyncio.sleep(0.2)
        monitor.stop_monitoring()

    run(scenario())
    assert received == ["b"]


def test_stop_is_idempotent_and_stops_notifications():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard)
    received = []
    monitor.add_listener(received.append)
    monitor.stop_monitoring()

    async def scenario():
        await monitor.start_monitoring(0.05)
        monitor.stop_monitoring()
        monitor.stop_monitoring()
        await asyncio.sleep(0)
        assert not monitor.is_monitoring
        clipboard.text = "b"
        await asyncio.sleep(0.2)

    run(scenario())
    assert received == []


def test_read_failures_are_survived():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard)
    received = []
    monitor.add_listener(received.append)

    async def scenario():
        await monitor.start_monitoring(0.05)
        clipboard.fail = True
        await asyncio.sleep(0.15)
        clipboard.fail = False
        clipboard.text = "b"
        await asyncio.sleep(0.15)
        monitor.stop_monitoring()

    run(scenario())
    assert received == ["b"]


def test_failed_baseline_counts_as_empty_clipboard():
    clipboard = FakeClipboard("existing")
    clipboard.fail = True
    monitor = ClipboardMonitor(clipboard)
    received = []
    monitor.add_listener(received.append)

    async def scenario():
        await monitor.start_monitoring(0.05)
        assert monitor.snapshot == ""
        clipboard.fail = False
        await asyncio.sleep(0.15)
        assert monitor.snapshot == "existing"
        clipboard.text = "new"
        await asyncio.sleep(0.15)
        monitor.stop_monitoring()

    run(scenario())
    assert received == ["existing", "new"]


def test_first_copy_into_empty_clipboard_is_notified():
    state = {"text": None}

    def xclip(args, input_text):
        if state["text"] is None:
            return failed("Error: target STRING not available")
        return ok(state["text"])

    table = StrategyTable(Platform.LINUX, linux.build_strategies({}))
    clipboard = ClipboardService(table, FakeRunner({"xclip": xclip}), timeout=1.0)
    monitor = ClipboardMonitor(clipboard)
    received = []
    monitor.add_listener(received.append)

    async def scenario():
        await monitor.start_monitoring(0.1)
        state["text"] = "hello"
        await asyncio.sleep(0.3)
        monitor.stop_monitoring()

    run(scenario())
    assert received == ["hello"]


def test_restart_waits_for_the_running_listener_to_unwind():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard)
    state = {"busy": False, "overlaps": 0}
    original_read = clipboard.read_text

    async def guarded_read():
        if state["busy"]:
            state["overlaps"] += 1
        return await original_read()

    clipboard.read_text = guarded_read

    async def slow_listener(text):
        state["busy"] = True
        try:
            await asyncio.sleep(5)
        finally:
            state["busy"] = False

    monitor.add_listener(slow_listener)

    async def scenario():
        await monitor.start_monitoring(0.02)
        clipboard.text = "b"
        await asyncio.sleep(0.1)
        assert state["busy"]
        await monitor.start_monitoring(0.02)
        monitor.stop_monitoring()

    run(scenario())
    assert state["overlaps"] == 0
    assert state["busy"] is False


def test_changes_are_kept_in_bounded_history():
    clipboard = FakeClipboard("a")
    monitor = ClipboardMonitor(clipboard, history_size=2)

    async def scenario():
        await monitor.start_monitoring(0.03)
        for text in ("b", "c", "d"):
            clipboard.text = text
            await asyncio.sleep(0.1)
        monitor.stop_monitoring()

    run(scenario())
    assert [change.text for change in monitor.history] == ["c", "d"]


def test_interval_must_be_positive():
    monitor = ClipboardMonitor(FakeClipboard())
    with pytest.raises(ValueError):
        run(monitor.start_monitoring(0))
