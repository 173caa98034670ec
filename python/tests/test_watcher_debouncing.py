"""
Tests for ChangeWatcher debouncing, batching, and event deduplication.

These tests focus on:
1. Debouncing rapid file modifications into a single event, per path
2. Batching changes to multiple files
3. Classification at delivery time (delete -> remove, create+delete -> remove)
4. DebounceQueue unit tests
"""

import asyncio
import threading
import time

import pytest

from indigo_docs.watcher import DEBOUNCE_SECONDS, ChangeEvent, ChangeKind, DebounceQueue


# ============================================================================
# DEBOUNCING TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_rapid_writes_yield_one_modify(default_watcher, hq, collector):
    """Ten writes 10ms apart produce exactly one MODIFY with the 500ms window."""
    doc = hq / "knowledge" / "public" / "README.md"
    default_watcher.start(hq, ["knowledge/public"], collector)

    for i in range(10):
        doc.write_text(f"# Public Knowledge\n\nRevision {i}\n")
        await asyncio.sleep(0.01)

    await asyncio.sleep(DEBOUNCE_SECONDS + 0.5)

    assert collector.for_path(doc) == [ChangeEvent(str(doc), ChangeKind.MODIFY)]


@pytest.mark.asyncio
async def test_busy_file_does_not_hold_back_quiet_file(default_watcher, hq, collector):
    """A file rewritten every 100ms must not delay another file that went quiet."""
    public = hq / "knowledge" / "public"
    quiet = public / "quiet.md"
    busy = public / "busy.md"
    default_watcher.start(hq, ["knowledge/public"], collector)

    quiet.write_text("# Quiet\n")
    written_at = time.monotonic()
    for i in range(30):
        busy.write_text(f"# Busy\n\nRevision {i}\n")
        await asyncio.sleep(0.1)

    delivered_at = collector.delivered_at(quiet)
    assert delivered_at is not None
    assert delivered_at - written_at < DEBOUNCE_SECONDS + 0.7
    assert collector.for_path(quiet) == [ChangeEvent(str(quiet), ChangeKind.MODIFY)]

    await asyncio.sleep(DEBOUNCE_SECONDS + 0.5)
    assert collector.for_path(busy) == [ChangeEvent(str(busy), ChangeKind.MODIFY)]


@pytest.mark.asyncio
async def test_nothing_delivered_inside_debounce_window(default_watcher, hq, collector):
    doc = hq / "knowledge" / "public" / "README.md"
    default_watcher.start(hq, ["knowledge/public"], collector)

    doc.write_text("# Edited\n")
    await asyncio.sleep(DEBOUNCE_SECONDS / 5)
    assert collector.snapshot() == []

    await asyncio.sleep(DEBOUNCE_SECONDS + 0.5)
    assert collector.for_path(doc) == [ChangeEvent(str(doc), ChangeKind.MODIFY)]


@pytest.mark.asyncio
async def test_batches_multiple_files(change_watcher, hq, collector):
    change_watcher.start(hq, ["knowledge/public"], collector)

    docs = [hq / "knowledge" / "public" / f"note{i}.md" for i in range(5)]
    for doc in docs:
        doc.write_text("# Note\n")
    await asyncio.sleep(0.8)

    for doc in docs:
        assert collector.for_path(doc) == [ChangeEvent(str(doc), ChangeKind.MODIFY)]


@pytest.mark.asyncio
async def test_delete_yields_remove(change_watcher, hq, collector):
    doc = hq / "knowledge" / "public" / "guides" / "setup.md"
    change_watcher.start(hq, ["knowledge/public"], collector)

    doc.unlink()
    await asyncio.sleep(0.8)

    assert collector.for_path(doc) == [ChangeEvent(str(doc), ChangeKind.REMOVE)]


@pytest.mark.asyncio
async def test_create_then_delete_within_window_yields_remove(change_watcher, hq, collector):
    """Only the final state counts: a short-lived file is reported as removed."""
    change_watcher.start(hq, ["knowledge/public"], collector)

    temp = hq / "knowledge" / "public" / "scratch.md"
    temp.write_text("# Scratch\n")
    temp.unlink()
    await asyncio.sleep(0.8)

    assert collector.for_path(temp) == [ChangeEvent(str(temp), ChangeKind.REMOVE)]


# ============================================================================
# DEBOUNCE QUEUE UNIT TESTS
# ============================================================================


class BatchRecorder:
    """Flush callback that records batches and signals each one."""

    def __init__(self):
        self.batches = []
        self.flushed = threading.Event()

    def __call__(self, paths):
        self.batches.append(paths)
        self.flushed.set()


def test_debounce_queue_rejects_bad_delay():
    with pytest.raises(ValueError):
        DebounceQueue(debounce_delay=0)
    with pytest.raises(ValueError):
        DebounceQueue(debounce_delay=-1)
    with pytest.raises(ValueError):
        DebounceQueue(debounce_delay=11)


def test_debounce_queue_deduplicates_in_order():
    recorder = BatchRecorder()
    queue = DebounceQueue(debounce_delay=5, flush_callback=recorder)

    for path in ["/a.md", "/b.md", "/a.md", "/c.md", "/b.md"]:
        queue.add(path)

    assert queue.pending() == ["/a.md", "/b.md", "/c.md"]

    queue.flush()

    assert recorder.batches == [["/a.md", "/b.md", "/c.md"]]
    assert queue.pending() == []
    queue.close()


def test_debounce_queue_flushes_after_quiet_period():
    recorder = BatchRecorder()
    queue = DebounceQueue(debounce_delay=0.1, flush_callback=recorder)

    queue.add("/a.md")

    assert recorder.flushed.wait(timeout=2.0)
    assert recorder.batches == [["/a.md"]]
    queue.close()


def test_debounce_queue_timer_restarts_on_each_add():
    recorder = BatchRecorder()
    queue = DebounceQueue(debounce_delay=0.2, flush_callback=recorder)

    for _ in range(5):
        queue.add("/a.md")
        time.sleep(0.1)  # Shorter than the window, keeps resetting it

    assert recorder.batches == []
    assert recorder.flushed.wait(timeout=2.0)
    assert recorder.batches == [["/a.md"]]
    queue.close()


def test_debounce_queue_quiet_path_flushes_while_other_path_is_busy():
    recorder = BatchRecorder()
    queue = DebounceQueue(debounce_delay=0.3, flush_callback=recorder)

    queue.add("/quiet.md")
    for _ in range(12):
        queue.add("/busy.md")
        time.sleep(0.1)

    # Quiet path went out on its own; busy path is still inside its window
    assert recorder.batches == [["/quiet.md"]]
    assert queue.pending() == ["/busy.md"]

    recorder.flushed.clear()
    assert recorder.flushed.wait(timeout=2.0)
    assert recorder.batches == [["/quiet.md"], ["/busy.md"]]
    queue.close()


def test_debounce_queue_empty_flush_does_not_call_back():
    recorder = BatchRecorder()
    queue = DebounceQueue(debounce_delay=0.1, flush_callback=recorder)

    queue.flush()

    assert recorder.batches == []


def test_debounce_queue_close_discards_pending():
    recorder = BatchRecorder()
    queue = DebounceQueue(debounce_delay=0.1, flush_callback=recorder)

    queue.add("/a.md")
    queue.close()
    queue.add("/b.md")  # Ignored once closed

    assert queue.closed
    assert queue.pending() == []
    assert not recorder.flushed.wait(timeout=0.4)


def test_debounce_queue_callback_error_is_contained():
    def failing(paths):
        raise RuntimeError("boom")

    queue = DebounceQueue(debounce_delay=5, flush_callback=failing)
    queue.add("/a.md")

    queue.flush()  # Logged, not raised

    assert queue.pending() == []
    queue.close()


def test_debounce_queue_callback_may_close_queue():
    """A flush callback that tears the queue down must not deadlock."""
    holder = {}

    def closing(paths):
        holder["queue"].close()

    queue = DebounceQueue(debounce_delay=5, flush_callback=closing)
    holder["queue"] = queue
    queue.add("/a.md")

    queue.flush()

    assert queue.closed
