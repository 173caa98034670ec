"""
Indigo Docs server global state, shared by the server and the tool wrappers.

Holds the process-wide change watcher (zero or one active subscription) and
the buffer its sink fills. Events are produced on the watcher's delivery
thread and drained by the ``recent_changes`` tool.
"""

from collections import deque
from typing import Optional

from .config import ConfigStore
from .watcher import ChangeEvent, ChangeWatcher

# Oldest events are dropped once a client stops draining
MAX_PENDING_CHANGES = 1000

change_watcher = ChangeWatcher()
pending_changes: deque[ChangeEvent] = deque(maxlen=MAX_PENDING_CHANGES)

config_store: Optional[ConfigStore] = None  # Created on first access (lazy)


def record_change(event: ChangeEvent) -> None:
    """Watcher sink: buffer an event for the next drain."""
    pending_changes.append(event)


def drain_changes(limit: Optional[int] = None) -> list[ChangeEvent]:
    """Remove and return buffered events, oldest first."""
    drained = []
    while pending_changes and (limit is None or len(drained) < limit):
        try:
            drained.append(pending_changes.popleft())
        except IndexError:
            break
    return drained


def get_config_store() -> ConfigStore:
    """Get or create the config store (reads the config file once)."""
    global config_store
    if config_store is None:
        config_store = ConfigStore()
    return config_store
