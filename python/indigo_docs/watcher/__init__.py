"""
Filesystem change watcher for the HQ document tree.

This module watches the directories resolved from the enabled scopes and
delivers debounced, classified change events to one subscriber. It uses
Python's watchdog library for the OS-level recursive watches.

Typical usage:
--------------
    from indigo_docs.watcher import ChangeKind, ChangeWatcher

    def on_change(event):
        if event.kind == ChangeKind.REMOVE:
            tree_needs_rescan()
        elif event.path.endswith(".md"):
            reload_document(event.path)

    watcher = ChangeWatcher()
    watcher.start("/path/to/hq", ["knowledge/public", "companies/*/knowledge"], on_change)
    # ... watcher runs in background ...
    watcher.stop()

Classification:
---------------
- Paths with an excluded segment (.git, node_modules, dotfiles, ...) below a
  watched directory are never reported
- A path that exists when the debounced batch is delivered is MODIFY
  (creations included); a path that is gone is REMOVE
- Raw bursts are coalesced per path: one event once that path has been
  quiet for 500ms, whatever happens to other paths

Threading:
----------
- Watchdog emits raw events on its own threads
- Batches are delivered to the sink on a timer thread
- start()/stop() swap the single subscription under a lock
"""

from .core import DEBOUNCE_SECONDS, ChangeWatcher, classify_path
from .debouncer import DebounceQueue
from .handlers import ChangeEventHandler
from .types import ChangeEvent, ChangeKind, ChangeSink

__all__ = [
    "DEBOUNCE_SECONDS",
    "ChangeEvent",
    "ChangeEventHandler",
    "ChangeKind",
    "ChangeSink",
    "ChangeWatcher",
    "DebounceQueue",
    "classify_path",
]
