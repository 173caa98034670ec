"""
Internal event handler for watchdog filesystem monitoring.

This module provides the low-level handler that receives raw watchdog events
on the observer thread and feeds their paths into the debounce queue.
"""

import logging
import os
from pathlib import Path
from typing import Iterable

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)

from ..exclusion import is_excluded_path
from .debouncer import DebounceQueue

logger = logging.getLogger("indigo_docs.watcher")


class ChangeEventHandler(FileSystemEventHandler):
    """
    Internal event handler for watchdog.

    Watchdog's own created/modified/deleted tags are not used for the final
    classification (that is an existence check at delivery time); the handler
    only decides which paths are worth queueing:
    - open/close notifications and directory-modified events are noise
    - moves queue both the source and the destination path
    - excluded paths are dropped before they can restart the debounce timer
    """

    _RELEVANT_EVENTS = frozenset(
        {EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED}
    )

    def __init__(self, queue: DebounceQueue, roots: Iterable[Path]) -> None:
        """
        Initialize event handler.

        Args:
        -----
        queue: Debounce queue receiving changed paths
        roots: Watched directories (exclusion is checked below these)
        """
        super().__init__()
        self.queue = queue
        self.roots = list(roots)

    def dispatch(self, event: FileSystemEvent) -> None:
        """Queue the path(s) of a raw watchdog event."""
        if event.event_type not in self._RELEVANT_EVENTS:
            return
        # Parent directories get a modified event for every child change
        if event.is_directory and event.event_type == EVENT_TYPE_MODIFIED:
            return

        paths = [event.src_path]
        if event.event_type == EVENT_TYPE_MOVED:
            paths.append(event.dest_path)

        for raw_path in paths:
            if not raw_path:
                continue
            path = os.fsdecode(raw_path)
            if is_excluded_path(path, self.roots):
                continue
            try:
                self.queue.add(path)
            except Exception as e:
                logger.error(f"Failed to queue change for {path}: {e}", exc_info=True)
