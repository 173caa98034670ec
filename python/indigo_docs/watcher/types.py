"""
Change watcher type definitions.

This module defines the types delivered to watch subscribers:
- ChangeKind enum: classification of a change
- ChangeEvent: one classified change for one path
- ChangeSink: the callable that receives events
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable


class ChangeKind(Enum):
    """Classification of a debounced filesystem change."""

    CREATE = "create"  # Reserved; the existence check never produces it
    MODIFY = "modify"  # Path exists after the change (created or modified)
    REMOVE = "remove"  # Path no longer exists


@dataclass(frozen=True)
class ChangeEvent:
    """A classified change delivered to the active subscriber."""

    path: str
    kind: ChangeKind

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "kind": self.kind.value}


# Called on the watcher's delivery thread, once per surviving path
ChangeSink = Callable[[ChangeEvent], None]
