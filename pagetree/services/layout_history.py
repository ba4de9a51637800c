"""
Layout History

Bounded undo/redo over full layout snapshots.

Three logical stacks: ``past`` (bounded), ``present`` and ``future``. Every
entry is the layout's serialized JSON text, so history never shares mutable
structure with the live layout and is immune to later in-place edits.
"""

import logging
from collections import deque

from pagetree.core.constants import HISTORY_CAPACITY
from pagetree.models.contracts.layout import Layout
from pagetree.services import layout_codec

logger = logging.getLogger(__name__)


class LayoutHistory:
    """
    Snapshot history for one layout.

    Exceeding ``capacity`` silently discards the oldest past entry.
    """

    def __init__(self, initial: Layout | None = None, capacity: int = HISTORY_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self.capacity = capacity
        self._past: deque[str] = deque(maxlen=capacity)
        self._future: list[str] = []
        self._present = layout_codec.encode_json(initial or Layout())

    @property
    def present(self) -> Layout:
        """Independent copy of the current state."""
        return self._restore(self._present)

    @property
    def present_snapshot(self) -> str:
        """Serialized current state."""
        return self._present

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def undo_depth(self) -> int:
        return len(self._past)

    @property
    def redo_depth(self) -> int:
        return len(self._future)

    def commit(self, layout: Layout) -> None:
        """
        Record a new current state.

        The previous state moves onto the past stack (evicting the oldest
        entry when full) and the future is cleared.
        """
        if len(self._past) == self.capacity:
            logger.debug("History full; discarding oldest entry")
        self._past.append(self._present)
        self._present = layout_codec.encode_json(layout)
        self._future.clear()

    def undo(self) -> Layout | None:
        """
        Step back one state.

        Returns:
            The restored layout, or None if there is nothing to undo
        """
        if not self._past:
            return None
        self._future.append(self._present)
        self._present = self._past.pop()
        return self.present

    def redo(self) -> Layout | None:
        """
        Step forward one state.

        Returns:
            The restored layout, or None if there is nothing to redo
        """
        if not self._future:
            return None
        self._past.append(self._present)
        self._present = self._future.pop()
        return self.present

    def reset(self, layout: Layout | None = None) -> None:
        """Drop all history and start over from ``layout`` (empty if omitted)."""
        self._past.clear()
        self._future.clear()
        self._present = layout_codec.encode_json(layout or Layout())

    @staticmethod
    def _restore(snapshot: str) -> Layout:
        return layout_codec.decode_snapshot(snapshot)
