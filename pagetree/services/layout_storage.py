"""
Layout Storage

Best-effort persistence of a layout document to a key-value store.

Saves are fire-and-forget: the document is handed to a single background
worker (so writes land in submission order) and the caller never waits on
the outcome. A failed save is logged and otherwise ignored; it never affects
the in-memory layout. Loading falls back to an empty layout when the stored
document is missing, unreadable or invalid.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from pagetree.core.constants import AUTOSAVE_KEY
from pagetree.core.exceptions import LayoutError
from pagetree.core.kv_store import KeyValueStore
from pagetree.models.contracts.layout import Layout
from pagetree.services import layout_codec
from pagetree.services.widget_registry import WidgetLookup

logger = logging.getLogger(__name__)


class LayoutStorage:
    """Autosave adapter for one layout key."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str = AUTOSAVE_KEY,
        background: bool = True,
    ):
        """
        Args:
            store: Backing key-value store
            key: Key the layout document is saved under
            background: Write on a worker thread; when False, writes happen
                inline (still best-effort)
        """
        self.store = store
        self.key = key
        self._executor = (
            ThreadPoolExecutor(max_workers=1, thread_name_prefix="pagetree-save")
            if background
            else None
        )
        self._last_write: Future[bool] | None = None

    def save(self, document: str) -> None:
        """Queue a serialized layout for saving. Never raises on store errors."""
        if self._executor is None:
            self._write(document)
            return
        self._last_write = self._executor.submit(self._write, document)

    def load(self, registry: WidgetLookup | None = None) -> Layout:
        """
        Load the stored layout.

        Returns:
            The stored layout, or an empty layout if nothing usable is stored
        """
        try:
            raw = self.store.load(self.key)
        except Exception as e:
            logger.warning(f"Failed to load layout '{self.key}', starting empty: {e}")
            return Layout()

        if raw is None:
            logger.debug(f"No stored layout under '{self.key}'")
            return Layout()

        try:
            return layout_codec.decode(raw, registry)
        except LayoutError as e:
            logger.warning(f"Stored layout '{self.key}' is invalid, starting empty: {e.message}")
            return Layout()

    def clear(self) -> None:
        """Delete the stored layout (best-effort)."""
        self.flush()
        try:
            self.store.delete(self.key)
        except Exception as e:
            logger.warning(f"Failed to delete stored layout '{self.key}': {e}")

    def flush(self, timeout: float | None = None) -> None:
        """Wait until every queued save has been attempted."""
        if self._last_write is not None:
            self._last_write.result(timeout=timeout)

    def close(self) -> None:
        """Flush pending saves and stop the worker."""
        self.flush()
        if self._executor is not None:
            self._executor.shutdown(wait=True)

    def _write(self, document: str) -> bool:
        try:
            self.store.save(self.key, document)
        except Exception as e:
            logger.warning(f"Failed to save layout '{self.key}': {e}")
            return False
        return True
