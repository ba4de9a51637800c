"""
Layout Editor

Editing session for one page layout. Ties together:
- LayoutEngine (validated mutations)
- LayoutHistory (undo/redo snapshots)
- LayoutStorage (best-effort autosave)
- Change listeners (notified with the serialized layout after every commit)

Edits that change nothing (moving the first widget up, setting an identical
config) succeed without creating a history entry, saving or notifying.
"""

import json
import logging
from collections.abc import Callable
from typing import Any

from pagetree.config import Settings, get_settings
from pagetree.core.kv_store import create_store
from pagetree.models.contracts.layout import Layout, LayoutNode, WidgetConfig
from pagetree.services import layout_codec
from pagetree.services.layout_engine import ConfigInput, LayoutEngine
from pagetree.services.layout_history import LayoutHistory
from pagetree.services.layout_storage import LayoutStorage
from pagetree.services.widget_registry import WidgetLookup, WidgetRegistry

logger = logging.getLogger(__name__)

LayoutListener = Callable[[dict[str, Any]], None]


class LayoutEditor:
    """
    Service for editing a layout with undo/redo and autosave.

    Usage:
        editor = LayoutEditor()
        row_id = editor.add_root("container.row")
        editor.add_child(row_id, "text.paragraph")
        editor.undo()
    """

    def __init__(
        self,
        registry: WidgetLookup | None = None,
        storage: LayoutStorage | None = None,
        initial_layout: Layout | None = None,
        settings: Settings | None = None,
    ):
        """
        Args:
            registry: Widget lookup (standard widgets if omitted)
            storage: Autosave adapter (built from settings if omitted)
            initial_layout: Starting layout; when omitted the stored autosave
                is loaded, falling back to an empty layout
            settings: Configuration (global settings if omitted)
        """
        self.settings = settings or get_settings()
        self.registry = registry if registry is not None else WidgetRegistry.with_standard_widgets()
        self.storage = storage or LayoutStorage(create_store(self.settings), self.settings.storage_key)

        if initial_layout is None:
            initial_layout = self.storage.load(self.registry)

        self.engine = LayoutEngine(self.registry, initial_layout)
        self.history = LayoutHistory(self.engine.layout, capacity=self.settings.history_capacity)
        self._listeners: list[LayoutListener] = []

    # =========================================================================
    # State
    # =========================================================================

    @property
    def layout(self) -> Layout:
        """Independent copy of the current layout."""
        return self.engine.layout

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def get(self, node_id: str) -> LayoutNode:
        return self.engine.get(node_id)

    def close(self) -> None:
        """Flush pending autosaves and release the storage worker."""
        self.storage.close()

    def subscribe(self, listener: LayoutListener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_root(self, widget_type: str, config: ConfigInput = None) -> str:
        node_id = self.engine.add_root(widget_type, config)
        self._commit()
        return node_id

    def insert_root(self, widget_type: str, position: int, config: ConfigInput = None) -> str:
        node_id = self.engine.insert_root(widget_type, position, config)
        self._commit()
        return node_id

    def add_child(self, parent_id: str, widget_type: str, config: ConfigInput = None) -> str:
        node_id = self.engine.add_child(parent_id, widget_type, config)
        self._commit()
        return node_id

    def insert_child(
        self,
        parent_id: str,
        widget_type: str,
        position: int,
        config: ConfigInput = None,
    ) -> str:
        node_id = self.engine.insert_child(parent_id, widget_type, position, config)
        self._commit()
        return node_id

    def remove(self, node_id: str) -> list[str]:
        removed = self.engine.remove(node_id)
        self._commit()
        return removed

    def move_up(self, node_id: str) -> bool:
        moved = self.engine.move_up(node_id)
        if moved:
            self._commit()
        return moved

    def move_down(self, node_id: str) -> bool:
        moved = self.engine.move_down(node_id)
        if moved:
            self._commit()
        return moved

    def set_config(self, node_id: str, config: WidgetConfig | dict[str, Any]) -> bool:
        changed = self.engine.set_config(node_id, config)
        if changed:
            self._commit()
        return changed

    def set_metadata(self, key: str, value: Any) -> bool:
        changed = self.engine.set_metadata(key, value)
        if changed:
            self._commit()
        return changed

    # =========================================================================
    # History
    # =========================================================================

    def undo(self) -> bool:
        """Restore the previous state. Returns False if there was nothing to undo."""
        restored = self.history.undo()
        if restored is None:
            return False
        self.engine.replace(restored)
        self._publish()
        return True

    def redo(self) -> bool:
        """Re-apply the next state. Returns False if there was nothing to redo."""
        restored = self.history.redo()
        if restored is None:
            return False
        self.engine.replace(restored)
        self._publish()
        return True

    # =========================================================================
    # Import / export
    # =========================================================================

    def export_json(self, pretty: bool = False) -> str:
        return layout_codec.encode_json(self.engine.layout, pretty=pretty)

    def import_json(self, document: dict[str, Any] | str | bytes) -> None:
        """
        Replace the layout with a decoded document (undoable).

        Raises:
            LayoutError: If the document cannot be decoded; the current
                layout is left untouched
        """
        layout = layout_codec.decode(document, self.registry)
        self.engine.replace(layout)
        self._commit()
        logger.info(f"Imported layout with {len(self.engine)} widget(s)")

    def clear(self) -> None:
        """Start over with an empty layout, dropping history and the autosave."""
        self.engine.replace(Layout())
        self.history.reset(self.engine.layout)
        self.storage.clear()
        self._notify(self.history.present_snapshot)
        logger.info("Cleared layout")

    # =========================================================================
    # Internals
    # =========================================================================

    def _commit(self) -> None:
        layout = self.engine.layout
        if layout_codec.encode_json(layout) == self.history.present_snapshot:
            logger.debug("Edit produced no change; not recording history")
            return
        self.history.commit(layout)
        self._publish()

    def _publish(self) -> None:
        """Autosave and notify listeners with the current layout."""
        snapshot = self.history.present_snapshot
        self.storage.save(snapshot)
        self._notify(snapshot)

    def _notify(self, snapshot: str) -> None:
        # Each listener gets its own copy of the document
        for listener in list(self._listeners):
            try:
                listener(json.loads(snapshot))
            except Exception:
                logger.exception("Layout change listener failed")
