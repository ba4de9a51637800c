"""
Layout Engine

Mutation API over a layout tree:
- Insert widgets as roots or children (appended or at a position)
- Remove a widget together with its whole subtree
- Reorder a widget among its siblings
- Replace a widget's configuration

Every operation checks all of its preconditions before touching the tree, so
it either applies completely or raises with the tree unchanged. The engine
never exposes its live Layout; callers get independent copies.
"""

import logging
from collections.abc import Iterator
from typing import Any
from uuid import uuid4

from pydantic import ValidationError

from pagetree.core.exceptions import (
    ChildrenNotAllowedError,
    InvalidConfigError,
    NodeNotFoundError,
    UnknownWidgetTypeError,
)
from pagetree.models.contracts.layout import Layout, LayoutNode, WidgetConfig, ensure_json_value
from pagetree.services.tree_validator import validate_layout
from pagetree.services.widget_registry import WidgetLookup

logger = logging.getLogger(__name__)

ConfigInput = WidgetConfig | dict[str, Any] | None


class LayoutEngine:
    """Owns one Layout and keeps it valid across edits."""

    def __init__(self, registry: WidgetLookup, layout: Layout | None = None):
        """
        Args:
            registry: Widget type lookup
            layout: Initial layout; validated and copied. Empty if omitted.

        Raises:
            InvalidLayoutError, UnknownWidgetTypeError, ChildrenNotAllowedError:
                If the initial layout is not a valid tree
        """
        self.registry = registry
        self._layout = Layout()
        if layout is not None:
            self.replace(layout)

    # =========================================================================
    # State access
    # =========================================================================

    @property
    def layout(self) -> Layout:
        """Independent copy of the current layout."""
        return self._layout.model_copy(deep=True)

    @property
    def root_ids(self) -> list[str]:
        return list(self._layout.root_nodes)

    @property
    def metadata(self) -> dict[str, Any]:
        return self.layout.metadata

    def replace(self, layout: Layout) -> None:
        """
        Swap in a whole new layout (undo/redo, import).

        The layout is validated first; on failure the current tree is kept.

        Raises:
            InvalidConfigError: If node properties or metadata are not JSON data
        """
        try:
            candidate = Layout.model_validate(layout.model_dump())
        except ValidationError as e:
            raise InvalidConfigError(f"Invalid layout content: {e}") from e
        validate_layout(candidate, self.registry)
        self._layout = candidate

    def check_invariants(self) -> None:
        """Re-run the tree validator over the live layout."""
        validate_layout(self._layout, self.registry)

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, node_id: str) -> LayoutNode:
        """
        Get a copy of a node.

        Raises:
            NodeNotFoundError: If the node does not exist
        """
        return self._node(node_id).model_copy(deep=True)

    def children_of(self, node_id: str) -> list[str]:
        return list(self._node(node_id).children)

    def parent_of(self, node_id: str) -> str | None:
        return self._node(node_id).parent

    def descendants(self, node_id: str) -> list[str]:
        """All descendant ids of a node in pre-order, excluding the node itself."""
        return self._subtree(node_id)[1:]

    def walk(self) -> Iterator[tuple[str, int]]:
        """Yield ``(node_id, depth)`` for every node in display (pre-) order."""
        stack: list[tuple[str, int]] = [(root_id, 0) for root_id in reversed(self._layout.root_nodes)]
        while stack:
            node_id, depth = stack.pop()
            yield node_id, depth
            children = self._layout.nodes[node_id].children
            stack.extend((child_id, depth + 1) for child_id in reversed(children))

    def __len__(self) -> int:
        return len(self._layout.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._layout.nodes

    # =========================================================================
    # Inserts
    # =========================================================================

    def add_root(self, widget_type: str, config: ConfigInput = None) -> str:
        """Append a new root widget. Returns its id."""
        return self.insert_root(widget_type, len(self._layout.root_nodes), config)

    def insert_root(self, widget_type: str, position: int, config: ConfigInput = None) -> str:
        """
        Insert a new root widget at ``position`` (clamped to the root list).

        Raises:
            UnknownWidgetTypeError: If the widget type is not registered
            InvalidConfigError: If ``config`` fails validation
        """
        node = self._build_node(widget_type, config, parent=None)
        node_id = self._new_id()

        roots = self._layout.root_nodes
        self._layout.nodes[node_id] = node
        roots.insert(_clamp(position, len(roots)), node_id)

        logger.info(f"Added root widget {node_id} (type={widget_type})")
        return node_id

    def add_child(self, parent_id: str, widget_type: str, config: ConfigInput = None) -> str:
        """Append a new widget to a container's children. Returns its id."""
        parent = self._node(parent_id)
        return self.insert_child(parent_id, widget_type, len(parent.children), config)

    def insert_child(
        self,
        parent_id: str,
        widget_type: str,
        position: int,
        config: ConfigInput = None,
    ) -> str:
        """
        Insert a new widget into a container at ``position`` (clamped).

        Raises:
            NodeNotFoundError: If the parent does not exist
            ChildrenNotAllowedError: If the parent's widget type cannot hold children
            UnknownWidgetTypeError: If the widget type is not registered
            InvalidConfigError: If ``config`` fails validation
        """
        parent = self._node(parent_id)
        if not self.registry.allows_children(parent.widget_type):
            raise ChildrenNotAllowedError(parent_id, parent.widget_type)

        node = self._build_node(widget_type, config, parent=parent_id)
        node_id = self._new_id()

        self._layout.nodes[node_id] = node
        parent.children.insert(_clamp(position, len(parent.children)), node_id)

        logger.info(f"Added widget {node_id} (type={widget_type}) under {parent_id}")
        return node_id

    # =========================================================================
    # Remove
    # =========================================================================

    def remove(self, node_id: str) -> list[str]:
        """
        Delete a widget and every descendant.

        Returns:
            Ids of all removed nodes, the widget first

        Raises:
            NodeNotFoundError: If the widget does not exist
        """
        removed = self._subtree(node_id)
        self._siblings(node_id).remove(node_id)
        for removed_id in removed:
            del self._layout.nodes[removed_id]

        logger.info(f"Removed widget {node_id} and {len(removed) - 1} descendant(s)")
        return removed

    # =========================================================================
    # Reorder
    # =========================================================================

    def move_up(self, node_id: str) -> bool:
        """
        Swap a widget with its preceding sibling.

        Returns:
            False if the widget was already first (nothing changed)
        """
        siblings = self._siblings(node_id)
        index = siblings.index(node_id)
        if index == 0:
            logger.debug(f"Widget {node_id} is already first; move_up is a no-op")
            return False
        siblings[index - 1], siblings[index] = siblings[index], siblings[index - 1]
        return True

    def move_down(self, node_id: str) -> bool:
        """
        Swap a widget with its following sibling.

        Returns:
            False if the widget was already last (nothing changed)
        """
        siblings = self._siblings(node_id)
        index = siblings.index(node_id)
        if index == len(siblings) - 1:
            logger.debug(f"Widget {node_id} is already last; move_down is a no-op")
            return False
        siblings[index], siblings[index + 1] = siblings[index + 1], siblings[index]
        return True

    # =========================================================================
    # Configure
    # =========================================================================

    def set_config(self, node_id: str, config: WidgetConfig | dict[str, Any]) -> bool:
        """
        Replace a widget's configuration wholesale.

        Returns:
            False if the new configuration equals the current one

        Raises:
            NodeNotFoundError: If the widget does not exist
            InvalidConfigError: If ``config`` fails validation
        """
        node = self._node(node_id)
        new_config = _coerce_config(config)
        if new_config == node.config:
            return False
        node.apply_config(new_config)
        logger.info(f"Updated config of widget {node_id}")
        return True

    def set_metadata(self, key: str, value: Any) -> bool:
        """
        Set a layout metadata entry. Returns False if unchanged.

        Raises:
            InvalidConfigError: If ``value`` is not plain JSON data
        """
        try:
            entry = ensure_json_value({key: value})
        except ValueError as e:
            raise InvalidConfigError(f"Invalid metadata value for {key!r}: {e}") from e
        metadata = self._layout.metadata
        if key in metadata and metadata[key] == entry[key]:
            return False
        metadata[key] = entry[key]
        return True

    # =========================================================================
    # Internals
    # =========================================================================

    def _node(self, node_id: str) -> LayoutNode:
        node = self._layout.nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)
        return node

    def _siblings(self, node_id: str) -> list[str]:
        """The live list a node is placed in: its parent's children or the root list."""
        node = self._node(node_id)
        if node.parent is None:
            return self._layout.root_nodes
        return self._layout.nodes[node.parent].children

    def _subtree(self, node_id: str) -> list[str]:
        """Node id followed by all descendant ids, pre-order."""
        self._node(node_id)
        result: list[str] = []
        stack = [node_id]
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(reversed(self._layout.nodes[current].children))
        return result

    def _build_node(self, widget_type: str, config: ConfigInput, parent: str | None) -> LayoutNode:
        if not self.registry.has_type(widget_type):
            raise UnknownWidgetTypeError(widget_type)
        resolved = self.registry.default_config(widget_type) if config is None else _coerce_config(config)
        return LayoutNode(
            widget_type=widget_type,
            parent=parent,
            **resolved.model_dump(),
        )

    def _new_id(self) -> str:
        node_id = str(uuid4())
        while node_id in self._layout.nodes:
            node_id = str(uuid4())
        return node_id


def _clamp(position: int, length: int) -> int:
    return max(0, min(position, length))


def _coerce_config(config: WidgetConfig | dict[str, Any]) -> WidgetConfig:
    """Validate externally supplied configuration into an independent WidgetConfig."""
    try:
        if isinstance(config, WidgetConfig):
            return WidgetConfig.model_validate(
                config.model_dump(include={"properties", "css_classes", "styles"})
            )
        return WidgetConfig.model_validate(config)
    except ValidationError as e:
        raise InvalidConfigError(f"Invalid widget configuration: {e}") from e
