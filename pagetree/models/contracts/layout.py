"""
Layout Tree Definitions

Core types for the widget tree: widget configuration, tree nodes, the
in-memory Layout and its versioned wire document.

The tree is stored as an arena: ``Layout.nodes`` maps node id to node, and
parent/child links are node ids, never nested objects.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def ensure_json_value(value: Any) -> Any:
    """
    Return an independent copy of ``value`` if it is plain JSON data.

    Raises:
        ValueError: If ``value`` holds anything that would not survive a JSON
            round trip unchanged (objects, dates, sets, tuples, non-string
            keys, NaN or infinities)
    """
    try:
        copied = json.loads(json.dumps(value, allow_nan=False))
    except (TypeError, ValueError) as e:
        raise ValueError(f"value is not JSON data: {e}") from e
    if copied != value:
        raise ValueError("value is not JSON data: tuples and non-string keys are not allowed")
    return copied


# -----------------------------------------------------------------------------
# Widget Configuration
# -----------------------------------------------------------------------------


class WidgetConfig(BaseModel):
    """Per-widget configuration: properties, CSS classes and inline styles."""

    model_config = ConfigDict(extra="forbid")  # Reject unknown fields

    properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Widget-specific properties (JSON values)",
    )
    css_classes: list[str] = Field(
        default_factory=list,
        description="Additional CSS classes, unique, in insertion order",
    )
    styles: dict[str, str] = Field(
        default_factory=dict,
        description="Inline CSS styles (property -> value)",
    )

    @field_validator("css_classes")
    @classmethod
    def _unique_classes(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("properties")
    @classmethod
    def _json_properties(cls, value: dict[str, Any]) -> dict[str, Any]:
        return ensure_json_value(value)

    def with_property(self, key: str, value: Any) -> WidgetConfig:
        """Return a copy with ``key`` set to ``value``."""
        return self.model_copy(update={"properties": {**self.properties, key: value}}, deep=True)

    def with_class(self, css_class: str) -> WidgetConfig:
        """Return a copy with ``css_class`` appended (if not already present)."""
        if css_class in self.css_classes:
            return self.model_copy(deep=True)
        return self.model_copy(update={"css_classes": [*self.css_classes, css_class]}, deep=True)

    def with_style(self, prop: str, value: str) -> WidgetConfig:
        """Return a copy with inline style ``prop`` set to ``value``."""
        return self.model_copy(update={"styles": {**self.styles, prop: value}}, deep=True)

    def get_property(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)


# -----------------------------------------------------------------------------
# Tree Nodes
# -----------------------------------------------------------------------------


class LayoutNode(WidgetConfig):
    """
    A widget instance in the tree.

    Carries its configuration fields inline, plus the structural fields
    (``children``, ``parent``) that only the layout engine may change.
    """

    widget_type: str = Field(
        min_length=1,
        description="Registered widget type, dot-namespaced (e.g. 'container.row')",
    )
    children: list[str] = Field(
        default_factory=list,
        description="Ordered child node ids",
    )
    parent: str | None = Field(
        default=None,
        description="Parent node id (None for root nodes)",
    )

    @property
    def config(self) -> WidgetConfig:
        """Independent copy of this node's configuration."""
        return WidgetConfig.model_validate(
            self.model_dump(include={"properties", "css_classes", "styles"})
        )

    def apply_config(self, config: WidgetConfig) -> None:
        """Replace the configuration fields, leaving structure untouched."""
        fresh = config.model_copy(deep=True)
        self.properties = fresh.properties
        self.css_classes = fresh.css_classes
        self.styles = fresh.styles


class Layout(BaseModel):
    """
    A page layout: ordered root ids, the node store and free-form metadata.

    Metadata (title, author, timestamps...) is opaque to the engine.
    """

    root_nodes: list[str] = Field(default_factory=list, description="Ordered root node ids")
    nodes: dict[str, LayoutNode] = Field(default_factory=dict, description="Node store keyed by id")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Layout metadata")

    @field_validator("metadata")
    @classmethod
    def _json_metadata(cls, value: dict[str, Any]) -> dict[str, Any]:
        return ensure_json_value(value)


# -----------------------------------------------------------------------------
# Wire Document
# -----------------------------------------------------------------------------


class LayoutDocument(BaseModel):
    """Versioned JSON document a Layout is persisted and exchanged as."""

    model_config = ConfigDict(extra="forbid")

    version: int = Field(description="Layout schema version")
    root_nodes: list[str] = Field(default_factory=list)
    nodes: dict[str, LayoutNode] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("metadata")
    @classmethod
    def _json_metadata(cls, value: dict[str, Any]) -> dict[str, Any]:
        return ensure_json_value(value)

    def to_layout(self) -> Layout:
        return Layout(
            root_nodes=list(self.root_nodes),
            nodes=dict(self.nodes),
            metadata=dict(self.metadata),
        )
