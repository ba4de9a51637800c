"""
Layout Codec

Converts layouts to and from the versioned JSON document:

    {
        "version": 1,
        "root_nodes": ["<id>", ...],
        "nodes": {"<id>": {"widget_type": ..., "properties": {...},
                           "css_classes": [...], "styles": {...},
                           "children": [...], "parent": "<id>" | null}},
        "metadata": {...}
    }

Decoding is all-or-nothing: the document is parsed, migrated to the current
schema version, checked against the schema and then run through the tree
validator. Callers get a fully valid Layout or a LayoutDecodeError / widget
registry error, never a half-built tree.
"""

import json
import logging
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from pagetree.core.constants import (
    LAYOUT_SCHEMA_VERSION,
    LEGACY_SCHEMA_VERSION,
    LEGACY_VERSION_STRINGS,
)
from pagetree.core.exceptions import MalformedDocumentError, UnsupportedVersionError
from pagetree.models.contracts.layout import Layout, LayoutDocument, LayoutNode
from pagetree.services.tree_validator import validate_layout, validate_structure
from pagetree.services.widget_registry import WidgetLookup

logger = logging.getLogger(__name__)


# =============================================================================
# Encoding
# =============================================================================


def _encode_node(node: LayoutNode) -> dict[str, Any]:
    data = node.model_dump(mode="json")
    return {
        "widget_type": data["widget_type"],
        "properties": data["properties"],
        "css_classes": data["css_classes"],
        "styles": data["styles"],
        "children": data["children"],
        "parent": data["parent"],
    }


def _display_order(layout: Layout) -> list[str]:
    """Node ids in pre-order from the roots, then any unplaced ids in store order."""
    ordered: list[str] = []
    seen: set[str] = set()
    stack = list(reversed(layout.root_nodes))
    while stack:
        node_id = stack.pop()
        if node_id in seen or node_id not in layout.nodes:
            continue
        seen.add(node_id)
        ordered.append(node_id)
        stack.extend(reversed(layout.nodes[node_id].children))
    ordered.extend(node_id for node_id in layout.nodes if node_id not in seen)
    return ordered


def encode(layout: Layout) -> dict[str, Any]:
    """
    Encode a layout as a JSON-ready document.

    Deterministic: nodes are emitted in display order, so equal layouts
    always encode identically.
    """
    return {
        "version": LAYOUT_SCHEMA_VERSION,
        "root_nodes": list(layout.root_nodes),
        "nodes": {node_id: _encode_node(layout.nodes[node_id]) for node_id in _display_order(layout)},
        "metadata": layout.model_dump(mode="json", include={"metadata"})["metadata"],
    }


def encode_json(layout: Layout, pretty: bool = False) -> str:
    """Encode a layout as a JSON string."""
    return json.dumps(
        encode(layout),
        indent=2 if pretty else None,
        ensure_ascii=False,
        allow_nan=False,
    )


# =============================================================================
# Migrations
# =============================================================================


def _migrate_legacy_node(node: Any) -> Any:
    if not isinstance(node, dict) or "config" not in node:
        return node
    config = node.get("config")
    if not isinstance(config, dict):
        return node
    if node.get("metadata"):
        logger.warning("Dropping per-node metadata while migrating legacy layout document")
    return {
        "widget_type": config.get("widget_type"),
        "properties": config.get("properties", {}),
        "css_classes": config.get("css_classes", []),
        "styles": config.get("inline_styles", {}),
        "children": node.get("children", []),
        "parent": node.get("parent"),
    }


def _migrate_v0_to_v1(data: dict[str, Any]) -> dict[str, Any]:
    """Legacy documents nest widget settings under ``config`` with ``inline_styles``."""
    nodes = data.get("nodes", {})
    if isinstance(nodes, dict):
        nodes = {node_id: _migrate_legacy_node(node) for node_id, node in nodes.items()}
    return {**data, "version": 1, "nodes": nodes}


# version -> function upgrading a document from that version to the next
_MIGRATIONS: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    0: _migrate_v0_to_v1,
}


def _schema_version(data: dict[str, Any]) -> int:
    if "version" not in data:
        raise MalformedDocumentError("Layout document has no 'version' field")
    version = data["version"]

    if isinstance(version, str):
        if version in LEGACY_VERSION_STRINGS:
            return LEGACY_SCHEMA_VERSION
        raise UnsupportedVersionError(version)
    if isinstance(version, bool) or not isinstance(version, int):
        raise MalformedDocumentError(f"Layout document version must be an integer, got {version!r}")
    if version < LEGACY_SCHEMA_VERSION or version > LAYOUT_SCHEMA_VERSION:
        raise UnsupportedVersionError(version)
    return version


def migrate(data: dict[str, Any]) -> dict[str, Any]:
    """
    Upgrade a parsed document to the current schema version.

    Raises:
        MalformedDocumentError: If the version field is missing or mistyped
        UnsupportedVersionError: If the version is unknown or newer than supported
    """
    version = _schema_version(data)
    while version < LAYOUT_SCHEMA_VERSION:
        logger.info(f"Migrating layout document from schema version {version}")
        data = _MIGRATIONS[version](data)
        version += 1
    return data


# =============================================================================
# Decoding
# =============================================================================


def _load_document(document: dict[str, Any] | str | bytes) -> Layout:
    data = migrate(_parse(document))

    try:
        parsed = LayoutDocument.model_validate(data)
    except ValidationError as e:
        raise MalformedDocumentError(f"Layout document does not match schema: {e}") from e

    # Round-trip through the model copy so nothing aliases the caller's dict
    return parsed.to_layout().model_copy(deep=True)


def _parse(document: dict[str, Any] | str | bytes) -> dict[str, Any]:
    if isinstance(document, (str, bytes, bytearray)):
        try:
            document = json.loads(document)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedDocumentError(f"Layout document is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise MalformedDocumentError(
            f"Layout document must be a JSON object, got {type(document).__name__}"
        )
    return document


def decode(
    document: dict[str, Any] | str | bytes,
    registry: WidgetLookup | None = None,
) -> Layout:
    """
    Decode a document into a validated Layout.

    Args:
        document: Parsed document, or JSON text
        registry: Widget lookup (standard widgets if omitted)

    Returns:
        A new Layout sharing no state with ``document``

    Raises:
        MalformedDocumentError: Not JSON, or does not match the document schema
        UnsupportedVersionError: Unknown schema version
        InvalidLayoutError: A structural invariant is broken (dangling
            reference, cycle, orphan, duplicate placement)
        UnknownWidgetTypeError, ChildrenNotAllowedError: Registry checks fail
    """
    layout = _load_document(document)
    validate_layout(layout, registry)
    return layout


def decode_snapshot(snapshot: str) -> Layout:
    """
    Decode a snapshot this package encoded itself.

    Structural invariants are re-checked; widget types are not looked up.
    """
    layout = _load_document(snapshot)
    validate_structure(layout)
    return layout
