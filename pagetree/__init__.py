"""
pagetree

Document-tree model for a visual page builder: a validated tree of typed
widget nodes with structural edits, lossless JSON persistence and bounded
undo/redo.
"""

from pagetree.core.exceptions import (
    ChildrenNotAllowedError,
    CycleDetectedError,
    DanglingReferenceError,
    DuplicateRootOrParentError,
    InvalidConfigError,
    InvalidLayoutError,
    LayoutDecodeError,
    LayoutError,
    MalformedDocumentError,
    NodeNotFoundError,
    OrphanNodeError,
    UnknownWidgetTypeError,
    UnsupportedVersionError,
    WidgetAlreadyRegisteredError,
)
from pagetree.models.contracts import Layout, LayoutNode, WidgetConfig, WidgetDefinition
from pagetree.services.layout_codec import decode, encode, encode_json
from pagetree.services.layout_editor import LayoutEditor
from pagetree.services.layout_engine import LayoutEngine
from pagetree.services.layout_history import LayoutHistory
from pagetree.services.tree_validator import find_violation, validate_tree
from pagetree.services.widget_registry import WidgetLookup, WidgetRegistry

__version__ = "0.1.0"

__all__ = [
    "ChildrenNotAllowedError",
    "CycleDetectedError",
    "DanglingReferenceError",
    "DuplicateRootOrParentError",
    "InvalidConfigError",
    "InvalidLayoutError",
    "Layout",
    "LayoutDecodeError",
    "LayoutEditor",
    "LayoutEngine",
    "LayoutError",
    "LayoutHistory",
    "LayoutNode",
    "MalformedDocumentError",
    "NodeNotFoundError",
    "OrphanNodeError",
    "UnknownWidgetTypeError",
    "UnsupportedVersionError",
    "WidgetAlreadyRegisteredError",
    "WidgetConfig",
    "WidgetDefinition",
    "WidgetLookup",
    "WidgetRegistry",
    "decode",
    "encode",
    "encode_json",
    "find_violation",
    "validate_tree",
]
