"""
Pydantic contracts for layouts and widget definitions.
"""

from pagetree.models.contracts.layout import Layout, LayoutDocument, LayoutNode, WidgetConfig
from pagetree.models.contracts.widgets import STANDARD_WIDGETS, WidgetDefinition

__all__ = [
    "Layout",
    "LayoutDocument",
    "LayoutNode",
    "STANDARD_WIDGETS",
    "WidgetConfig",
    "WidgetDefinition",
]
