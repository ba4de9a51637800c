"""
Widget Definitions

Describes the widget types a page can be built from. Rendering lives outside
this package; the tree engine only needs to know that a type exists, what its
default configuration is and whether it may hold children.

This module is the single source of truth for the standard widget set.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pagetree.models.contracts.layout import WidgetConfig


class WidgetDefinition(BaseModel):
    """A registrable widget type."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    widget_type: str = Field(min_length=1, description="Dot-namespaced type id (e.g. 'text.heading')")
    display_name: str = Field(description="Human-readable name shown in the palette")
    description: str = Field(default="", description="Short description of the widget")
    allows_children: bool = Field(default=False, description="Whether the widget is a container")
    default_config: WidgetConfig = Field(
        default_factory=WidgetConfig,
        description="Configuration a freshly inserted widget starts with",
    )


# -----------------------------------------------------------------------------
# Standard Widgets
# -----------------------------------------------------------------------------

_SPACING = "var(--wysiwyg-spacing, 8px)"
_INPUT_STYLES = {
    "width": "100%",
    "padding": "8px 12px",
    "border": "1px solid #d1d5db",
    "border-radius": "4px",
    "font-size": "14px",
}

# Registration order is palette order
STANDARD_WIDGETS: tuple[WidgetDefinition, ...] = (
    # Layout containers
    WidgetDefinition(
        widget_type="container.row",
        display_name="Row Container",
        description="Arranges child widgets horizontally in a row",
        allows_children=True,
        default_config=WidgetConfig(
            styles={"display": "flex", "flex-direction": "row", "gap": _SPACING},
        ),
    ),
    WidgetDefinition(
        widget_type="container.column",
        display_name="Column Container",
        description="Arranges child widgets vertically in a column",
        allows_children=True,
        default_config=WidgetConfig(
            styles={"display": "flex", "flex-direction": "column", "gap": _SPACING},
        ),
    ),
    WidgetDefinition(
        widget_type="container.grid",
        display_name="Grid Container",
        description="Arranges child widgets in a responsive grid",
        allows_children=True,
        default_config=WidgetConfig(
            styles={
                "display": "grid",
                "grid-template-columns": "repeat(auto-fit, minmax(200px, 1fr))",
                "gap": _SPACING,
            },
        ),
    ),
    WidgetDefinition(
        widget_type="container.card",
        display_name="Card",
        description="A styled card/panel that can contain other widgets",
        allows_children=True,
        default_config=WidgetConfig(
            properties={"title": ""},
            styles={
                "border": "1px solid #e5e7eb",
                "border-radius": "8px",
                "padding": "16px",
                "background": "#ffffff",
                "box-shadow": "0 1px 3px rgba(0,0,0,0.1)",
            },
        ),
    ),
    WidgetDefinition(
        widget_type="layout.spacer",
        display_name="Spacer",
        description="Empty space for layout control",
        default_config=WidgetConfig(properties={"height": 20}, styles={"width": "100%"}),
    ),
    # Text
    WidgetDefinition(
        widget_type="text.heading",
        display_name="Heading",
        description="Heading element (H1-H6)",
        default_config=WidgetConfig(properties={"content": "Heading", "level": 1}),
    ),
    WidgetDefinition(
        widget_type="text.paragraph",
        display_name="Paragraph",
        description="Paragraph of text with optional Markdown support",
        default_config=WidgetConfig(
            properties={
                "content": "This is a paragraph of text. You can edit it in the configuration panel.",
                "markdown": False,
            },
        ),
    ),
    WidgetDefinition(
        widget_type="text",
        display_name="Text",
        description="Rich text with formatting support",
        default_config=WidgetConfig(
            properties={
                "content": "Enter text here...",
                "bold": False,
                "italic": False,
                "underline": False,
            },
        ),
    ),
    # Interactive
    WidgetDefinition(
        widget_type="basic.button",
        display_name="Button",
        description="A clickable button",
        default_config=WidgetConfig(
            properties={"text": "Click me", "variant": "primary"},
            styles={
                "padding": "8px 16px",
                "border": "none",
                "border-radius": "4px",
                "cursor": "pointer",
                "font-size": "14px",
                "font-weight": "500",
            },
        ),
    ),
    WidgetDefinition(
        widget_type="basic.link",
        display_name="Link",
        description="A clickable link container - put images, text, or any widget inside",
        allows_children=True,
        default_config=WidgetConfig(
            properties={"href": "https://example.com", "target": "_self"},
            styles={
                "color": "#3b82f6",
                "text-decoration": "none",
                "cursor": "pointer",
                "display": "inline-block",
            },
        ),
    ),
    WidgetDefinition(
        widget_type="basic.image",
        display_name="Image",
        description="An image with configurable source and alt text",
        default_config=WidgetConfig(
            properties={"src": "https://via.placeholder.com/400x300", "alt": "Placeholder image"},
            styles={"max-width": "100%", "height": "auto", "display": "block"},
        ),
    ),
    # Forms
    WidgetDefinition(
        widget_type="form.textinput",
        display_name="Text Input",
        description="Single-line text input field",
        default_config=WidgetConfig(
            properties={"placeholder": "Enter text...", "label": "", "type": "text"},
            styles=dict(_INPUT_STYLES),
        ),
    ),
    WidgetDefinition(
        widget_type="form.textarea",
        display_name="Text Area",
        description="Multi-line text input field",
        default_config=WidgetConfig(
            properties={"placeholder": "Enter text...", "label": "", "rows": 4},
            styles={**_INPUT_STYLES, "font-family": "inherit", "resize": "vertical"},
        ),
    ),
    WidgetDefinition(
        widget_type="form.checkbox",
        display_name="Checkbox",
        description="Checkbox input field",
        default_config=WidgetConfig(properties={"label": "Check me", "checked": False}),
    ),
    # Other
    WidgetDefinition(
        widget_type="basic.divider",
        display_name="Divider",
        description="A horizontal line to separate content",
        default_config=WidgetConfig(
            properties={"thickness": "1", "color": "#e5e7eb"},
            styles={"margin": "16px 0"},
        ),
    ),
)
