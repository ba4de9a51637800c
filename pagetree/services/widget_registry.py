"""
Widget Registry

Lookup of known widget types. The layout engine depends only on the
``WidgetLookup`` protocol; ``WidgetRegistry`` is the in-process implementation
that ships with the standard widget set.
"""

import logging
from typing import Protocol, runtime_checkable

from pagetree.core.exceptions import UnknownWidgetTypeError, WidgetAlreadyRegisteredError
from pagetree.models.contracts.layout import WidgetConfig
from pagetree.models.contracts.widgets import STANDARD_WIDGETS, WidgetDefinition

logger = logging.getLogger(__name__)


@runtime_checkable
class WidgetLookup(Protocol):
    """What the tree engine needs to know about widget types."""

    def has_type(self, widget_type: str) -> bool: ...

    def default_config(self, widget_type: str) -> WidgetConfig: ...

    def allows_children(self, widget_type: str) -> bool: ...


class WidgetRegistry:
    """
    Ordered registry of widget definitions.

    Registration order is preserved (palette order).
    """

    def __init__(self, definitions: list[WidgetDefinition] | None = None):
        self._definitions: dict[str, WidgetDefinition] = {}
        for definition in definitions or []:
            self.register(definition)

    @classmethod
    def with_standard_widgets(cls) -> "WidgetRegistry":
        """Create a registry pre-populated with the standard widget set."""
        return cls(list(STANDARD_WIDGETS))

    def register(self, definition: WidgetDefinition) -> None:
        """
        Register a widget type.

        Raises:
            WidgetAlreadyRegisteredError: If the type is already registered
        """
        if definition.widget_type in self._definitions:
            raise WidgetAlreadyRegisteredError(definition.widget_type)
        self._definitions[definition.widget_type] = definition
        logger.debug(f"Registered widget type '{definition.widget_type}'")

    def get(self, widget_type: str) -> WidgetDefinition:
        """
        Get the definition for a widget type.

        Raises:
            UnknownWidgetTypeError: If the type is not registered
        """
        definition = self._definitions.get(widget_type)
        if definition is None:
            raise UnknownWidgetTypeError(widget_type)
        return definition

    def widget_types(self) -> list[str]:
        """All registered widget types, in registration order."""
        return list(self._definitions)

    def definitions(self) -> list[WidgetDefinition]:
        return list(self._definitions.values())

    # =========================================================================
    # WidgetLookup
    # =========================================================================

    def has_type(self, widget_type: str) -> bool:
        return widget_type in self._definitions

    def default_config(self, widget_type: str) -> WidgetConfig:
        """Fresh copy of the default configuration for ``widget_type``."""
        return self.get(widget_type).default_config.model_copy(deep=True)

    def allows_children(self, widget_type: str) -> bool:
        return self.get(widget_type).allows_children

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, widget_type: object) -> bool:
        return widget_type in self._definitions
