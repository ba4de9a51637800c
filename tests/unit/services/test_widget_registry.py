"""
Unit tests for WidgetRegistry.
"""

import pytest

from pagetree.core.exceptions import UnknownWidgetTypeError, WidgetAlreadyRegisteredError
from pagetree.models.contracts.layout import WidgetConfig
from pagetree.models.contracts.widgets import STANDARD_WIDGETS, WidgetDefinition
from pagetree.services.widget_registry import WidgetLookup, WidgetRegistry


class TestStandardWidgets:
    """The bundled widget set."""

    def test_all_registered_in_order(self, registry):
        assert registry.widget_types() == [d.widget_type for d in STANDARD_WIDGETS]
        assert len(registry) == len(STANDARD_WIDGETS)

    @pytest.mark.parametrize(
        "widget_type",
        ["container.row", "container.column", "container.grid", "container.card", "basic.link"],
    )
    def test_containers(self, registry, widget_type):
        assert registry.allows_children(widget_type)

    @pytest.mark.parametrize(
        "widget_type",
        ["text.heading", "text.paragraph", "basic.button", "basic.image", "form.checkbox"],
    )
    def test_leaves(self, registry, widget_type):
        assert not registry.allows_children(widget_type)

    def test_satisfies_lookup_protocol(self, registry):
        assert isinstance(registry, WidgetLookup)


class TestRegistration:
    """Tests for register / get"""

    def test_register_custom_widget(self):
        registry = WidgetRegistry()
        definition = WidgetDefinition(
            widget_type="custom.banner",
            display_name="Banner",
            default_config=WidgetConfig(properties={"text": "Sale"}),
        )

        registry.register(definition)

        assert "custom.banner" in registry
        assert registry.get("custom.banner") == definition
        assert registry.default_config("custom.banner").properties == {"text": "Sale"}

    def test_duplicate_registration(self, registry):
        with pytest.raises(WidgetAlreadyRegisteredError):
            registry.register(WidgetDefinition(widget_type="text", display_name="Again"))

    def test_unknown_type(self, registry):
        assert not registry.has_type("widget.nope")
        with pytest.raises(UnknownWidgetTypeError):
            registry.get("widget.nope")
        with pytest.raises(UnknownWidgetTypeError):
            registry.allows_children("widget.nope")

    def test_default_config_is_a_fresh_copy(self, registry):
        config = registry.default_config("text.heading")
        config.properties["content"] = "Changed"

        assert registry.default_config("text.heading").properties["content"] == "Heading"
