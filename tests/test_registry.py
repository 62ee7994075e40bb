"""Unit tests for the component registry.

WHY: The engine's skip-or-mount decision rests entirely on the
registry. A rebinding that left stale metadata, or a lookup that
raised for unknown names, would break the "render nothing, proceed"
contract.

RULES:
- Each test builds its own registry (no process-wide singleton)
"""

from ui_assembly.core.registry import ComponentMetadata, ComponentRegistry, RemoteComponent
from ui_assembly.mapping.catalog import COMPONENT_CATALOG, DEFAULT_RULES, register_defaults
from ui_assembly.mapping.rules import AddEffect


class TestRegisterAndLookup:
    """register() binds names; get()/has() look them up."""

    def test_register_then_get(self):
        registry = ComponentRegistry()
        capability = object()
        registry.register("ProductGrid", capability)
        assert registry.get("ProductGrid") is capability
        assert registry.has("ProductGrid")
        assert "ProductGrid" in registry

    def test_unknown_name_is_absent_not_error(self):
        registry = ComponentRegistry()
        assert registry.get("Nope") is None
        assert registry.get_metadata("Nope") is None
        assert not registry.has("Nope")

    def test_list_names_in_registration_order(self):
        registry = ComponentRegistry()
        registry.register("B", 1)
        registry.register("A", 2)
        assert registry.list_names() == ["B", "A"]
        assert len(registry) == 2

    def test_capability_shape_not_validated(self):
        registry = ComponentRegistry()
        registry.register("Weird", None)
        assert registry.has("Weird")


class TestRebinding:
    """Registering a name again replaces capability and metadata together."""

    def test_rebind_replaces_capability(self):
        registry = ComponentRegistry()
        registry.register("X", "first", ComponentMetadata(description="one"))
        registry.register("X", "second", ComponentMetadata(description="two"))
        assert registry.get("X") == "second"
        assert registry.get_metadata("X").description == "two"
        assert registry.list_names() == ["X"]

    def test_rebind_without_metadata_drops_old_metadata(self):
        registry = ComponentRegistry()
        registry.register("X", "first", ComponentMetadata(description="one"))
        registry.register("X", "second")
        assert registry.get("X") == "second"
        assert registry.get_metadata("X") is None


class TestDefaultCatalog:
    """register_defaults() covers every type the default rules emit."""

    def test_registers_remote_components(self):
        registry = register_defaults(ComponentRegistry())
        assert registry.get("WelcomeHero") == RemoteComponent("WelcomeHero")
        assert len(registry) == len(COMPONENT_CATALOG)

    def test_every_rule_type_is_in_catalog(self):
        for rule in DEFAULT_RULES:
            if isinstance(rule.effect, AddEffect):
                for definition in rule.effect.components:
                    assert definition.type in COMPONENT_CATALOG, definition.type

    def test_fallback_type_is_in_catalog(self):
        assert "HelpPanel" in COMPONENT_CATALOG
