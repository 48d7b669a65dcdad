"""Tests for the schema registry."""

import json

import pytest
import yaml

from sdvalidator.exceptions import RegistryLoadError
from sdvalidator.schema_registry import (
    SchemaRegistry,
    TypeDefinition,
    default_registry,
    load_registry,
)


class TestDefaultRegistry:
    """Test cases for the built-in table."""

    def test_core_types_present(self, registry):
        """Test the commonly validated types are known."""
        for name in ("Product", "Offer", "BreadcrumbList", "ListItem", "FAQPage",
                     "Question", "Answer", "Organization", "LocalBusiness", "Article"):
            assert name in registry

    def test_cached_and_immutable(self):
        """Test the default registry is one shared immutable value."""
        registry = default_registry()

        assert default_registry() is registry
        with pytest.raises(TypeError):
            registry.get("Product").property_types["name"] = ("Number",)

    def test_required_properties(self, registry):
        """Test required lists come from the definitions."""
        assert registry.get("Offer").required == ("price", "priceCurrency")
        assert registry.get("WebSite").required == ("name", "url")

    def test_inherited_property_types(self, registry):
        """Test subtypes inherit their parents' property kinds."""
        local_business = registry.property_types("LocalBusiness")
        blog_posting = registry.property_types("BlogPosting")

        assert "foundingDate" in local_business
        assert "sameAs" in blog_posting
        assert "headline" in registry.property_types("NewsArticle")

    def test_property_types_for_union(self, registry):
        """Test the union of kinds across several types."""
        union = registry.property_types_for(["Product", "Offer", "NotAType"])

        assert union["price"] == ("Number",)
        assert union["name"] == ("Text",)
        assert "url" in union

    def test_unknown_type(self, registry):
        """Test unknown names are tolerated."""
        assert registry.get("NotAType") is None
        assert dict(registry.property_types("NotAType")) == {}


class TestRegistryConstruction:
    """Test cases for building registries."""

    def test_from_mapping_bare(self):
        """Test a bare name mapping is accepted."""
        registry = SchemaRegistry.from_mapping({
            "Widget": {"properties": {"color": "Text", "size": ["Number", "Text"]},
                       "required": ["color"]},
        })

        definition = registry.get("Widget")
        assert definition.required == ("color",)
        assert definition.property_types["size"] == ("Number", "Text")

    def test_from_mapping_rejects_bad_shapes(self):
        """Test invalid definitions raise RegistryLoadError."""
        with pytest.raises(RegistryLoadError):
            SchemaRegistry.from_mapping({"types": {"Widget": {"required": "color"}}})
        with pytest.raises(RegistryLoadError):
            SchemaRegistry.from_mapping({"Widget": {"properties": {"color": []}}})
        with pytest.raises(RegistryLoadError):
            SchemaRegistry.from_mapping(["Widget"])

    def test_with_definitions(self, registry):
        """Test adding a definition returns a new registry."""
        widget = TypeDefinition(name="Widget", required=("color", "color"))
        extended = registry.with_definitions(widget)

        assert "Widget" in extended
        assert "Widget" not in registry
        assert extended.get("Widget").required == ("color",)
        assert len(extended) == len(registry) + 1

    def test_extends_cycle_is_safe(self):
        """Test a cycle in extends does not loop forever."""
        registry = SchemaRegistry([
            TypeDefinition(name="A", property_types={"a": ("Text",)}, extends="B"),
            TypeDefinition(name="B", property_types={"b": ("Text",)}, extends="A"),
        ])

        assert set(registry.property_types("A")) == {"a", "b"}

    def test_to_dict_round_trip(self, registry):
        """Test to_dict output loads back into an equal table."""
        reloaded = SchemaRegistry.from_mapping(registry.to_dict())

        assert reloaded.type_names == registry.type_names
        assert reloaded.get("Product") == registry.get("Product")


class TestRegistryFiles:
    """Test cases for loading registry files."""

    def test_yaml_file(self, tmp_path):
        """Test YAML registries are read by suffix."""
        path = tmp_path / "types.yaml"
        path.write_text(yaml.safe_dump({
            "types": {"Recipe": {"properties": {"name": "Text"}, "required": ["name", "recipeYield"]}}
        }))

        registry = SchemaRegistry.from_file(path)

        assert registry.type_names == ["Recipe"]
        assert registry.get("Recipe").required == ("name", "recipeYield")

    def test_json_file_merged_with_default(self, tmp_path):
        """Test merge_default overlays file types on the built-in table."""
        path = tmp_path / "types.json"
        path.write_text(json.dumps({"Widget": {"properties": {"color": "Text"}}}))

        registry = SchemaRegistry.from_file(path, merge_default=True)

        assert "Widget" in registry
        assert "Product" in registry

    def test_missing_file(self, tmp_path):
        """Test a missing file raises RegistryLoadError."""
        with pytest.raises(RegistryLoadError):
            SchemaRegistry.from_file(tmp_path / "missing.yaml")

    def test_malformed_yaml(self, tmp_path):
        """Test unparseable YAML raises RegistryLoadError."""
        path = tmp_path / "broken.yml"
        path.write_text("types: [unclosed")

        with pytest.raises(RegistryLoadError):
            SchemaRegistry.from_file(path)

    def test_load_registry_without_path(self, monkeypatch):
        """Test load_registry falls back to the built-in table."""
        monkeypatch.setattr("sdvalidator.schema_registry.settings.REGISTRY_FILE", None)
        assert load_registry() is default_registry()
