"""Tests for kits, the block registry and YAML kit loading."""

from pathlib import Path

import pytest

from mkly import (
    CORE_KIT,
    BlockDefinition,
    BlockRegistry,
    Kit,
    KitDefinitionError,
    default_registry,
    kit_from_mapping,
    load_kit,
)
from mkly.schemas import HeadingProperties, ImageProperties, validate_properties

NEWSLETTER_YAML = """\
name: newsletter
blocks:
  - name: category
    content_mode: mixed
    container: true
    content_hints:
      content_props: [title]
      content_children: true
  - name: quickHits
    content_mode: text
reverse:
  - css_class: mkly-newsletter-category
    block_type: newsletter/category
"""


class TestCoreKit:
    """The built-in core kit."""

    def test_core_content_modes(self) -> None:
        """Core types have their documented content modes."""
        registry = default_registry()

        assert registry.content_mode("core/heading") == "mixed"
        assert registry.content_mode("core/text") == "text"
        assert registry.content_mode("core/image") == "properties"
        assert registry.content_mode("core/list") == "text"
        assert registry.content_mode("core/html") == "verbatim"

    def test_only_section_is_container(self) -> None:
        """core/section is the only core container."""
        assert default_registry().container_types() == frozenset({"core/section"})

    def test_sixteen_core_types(self) -> None:
        """The core kit defines sixteen block types."""
        assert len(CORE_KIT.blocks) == 16
        assert len(default_registry().block_types()) == 16

    def test_reverse_classes(self) -> None:
        """Every core type maps back from its mkly-core-* class."""
        mapping = {handler.css_class: handler.block_type for handler in CORE_KIT.reverse}

        assert mapping["mkly-core-card"] == "core/card"
        assert len(mapping) == 16


class TestBlockRegistry:
    """Registry lookups."""

    def test_unknown_type_defaults(self) -> None:
        """Unknown types are mixed non-containers without schema."""
        registry = BlockRegistry()

        assert registry.content_mode("acme/thing") == "mixed"
        assert registry.is_container("acme/thing") is False
        assert registry.schema("acme/thing") is None
        assert registry.has("acme/thing") is False

    def test_later_kit_overrides(self) -> None:
        """A later kit redefining a qualified name replaces it."""
        first = Kit(name="acme", blocks=(BlockDefinition("box", "text"),))
        second = Kit(name="acme", blocks=(BlockDefinition("box", "verbatim"),))
        registry = BlockRegistry((first, second))

        assert registry.content_mode("acme/box") == "verbatim"
        assert registry.kits == (first, second)

    def test_register_chains(self) -> None:
        """register returns the registry."""
        registry = BlockRegistry()

        assert registry.register(CORE_KIT) is registry
        assert registry.has("core/card")


class TestLoadKit:
    """Loading kit definitions from YAML."""

    def test_load_kit(self, tmp_path: Path) -> None:
        """Blocks and reverse entries are read from YAML."""
        path = tmp_path / "newsletter.yaml"
        path.write_text(NEWSLETTER_YAML, encoding="utf-8")

        kit = load_kit(path)

        assert kit.name == "newsletter"
        assert [block.name for block in kit.blocks] == ["category", "quickHits"]
        category = kit.blocks[0]
        assert category.is_container is True
        assert category.content_hints.content_props == ("title",)
        assert category.content_hints.content_children is True
        assert kit.reverse[0].block_type == "newsletter/category"

    def test_loaded_kit_parses(self, tmp_path: Path) -> None:
        """A loaded kit drives the registry."""
        path = tmp_path / "newsletter.yaml"
        path.write_text(NEWSLETTER_YAML, encoding="utf-8")

        registry = default_registry(load_kit(str(path)))

        assert registry.is_container("newsletter/category") is True
        assert registry.content_mode("newsletter/quickHits") == "text"

    def test_missing_file(self, tmp_path: Path) -> None:
        """An unreadable file raises KitDefinitionError with the path."""
        path = tmp_path / "missing.yaml"

        with pytest.raises(KitDefinitionError) as exc_info:
            load_kit(path)

        assert str(path) in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Malformed YAML raises KitDefinitionError."""
        path = tmp_path / "broken.yaml"
        path.write_text("name: [unclosed\n", encoding="utf-8")

        with pytest.raises(KitDefinitionError):
            load_kit(path)

    def test_unknown_content_mode(self) -> None:
        """An unknown content mode is rejected."""
        with pytest.raises(KitDefinitionError, match="unknown content_mode"):
            kit_from_mapping({"name": "acme", "blocks": [{"name": "box", "content_mode": "fancy"}]})

    def test_missing_name(self) -> None:
        """A kit needs a name."""
        with pytest.raises(KitDefinitionError, match="requires a name"):
            kit_from_mapping({"blocks": []})

    def test_not_a_mapping(self) -> None:
        """The top level must be a mapping."""
        with pytest.raises(KitDefinitionError):
            kit_from_mapping(["name", "acme"])

    def test_bad_reverse_entry(self) -> None:
        """Reverse entries need both keys."""
        with pytest.raises(KitDefinitionError):
            kit_from_mapping({"name": "acme", "reverse": [{"css_class": "mkly-acme-box"}]})

    def test_default_mode_is_mixed(self) -> None:
        """Blocks without content_mode are mixed."""
        kit = kit_from_mapping({"name": "acme", "blocks": [{"name": "box"}]})

        assert kit.blocks[0].content_mode == "mixed"


class TestSchemas:
    """Property schema validation."""

    def test_valid_properties(self) -> None:
        """Valid maps produce no failures."""
        assert validate_properties(ImageProperties, {"src": "a.jpg", "data-x": "1"}) == []

    def test_failure_names_property(self) -> None:
        """Each failure names its property."""
        failures = validate_properties(HeadingProperties, {"level": "nine"})

        assert [prop for prop, _ in failures] == ["level"]
