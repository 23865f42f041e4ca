"""Kit contract: block definitions, reverse handlers and import patterns.

A kit is a named bundle of block types. Parsing needs each type's content
mode and container flag; reconstruction needs the CSS class that marks the
type in generated HTML and, optionally, a custom element parser; the foreign
HTML path accepts detect/parse pattern pairs.

Kits are normally built in code. `load_kit` reads the declarative part
(blocks and reverse class entries) from a YAML file.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, get_args

import yaml
from pydantic import BaseModel

from mkly.document import ParsedBlock
from mkly.exceptions import KitDefinitionError

logger = logging.getLogger(__name__)

ContentMode = Literal["text", "properties", "mixed", "verbatim"]

CONTENT_MODES: tuple[ContentMode, ...] = get_args(ContentMode)


@dataclass(frozen=True, slots=True)
class ContentHints:
    """Which parts of a block are editorial rather than structural.

    Attributes:
        content_props: Properties holding editorial content.
        content_body: Whether the body text is editorial.
        content_children: Whether all children are editorial.
    """

    content_props: tuple[str, ...] = ()
    content_body: bool = False
    content_children: bool = False


@dataclass(frozen=True, slots=True)
class BlockDefinition:
    """Parsing contract for one block type.

    Attributes:
        name: Unqualified name; the registry qualifies it as "kit/name".
        content_mode: How lines after the opening marker are absorbed.
        is_container: Whether the block may hold child blocks.
        content_hints: Editorial/structural hints for template tooling.
        schema: Optional pydantic model validating the property map.
    """

    name: str
    content_mode: ContentMode
    is_container: bool = False
    content_hints: ContentHints = field(default_factory=ContentHints)
    schema: type[BaseModel] | None = None


@dataclass(frozen=True, slots=True)
class ReverseHandler:
    """Maps a generated CSS class back to a block type."""

    css_class: str
    block_type: str
    parse: Callable[[str], ParsedBlock] | None = None


@dataclass(frozen=True, slots=True)
class ImportPattern:
    """A detect/parse pair tried on foreign HTML segments before the built-ins."""

    name: str
    block_type: str
    detect: Callable[[str], bool]
    parse: Callable[[str], ParsedBlock]


@dataclass(frozen=True, slots=True)
class Kit:
    """A named bundle of block definitions and reverse mappings."""

    name: str
    blocks: tuple[BlockDefinition, ...] = ()
    reverse: tuple[ReverseHandler, ...] = ()
    import_patterns: tuple[ImportPattern, ...] = ()


class BlockRegistry:
    """Lookup of block definitions by qualified type name.

    Kits are registered in order; a later kit redefining a qualified name
    replaces the earlier definition.
    """

    def __init__(self, kits: Iterable[Kit] = ()) -> None:
        self._definitions: dict[str, BlockDefinition] = {}
        self._kits: list[Kit] = []
        for kit in kits:
            self.register(kit)

    def register(self, kit: Kit) -> "BlockRegistry":
        """Register every block of a kit under "kit/name"."""
        self._kits.append(kit)
        for definition in kit.blocks:
            self._definitions[f"{kit.name}/{definition.name}"] = definition
        return self

    @property
    def kits(self) -> tuple[Kit, ...]:
        """Registered kits in registration order."""
        return tuple(self._kits)

    def get(self, block_type: str) -> BlockDefinition | None:
        return self._definitions.get(block_type)

    def has(self, block_type: str) -> bool:
        return block_type in self._definitions

    def content_mode(self, block_type: str) -> ContentMode:
        """Content mode of a type; unknown types parse as mixed."""
        definition = self._definitions.get(block_type)
        return definition.content_mode if definition else "mixed"

    def is_container(self, block_type: str) -> bool:
        definition = self._definitions.get(block_type)
        return definition.is_container if definition else False

    def schema(self, block_type: str) -> type[BaseModel] | None:
        definition = self._definitions.get(block_type)
        return definition.schema if definition else None

    def container_types(self) -> frozenset[str]:
        return frozenset(name for name, d in self._definitions.items() if d.is_container)

    def block_types(self) -> tuple[str, ...]:
        return tuple(self._definitions)


def load_kit(path: Path | str) -> Kit:
    """Load the declarative part of a kit from a YAML file.

    Expected layout::

        name: newsletter
        blocks:
          - name: category
            content_mode: mixed
            container: true
        reverse:
          - css_class: mkly-newsletter-category
            block_type: newsletter/category

    Args:
        path: YAML file to read.

    Returns:
        The Kit described by the file.

    Raises:
        KitDefinitionError: If the file cannot be read or is malformed.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        raise KitDefinitionError(message=f"Cannot read kit file: {exc}", path=str(path)) from exc
    except yaml.YAMLError as exc:
        raise KitDefinitionError(message=f"Invalid YAML: {exc}", path=str(path)) from exc

    kit = kit_from_mapping(data, source=str(path))
    logger.debug("Loaded kit %s with %d blocks from %s", kit.name, len(kit.blocks), path)
    return kit


def kit_from_mapping(data: Any, *, source: str | None = None) -> Kit:
    """Build a Kit from an already-decoded mapping (see `load_kit`)."""
    if not isinstance(data, Mapping):
        raise KitDefinitionError(message="Kit definition must be a mapping", path=source)

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise KitDefinitionError(message="Kit definition requires a name", path=source)

    blocks = tuple(_block_from_mapping(entry, source) for entry in data.get("blocks") or ())
    reverse = tuple(_reverse_from_mapping(entry, source) for entry in data.get("reverse") or ())
    return Kit(name=name, blocks=blocks, reverse=reverse)


def _block_from_mapping(entry: Any, source: str | None) -> BlockDefinition:
    if not isinstance(entry, Mapping) or not isinstance(entry.get("name"), str):
        raise KitDefinitionError(message=f"Block entry needs a name: {entry!r}", path=source)

    mode = entry.get("content_mode", "mixed")
    if mode not in CONTENT_MODES:
        raise KitDefinitionError(
            message=f'Block "{entry["name"]}" has unknown content_mode "{mode}"',
            path=source,
        )

    hints = entry.get("content_hints") or {}
    return BlockDefinition(
        name=entry["name"],
        content_mode=mode,
        is_container=bool(entry.get("container", False)),
        content_hints=ContentHints(
            content_props=tuple(hints.get("content_props") or ()),
            content_body=bool(hints.get("content_body", False)),
            content_children=bool(hints.get("content_children", False)),
        ),
    )


def _reverse_from_mapping(entry: Any, source: str | None) -> ReverseHandler:
    if (
        not isinstance(entry, Mapping)
        or not isinstance(entry.get("css_class"), str)
        or not isinstance(entry.get("block_type"), str)
    ):
        raise KitDefinitionError(
            message=f"Reverse entry needs css_class and block_type: {entry!r}",
            path=source,
        )
    return ReverseHandler(css_class=entry["css_class"], block_type=entry["block_type"])
