"""The built-in `core` kit."""

from mkly.kits import BlockDefinition, BlockRegistry, ContentHints, Kit, ReverseHandler
from mkly.schemas import (
    BlockProperties,
    ButtonProperties,
    CardProperties,
    CodeProperties,
    CtaProperties,
    HeaderProperties,
    HeadingProperties,
    HeroProperties,
    HtmlProperties,
    ImageProperties,
    QuoteProperties,
    SectionProperties,
    SpacerProperties,
)

# heading is mixed rather than text so that a `level:` line stays a property
_CORE_BLOCKS = (
    BlockDefinition(
        "heading",
        "mixed",
        content_hints=ContentHints(content_props=("text",), content_body=True),
        schema=HeadingProperties,
    ),
    BlockDefinition("text", "text", content_hints=ContentHints(content_body=True), schema=BlockProperties),
    BlockDefinition(
        "image",
        "properties",
        content_hints=ContentHints(content_props=("src", "alt", "url")),
        schema=ImageProperties,
    ),
    BlockDefinition(
        "button",
        "mixed",
        content_hints=ContentHints(content_props=("url", "label"), content_body=True),
        schema=ButtonProperties,
    ),
    BlockDefinition("divider", "properties", schema=BlockProperties),
    BlockDefinition("spacer", "properties", schema=SpacerProperties),
    BlockDefinition("code", "mixed", content_hints=ContentHints(content_body=True), schema=CodeProperties),
    BlockDefinition(
        "quote",
        "mixed",
        content_hints=ContentHints(content_props=("author",), content_body=True),
        schema=QuoteProperties,
    ),
    BlockDefinition(
        "hero",
        "mixed",
        content_hints=ContentHints(content_props=("image", "alt"), content_body=True),
        schema=HeroProperties,
    ),
    BlockDefinition(
        "section",
        "mixed",
        is_container=True,
        content_hints=ContentHints(content_props=("title",), content_children=True),
        schema=SectionProperties,
    ),
    BlockDefinition(
        "card",
        "mixed",
        content_hints=ContentHints(content_props=("image", "link"), content_body=True),
        schema=CardProperties,
    ),
    BlockDefinition("list", "text", content_hints=ContentHints(content_body=True), schema=BlockProperties),
    BlockDefinition(
        "header",
        "mixed",
        content_hints=ContentHints(content_props=("logo", "title"), content_body=True),
        schema=HeaderProperties,
    ),
    BlockDefinition("footer", "mixed", content_hints=ContentHints(content_body=True), schema=BlockProperties),
    BlockDefinition(
        "cta",
        "mixed",
        content_hints=ContentHints(content_props=("url", "buttonText"), content_body=True),
        schema=CtaProperties,
    ),
    BlockDefinition("html", "verbatim", schema=HtmlProperties),
)

CORE_KIT = Kit(
    name="core",
    blocks=_CORE_BLOCKS,
    reverse=tuple(
        ReverseHandler(css_class=f"mkly-core-{definition.name}", block_type=f"core/{definition.name}")
        for definition in _CORE_BLOCKS
    ),
)


def default_registry(*kits: Kit) -> BlockRegistry:
    """Registry holding the core kit followed by `kits`."""
    return BlockRegistry((CORE_KIT, *kits))
