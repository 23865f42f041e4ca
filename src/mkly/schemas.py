"""Property schemas for the core block types.

Every property value arrives as a string. Models allow unknown keys so
that styling and kit-specific properties pass through untouched; only the
fields declared here are checked.
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class BlockProperties(BaseModel):
    """Base for block property schemas."""

    model_config = ConfigDict(extra="allow")


class HeadingProperties(BlockProperties):
    level: int | None = Field(default=None, ge=1, le=6)
    text: str | None = None


class ImageProperties(BlockProperties):
    src: str
    alt: str | None = None
    url: str | None = None
    width: str | None = None


class ButtonProperties(BlockProperties):
    url: str | None = None
    href: str | None = None
    label: str | None = None


class SpacerProperties(BlockProperties):
    height: str = Field(pattern=r"(?i)^\d+(\.\d+)?(px|em|rem|%|vh)?$")


class CodeProperties(BlockProperties):
    lang: str | None = None


class QuoteProperties(BlockProperties):
    author: str | None = None


class HeroProperties(BlockProperties):
    image: str | None = None
    src: str | None = None
    alt: str | None = None


class SectionProperties(BlockProperties):
    title: str | None = None


class CardProperties(BlockProperties):
    image: str | None = None
    link: str | None = None
    url: str | None = None


class HeaderProperties(BlockProperties):
    logo: str | None = None
    title: str | None = None


class CtaProperties(BlockProperties):
    url: str | None = None
    href: str | None = None
    buttonText: str | None = None
    label: str | None = None


class HtmlProperties(BlockProperties):
    prettify: str | None = Field(default=None, pattern=r"^(true|false)$")


def validate_properties(
    schema: type[BaseModel], properties: dict[str, str]
) -> list[tuple[str | None, str]]:
    """Validate a property map against a schema.

    Args:
        schema: Pydantic model describing the block's properties.
        properties: Raw property map of a parsed block.

    Returns:
        (property, message) pairs, one per failure. Property is None when
        the failure is not tied to a single field.
    """
    try:
        schema.model_validate(properties)
    except ValidationError as exc:
        failures = []
        for error in exc.errors():
            path = ".".join(str(part) for part in error["loc"])
            failures.append((path or None, error["msg"]))
        return failures
    return []
