"""Document model shared by the parser, the reconstructors and the emitter."""

from dataclasses import dataclass, field
from typing import Literal

Severity = Literal["warning", "error"]


@dataclass(frozen=True, slots=True)
class SourcePosition:
    """A 1-based line/column location in mkly source."""

    line: int
    column: int = 1


@dataclass(frozen=True, slots=True)
class SourceRange:
    """Start and end of a block in mkly source."""

    start: SourcePosition
    end: SourcePosition


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A problem found while parsing or reconstructing.

    Diagnostics are collected, never raised. A warning never stops parsing;
    an error only marks the offending property or block as invalid.

    Attributes:
        message: Human-readable description.
        line: 1-based source line the problem refers to.
        severity: "warning" or "error".
        block_type: Block type involved, if any.
        property: Property name involved, if any.
    """

    message: str
    line: int
    severity: Severity
    block_type: str | None = None
    property: str | None = None


@dataclass(frozen=True, slots=True)
class Comment:
    """An author comment (`// text`) kept for round-trip emission."""

    text: str
    line: int


@dataclass(frozen=True, slots=True)
class Block:
    """A node of the mkly block tree.

    Attributes:
        block_type: Namespaced type, e.g. "core/card".
        properties: Property map in source order.
        content: Raw body text.
        children: Child blocks (containers only).
        label: Free text after the colon of the opening marker.
        verbatim: Content must not be post-processed as markdown.
        position: Source range of the block.
        style_entries: Style lines recovered from HTML (reconstruction only).
    """

    block_type: str
    properties: dict[str, str]
    content: str
    children: tuple["Block", ...]
    position: SourceRange
    label: str | None = None
    verbatim: bool = False
    style_entries: tuple[str, ...] = ()


@dataclass(slots=True)
class ParsedBlock:
    """A block inferred from HTML, built up field by field.

    Kit parse functions return this type. `to_block` freezes it into a
    Block once reconstruction has decided where it goes.
    """

    block_type: str
    properties: dict[str, str] = field(default_factory=dict)
    content: str = ""
    children: list["ParsedBlock"] = field(default_factory=list)
    label: str | None = None
    verbatim: bool = False
    style_entries: list[str] = field(default_factory=list)

    def to_block(self, line: int) -> Block:
        """Freeze into a Block positioned at `line`.

        Children are numbered after their parent so that the ordering of
        lines still follows the ordering of the tree.
        """
        children: list[Block] = []
        next_line = line + 1
        for child in self.children:
            frozen = child.to_block(next_line)
            children.append(frozen)
            next_line = frozen.position.end.line + 1
        end_line = children[-1].position.end.line + 1 if children else line
        return Block(
            block_type=self.block_type,
            properties=dict(self.properties),
            content=self.content,
            children=tuple(children),
            position=SourceRange(SourcePosition(line), SourcePosition(end_line)),
            label=self.label,
            verbatim=self.verbatim,
            style_entries=tuple(self.style_entries),
        )


def freeze_blocks(parsed: list[ParsedBlock], start_line: int = 1) -> tuple[Block, ...]:
    """Freeze reconstructed blocks, numbering them in order from `start_line`."""
    blocks: list[Block] = []
    line = start_line
    for item in parsed:
        block = item.to_block(line)
        blocks.append(block)
        line = block.position.end.line + 1
    return tuple(blocks)


@dataclass(frozen=True, slots=True)
class InlineTheme:
    """A `--- define-theme` block: variables plus optional css text."""

    name: str
    variables: dict[str, str]
    css: str | None = None


@dataclass(frozen=True, slots=True)
class InlinePreset:
    """A `--- define-preset` block."""

    name: str
    css: str


@dataclass(frozen=True, slots=True)
class Document:
    """A parsed or reconstructed mkly document.

    Directives live in their own slots and never appear in `blocks`.
    """

    blocks: tuple[Block, ...] = ()
    uses: tuple[str, ...] = ()
    inline_themes: tuple[InlineTheme, ...] = ()
    inline_presets: tuple[InlinePreset, ...] = ()
    themes: tuple[str, ...] = ()
    presets: tuple[str, ...] = ()
    meta: dict[str, str] = field(default_factory=dict)
    styles: tuple[str, ...] = ()
    comments: tuple[Comment, ...] = ()
    version: int = 1
