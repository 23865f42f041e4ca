"""Canonical mkly source from a Document.

Sections are written in a fixed order: uses, inline theme/preset
definitions, theme activations, preset activations, meta, style blocks and
then content blocks. Sections are separated by one blank line and the
output ends with a newline.
"""

import re

from mkly.core_kit import default_registry
from mkly.document import Block, Comment, Document, InlinePreset, InlineTheme
from mkly.kits import BlockRegistry

# Content lines that would read back as comments; already escaped ones too
_COMMENT_SHAPED_LINE = re.compile(r"^([ \t]*)(\\*//)", re.MULTILINE)


class Emitter:
    """Serializes Documents back to mkly source."""

    def __init__(self, *, registry: BlockRegistry | None = None) -> None:
        """Initialize the emitter.

        Args:
            registry: Used to decide which block types always get a closing
                marker; defaults to the core kit.
        """
        self.registry = registry if registry is not None else default_registry()

    def emit(self, document: Document) -> str:
        """Emit canonical mkly source.

        Args:
            document: Parsed or reconstructed document.

        Returns:
            mkly source, or an empty string for an empty document.
        """
        sections: list[str] = []

        if document.uses:
            sections.append("\n".join(f"--- use: {name}" for name in document.uses))
        sections.extend(_emit_theme_definition(theme) for theme in document.inline_themes)
        sections.extend(_emit_preset_definition(preset) for preset in document.inline_presets)
        if document.themes:
            sections.append("\n".join(f"--- theme: {name}" for name in document.themes))
        if document.presets:
            sections.append("\n".join(f"--- preset: {name}" for name in document.presets))
        if document.meta:
            lines = ["--- meta"]
            lines.extend(f"{key}: {_format_value(value)}" for key, value in document.meta.items())
            sections.append("\n".join(lines))
        sections.extend(f"--- style\n{style}" for style in document.styles)

        sections = self._interleave(sections, document)
        if not sections:
            return ""
        return "\n\n".join(sections) + "\n"

    def emit_block(self, block: Block) -> str:
        """Emit a single block, children included."""
        head = [f"--- {block.block_type}: {block.label}" if block.label else f"--- {block.block_type}"]
        head.extend(f"{key}: {_format_value(value)}" for key, value in block.properties.items())
        head.extend(block.style_entries)

        parts = ["\n".join(head)]
        if block.content:
            parts.append(block.content if block.verbatim else _escape_comment_lines(block.content))
        parts.extend(self.emit_block(child) for child in block.children)
        if block.children or block.verbatim or self.registry.is_container(block.block_type):
            parts.append(f"--- /{block.block_type}")
        return "\n\n".join(parts)

    def _interleave(self, preamble: list[str], document: Document) -> list[str]:
        """Place comments between blocks by source line."""
        comments = sorted(document.comments, key=lambda comment: comment.line)
        index = 0
        sections: list[str] = []

        first_line = document.blocks[0].position.start.line if document.blocks else None
        top: list[Comment] = []
        while index < len(comments) and (first_line is None or comments[index].line < first_line):
            top.append(comments[index])
            index += 1
        if top:
            sections.append(_emit_comments(top))
        sections.extend(preamble)

        for block in document.blocks:
            before: list[Comment] = []
            while index < len(comments) and comments[index].line < block.position.start.line:
                before.append(comments[index])
                index += 1
            if before:
                sections.append(_emit_comments(before))
            sections.append(self.emit_block(block))

        if index < len(comments):
            sections.append(_emit_comments(comments[index:]))
        return sections


def emit(document: Document, *, registry: BlockRegistry | None = None) -> str:
    """Emit a Document with a default-configured Emitter."""
    return Emitter(registry=registry).emit(document)


def _escape_comment_lines(content: str) -> str:
    """Prefix `//` content lines with a backslash so they stay content."""
    return _COMMENT_SHAPED_LINE.sub(r"\1\\\2", content)


def _emit_comments(comments: list[Comment]) -> str:
    return "\n".join(f"// {comment.text}" for comment in comments)


def _emit_theme_definition(theme: InlineTheme) -> str:
    lines = [f"--- define-theme: {theme.name}"]
    lines.extend(f"{key}: {value}" for key, value in theme.variables.items())
    if theme.css:
        # css lines often look like properties, so a blank line must separate them
        lines.append("")
        lines.append(theme.css)
    return "\n".join(lines)


def _emit_preset_definition(preset: InlinePreset) -> str:
    return f"--- define-preset: {preset.name}\n{preset.css}"


def _format_value(value: str) -> str:
    value = value.replace("\n", " ")
    if not value or (len(value) >= 2 and value.startswith('"') and value.endswith('"')):
        return f'"{value}"'
    return value
