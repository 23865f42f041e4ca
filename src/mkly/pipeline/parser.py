"""Structural parsing of mkly source into a Document.

The parser walks tokenized lines with an explicit stack of open container
frames. A non-container block is the current leaf: it absorbs lines
according to its content mode until the next marker. Directive blocks
(use, theme, preset, meta, style, define-theme, define-preset) fill their
own Document slots and never become blocks.

All problems are collected as diagnostics; parsing never raises on
content.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Literal

from mkly.core_kit import default_registry
from mkly.document import (
    Block,
    Comment,
    Diagnostic,
    Document,
    InlinePreset,
    InlineTheme,
    SourcePosition,
    SourceRange,
)
from mkly.kits import BlockRegistry, ContentMode
from mkly.pipeline.tokenizer import TokenizedLine, Tokenizer
from mkly.schemas import validate_properties

logger = logging.getLogger(__name__)

DEFAULT_MAX_SOURCE_SIZE = 10 * 1024 * 1024
DEFAULT_MAX_BLOCKS = 10_000
DEFAULT_VERSION = 1

DIRECTIVES = frozenset({"use", "theme", "preset", "meta", "style", "define-theme", "define-preset"})

# Canonical directive order; blocks come last
_PHASES = ("use", "define", "theme", "meta", "style", "blocks")
_PHASE_INDEX = {name: index for index, name in enumerate(_PHASES)}

_DIRECTIVE_PHASE = {
    "use": "use",
    "define-theme": "define",
    "define-preset": "define",
    "theme": "theme",
    "preset": "theme",
    "meta": "meta",
    "style": "style",
}

_PHASE_HINTS = {
    "define": 'before "--- define-theme/define-preset"; move it above the define blocks',
    "theme": 'before "--- theme:"; move it above the theme declarations',
    "meta": 'before "--- meta"; move it above the meta block',
    "style": 'before "--- style"; move it above the style block',
    "blocks": "before content blocks; move it above the first block",
}

_VERSION_PATTERN = re.compile(r"^\s*([+-]?\d+)")
# `\//` keeps a comment-shaped line as content; one backslash is removed
_ESCAPED_COMMENT_PATTERN = re.compile(r"^([ \t]*)\\(\\*//)")

FrameState = Literal["properties", "content", "verbatim"]


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Result of parsing mkly source.

    Attributes:
        document: The parsed document.
        diagnostics: Warnings and errors in source order of discovery.
    """

    document: Document
    diagnostics: tuple[Diagnostic, ...]

    @property
    def errors(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == "error")

    @property
    def warnings(self) -> tuple[Diagnostic, ...]:
        return tuple(d for d in self.diagnostics if d.severity == "warning")


@dataclass(slots=True)
class _Frame:
    """An open block being filled."""

    block_type: str
    label: str | None
    start_line: int
    mode: ContentMode
    is_container: bool
    state: FrameState
    last_line: int
    properties: dict[str, str] = field(default_factory=dict)
    content_lines: list[str] = field(default_factory=list)
    children: list[Block] = field(default_factory=list)


@dataclass(slots=True)
class _Directive:
    """An open directive block being filled."""

    name: str
    line: int
    label: str | None
    in_css: bool = False
    lines: list[str] = field(default_factory=list)
    variables: dict[str, str] = field(default_factory=dict)


class Parser:
    """Builds a Document from mkly source.

    Content modes and container flags come from the block registry.
    Unknown block types parse as mixed non-containers.
    """

    def __init__(
        self,
        *,
        registry: BlockRegistry | None = None,
        max_source_size: int = DEFAULT_MAX_SOURCE_SIZE,
        max_blocks: int = DEFAULT_MAX_BLOCKS,
    ) -> None:
        """Initialize the parser.

        Args:
            registry: Block definitions; defaults to the core kit only.
            max_source_size: Larger sources yield an empty document and an error.
            max_blocks: Blocks beyond this count are dropped with an error.
        """
        self.registry = registry if registry is not None else default_registry()
        self.max_source_size = max_source_size
        self.max_blocks = max_blocks
        self._tokenizer = Tokenizer()

    def parse(self, source: str) -> ParseResult:
        """Parse mkly source.

        Args:
            source: mkly source text.

        Returns:
            ParseResult with the document and all diagnostics.
        """
        if len(source) > self.max_source_size:
            logger.debug("Source of %d characters exceeds limit", len(source))
            return ParseResult(
                document=Document(),
                diagnostics=(
                    Diagnostic(
                        message=f"Document exceeds maximum size ({self.max_source_size} characters)",
                        line=1,
                        severity="error",
                    ),
                ),
            )

        tokens = self._tokenizer.tokenize(source)
        run = _ParseRun(self.registry, self.max_blocks)
        for token in tokens:
            run.feed(token)
        document, diagnostics = run.finish(tokens[-1].line if tokens else 1)

        logger.debug(
            "Parsed %d top-level blocks with %d diagnostics", len(document.blocks), len(diagnostics)
        )
        return ParseResult(document=document, diagnostics=tuple(diagnostics))


def parse(source: str, *, registry: BlockRegistry | None = None) -> ParseResult:
    """Parse mkly source with a default-configured Parser."""
    return Parser(registry=registry).parse(source)


class _ParseRun:
    """Mutable state of a single parse call."""

    def __init__(self, registry: BlockRegistry, max_blocks: int) -> None:
        self._registry = registry
        self._max_blocks = max_blocks
        self._diagnostics: list[Diagnostic] = []
        self._blocks: list[Block] = []
        self._stack: list[_Frame] = []
        # Frame absorbing lines; None between a closed container and the next marker
        self._current: _Frame | None = None
        self._directive: _Directive | None = None
        self._dropping = False
        self._block_count = 0
        self._phase = "use"

        self._uses: list[str] = []
        self._themes: list[str] = []
        self._presets: list[str] = []
        self._inline_themes: list[InlineTheme] = []
        self._inline_presets: list[InlinePreset] = []
        self._meta: dict[str, str] = {}
        self._styles: list[str] = []
        self._comments: list[Comment] = []

    def feed(self, token: TokenizedLine) -> None:
        current = self._current
        if current is not None and current.state == "verbatim":
            if token.kind == "block_end" and token.block_type == current.block_type:
                self._close_current(token.line)
                return
            current.content_lines.append(token.raw)
            current.last_line = token.line
            return

        if token.kind == "block_start":
            self._start(token)
        elif token.kind == "block_end":
            self._end(token)
        elif token.kind == "comment":
            if self._directive is not None and self._directive.name == "style":
                self._directive.lines.append(f"// {token.text}")
            else:
                self._comments.append(Comment(text=token.text or "", line=token.line))
        elif self._directive is not None:
            self._feed_directive(self._directive, token)
        elif current is not None and not self._dropping:
            self._feed_block(current, token)

    def finish(self, last_line: int) -> tuple[Document, list[Diagnostic]]:
        self._finish_directive()
        self._finish_leaf()
        self._current = None
        while self._stack:
            self._attach(self._finalize(self._stack.pop(), last_line))

        version = DEFAULT_VERSION
        raw_version = self._meta.get("version")
        if raw_version:
            match = _VERSION_PATTERN.match(raw_version)
            if match:
                version = int(match.group(1))
            else:
                self._error(f'Invalid version: "{raw_version}"', 1)

        document = Document(
            blocks=tuple(self._blocks),
            uses=tuple(self._uses),
            inline_themes=tuple(self._inline_themes),
            inline_presets=tuple(self._inline_presets),
            themes=tuple(self._themes),
            presets=tuple(self._presets),
            meta=dict(self._meta),
            styles=tuple(self._styles),
            comments=tuple(self._comments),
            version=version,
        )
        return document, self._diagnostics

    # -- markers ---------------------------------------------------------

    def _start(self, token: TokenizedLine) -> None:
        block_type = token.block_type or ""
        self._finish_directive()
        self._finish_leaf()
        self._dropping = False

        if block_type in DIRECTIVES:
            self._start_directive(block_type, token)
            return

        if self._block_count >= self._max_blocks:
            self._error(f"Maximum block count ({self._max_blocks}) exceeded", token.line)
            self._current = None
            self._dropping = True
            return
        self._block_count += 1
        self._advance_phase("blocks")

        definition = self._registry.get(block_type)
        if definition is None:
            self._diagnostics.append(
                Diagnostic(
                    message=f"Unknown block type: {block_type}",
                    line=token.line,
                    severity="warning",
                    block_type=block_type,
                )
            )
        mode = self._registry.content_mode(block_type)
        frame = _Frame(
            block_type=block_type,
            label=token.label,
            start_line=token.line,
            mode=mode,
            is_container=self._registry.is_container(block_type),
            state="content" if mode == "text" else "properties",
            last_line=token.line,
        )
        if frame.is_container:
            self._stack.append(frame)
        self._current = frame

    def _end(self, token: TokenizedLine) -> None:
        block_type = token.block_type or ""
        if self._directive is not None and self._directive.name == block_type:
            self._finish_directive()
            return
        self._finish_directive()

        current = self._current
        if current is not None and not current.is_container and current.block_type == block_type:
            self._close_current(token.line)
            return

        self._finish_leaf()
        if self._stack and self._stack[-1].block_type == block_type:
            frame = self._stack.pop()
            self._current = None
            self._attach(self._finalize(frame, token.line))
            return

        self._current = None
        self._diagnostics.append(
            Diagnostic(
                message=f"Closing --- /{block_type} has no matching opening block",
                line=token.line,
                severity="warning",
                block_type=block_type,
            )
        )

    def _close_current(self, end_line: int) -> None:
        frame = self._current
        self._current = None
        if frame is None:
            return
        if frame.is_container:
            self._stack.remove(frame)
        self._attach(self._finalize(frame, end_line))

    def _finish_leaf(self) -> None:
        """Finalize the current leaf, ending it at its last absorbed line."""
        frame = self._current
        if frame is None or frame.is_container:
            return
        self._current = None
        self._attach(self._finalize(frame, frame.last_line))

    # -- blocks ----------------------------------------------------------

    def _feed_block(self, frame: _Frame, token: TokenizedLine) -> None:
        if token.kind == "blank":
            if frame.state == "properties":
                if frame.mode == "mixed":
                    frame.state = "content"
                elif frame.mode == "verbatim":
                    frame.state = "verbatim"
            else:
                frame.content_lines.append("")
            return

        if token.kind == "property" and frame.state == "properties":
            self._set_property(frame, token)
            frame.last_line = token.line
            return

        if frame.mode == "properties":
            self._diagnostics.append(
                Diagnostic(
                    message=f"{frame.block_type} does not support body content; line ignored",
                    line=token.line,
                    severity="warning",
                    block_type=frame.block_type,
                )
            )
            return

        if frame.state == "properties":
            frame.state = "verbatim" if frame.mode == "verbatim" else "content"
        if frame.mode == "verbatim":
            frame.content_lines.append(token.raw)
        else:
            frame.content_lines.append(_ESCAPED_COMMENT_PATTERN.sub(r"\1\2", token.raw))
        frame.last_line = token.line

    def _set_property(self, frame: _Frame, token: TokenizedLine) -> None:
        key = token.key or ""
        if key.startswith("@"):
            self._diagnostics.append(
                Diagnostic(
                    message=(
                        f'Invalid property "{key}": property names cannot start with @. '
                        "Use a --- style block for styling."
                    ),
                    line=token.line,
                    severity="error",
                    block_type=frame.block_type,
                    property=key,
                )
            )
            return
        if key in frame.properties:
            self._diagnostics.append(
                Diagnostic(
                    message=f'Duplicate property "{key}": previous value will be overwritten',
                    line=token.line,
                    severity="warning",
                    block_type=frame.block_type,
                    property=key,
                )
            )
        frame.properties[key] = token.value or ""

    def _finalize(self, frame: _Frame, end_line: int) -> Block:
        block = Block(
            block_type=frame.block_type,
            properties=frame.properties,
            content="\n".join(_trim_blank_edges(frame.content_lines)),
            children=tuple(frame.children),
            position=SourceRange(SourcePosition(frame.start_line), SourcePosition(end_line)),
            label=frame.label,
            verbatim=frame.mode == "verbatim",
        )
        self._validate(block)
        return block

    def _attach(self, block: Block) -> None:
        if self._stack:
            self._stack[-1].children.append(block)
        else:
            self._blocks.append(block)

    def _validate(self, block: Block) -> None:
        schema = self._registry.schema(block.block_type)
        if schema is None:
            return
        for prop, message in validate_properties(schema, block.properties):
            prefix = f'"{prop}" - ' if prop else ""
            self._diagnostics.append(
                Diagnostic(
                    message=f"{block.block_type}: {prefix}{message}",
                    line=block.position.start.line,
                    severity="error",
                    block_type=block.block_type,
                    property=prop,
                )
            )

    # -- directives ------------------------------------------------------

    def _start_directive(self, name: str, token: TokenizedLine) -> None:
        self._current = None
        phase = _DIRECTIVE_PHASE[name]
        if _PHASE_INDEX[self._phase] > _PHASE_INDEX[phase]:
            shown = name if name in ("meta", "style") else f"{name}:"
            self._error(
                f'"--- {shown}" must appear {_PHASE_HINTS[self._phase]}',
                token.line,
            )
        self._advance_phase(phase)

        directive = _Directive(name=name, line=token.line, label=token.label)
        if name in ("define-theme", "define-preset") and not token.label:
            self._error(
                f'"--- {name}" requires a name (e.g. --- {name}: my-{name.split("-")[1]})',
                token.line,
            )
        if name in ("use", "theme", "preset") and token.label:
            self._list_for(name).append(token.label)
        self._directive = directive

    def _feed_directive(self, directive: _Directive, token: TokenizedLine) -> None:
        name = directive.name
        if name in ("use", "theme", "preset"):
            if token.kind != "blank":
                self._list_for(name).append(token.raw.strip())
        elif name == "meta":
            if token.kind == "property":
                self._meta[token.key or ""] = token.value or ""
        elif name == "style" or name == "define-preset":
            directive.lines.append("" if token.kind == "blank" else token.raw)
        elif name == "define-theme":
            if not directive.in_css and token.kind == "property":
                directive.variables[token.key or ""] = token.value or ""
            elif not directive.in_css and token.kind == "blank":
                directive.in_css = True
            else:
                directive.in_css = True
                directive.lines.append("" if token.kind == "blank" else token.raw)

    def _finish_directive(self) -> None:
        directive = self._directive
        self._directive = None
        if directive is None:
            return

        lines = _trim_blank_edges(directive.lines)
        if directive.name == "style":
            if lines:
                self._styles.append("\n".join(lines))
        elif directive.name == "define-theme" and directive.label:
            if directive.variables or lines:
                self._inline_themes.append(
                    InlineTheme(
                        name=directive.label,
                        variables=dict(directive.variables),
                        css="\n".join(lines) if lines else None,
                    )
                )
            else:
                self._warning(
                    f'Empty define-theme "{directive.label}": add variables or CSS', directive.line
                )
        elif directive.name == "define-preset" and directive.label:
            if lines:
                self._inline_presets.append(InlinePreset(name=directive.label, css="\n".join(lines)))
            else:
                self._warning(f'Empty define-preset "{directive.label}": add CSS rules', directive.line)

    def _list_for(self, name: str) -> list[str]:
        return {"use": self._uses, "theme": self._themes, "preset": self._presets}[name]

    def _advance_phase(self, phase: str) -> None:
        if _PHASE_INDEX[phase] > _PHASE_INDEX[self._phase]:
            self._phase = phase

    def _error(self, message: str, line: int) -> None:
        self._diagnostics.append(Diagnostic(message=message, line=line, severity="error"))

    def _warning(self, message: str, line: int) -> None:
        self._diagnostics.append(Diagnostic(message=message, line=line, severity="warning"))


def _trim_blank_edges(lines: list[str]) -> list[str]:
    start = 0
    end = len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]
