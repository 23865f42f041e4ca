"""mkly - Parse, emit and reverse-convert the mkly block document language."""

from mkly.converter import ConversionResult, Converter, html_to_mkly
from mkly.core_kit import CORE_KIT, default_registry
from mkly.document import (
    Block,
    Comment,
    Diagnostic,
    Document,
    InlinePreset,
    InlineTheme,
    ParsedBlock,
    Severity,
    SourcePosition,
    SourceRange,
)
from mkly.exceptions import InvalidInputError, KitDefinitionError, MklyError
from mkly.kits import (
    BlockDefinition,
    BlockRegistry,
    ContentHints,
    ImportPattern,
    Kit,
    ReverseHandler,
    kit_from_mapping,
    load_kit,
)
from mkly.pipeline import Emitter, Parser, ParseResult, emit, parse

__version__ = "0.1.0"

__all__ = [
    "Block",
    "BlockDefinition",
    "BlockRegistry",
    "Comment",
    "ContentHints",
    "ConversionResult",
    "Converter",
    "CORE_KIT",
    "default_registry",
    "Diagnostic",
    "Document",
    "emit",
    "Emitter",
    "html_to_mkly",
    "ImportPattern",
    "InlinePreset",
    "InlineTheme",
    "InvalidInputError",
    "Kit",
    "kit_from_mapping",
    "KitDefinitionError",
    "load_kit",
    "MklyError",
    "parse",
    "ParsedBlock",
    "Parser",
    "ParseResult",
    "ReverseHandler",
    "Severity",
    "SourcePosition",
    "SourceRange",
]
