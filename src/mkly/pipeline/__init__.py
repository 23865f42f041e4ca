"""Forward pipeline: tokenizer, structural parser and source emitter."""

from mkly.pipeline.emitter import Emitter, emit
from mkly.pipeline.parser import Parser, ParseResult, parse
from mkly.pipeline.tokenizer import TokenizedLine, Tokenizer, tokenize

__all__ = [
    "Emitter",
    "emit",
    "Parser",
    "ParseResult",
    "parse",
    "TokenizedLine",
    "Tokenizer",
    "tokenize",
]
