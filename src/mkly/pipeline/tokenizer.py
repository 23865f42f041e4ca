"""Line classification for mkly source.

Each physical line becomes exactly one TokenizedLine. Classification looks
at the trimmed line, in this priority:

- empty -> blank
- `//` prefix -> comment
- `--- /type` -> block_end (checked before block_start)
- `--- type` or `--- type: label` -> block_start
- `key: value` -> property
- anything else -> text, keeping the original indentation
"""

import re
from dataclasses import dataclass
from typing import Literal

TokenKind = Literal["blank", "comment", "block_start", "block_end", "property", "text"]

# Block types are `name` or `kit/name`
_BLOCK_END_PATTERN = re.compile(r"^---\s+/([\w-]+(?:/[\w-]+)?)\s*$")
_BLOCK_START_PATTERN = re.compile(r"^---\s+([\w-]+(?:/[\w-]+)?)(?::\s*(.+))?\s*$")

# Keys are plain identifiers or @-prefixed style selectors; the value needs
# at least one space after the colon
_PROPERTY_PATTERN = re.compile(r"^(@[\w.#:,/-]+|\w+):\s+(.*)$")

_COMMENT_PREFIX = "//"


@dataclass(frozen=True, slots=True)
class TokenizedLine:
    """One classified source line.

    Attributes:
        kind: Line classification.
        line: 1-based line number.
        raw: The physical line, untouched.
        text: Comment text (comment) or the raw line (text).
        block_type: Block type (block_start, block_end).
        label: Label after the colon (block_start), if any.
        key: Property key (property).
        value: Property value with one pair of surrounding quotes removed (property).
    """

    kind: TokenKind
    line: int
    raw: str
    text: str | None = None
    block_type: str | None = None
    label: str | None = None
    key: str | None = None
    value: str | None = None


class Tokenizer:
    """Splits mkly source into classified lines."""

    def tokenize(self, source: str) -> tuple[TokenizedLine, ...]:
        """Classify every line of `source`.

        Args:
            source: mkly source text. CRLF and CR endings are accepted.

        Returns:
            One token per line, including a trailing empty line.
        """
        source = source.replace("\r\n", "\n").replace("\r", "\n")
        return tuple(
            self._classify(raw, number) for number, raw in enumerate(source.split("\n"), start=1)
        )

    def _classify(self, raw: str, number: int) -> TokenizedLine:
        trimmed = raw.strip()

        if not trimmed:
            return TokenizedLine(kind="blank", line=number, raw=raw)

        if trimmed.startswith(_COMMENT_PREFIX):
            return TokenizedLine(
                kind="comment",
                line=number,
                raw=raw,
                text=trimmed[len(_COMMENT_PREFIX):].strip(),
            )

        match = _BLOCK_END_PATTERN.match(trimmed)
        if match:
            return TokenizedLine(kind="block_end", line=number, raw=raw, block_type=match.group(1))

        match = _BLOCK_START_PATTERN.match(trimmed)
        if match:
            label = match.group(2).strip() if match.group(2) else None
            return TokenizedLine(
                kind="block_start",
                line=number,
                raw=raw,
                block_type=match.group(1),
                label=label or None,
            )

        match = _PROPERTY_PATTERN.match(trimmed)
        if match:
            value = match.group(2)
            if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
                value = value[1:-1]
            return TokenizedLine(
                kind="property",
                line=number,
                raw=raw,
                key=match.group(1),
                value=value,
            )

        return TokenizedLine(kind="text", line=number, raw=raw, text=raw)


def tokenize(source: str) -> tuple[TokenizedLine, ...]:
    """Module-level shortcut for `Tokenizer().tokenize`."""
    return Tokenizer().tokenize(source)
