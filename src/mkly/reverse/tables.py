"""Tier 2: replace layout tables with the content of their cells.

Email-style HTML nests presentation tables many levels deep. Each pass
walks the `<table>` tags with an explicit stack, so inner tables are
resolved before the tables that contain them and any nesting depth is
handled in one pass. Passes repeat until nothing changes, bounded by
`max_passes`.
"""

import logging
import re
from dataclasses import dataclass, field

from mkly.reverse.html import strip_tags

logger = logging.getLogger(__name__)

DEFAULT_MAX_PASSES = 10

_TABLE_TAG_PATTERN = re.compile(r"<(/?)table\b([^>]*)>", re.IGNORECASE)
_CELL_TAG_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<(/?)td\b[^>]*>", re.IGNORECASE),
    re.compile(r"<(/?)tr\b[^>]*>", re.IGNORECASE),
)

_LAYOUT_ATTR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"""width\s*=\s*["']100%["']""", re.IGNORECASE),
    re.compile(r"""role\s*=\s*["']presentation["']""", re.IGNORECASE),
    re.compile(r"cellpadding|cellspacing", re.IGNORECASE),
)


@dataclass(frozen=True, slots=True)
class UnwrappedHtml:
    """Result of table unwrapping.

    Attributes:
        html: HTML with layout tables replaced by their cell contents.
        passes: Number of passes run.
        tables_unwrapped: Total layout tables replaced.
    """

    html: str
    passes: int
    tables_unwrapped: int


@dataclass(slots=True)
class _OpenTable:
    open_tag: str
    attrs: str
    parts: list[str] = field(default_factory=list)
    has_nested: bool = False


class TableUnwrapper:
    """Unwraps layout tables while keeping data tables."""

    def __init__(self, *, max_passes: int = DEFAULT_MAX_PASSES) -> None:
        """Initialize the unwrapper.

        Args:
            max_passes: Upper bound on passes over the document.
        """
        self.max_passes = max_passes

    def unwrap(self, html: str) -> UnwrappedHtml:
        """Unwrap layout tables.

        Args:
            html: HTML after boilerplate stripping.

        Returns:
            UnwrappedHtml with the rewritten HTML and pass statistics.
        """
        passes = 0
        total = 0
        changed = True
        while changed and passes < self.max_passes:
            html, count = self._pass(html)
            passes += 1
            total += count
            changed = count > 0

        if changed:
            logger.warning("Table unwrapping stopped after %d passes with tables still changing", passes)
        logger.debug("Unwrapped %d layout tables in %d passes", total, passes)
        return UnwrappedHtml(html=html, passes=passes, tables_unwrapped=total)

    def _pass(self, html: str) -> tuple[str, int]:
        output: list[str] = []
        stack: list[_OpenTable] = []
        position = 0
        unwrapped = 0

        for match in _TABLE_TAG_PATTERN.finditer(html):
            closing = bool(match.group(1))
            if closing and not stack:
                # Stray closing tag: leave it in the text
                continue

            target = stack[-1].parts if stack else output
            target.append(html[position:match.start()])
            position = match.end()

            if not closing:
                if stack:
                    stack[-1].has_nested = True
                stack.append(_OpenTable(open_tag=match.group(0), attrs=match.group(2)))
                continue

            table = stack.pop()
            inner = "".join(table.parts)
            if table.has_nested or _is_layout(table.attrs):
                replacement = extract_cells(inner)
                unwrapped += 1
            else:
                replacement = f"{table.open_tag}{inner}{match.group(0)}"
            (stack[-1].parts if stack else output).append(replacement)

        # Unclosed tables go back as text, resolved children included
        tail = html[position:]
        while stack:
            table = stack.pop()
            tail = table.open_tag + "".join(table.parts) + tail
        output.append(tail)
        return "".join(output), unwrapped


def _is_layout(attrs: str) -> bool:
    return any(pattern.search(attrs) for pattern in _LAYOUT_ATTR_PATTERNS)


def extract_cells(table_inner: str) -> str:
    """Join the non-empty cell contents of a table with blank lines.

    Cells are depth-balanced `<td>` elements; rows are used when a table
    has no usable cells.
    """
    for pattern in _CELL_TAG_PATTERNS:
        cells = [cell for cell in _balanced_contents(table_inner, pattern) if not is_empty_cell(cell)]
        if cells:
            return "\n\n".join(cells)
    return ""


def is_empty_cell(content: str) -> bool:
    """True if nothing but tags, whitespace or non-breaking spaces remains."""
    text = strip_tags(content).replace("&nbsp;", "").replace("\xa0", "")
    return not text.strip()


def _balanced_contents(html: str, pattern: re.Pattern[str]) -> list[str]:
    contents: list[str] = []
    depth = 0
    start = 0
    for match in pattern.finditer(html):
        if not match.group(1):
            if depth == 0:
                start = match.end()
            depth += 1
        elif depth > 0:
            depth -= 1
            if depth == 0:
                contents.append(html[start:match.start()].strip())
    return contents
