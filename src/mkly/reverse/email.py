"""Reconstruction of mkly's own email output.

Email HTML is flattened into inline-styled tables, so block classes do not
survive. Blocks are recovered from `<!-- mkly:type -->` comment markers
when present; otherwise from padded table cells, and as a last resort from
headings and text elements.
"""

import logging
import re

from mkly.document import Document, ParsedBlock, freeze_blocks
from mkly.reverse.html import extract_mkly_meta
from mkly.reverse.markdown import html_to_markdown

logger = logging.getLogger(__name__)

MIN_MARKED_BLOCKS = 2

_MARKER_PATTERN = re.compile(
    r"<!--\s*mkly:([\w/-]+)\s*-->([\s\S]*?)(?=<!--\s*mkly:[\w/-]+\s*-->|<!--\s*/mkly\s*-->|\Z)",
    re.IGNORECASE,
)
_SUBJECT_PATTERN = re.compile(r'<meta\s+name="subject"\s+content="([^"]*)"', re.IGNORECASE)
_TITLE_PATTERN = re.compile(r"<title>([^<]*)</title>", re.IGNORECASE)

_PADDED_CELL_PATTERN = re.compile(r'<td[^>]*style="[^"]*padding[^"]*"[^>]*>([\s\S]*?)</td>', re.IGNORECASE)
_TABLE_START_PATTERN = re.compile(r"^\s*<table\b", re.IGNORECASE)
_AFTER_TABLE_PATTERN = re.compile(r"</table>\s*\S", re.IGNORECASE)
_CELL_HEADING_PATTERN = re.compile(r"<h([1-6])\b", re.IGNORECASE)

_HEADING_PATTERN = re.compile(r"<h([1-6])\b[^>]*>([\s\S]*?)</h\1>", re.IGNORECASE)
_TEXT_ELEMENT_PATTERN = re.compile(r"<(?:div|p)\b[^>]*>([\s\S]*?)</(?:div|p)>", re.IGNORECASE)
_WRAPPER_START_PATTERN = re.compile(r"^<(?:div|table|tr|td)\b", re.IGNORECASE)
_AFTER_WRAPPER_PATTERN = re.compile(r"</(?:div|table)>\s*\S", re.IGNORECASE)


class EmailReconstructor:
    """Rebuilds a Document from HTML produced by mkly's email output."""

    def reconstruct(self, html: str) -> Document:
        """Rebuild a Document from generated email HTML.

        Args:
            html: Email HTML.

        Returns:
            The reconstructed Document. Identical recovered text appears once.
        """
        mkly_meta = extract_mkly_meta(html)
        meta = dict(mkly_meta.meta)
        if mkly_meta.is_empty:
            subject = _SUBJECT_PATTERN.search(html)
            title = (subject.group(1) if subject else "") or _first_group(_TITLE_PATTERN, html)
            if title:
                meta["title"] = title

        blocks = self._from_markers(html)
        seen = {block.content for block in blocks}
        if len(blocks) < MIN_MARKED_BLOCKS:
            logger.debug("Found %d marked blocks, falling back to heuristics", len(blocks))
            recovered = self._from_cells(html, seen)
            if not recovered:
                recovered = self._from_elements(html, seen)
            blocks.extend(recovered)

        return Document(
            blocks=freeze_blocks(blocks),
            uses=mkly_meta.uses,
            themes=mkly_meta.themes,
            presets=mkly_meta.presets,
            meta=meta,
        )

    def _from_markers(self, html: str) -> list[ParsedBlock]:
        blocks = []
        for match in _MARKER_PATTERN.finditer(html):
            name = match.group(1)
            block_type = name if "/" in name else f"core/{name}"
            span = match.group(2)
            block = ParsedBlock(block_type=block_type)
            heading = _HEADING_PATTERN.search(span) if block_type == "core/heading" else None
            if heading:
                block.properties["level"] = heading.group(1)
                block.content = html_to_markdown(heading.group(2))
            else:
                block.content = html_to_markdown(span)
            if block.content:
                blocks.append(block)
        return blocks

    def _from_cells(self, html: str, seen: set[str]) -> list[ParsedBlock]:
        blocks = []
        for match in _PADDED_CELL_PATTERN.finditer(html):
            cell = match.group(1).strip()
            if not cell:
                continue
            # Cells that only wrap another table carry no content of their own
            if _TABLE_START_PATTERN.match(cell) and not _AFTER_TABLE_PATTERN.search(cell):
                continue
            text = html_to_markdown(cell)
            if not text or text in seen:
                continue
            seen.add(text)
            level = _CELL_HEADING_PATTERN.search(cell)
            if level:
                heading = _HEADING_PATTERN.search(cell)
                if heading and html_to_markdown(heading.group(2)):
                    text = html_to_markdown(heading.group(2))
                blocks.append(
                    ParsedBlock(block_type="core/heading", properties={"level": level.group(1)}, content=text)
                )
            else:
                blocks.append(ParsedBlock(block_type="core/text", content=text))
        return blocks

    def _from_elements(self, html: str, seen: set[str]) -> list[ParsedBlock]:
        blocks = []
        for match in _HEADING_PATTERN.finditer(html):
            text = html_to_markdown(match.group(2))
            if text and text not in seen:
                seen.add(text)
                blocks.append(
                    ParsedBlock(block_type="core/heading", properties={"level": match.group(1)}, content=text)
                )

        for match in _TEXT_ELEMENT_PATTERN.finditer(html):
            inner = match.group(1).strip()
            if not inner:
                continue
            if _WRAPPER_START_PATTERN.match(inner) and not _AFTER_WRAPPER_PATTERN.search(inner):
                continue
            text = html_to_markdown(inner)
            if text and text not in seen:
                seen.add(text)
                blocks.append(ParsedBlock(block_type="core/text", content=text))
        return blocks


def _first_group(pattern: re.Pattern[str], text: str) -> str:
    match = pattern.search(text)
    return match.group(1) if match else ""
