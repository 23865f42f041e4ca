"""Split HTML into top-level sibling segments.

A left-to-right scan with depth tracking per tag name:

- void and self-closing tags are atomic segments
- paired tags run to their depth-balanced close of the same name
- text between tags becomes a trimmed segment
- comments, declarations and stray closing tags are skipped

An element whose close never arrives runs to the end of the input.
"""

import re

from mkly.reverse.html import VOID_TAGS

_TAG_PATTERN = re.compile(r"<(/?)([a-zA-Z][\w-]*)([^>]*)>")
_INNER_TAG_PATTERN = re.compile(r"<(/?)([a-zA-Z][\w-]*)(?:\s[^>]*)?\s*/?>")


class SegmentSplitter:
    """Splits an HTML fragment into sibling segments."""

    def split(self, html: str) -> tuple[str, ...]:
        """Split `html` into top-level segments.

        Args:
            html: HTML fragment.

        Returns:
            Non-empty segments in document order.
        """
        segments: list[str] = []
        length = len(html)
        i = 0

        while i < length:
            while i < length and html[i].isspace():
                i += 1
            if i >= length:
                break

            if html[i] != "<":
                end = html.find("<", i)
                if end == -1:
                    end = length
                text = html[i:end].strip()
                if text:
                    segments.append(text)
                i = end
                continue

            if html.startswith("<!--", i):
                end = html.find("-->", i + 4)
                i = length if end == -1 else end + 3
                continue

            if html.startswith("<!", i) or html.startswith("<?", i):
                end = html.find(">", i)
                i = length if end == -1 else end + 1
                continue

            match = _TAG_PATTERN.match(html, i)
            if not match:
                # A lone "<" that does not start a tag is text
                end = html.find("<", i + 1)
                if end == -1:
                    end = length
                text = html[i:end].strip()
                if text:
                    segments.append(text)
                i = end
                continue

            if match.group(1):
                i = match.end()
                continue

            tag = match.group(2).lower()
            if tag in VOID_TAGS or match.group(3).rstrip().endswith("/"):
                segments.append(match.group(0))
                i = match.end()
                continue

            end = _find_element_end(html, tag, match.end())
            outer = html[i:end]
            if outer.strip():
                segments.append(outer)
            i = end

        return tuple(segments)


def _find_element_end(html: str, tag: str, start: int) -> int:
    """Offset just past the balancing close of `tag`, or the input length."""
    depth = 1
    for match in _INNER_TAG_PATTERN.finditer(html, start):
        if match.group(2).lower() != tag:
            continue
        if match.group(1):
            depth -= 1
            if depth == 0:
                return match.end()
        elif tag not in VOID_TAGS and not match.group(0).endswith("/>"):
            depth += 1
    return len(html)
