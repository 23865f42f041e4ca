"""Tier 1: strip non-content markup from foreign HTML."""

import re
from dataclasses import dataclass

_REMOVAL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE),
    re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE),
    re.compile(r"<!--[\s\S]*?-->"),
    # 1x1 tracking pixels, width and height in either order
    re.compile(
        r"""<img[^>]*(?:width\s*=\s*["']1["'][^>]*height\s*=\s*["']1["']"""
        r"""|height\s*=\s*["']1["'][^>]*width\s*=\s*["']1["'])[^>]*/?>""",
        re.IGNORECASE,
    ),
    # Known tracker URLs
    re.compile(
        r"<img[^>]*(?:track|beacon|pixel|open|analytics|mailchimp\.com/track|list-manage\.com)[^>]*/?>",
        re.IGNORECASE,
    ),
    re.compile(r"<link[^>]*/?>", re.IGNORECASE),
    re.compile(r"<meta[^>]*/?>", re.IGNORECASE),
)

_BODY_PATTERN = re.compile(r"<body[^>]*>([\s\S]*)</body>", re.IGNORECASE)
_HTML_TAG_PATTERN = re.compile(r"</?html[^>]*>", re.IGNORECASE)
_HEAD_PATTERN = re.compile(r"<head[\s\S]*?</head>", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class StrippedHtml:
    """Result of boilerplate stripping.

    Attributes:
        html: Remaining content HTML, trimmed.
        had_body: Whether the content was narrowed to a `<body>` element.
    """

    html: str
    had_body: bool


class BoilerplateStripper:
    """Removes scripts, styles, comments, tracking pixels, links and meta tags."""

    def strip(self, html: str) -> StrippedHtml:
        """Strip boilerplate in a single pass.

        Args:
            html: Foreign HTML document or fragment.

        Returns:
            StrippedHtml with the remaining content.
        """
        content = html
        for pattern in _REMOVAL_PATTERNS:
            content = pattern.sub("", content)

        body = _BODY_PATTERN.search(content)
        if body:
            return StrippedHtml(html=body.group(1).strip(), had_body=True)

        content = _HTML_TAG_PATTERN.sub("", content)
        content = _HEAD_PATTERN.sub("", content)
        return StrippedHtml(html=content.strip(), had_body=False)
