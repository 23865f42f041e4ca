"""HTML to markdown conversion for block content.

Built on markdownify, with one addition: inline `style` attributes on
`<span>` elements become mkly inline style syntax, `{@prop:value}text{/}`.
Images are dropped, non-breaking spaces become mkly's `\\~` escape.
"""

import re

from markdownify import MarkdownConverter

from mkly.reverse.html import kebab_to_camel

_SCRIPT_STYLE_PATTERN = re.compile(r"<(script|style)\b[^>]*>[\s\S]*?</\1>", re.IGNORECASE)
_COMMENT_PATTERN = re.compile(r"<!--[\s\S]*?-->")
_BLANK_RUN_PATTERN = re.compile(r"\n{3,}")


def css_to_inline_styles(style: str) -> str:
    """Turn a CSS declaration list into mkly inline style entries.

    >>> css_to_inline_styles("font-weight: bold; color: red")
    '@fontWeight:bold @color:red'
    """
    entries = []
    for declaration in style.split(";"):
        prop, colon, value = declaration.partition(":")
        prop, value = prop.strip(), value.strip()
        if not colon or not prop:
            continue
        entries.append(f"@{kebab_to_camel(prop)}:{value}")
    return " ".join(entries)


class MklyMarkdownConverter(MarkdownConverter):
    """markdownify converter that keeps span styles as mkly inline syntax."""

    def convert_span(self, el, text, *args, **kwargs):
        style = el.get("style")
        if not style or not text.strip():
            return text
        styles = css_to_inline_styles(style)
        if not styles:
            return text
        return f"{{{styles}}}{text}{{/}}"


def html_to_markdown(html: str) -> str:
    """Convert an HTML fragment to mkly markdown.

    Args:
        html: HTML fragment, typically the inner HTML of one block.

    Returns:
        Markdown text without leading or trailing whitespace.
    """
    if not html or not html.strip():
        return ""

    html = _SCRIPT_STYLE_PATTERN.sub("", html)
    html = _COMMENT_PATTERN.sub("", html)

    converter = MklyMarkdownConverter(
        heading_style="ATX",
        bullets="-",
        strip=["img"],
        autolinks=False,
        escape_asterisks=False,
        escape_underscores=False,
        escape_misc=False,
    )
    text = converter.convert(html)

    text = text.replace("\xa0", "\\~")
    text = "\n".join(line.rstrip() for line in text.split("\n"))
    text = _BLANK_RUN_PATTERN.sub("\n\n", text)
    return text.strip()
