"""Content-level pattern detection: lists, quotes, callouts and footers."""

import re

_LIST_PATTERN = re.compile(r"^<[uo]l\b", re.IGNORECASE)

_QUOTE_TAG_PATTERN = re.compile(r"^<blockquote\b", re.IGNORECASE)
_QUOTE_CLASS_PATTERN = re.compile(r'class="[^"]*(?:quote|testimonial|review|pullquote)[^"]*"', re.IGNORECASE)

_TIP_CLASS_PATTERN = re.compile(
    r'class="[^"]*(?:tip|callout|alert|notice|info-box|warning)[^"]*"', re.IGNORECASE
)
_BACKGROUND_PATTERN = re.compile(r"background(?:-color)?\s*:", re.IGNORECASE)
_BORDER_LEFT_PATTERN = re.compile(r"border-left\s*:", re.IGNORECASE)

_FOOTER_TAG_PATTERN = re.compile(r"^<footer\b", re.IGNORECASE)
_SOCIAL_PATTERN = re.compile(r"twitter|facebook|instagram|linkedin|youtube|x\.com", re.IGNORECASE)
_UNSUBSCRIBE_PATTERN = re.compile(r"unsubscribe", re.IGNORECASE)


def is_list(html: str) -> bool:
    return bool(_LIST_PATTERN.match(html))


def is_quote(html: str) -> bool:
    """Blockquote element or a quote/testimonial-like class."""
    return bool(_QUOTE_TAG_PATTERN.match(html) or _QUOTE_CLASS_PATTERN.search(html))


def is_tip(html: str) -> bool:
    """Callout-like class, or a background combined with a left border."""
    if _TIP_CLASS_PATTERN.search(html):
        return True
    return bool(_BACKGROUND_PATTERN.search(html) and _BORDER_LEFT_PATTERN.search(html))


def is_footer(html: str) -> bool:
    """Footer element, or social links together with an unsubscribe mention."""
    if _FOOTER_TAG_PATTERN.match(html):
        return True
    return bool(_SOCIAL_PATTERN.search(html) and _UNSUBSCRIBE_PATTERN.search(html))
