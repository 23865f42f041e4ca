"""Layout-level pattern detection for foreign HTML segments.

Predicates receive one trimmed top-level segment and look at its markup,
not its rendering.
"""

import re

DEFAULT_MAX_CARD_SIZE = 3000

_HERO_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"background-image:\s*url\(", re.IGNORECASE),
    re.compile(r'class="[^"]*(?:hero|banner|jumbotron)[^"]*"', re.IGNORECASE),
    # A bare image at least 500px wide, or full width
    re.compile(r"""^<img\b[^>]*width\s*=\s*["'](?:100%|[5-9]\d\d|[1-9]\d{3,})["']""", re.IGNORECASE),
)

_HEADER_TAG_PATTERN = re.compile(r"^<(?:nav|header)\b", re.IGNORECASE)
_HEADER_CLASS_PATTERN = re.compile(r'class="[^"]*(?:header|navbar|nav-bar|navigation)[^"]*"', re.IGNORECASE)
_LOGO_PATTERN = re.compile(r"<img\b[^>]*logo[^>]*>", re.IGNORECASE)
_LINK_PATTERN = re.compile(r"<a\b", re.IGNORECASE)

_CARD_CLASS_PATTERN = re.compile(r'class="[^"]*card[^"]*"', re.IGNORECASE)
_IMG_PATTERN = re.compile(r"<img\b", re.IGNORECASE)
_HEADING_PATTERN = re.compile(r"<h[1-6]\b", re.IGNORECASE)
_PARAGRAPH_PATTERN = re.compile(r"<p\b", re.IGNORECASE)

_FIRST_LINK_PATTERN = re.compile(r"<a\b([^>]*)>([\s\S]*?)</a>", re.IGNORECASE)
_BUTTON_STYLE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"padding\s*:\s*\d{2,}", re.IGNORECASE),
    re.compile(r'class="[^"]*(?:btn|button|cta)[^"]*"', re.IGNORECASE),
    re.compile(r"""role\s*=\s*["']button["']""", re.IGNORECASE),
    re.compile(r"background-color", re.IGNORECASE),
)
_CENTERED_PATTERN = re.compile(r"text-align\s*:\s*center", re.IGNORECASE)
_CTA_CLASS_PATTERN = re.compile(r'class="[^"]*(?:cta|call-to-action)[^"]*"', re.IGNORECASE)


def is_hero(html: str) -> bool:
    """Background image, hero-like class, or a wide leading image."""
    return any(pattern.search(html) for pattern in _HERO_PATTERNS)


def is_header(html: str) -> bool:
    """Navigation element, header-like class, or a logo with three or more links."""
    if _HEADER_TAG_PATTERN.match(html) or _HEADER_CLASS_PATTERN.search(html):
        return True
    return bool(_LOGO_PATTERN.search(html)) and len(_LINK_PATTERN.findall(html)) >= 3


def is_card(html: str, max_size: int = DEFAULT_MAX_CARD_SIZE) -> bool:
    """Card-like class, or image + heading/text + link in a small segment.

    Args:
        html: A trimmed segment.
        max_size: Segments this long or longer are not structural cards.

    Returns:
        True if the segment looks like a content card.
    """
    if _CARD_CLASS_PATTERN.search(html):
        return True
    has_text = bool(_HEADING_PATTERN.search(html) or _PARAGRAPH_PATTERN.search(html))
    return (
        bool(_IMG_PATTERN.search(html))
        and has_text
        and bool(_LINK_PATTERN.search(html))
        and len(html) < max_size
    )


def is_cta(html: str) -> bool:
    """A button-styled first link that is centered or inside a cta-like class."""
    link = _FIRST_LINK_PATTERN.search(html)
    if not link:
        return False
    attrs = link.group(1)
    if not any(pattern.search(attrs) for pattern in _BUTTON_STYLE_PATTERNS):
        return False
    return bool(_CENTERED_PATTERN.search(html) or _CTA_CLASS_PATTERN.search(html))
