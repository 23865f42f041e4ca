"""Tier 3: map foreign HTML segments to blocks.

Kit import patterns are tried first, in registration order. Then a fixed
ladder of (name, predicate, builder) rules runs and the first match wins.
Anything nothing recognises is kept as a verbatim `core/html` block.
"""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from mkly.document import ParsedBlock
from mkly.kits import ImportPattern, Kit
from mkly.patterns import is_card, is_cta, is_footer, is_header, is_hero, is_list, is_quote, is_tip
from mkly.patterns.layout import DEFAULT_MAX_CARD_SIZE
from mkly.reverse.html import extract_attr
from mkly.reverse.markdown import html_to_markdown

logger = logging.getLogger(__name__)

NEWSLETTER_KIT = "newsletter"

_BACKGROUND_URL_PATTERN = re.compile(r"""background-image:\s*url\(['"]?([^'")\s]+)['"]?\)""", re.IGNORECASE)
_IMG_TAG_PATTERN = re.compile(r"<img\b[^>]*>", re.IGNORECASE)
_IMG_SRC_PATTERN = re.compile(r'<img\b[^>]*src="([^"]*)"[^>]*>', re.IGNORECASE)
_LINK_HREF_PATTERN = re.compile(r'<a\b[^>]*href="([^"]*)"[^>]*>', re.IGNORECASE)
_LINK_PATTERN = re.compile(r'<a\b[^>]*href="([^"]*)"[^>]*>([\s\S]*?)</a>', re.IGNORECASE)
_TITLE_PATTERN = re.compile(r"<(?:h1|h2)\b[^>]*>([\s\S]*?)</(?:h1|h2)>", re.IGNORECASE)
_FOOTER_PATTERN = re.compile(r"<footer[^>]*>([\s\S]*?)</footer>", re.IGNORECASE)
_CITE_PATTERN = re.compile(r"<cite[^>]*>([\s\S]*?)</cite>", re.IGNORECASE)
_LEADING_DASH_PATTERN = re.compile(r"^[‒–—―-]\s*")
_HEADING_PATTERN = re.compile(r"^<(h[1-6])\b[^>]*>([\s\S]*?)</\1>$", re.IGNORECASE)
_PARAGRAPH_PATTERN = re.compile(r"^<p\b", re.IGNORECASE)
_IMAGE_PATTERN = re.compile(r"^<img\b([^>]*)/?>$", re.IGNORECASE)
_RULE_PATTERN = re.compile(r"^<hr\b", re.IGNORECASE)
_WRAPPER_PATTERN = re.compile(r"^<(?:div|span)\b", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    """One rung of the classification ladder.

    Attributes:
        name: Rule name, used in debug logging.
        detect: Predicate over a trimmed segment.
        build: Turns a matching segment into a block, or None to drop it.
    """

    name: str
    detect: Callable[[str], bool]
    build: Callable[[str], ParsedBlock | None]


class PatternClassifier:
    """Classifies foreign HTML segments into blocks."""

    def __init__(self, *, kits: Iterable[Kit] = (), max_card_size: int = DEFAULT_MAX_CARD_SIZE) -> None:
        """Initialize the classifier.

        Args:
            kits: Kits contributing import patterns. A kit named
                "newsletter" also redirects lists and tips to its blocks.
            max_card_size: Segments this long or longer are never
                structural cards.
        """
        kits = tuple(kits)
        self.max_card_size = max_card_size
        self.import_patterns: tuple[ImportPattern, ...] = tuple(
            pattern for kit in kits for pattern in kit.import_patterns
        )
        self.has_newsletter_kit = any(kit.name == NEWSLETTER_KIT for kit in kits)
        self.rules: tuple[ClassificationRule, ...] = (
            ClassificationRule("hero", is_hero, _build_hero),
            ClassificationRule("header", is_header, _build_header),
            ClassificationRule("card", self._is_card, _build_card),
            ClassificationRule("cta", is_cta, _build_cta),
            ClassificationRule("list", is_list, self._build_list),
            ClassificationRule("quote", is_quote, _build_quote),
            ClassificationRule("tip", is_tip, self._build_tip),
            ClassificationRule("footer", is_footer, _build_footer),
            ClassificationRule("heading", lambda html: bool(_HEADING_PATTERN.match(html)), _build_heading),
            ClassificationRule("paragraph", lambda html: bool(_PARAGRAPH_PATTERN.match(html)), _build_text),
            ClassificationRule("image", lambda html: bool(_IMAGE_PATTERN.match(html)), _build_image),
            ClassificationRule("rule", lambda html: bool(_RULE_PATTERN.match(html)), _build_divider),
            ClassificationRule("wrapper", lambda html: bool(_WRAPPER_PATTERN.match(html)), _build_text),
        )

    def classify(self, segment: str) -> ParsedBlock | None:
        """Classify one segment.

        Args:
            segment: A top-level HTML segment.

        Returns:
            The inferred block, or None if the segment carries no content.
        """
        html = segment.strip()
        if not html:
            return None

        for pattern in self.import_patterns:
            if pattern.detect(html):
                logger.debug("Segment matched kit pattern %s", pattern.name)
                return pattern.parse(html)

        for rule in self.rules:
            if rule.detect(html):
                logger.debug("Segment matched rule %s", rule.name)
                return rule.build(html)

        logger.debug("Segment kept as verbatim html")
        return ParsedBlock(block_type="core/html", content=html, verbatim=True)

    def classify_all(self, segments: Iterable[str]) -> list[ParsedBlock]:
        blocks = []
        for segment in segments:
            block = self.classify(segment)
            if block is not None:
                blocks.append(block)
        return blocks

    def _is_card(self, html: str) -> bool:
        return is_card(html, self.max_card_size)

    def _build_list(self, html: str) -> ParsedBlock:
        block_type = "newsletter/quickHits" if self.has_newsletter_kit else "core/list"
        return ParsedBlock(block_type=block_type, content=html_to_markdown(html))

    def _build_tip(self, html: str) -> ParsedBlock:
        block_type = "newsletter/tipOfTheDay" if self.has_newsletter_kit else "core/text"
        return ParsedBlock(block_type=block_type, content=html_to_markdown(html))


def _first_image_src(html: str) -> str | None:
    match = _IMG_SRC_PATTERN.search(html)
    return match.group(1) if match and match.group(1) else None


def _build_hero(html: str) -> ParsedBlock:
    block = ParsedBlock(block_type="core/hero")
    background = _BACKGROUND_URL_PATTERN.search(html)
    image = background.group(1) if background else _first_image_src(html)
    if image:
        block.properties["image"] = image
    block.content = html_to_markdown(html)
    return block


def _build_header(html: str) -> ParsedBlock:
    block = ParsedBlock(block_type="core/header")
    logo = _first_image_src(html)
    title = _TITLE_PATTERN.search(html)
    if logo:
        block.properties["logo"] = logo
    if title:
        block.properties["title"] = html_to_markdown(title.group(1))
    if not logo and not title:
        block.content = html_to_markdown(html)
    return block


def _build_card(html: str) -> ParsedBlock:
    block = ParsedBlock(block_type="core/card")
    image = _first_image_src(html)
    link = _LINK_HREF_PATTERN.search(html)
    if image:
        block.properties["image"] = image
    if link and link.group(1):
        block.properties["link"] = link.group(1)
    block.content = html_to_markdown(_IMG_TAG_PATTERN.sub("", html))
    return block


def _build_cta(html: str) -> ParsedBlock:
    link = _LINK_PATTERN.search(html)
    if not link:
        return ParsedBlock(block_type="core/html", content=html, verbatim=True)
    block = ParsedBlock(
        block_type="core/cta",
        properties={"url": link.group(1), "buttonText": html_to_markdown(link.group(2))},
    )
    block.content = html_to_markdown(html.replace(link.group(0), "", 1))
    return block


def _build_quote(html: str) -> ParsedBlock:
    block = ParsedBlock(block_type="core/quote")
    footer = _FOOTER_PATTERN.search(html)
    cite = _CITE_PATTERN.search(html)
    content = html
    if footer:
        author = _LEADING_DASH_PATTERN.sub("", html_to_markdown(footer.group(1)))
        content = content.replace(footer.group(0), "", 1)
    elif cite:
        author = html_to_markdown(cite.group(1))
        content = content.replace(cite.group(0), "", 1)
    else:
        author = ""
    if author:
        block.properties["author"] = author
    block.content = html_to_markdown(content)
    return block


def _build_footer(html: str) -> ParsedBlock:
    return ParsedBlock(block_type="core/footer", content=html_to_markdown(html))


def _build_heading(html: str) -> ParsedBlock:
    match = _HEADING_PATTERN.match(html)
    level = match.group(1)[1] if match else "2"
    inner = match.group(2) if match else html
    return ParsedBlock(
        block_type="core/heading",
        properties={"level": level},
        content=html_to_markdown(inner),
    )


def _build_text(html: str) -> ParsedBlock | None:
    text = html_to_markdown(html)
    if not text:
        return None
    return ParsedBlock(block_type="core/text", content=text)


def _build_image(html: str) -> ParsedBlock:
    block = ParsedBlock(block_type="core/image")
    for attr in ("src", "alt", "width"):
        value = extract_attr(html, attr)
        if value:
            block.properties[attr] = value
    return block


def _build_divider(html: str) -> ParsedBlock:
    return ParsedBlock(block_type="core/divider")
