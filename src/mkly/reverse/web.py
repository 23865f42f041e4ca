"""Reconstruction of mkly's own web output.

Generated web HTML marks every block with a `mkly-<kit>-<name>` class and
embeds the data needed for a faithful round trip:

- `<meta name="mkly:*">` tags carry uses, themes, presets and meta
- `<script type="text/mkly-style">` carries the original style blocks
- `<script type="text/mkly-defines">` carries inline theme/preset definitions
- `<!-- mkly-c: ... -->` comments carry author comments
- `data-mkly-styles` attributes carry per-block style entries

HTML between marked blocks is kept as verbatim `core/html` blocks.
"""

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from bs4 import Tag

from mkly.core_kit import CORE_KIT, default_registry
from mkly.document import Comment, Document, InlinePreset, InlineTheme, ParsedBlock
from mkly.kits import Kit
from mkly.pipeline.parser import Parser
from mkly.reverse.html import (
    OPEN_TAG_PATTERN,
    element_span,
    extract_attr,
    extract_inner_html,
    extract_mkly_meta,
    extract_text_content,
    find_by_class,
    find_element_with_class,
    first_element,
    normalize_html_indent,
    remove_elements_by_class,
    tag_classes,
    text_of,
)
from mkly.reverse.markdown import html_to_markdown

logger = logging.getLogger(__name__)

BlockParser = Callable[[str], ParsedBlock]

_STYLE_SCRIPT_PATTERN = re.compile(r'<script type="text/mkly-style">([\s\S]*?)</script>')
_DEFINES_SCRIPT_PATTERN = re.compile(r'<script type="text/mkly-defines">([\s\S]*?)</script>')
_STYLE_TAG_PATTERN = re.compile(r"<style>([\s\S]*?)</style>")
_CSS_VARIABLE_PATTERN = re.compile(r"--mkly-(\w[\w-]*)\s*:\s*([^;]+);")
_VARIABLE_DASH_PATTERN = re.compile(r"-(\w)")
_TITLE_PATTERN = re.compile(r"<title>([^<]*)</title>", re.IGNORECASE)
_BODY_PATTERN = re.compile(r"<body[^>]*>([\s\S]*)</body>", re.IGNORECASE)
_MKLY_COMMENT_PATTERN = re.compile(r"<!-- mkly-c: ([\s\S]*?) -->")
_PAYLOAD_SEPARATOR = "\n---\n"

# Markup that never makes a gap meaningful on its own
_GAP_NOISE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"<!-- mkly-c:[\s\S]*?-->"),
    re.compile(r"<script\b[\s\S]*?</script>", re.IGNORECASE),
    re.compile(r"<style\b[\s\S]*?</style>", re.IGNORECASE),
    re.compile(r"<(?:meta|link)\b[^>]*>", re.IGNORECASE),
)

_HEADING_LEVEL_PATTERN = re.compile(r"mkly-core-heading--(\d)")
_HEADING_TAG_PATTERN = re.compile(r"^h[1-6]$")
_SPACER_HEIGHT_PATTERN = re.compile(r"height:\s*(\d+)px")
_HTML_CLASS_PATTERN = re.compile(r"\s*mkly-core-html")
_EMPTY_CLASS_PATTERN = re.compile(r'\s+class="\s*"')
_DATA_ATTR_PATTERN = re.compile(r'\s+data-mkly-[\w-]+(?:="[^"]*")?')


@dataclass(frozen=True, slots=True)
class _Element:
    """A marked element found at the top level of some HTML."""

    block_type: str
    open_tag: str
    html: str
    inner: str
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class _MarkedComment:
    text: str
    start: int
    end: int


class WebReconstructor:
    """Rebuilds a Document from HTML produced by mkly's web output."""

    def __init__(
        self,
        *,
        kits: Iterable[Kit] = (),
        preserve_styles: bool = True,
        preserve_meta: bool = True,
    ) -> None:
        """Initialize the reconstructor.

        Args:
            kits: Kits whose reverse handlers extend the core class map.
                Later kits override earlier ones.
            preserve_styles: Recover `--mkly-*` CSS variables as a style
                block when no style source is embedded and no theme is active.
            preserve_meta: Recover the document title and used kits when no
                mkly meta tags are present.
        """
        self.preserve_styles = preserve_styles
        self.preserve_meta = preserve_meta
        self.registry = default_registry(*kits)

        self._class_map: dict[str, str] = {}
        self._parsers: dict[str, BlockParser] = {}
        self._block_kits: dict[str, str] = {}
        for kit in self.registry.kits:
            for handler in kit.reverse:
                self._class_map[handler.css_class] = handler.block_type
                if kit is not CORE_KIT:
                    self._block_kits[handler.block_type] = kit.name
                if handler.parse is not None:
                    self._parsers[handler.block_type] = handler.parse

    def reconstruct(self, html: str) -> Document:
        """Rebuild a Document from generated web HTML.

        Args:
            html: Web HTML, complete document or fragment.

        Returns:
            The reconstructed Document.
        """
        mkly_meta = extract_mkly_meta(html)
        inline_themes, inline_presets = self._extract_defines(html)

        uses = list(mkly_meta.uses)
        meta = dict(mkly_meta.meta)
        if mkly_meta.is_empty and not (inline_themes or inline_presets) and self.preserve_meta:
            title = _TITLE_PATTERN.search(html)
            if title:
                meta["title"] = title.group(1)
            uses = self._detect_kits(html)

        styles = self._extract_styles(html, bool(mkly_meta.themes))
        content = self._content_region(html)
        comments = [
            _MarkedComment(match.group(1).replace("—", "--"), match.start(), match.end())
            for match in _MKLY_COMMENT_PATTERN.finditer(content)
        ]
        elements = self._extract_elements(content)
        logger.debug("Found %d marked blocks and %d comments", len(elements), len(comments))

        # Ordered items: gaps split at the comments inside them, then the block
        items: list[ParsedBlock | str] = []
        cursor = 0
        for element in elements:
            _fill_gap(content, cursor, element.start, comments, items)
            items.append(self._parse_element(element))
            cursor = element.end
        _fill_gap(content, cursor, len(content), comments, items)

        blocks = []
        document_comments = []
        line = 1
        for item in items:
            if isinstance(item, str):
                document_comments.append(Comment(text=item, line=line))
                line += 1
                continue
            block = item.to_block(line)
            blocks.append(block)
            line = block.position.end.line + 1

        return Document(
            blocks=tuple(blocks),
            uses=tuple(uses),
            inline_themes=inline_themes,
            inline_presets=inline_presets,
            themes=mkly_meta.themes,
            presets=mkly_meta.presets,
            meta=meta,
            styles=styles,
            comments=tuple(document_comments),
        )

    def _extract_defines(self, html: str) -> tuple[tuple[InlineTheme, ...], tuple[InlinePreset, ...]]:
        match = _DEFINES_SCRIPT_PATTERN.search(html)
        if not match:
            return (), ()
        sources = [part.strip() for part in match.group(1).split(_PAYLOAD_SEPARATOR) if part.strip()]
        result = Parser(registry=self.registry).parse("\n\n".join(sources))
        return result.document.inline_themes, result.document.inline_presets

    def _extract_styles(self, html: str, has_theme: bool) -> tuple[str, ...]:
        match = _STYLE_SCRIPT_PATTERN.search(html)
        if match:
            return tuple(
                part.strip() for part in match.group(1).split(_PAYLOAD_SEPARATOR) if part.strip()
            )
        if not self.preserve_styles or has_theme:
            return ()

        style = _STYLE_TAG_PATTERN.search(html)
        if not style:
            return ()
        variables = [
            f"{_VARIABLE_DASH_PATTERN.sub(lambda m: m.group(1).upper(), name)}: {value.strip()}"
            for name, value in _CSS_VARIABLE_PATTERN.findall(style.group(1))
        ]
        return ("\n".join(variables),) if variables else ()

    def _detect_kits(self, html: str) -> list[str]:
        detected: list[str] = []
        for css_class, block_type in self._class_map.items():
            kit_name = self._block_kits.get(block_type)
            if kit_name and kit_name not in detected and css_class in html:
                detected.append(kit_name)
        return detected

    def _content_region(self, html: str) -> str:
        span = find_element_with_class(html, "mkly-document")
        if span is not None:
            return html[span.inner_start:span.inner_end]
        body = _BODY_PATTERN.search(html)
        return body.group(1) if body else html

    def _block_type_for(self, classes: list[str]) -> str | None:
        for token in classes:
            # BEM element classes (block__part) never start a block
            if "__" in token:
                continue
            block_type = self._class_map.get(token)
            if block_type:
                return block_type
        return None

    def _extract_elements(self, html: str) -> list[_Element]:
        """Find marked elements at the top level of `html`.

        Marked elements nested inside another marked element are skipped;
        containers extract their own children.
        """
        elements: list[_Element] = []
        position = 0
        while True:
            match = OPEN_TAG_PATTERN.search(html, position)
            if not match:
                break
            position = match.end()
            if "class" not in match.group(2):
                continue
            block_type = self._block_type_for(tag_classes(match.group(0)))
            if block_type is None:
                continue

            span = element_span(html, match)
            if span is None:
                continue
            elements.append(
                _Element(
                    block_type=block_type,
                    open_tag=span.open_tag,
                    html=html[span.start:span.end],
                    inner=html[span.inner_start:span.inner_end],
                    start=span.start,
                    end=span.end,
                )
            )
            position = span.end
        return elements

    def _parse_element(self, element: _Element) -> ParsedBlock:
        parser = self._parsers.get(element.block_type)
        block = parser(element.html) if parser else parse_core_block(element.html, element.block_type)

        styles = extract_attr(element.open_tag, "data-mkly-styles")
        if styles:
            entries = []
            for entry in styles.split(";"):
                key, _, value = entry.partition(":")
                if key and value:
                    entries.append(f"{key.strip()}: {value.strip()}")
            block.style_entries = entries

        if self.registry.is_container(element.block_type) and element.inner:
            block.children = [self._parse_element(child) for child in self._extract_elements(element.inner)]
        return block


def _fill_gap(
    content: str,
    cursor: int,
    stop: int,
    comments: list[_MarkedComment],
    items: list[ParsedBlock | str],
) -> None:
    """Append the gap between `cursor` and `stop`, split at each comment inside it.

    Comments that start before `cursor` (inside the previous block) are
    appended first. Consumed comments are popped from `comments`.
    """
    while comments and comments[0].start < stop:
        comment = comments.pop(0)
        gap = _gap_block(content[cursor:comment.start])
        if gap is not None:
            items.append(gap)
        items.append(comment.text)
        cursor = max(cursor, comment.end)
    gap = _gap_block(content[cursor:stop])
    if gap is not None:
        items.append(gap)


def _gap_block(gap: str) -> ParsedBlock | None:
    """Unmarked HTML between blocks, kept verbatim when it has content."""
    cleaned = gap
    for pattern in _GAP_NOISE_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    cleaned = cleaned.strip()
    if not cleaned:
        return None
    return ParsedBlock(block_type="core/html", content=normalize_html_indent(cleaned), verbatim=True)


# -- core block parsers -----------------------------------------------------


def _parse_heading(element: Tag, block: ParsedBlock) -> None:
    for token in element.get("class") or []:
        level = _HEADING_LEVEL_PATTERN.fullmatch(token)
        if level:
            block.properties["level"] = level.group(1)
            break
    if _HEADING_TAG_PATTERN.match(element.name):
        heading = element
    else:
        heading = element.find(_HEADING_TAG_PATTERN)
    if heading is not None:
        block.content = text_of(heading)


def _parse_text(element: Tag, block: ParsedBlock) -> None:
    block.content = html_to_markdown(element.decode_contents())


def _parse_html(html: str, block: ParsedBlock) -> None:
    cleaned = _HTML_CLASS_PATTERN.sub("", html)
    cleaned = _EMPTY_CLASS_PATTERN.sub("", cleaned)
    cleaned = _DATA_ATTR_PATTERN.sub("", cleaned)
    block.content = normalize_html_indent(cleaned.strip())
    block.verbatim = True


def _parse_image(element: Tag, block: ParsedBlock) -> None:
    for attr in ("src", "alt", "width"):
        value = extract_attr(element, attr)
        if value:
            block.properties[attr] = value


def _parse_button(element: Tag, block: ParsedBlock) -> None:
    href = extract_attr(element, "href")
    if href:
        block.properties["url"] = href
    label = extract_text_content(element, "mkly-core-button__link")
    if label:
        block.properties["label"] = label


def _parse_spacer(element: Tag, block: ParsedBlock) -> None:
    height = _SPACER_HEIGHT_PATTERN.search(element.get("style") or "")
    if height:
        block.properties["height"] = height.group(1)


def _parse_code(element: Tag, block: ParsedBlock) -> None:
    lang = extract_attr(element, "data-lang")
    if lang:
        block.properties["lang"] = lang
    code = element if element.name == "code" else element.find("code")
    if code is not None:
        block.content = code.get_text()


def _parse_quote(element: Tag, block: ParsedBlock) -> None:
    author = find_by_class(element, "mkly-core-quote__author")
    if author is not None:
        name = text_of(author).lstrip("—").strip()
        if name:
            block.properties["author"] = name
        author.decompose()
    quote = element if element.name == "blockquote" else element.find("blockquote")
    block.content = html_to_markdown((quote or element).decode_contents())


def _parse_hero(element: Tag, block: ParsedBlock) -> None:
    image = find_by_class(element, "mkly-core-hero__img")
    if image is not None:
        for attr, prop in (("src", "image"), ("alt", "alt")):
            value = image.get(attr)
            if value:
                block.properties[prop] = value
    content = extract_inner_html(element, "mkly-core-hero__content")
    if content:
        block.content = html_to_markdown(content)


def _parse_section(element: Tag, block: ParsedBlock) -> None:
    title = extract_text_content(element, "mkly-core-section__title")
    if title:
        block.properties["title"] = title


def _parse_card(element: Tag, block: ParsedBlock) -> None:
    image = find_by_class(element, "mkly-core-card__img")
    src = image.get("src") if image is not None else None
    if src:
        block.properties["image"] = src
    link = find_by_class(element, "mkly-core-card__link")
    href = link.get("href") if link is not None else None
    if href:
        block.properties["link"] = href
    body = extract_inner_html(element, "mkly-core-card__body")
    if body:
        # The compiler injects a "Read more" link that is not part of the body
        block.content = html_to_markdown(remove_elements_by_class(body, "mkly-core-card__link"))


def _parse_list(element: Tag, block: ParsedBlock) -> None:
    block.content = html_to_markdown(element.decode_contents())


def _parse_header(element: Tag, block: ParsedBlock) -> None:
    logo = find_by_class(element, "mkly-core-header__logo")
    src = logo.get("src") if logo is not None else None
    if src:
        block.properties["logo"] = src
    title = extract_text_content(element, "mkly-core-header__title")
    if title:
        block.properties["title"] = title
    subtitle = extract_inner_html(element, "mkly-core-header__subtitle")
    if subtitle:
        block.content = html_to_markdown(subtitle)


def _parse_footer(element: Tag, block: ParsedBlock) -> None:
    block.content = html_to_markdown(element.decode_contents())


def _parse_cta(element: Tag, block: ParsedBlock) -> None:
    button = find_by_class(element, "mkly-core-cta__button")
    if button is not None:
        href = button.get("href")
        if href:
            block.properties["url"] = href
        label = text_of(button)
        if label:
            block.properties["buttonText"] = label
    block.content = html_to_markdown(remove_elements_by_class(element.decode_contents(), "mkly-core-cta__button"))


def _parse_generic(element: Tag, block: ParsedBlock) -> None:
    block.content = html_to_markdown(element.decode_contents())


_CORE_PARSERS: dict[str, Callable[[Tag, ParsedBlock], None]] = {
    "core/heading": _parse_heading,
    "core/text": _parse_text,
    "core/image": _parse_image,
    "core/button": _parse_button,
    "core/divider": lambda element, block: None,
    "core/spacer": _parse_spacer,
    "core/code": _parse_code,
    "core/quote": _parse_quote,
    "core/hero": _parse_hero,
    "core/section": _parse_section,
    "core/card": _parse_card,
    "core/list": _parse_list,
    "core/header": _parse_header,
    "core/footer": _parse_footer,
    "core/cta": _parse_cta,
}


def parse_core_block(html: str, block_type: str) -> ParsedBlock:
    """Parse one marked element with the core parser for its type.

    Raw `core/html` blocks keep the element's markup as written. Types
    without a core parser fall back to the markdown of the element's inner
    HTML.

    Args:
        html: Outer HTML of the element.
        block_type: Block type resolved from its class.

    Returns:
        The parsed block, without children or style entries.
    """
    block = ParsedBlock(block_type=block_type)
    if block_type == "core/html":
        _parse_html(html, block)
        return block
    element = first_element(html)
    if element is not None:
        _CORE_PARSERS.get(block_type, _parse_generic)(element, block)
    return block
