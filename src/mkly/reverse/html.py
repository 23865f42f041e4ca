"""HTML helpers shared by the reconstructors.

Offset scanners (`OPEN_TAG_PATTERN`, `find_matching_close`, `element_span`)
work on HTML as text, so callers can slice the original markup without
re-serializing it. Everything that reads attributes, classes or text parses
the element with BeautifulSoup.

A helper that cannot find what it looks for returns None (or the input
unchanged) rather than raising.
"""

import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

VOID_TAGS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Opening tag; quoted attribute values may contain ">"
OPEN_TAG_PATTERN = re.compile(
    r"""<([a-zA-Z][\w-]*)((?:\s+[^\s"'>/=]+(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'>]+))?)*)\s*(/?)>"""
)

_TAG_PATTERN = re.compile(r"<[^>]+>")

_MKLY_META_PREFIX = "mkly:"


@dataclass(frozen=True, slots=True)
class ElementSpan:
    """Offsets of one element inside a larger HTML text.

    Void and self-closing elements have an empty inner range that starts
    and ends at `end`.
    """

    tag: str
    open_tag: str
    start: int
    inner_start: int
    inner_end: int
    end: int


@dataclass(frozen=True, slots=True)
class MklyMeta:
    """Preamble recovered from `<meta name="mkly:*">` tags.

    Attributes:
        uses: Kit names from `mkly:use`.
        themes: Theme names from `mkly:theme`.
        presets: Preset names from `mkly:preset`.
        meta: Every other `mkly:key` as a meta entry.
    """

    uses: tuple[str, ...] = ()
    themes: tuple[str, ...] = ()
    presets: tuple[str, ...] = ()
    meta: dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.uses or self.themes or self.presets or self.meta)


def parse_fragment(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def first_element(html: str) -> Tag | None:
    """The first element of `html`, parsed."""
    return parse_fragment(html).find()


def _root(html: str | Tag) -> Tag:
    return parse_fragment(html) if isinstance(html, str) else html


def strip_tags(html: str) -> str:
    return _TAG_PATTERN.sub("", html)


def tag_classes(open_tag: str) -> list[str]:
    """Class tokens of an element, read from its opening tag."""
    element = first_element(open_tag)
    if element is None:
        return []
    return list(element.get("class") or [])


def text_of(element: Tag) -> str:
    """Trimmed text of an element, non-breaking spaces as mkly's `\\~`."""
    return element.get_text().strip().replace("\xa0", "\\~")


def extract_attr(html: str | Tag, attr: str) -> str | None:
    """Value of `attr` on the first element carrying it.

    A Tag is checked itself before its descendants. Entities are decoded.
    """
    root = _root(html)
    element = root if root.has_attr(attr) else root.find(attrs={attr: True})
    if element is None:
        return None
    value = element.get(attr)
    if isinstance(value, list):
        return " ".join(value)
    return value


def find_by_class(html: str | Tag, class_name: str) -> Tag | None:
    """First element carrying `class_name` as one of its class tokens.

    For a Tag only descendants are searched.
    """
    return _root(html).find(class_=class_name)


def extract_inner_html(html: str | Tag, class_name: str) -> str | None:
    """Inner HTML of the first element carrying `class_name`.

    Void elements yield None.
    """
    element = find_by_class(html, class_name)
    if element is None or element.name in VOID_TAGS:
        return None
    return element.decode_contents()


def extract_text_content(html: str | Tag, class_name: str) -> str | None:
    element = find_by_class(html, class_name)
    return text_of(element) if element is not None else None


def remove_elements_by_class(html: str, *class_names: str) -> str:
    """Remove whole elements (tag and inner HTML) carrying any of the classes."""
    soup = parse_fragment(html)
    for class_name in class_names:
        for element in soup.find_all(class_=class_name):
            if not element.decomposed:
                element.decompose()
    return soup.decode()


def find_matching_close(html: str, tag: str, start: int) -> int:
    """Find the closing tag balancing an already-open `tag`.

    Args:
        html: HTML text.
        tag: Tag name of the open element.
        start: Offset just past the element's opening tag.

    Returns:
        Offset of the balancing `</tag>`, or -1 if the element is unclosed.
    """
    pattern = re.compile(rf"<(/?){re.escape(tag)}\b[^>]*>", re.IGNORECASE)
    depth = 1
    for match in pattern.finditer(html, start):
        if match.group(1):
            depth -= 1
            if depth == 0:
                return match.start()
        elif not match.group(0).endswith("/>"):
            depth += 1
    return -1


def element_span(html: str, match: re.Match[str]) -> ElementSpan | None:
    """Span of the element opened by an `OPEN_TAG_PATTERN` match.

    Returns:
        The span, or None if the element is never closed.
    """
    tag = match.group(1).lower()
    if tag in VOID_TAGS or match.group(3):
        return ElementSpan(tag, match.group(0), match.start(), match.end(), match.end(), match.end())
    close = find_matching_close(html, tag, match.end())
    if close < 0:
        return None
    end = html.index(">", close) + 1
    return ElementSpan(tag, match.group(0), match.start(), match.end(), close, end)


def find_element_with_class(html: str, class_name: str) -> ElementSpan | None:
    """Span of the first element whose class tokens include `class_name`."""
    for match in OPEN_TAG_PATTERN.finditer(html):
        if class_name in match.group(2) and class_name in tag_classes(match.group(0)):
            return element_span(html, match)
    return None


def extract_mkly_meta(html: str) -> MklyMeta:
    """Collect `mkly:*` meta tags into uses, themes, presets and meta."""
    uses: list[str] = []
    themes: list[str] = []
    presets: list[str] = []
    meta: dict[str, str] = {}
    for tag in parse_fragment(html).find_all("meta"):
        name = tag.get("name") or ""
        value = tag.get("content")
        if not name.startswith(_MKLY_META_PREFIX) or value is None:
            continue
        key = name[len(_MKLY_META_PREFIX):]
        if key == "use":
            uses.append(value)
        elif key == "theme":
            themes.append(value)
        elif key == "preset":
            presets.append(value)
        elif key:
            meta[key] = value
    return MklyMeta(uses=tuple(uses), themes=tuple(themes), presets=tuple(presets), meta=meta)


def normalize_html_indent(html: str) -> str:
    """Remove the common indentation of every line after the first.

    Browser-serialized HTML indents continuation lines relative to the
    element's nesting depth; the first line was already trimmed.
    """
    lines = html.split("\n")
    if len(lines) <= 1:
        return html
    indents = [len(line) - len(line.lstrip()) for line in lines[1:] if line.strip()]
    if not indents or min(indents) == 0:
        return html
    indent = min(indents)
    return "\n".join([lines[0], *(line[indent:] for line in lines[1:])])


def kebab_to_camel(name: str) -> str:
    """CSS property name to mkly style key (`font-size` -> `fontSize`)."""
    if name == "background":
        return "bg"
    if name == "background-color":
        return "bgColor"
    return re.sub(r"-([a-z])", lambda match: match.group(1).upper(), name)
