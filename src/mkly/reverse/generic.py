"""Reconstruction of foreign HTML.

Runs the three tiers in order: strip boilerplate, unwrap layout tables,
then split into segments and classify each one. A passthrough mode keeps
the whole body as a single verbatim `core/html` block instead.
"""

import logging
import re
from collections.abc import Iterable

from mkly.document import Document, ParsedBlock, freeze_blocks
from mkly.kits import Kit
from mkly.patterns.layout import DEFAULT_MAX_CARD_SIZE
from mkly.reverse.boilerplate import BoilerplateStripper
from mkly.reverse.classifier import PatternClassifier
from mkly.reverse.html import normalize_html_indent
from mkly.reverse.segments import SegmentSplitter
from mkly.reverse.tables import DEFAULT_MAX_PASSES, TableUnwrapper

logger = logging.getLogger(__name__)

_SCRIPT_PATTERN = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_BODY_PATTERN = re.compile(r"<body[^>]*>([\s\S]*)</body>", re.IGNORECASE)


class GenericReconstructor:
    """Best-effort conversion of arbitrary HTML into blocks."""

    def __init__(
        self,
        *,
        kits: Iterable[Kit] = (),
        max_passes: int = DEFAULT_MAX_PASSES,
        max_card_size: int = DEFAULT_MAX_CARD_SIZE,
        passthrough: bool = False,
    ) -> None:
        """Initialize the reconstructor.

        Args:
            kits: Kits contributing import patterns to the classifier.
            max_passes: Bound on table-unwrapping passes.
            max_card_size: Size limit for structural card detection.
            passthrough: Keep the body verbatim instead of classifying it.
        """
        self.passthrough = passthrough
        self._stripper = BoilerplateStripper()
        self._unwrapper = TableUnwrapper(max_passes=max_passes)
        self._splitter = SegmentSplitter()
        self._classifier = PatternClassifier(kits=kits, max_card_size=max_card_size)

    def reconstruct(self, html: str) -> Document:
        """Convert foreign HTML into a Document.

        Args:
            html: Arbitrary HTML.

        Returns:
            Document of inferred blocks; empty if nothing survives stripping.
        """
        if self.passthrough:
            return self.wrap_verbatim(html)

        stripped = self._stripper.strip(html)
        if not stripped.had_body:
            logger.debug("No <body> element; treating the input as a fragment")
        unwrapped = self._unwrapper.unwrap(stripped.html)
        segments = self._splitter.split(unwrapped.html)
        blocks = self._classifier.classify_all(segments)
        logger.debug("Classified %d segments into %d blocks", len(segments), len(blocks))
        return Document(blocks=freeze_blocks(blocks))

    def wrap_verbatim(self, html: str) -> Document:
        """Wrap the body of `html`, minus scripts, in one verbatim block."""
        content = _SCRIPT_PATTERN.sub("", html)
        body = _BODY_PATTERN.search(content)
        if body:
            content = body.group(1)
        content = normalize_html_indent(content.strip())
        if not content:
            return Document()

        block = ParsedBlock(block_type="core/html", content=content, verbatim=True)
        return Document(blocks=freeze_blocks([block]), uses=("core",), meta={"version": "1"})
