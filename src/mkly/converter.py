"""Converter - main public interface for HTML to mkly conversion.

Provides three conversion methods:
- convert(): Strict conversion, raises on invalid input
- convert_safe(): Safe conversion, returns None on failure
- convert_with_metadata(): Full result with the document, origin and diagnostics
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

from mkly.core_kit import default_registry
from mkly.document import Diagnostic, Document
from mkly.exceptions import InvalidInputError
from mkly.kits import Kit
from mkly.patterns.layout import DEFAULT_MAX_CARD_SIZE
from mkly.pipeline.emitter import Emitter
from mkly.pipeline.parser import Parser, ParseResult
from mkly.reverse.detector import ORIGINS, Origin, detect_origin
from mkly.reverse.email import EmailReconstructor
from mkly.reverse.generic import GenericReconstructor
from mkly.reverse.tables import DEFAULT_MAX_PASSES
from mkly.reverse.web import WebReconstructor

logger = logging.getLogger(__name__)

# Compiler scaffolding (source lines, active state); data-mkly-styles carries round-trip data
_SCAFFOLD_ATTR_PATTERN = re.compile(r'\s+data-mkly-(?!styles\b)[\w-]+(?:="[^"]*")?')


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Full conversion result with metadata.

    Attributes:
        source: Emitted mkly source.
        document: The reconstructed document.
        origin: Origin the HTML was handled as.
        diagnostics: Diagnostics from parsing the emitted source.
    """

    source: str
    document: Document
    origin: Origin
    diagnostics: tuple[Diagnostic, ...]


class Converter:
    """Converts HTML back into mkly source.

    The origin of the HTML decides the strategy:
    1. web: mkly web output, rebuilt from its block classes
    2. email: mkly email output, rebuilt from comment markers or heuristics
    3. generic: anything else, via strip, unwrap, split and classify

    Example:
        converter = Converter()

        # Strict conversion (raises on invalid input)
        source = converter.convert(html)

        # Safe conversion (returns None on failure)
        source = converter.convert_safe(html)

        # Full metadata
        result = converter.convert_with_metadata(html)
    """

    def __init__(
        self,
        *,
        kits: Iterable[Kit] = (),
        preserve_styles: bool = True,
        preserve_meta: bool = True,
        passthrough_generic: bool = False,
        max_passes: int = DEFAULT_MAX_PASSES,
        max_card_size: int = DEFAULT_MAX_CARD_SIZE,
    ) -> None:
        """Initialize the converter.

        Args:
            kits: Kits beyond core, used for class mapping, import patterns
                and validation of the emitted source.
            preserve_styles: Recover CSS variables from web output.
            preserve_meta: Recover title and used kits from web output.
            passthrough_generic: Keep foreign HTML as one verbatim block.
            max_passes: Bound on table-unwrapping passes.
            max_card_size: Size limit for structural card detection.
        """
        self.kits = tuple(kits)
        self.registry = default_registry(*self.kits)

        self._web = WebReconstructor(
            kits=self.kits,
            preserve_styles=preserve_styles,
            preserve_meta=preserve_meta,
        )
        self._email = EmailReconstructor()
        self._generic = GenericReconstructor(
            kits=self.kits,
            max_passes=max_passes,
            max_card_size=max_card_size,
            passthrough=passthrough_generic,
        )
        self._emitter = Emitter(registry=self.registry)
        self._parser = Parser(registry=self.registry)

    def convert(self, html: str, origin: Origin | None = None) -> str:
        """Convert HTML to mkly source.

        Args:
            html: HTML text.
            origin: Force an origin instead of detecting it.

        Returns:
            mkly source; empty if nothing was recovered.

        Raises:
            InvalidInputError: If html is not a string or origin is unknown.
        """
        return self.convert_with_metadata(html, origin).source

    def convert_safe(self, html: str, origin: Origin | None = None) -> str | None:
        """Convert HTML to mkly source, returning None on any failure.

        Args:
            html: HTML text.
            origin: Force an origin instead of detecting it.

        Returns:
            mkly source, or None if conversion failed.
        """
        try:
            return self.convert_with_metadata(html, origin).source
        except Exception:
            logger.exception("Unexpected error during conversion")
            return None

    def convert_with_metadata(self, html: str, origin: Origin | None = None) -> ConversionResult:
        """Convert HTML and report how it was handled.

        Args:
            html: HTML text.
            origin: Force an origin instead of detecting it.

        Returns:
            ConversionResult with source, document, origin and diagnostics.

        Raises:
            InvalidInputError: If html is not a string or origin is unknown.
        """
        if not isinstance(html, str):
            raise InvalidInputError(message=f"Expected HTML as str, got {type(html).__name__}")
        if origin is not None and origin not in ORIGINS:
            raise InvalidInputError(message=f'Unknown origin "{origin}"; expected one of {", ".join(ORIGINS)}')

        cleaned = _SCAFFOLD_ATTR_PATTERN.sub("", html)
        resolved: Origin = origin or detect_origin(cleaned)
        logger.debug("Converting HTML as %s origin", resolved)

        if resolved == "web":
            document = self._web.reconstruct(cleaned)
        elif resolved == "email":
            document = self._email.reconstruct(cleaned)
        else:
            document = self._generic.reconstruct(cleaned)

        source = self._emitter.emit(document)
        diagnostics = self._parser.parse(source).diagnostics if source else ()
        return ConversionResult(source=source, document=document, origin=resolved, diagnostics=diagnostics)

    def parse(self, source: str) -> ParseResult:
        """Parse mkly source with this converter's kits."""
        return self._parser.parse(source)

    def emit(self, document: Document) -> str:
        """Emit canonical mkly source with this converter's kits."""
        return self._emitter.emit(document)


def html_to_mkly(html: str, *, origin: Origin | None = None, kits: Iterable[Kit] = ()) -> str:
    """Convert HTML to mkly source with a default-configured Converter."""
    return Converter(kits=kits).convert(html, origin)
