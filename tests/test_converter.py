"""Tests for the Converter facade."""

import logging

import pytest

from mkly import ConversionResult, Converter, InvalidInputError, Kit, html_to_mkly

WEB_HTML = """\
<html><head><meta name="mkly:use" content="core"></head><body>
<main class="mkly-document" data-mkly-theme="none">
<article class="mkly-core-card" data-mkly-line="3" data-mkly-styles="padding:16px"><img src="https://example.com/a.jpg" alt="" class="mkly-core-card__img"><div class="mkly-core-card__body"><p>A brief summary.</p><a href="https://example.com/article" class="mkly-core-card__link">Read more</a></div></article>
</main>
</body></html>
"""

EMAIL_HTML = """\
<!--[if mso]><table><![endif]-->
<table role="presentation"><tr><td>
<!-- mkly:heading --><h1>Hello</h1>
<!-- mkly:text --><p>Welcome aboard.</p>
</td></tr></table>
"""

GENERIC_HTML = "<body><h2>Plain page</h2><p>Some text.</p></body>"


class TestConvert:
    """Strict conversion."""

    def test_web(self) -> None:
        """Web output converts back to a card block."""
        source = Converter().convert(WEB_HTML)

        assert source.startswith("--- use: core\n\n--- core/card\n")
        assert "image: https://example.com/a.jpg" in source
        assert "link: https://example.com/article" in source
        assert "padding: 16px" in source
        assert "A brief summary." in source
        assert "Read more" not in source
        assert source.endswith("\n")

    def test_generic(self) -> None:
        """Foreign HTML goes through the classifier."""
        source = Converter().convert(GENERIC_HTML)

        assert source == "--- core/heading\nlevel: 2\n\nPlain page\n\n--- core/text\n\nSome text.\n"

    def test_empty_input(self) -> None:
        """Empty input converts to empty source."""
        assert Converter().convert("") == ""

    def test_invalid_origin(self) -> None:
        """Unknown explicit origins raise."""
        with pytest.raises(InvalidInputError, match="Unknown origin"):
            Converter().convert(GENERIC_HTML, origin="print")

    def test_non_string_input(self) -> None:
        """Non-string input raises."""
        with pytest.raises(InvalidInputError):
            Converter().convert(b"<p>x</p>")  # type: ignore[arg-type]

    def test_module_shortcut(self) -> None:
        """html_to_mkly uses a default converter."""
        assert html_to_mkly(GENERIC_HTML) == Converter().convert(GENERIC_HTML)


class TestConvertSafe:
    """Safe conversion."""

    def test_success(self) -> None:
        """Valid input returns source."""
        assert Converter().convert_safe(GENERIC_HTML) == Converter().convert(GENERIC_HTML)

    def test_failure_returns_none(self, caplog: pytest.LogCaptureFixture) -> None:
        """Failures return None and are logged."""
        with caplog.at_level(logging.ERROR, logger="mkly.converter"):
            result = Converter().convert_safe(None)  # type: ignore[arg-type]

        assert result is None
        assert "Unexpected error during conversion" in caplog.text


class TestConvertWithMetadata:
    """Full conversion results."""

    def test_detected_origins(self) -> None:
        """The origin is detected from the HTML."""
        converter = Converter()

        assert converter.convert_with_metadata(WEB_HTML).origin == "web"
        assert converter.convert_with_metadata(EMAIL_HTML).origin == "email"
        assert converter.convert_with_metadata(GENERIC_HTML).origin == "generic"

    def test_result_fields(self) -> None:
        """The result carries source, document and diagnostics."""
        result = Converter().convert_with_metadata(EMAIL_HTML)

        assert isinstance(result, ConversionResult)
        assert [block.block_type for block in result.document.blocks] == ["core/heading", "core/text"]
        assert "--- core/heading\nlevel: 1\n\nHello" in result.source
        assert result.diagnostics == ()

    def test_forced_origin(self) -> None:
        """An explicit origin skips detection."""
        result = Converter().convert_with_metadata(WEB_HTML, origin="generic")

        assert result.origin == "generic"

    def test_diagnostics_from_reparse(self) -> None:
        """Blocks of kits without definitions are reported."""
        converter = Converter(kits=(Kit(name="newsletter"),))
        result = converter.convert_with_metadata("<ul><li>A</li></ul>")

        assert result.document.blocks[0].block_type == "newsletter/quickHits"
        assert [d.message for d in result.diagnostics] == ["Unknown block type: newsletter/quickHits"]

    def test_data_class_is_foreign(self) -> None:
        """A data-class attribute naming a block class is converted as foreign HTML."""
        result = Converter().convert_with_metadata('<div data-class="mkly-core-text"><p>foreign</p></div>')

        assert result.origin == "generic"
        assert "foreign" in result.source

    def test_scaffolding_attributes_removed(self) -> None:
        """data-mkly-* attributes other than styles are dropped before conversion."""
        converter = Converter(passthrough_generic=True)
        source = converter.convert('<div data-mkly-line="2" data-mkly-styles="a:b">x</div>')

        assert "data-mkly-line" not in source
        assert '<div data-mkly-styles="a:b">x</div>' in source


class TestConverterHelpers:
    """Parse and emit with the converter's kits."""

    def test_parse_and_emit(self) -> None:
        """parse and emit use the configured registry."""
        converter = Converter()
        result = converter.parse("--- core/text\nHello")

        assert converter.emit(result.document) == "--- core/text\n\nHello\n"
