"""Tests for the EmailReconstructor."""

from mkly.reverse import EmailReconstructor

MARKED_EMAIL = """\
<html><head>
<meta name="subject" content="Issue 12">
<title>Fallback title</title>
</head><body>
<!--[if mso]><table><tr><td><![endif]-->
<table role="presentation" width="100%"><tr><td>
<!-- mkly:heading --><h1 style="margin:0">Weekly News</h1>
<!-- mkly:text --><p style="color:#333">Hello <strong>reader</strong>.</p>
<!-- mkly:newsletter/intro --><p>Kit block</p>
<!-- /mkly -->
<p>Footer text</p>
</td></tr></table>
</body></html>
"""

CELL_EMAIL = """\
<!--[if mso]><table><![endif]-->
<table role="presentation">
<tr><td style="padding: 24px"><h2 style="font-size:20px">Big headline</h2></td></tr>
<tr><td style="padding: 16px"><p>Body paragraph</p></td></tr>
<tr><td style="padding: 0"><table><tr><td>nested only</td></tr></table></td></tr>
</table>
"""


class TestMarkers:
    """Comment-marker recovery."""

    def test_marked_blocks(self) -> None:
        """Markers delimit blocks; bare names get the core prefix."""
        document = EmailReconstructor().reconstruct(MARKED_EMAIL)

        assert [block.block_type for block in document.blocks] == [
            "core/heading",
            "core/text",
            "newsletter/intro",
        ]
        heading, text, intro = document.blocks
        assert heading.properties == {"level": "1"}
        assert heading.content == "Weekly News"
        assert text.content == "Hello **reader**."
        assert intro.content == "Kit block"

    def test_content_after_end_marker_ignored(self) -> None:
        """Nothing after the end marker is recovered when markers suffice."""
        document = EmailReconstructor().reconstruct(MARKED_EMAIL)

        assert all("Footer text" not in block.content for block in document.blocks)

    def test_subject_title(self) -> None:
        """The subject meta wins over the title element."""
        document = EmailReconstructor().reconstruct(MARKED_EMAIL)

        assert document.meta == {"title": "Issue 12"}

    def test_mkly_meta_preamble(self) -> None:
        """mkly meta tags restore the preamble."""
        html = (
            '<meta name="mkly:use" content="core"><meta name="mkly:preset" content="compact">'
            "<!-- mkly:text --><p>A</p><!-- mkly:text --><p>B</p>"
        )
        document = EmailReconstructor().reconstruct(html)

        assert document.uses == ("core",)
        assert document.presets == ("compact",)
        assert document.meta == {}


class TestHeuristics:
    """Fallback recovery without markers."""

    def test_padded_cells(self) -> None:
        """Padded cells become headings or text; wrapper cells are skipped."""
        document = EmailReconstructor().reconstruct(CELL_EMAIL)

        assert [block.block_type for block in document.blocks] == ["core/heading", "core/text"]
        heading, text = document.blocks
        assert heading.properties == {"level": "2"}
        assert heading.content == "Big headline"
        assert text.content == "Body paragraph"

    def test_elements(self) -> None:
        """Without cells, headings then paragraphs are recovered once each."""
        html = "<h3>Title here</h3><p>Para one</p><p>Para one</p><p>Para two</p>"
        document = EmailReconstructor().reconstruct(html)

        assert [(block.block_type, block.content) for block in document.blocks] == [
            ("core/heading", "Title here"),
            ("core/text", "Para one"),
            ("core/text", "Para two"),
        ]

    def test_single_marker_not_duplicated(self) -> None:
        """Text found by a marker is not recovered again by the fallback."""
        html = '<table role="presentation"><tr><td style="padding:8px"><!-- mkly:text --><p>Only</p></td></tr></table>'
        document = EmailReconstructor().reconstruct(html)

        assert [block.content for block in document.blocks] == ["Only"]

    def test_title_element(self) -> None:
        """The title element is used without a subject."""
        document = EmailReconstructor().reconstruct("<title>Hi there</title><p>x</p>")

        assert document.meta == {"title": "Hi there"}
