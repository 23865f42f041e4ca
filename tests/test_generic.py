"""Tests for the GenericReconstructor."""

import logging

import pytest

from mkly.reverse import GenericReconstructor

NEWSLETTER = """\
<html>
<head><style>body { margin: 0; }</style></head>
<body>
<table role="presentation" width="100%">
  <tr><td><h1>Acme Weekly</h1></td></tr>
  <tr><td><p>Hello friends.</p></td></tr>
  <tr><td>&nbsp;</td></tr>
  <tr><td><ul><li>First</li><li>Second</li></ul></td></tr>
</table>
<img src="https://mail.example.com/open.gif" width="1" height="1">
</body>
</html>
"""


class TestGenericReconstructor:
    """Strip, unwrap, split and classify."""

    def test_three_tiers(self) -> None:
        """Layout tables disappear and each segment is classified."""
        document = GenericReconstructor().reconstruct(NEWSLETTER)

        assert [block.block_type for block in document.blocks] == ["core/heading", "core/text", "core/list"]
        heading, text, _ = document.blocks
        assert heading.properties == {"level": "1"}
        assert heading.content == "Acme Weekly"
        assert text.content == "Hello friends."

    def test_blocks_numbered_in_order(self) -> None:
        """Reconstructed blocks get increasing positions."""
        document = GenericReconstructor().reconstruct(NEWSLETTER)

        lines = [block.position.start.line for block in document.blocks]
        assert lines == sorted(lines)
        assert len(set(lines)) == len(lines)

    def test_empty_body(self) -> None:
        """Nothing to classify gives an empty document."""
        document = GenericReconstructor().reconstruct("<html><body>  <!-- x --> </body></html>")

        assert document.blocks == ()

    def test_passthrough(self) -> None:
        """Passthrough keeps the body as one verbatim block."""
        html = "<body><script>track()</script><div>\n    <p>Hi</p>\n  </div></body>"
        document = GenericReconstructor(passthrough=True).reconstruct(html)

        assert document.uses == ("core",)
        assert document.meta == {"version": "1"}
        assert len(document.blocks) == 1
        block = document.blocks[0]
        assert block.block_type == "core/html"
        assert block.verbatim is True
        assert block.content == "<div>\n  <p>Hi</p>\n</div>"

    def test_passthrough_empty(self) -> None:
        """Passthrough of an empty body is an empty document."""
        assert GenericReconstructor().wrap_verbatim("<body> </body>").blocks == ()

    def test_fragment_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Input without a body element is reported as a fragment."""
        with caplog.at_level(logging.DEBUG, logger="mkly.reverse.generic"):
            GenericReconstructor().reconstruct("<p>Loose paragraph</p>")

        assert "treating the input as a fragment" in caplog.text

    def test_body_not_logged_as_fragment(self, caplog: pytest.LogCaptureFixture) -> None:
        """Documents with a body element are not fragments."""
        with caplog.at_level(logging.DEBUG, logger="mkly.reverse.generic"):
            GenericReconstructor().reconstruct(NEWSLETTER)

        assert "fragment" not in caplog.text
