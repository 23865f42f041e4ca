"""Tests for the source Emitter."""

from mkly import Block, Document, Emitter, InlinePreset, InlineTheme, ParsedBlock, emit, parse

ROUND_TRIP_SOURCE = """\
--- use: core

--- define-theme: brand
accent: #e2725b

.mkly-document { color: #333; }

--- theme: brand

--- meta
title: Weekly digest
version: 1

--- style
card:
  padding: 16px

--- core/heading
level: 1

Welcome

// Top stories follow
--- core/section: Top
title: Stories

--- core/card
image: https://example.com/a.jpg
link: https://example.com/article

A **bold** summary.

Second paragraph.

--- core/text
title: literal line
--- /core/section

--- core/spacer
height: 24px

--- core/html

<div class="custom">
  <span>raw</span>
</div>
--- /core/html
"""


def _shape(block: Block) -> tuple:
    """Structure of a block without source positions."""
    return (
        block.block_type,
        block.label,
        dict(block.properties),
        block.content,
        block.verbatim,
        tuple(_shape(child) for child in block.children),
    )


def _document_shape(document: Document) -> tuple:
    return (
        document.uses,
        document.inline_themes,
        document.inline_presets,
        document.themes,
        document.presets,
        document.meta,
        document.styles,
        tuple(comment.text for comment in document.comments),
        document.version,
        tuple(_shape(block) for block in document.blocks),
    )


class TestRoundTrip:
    """Parsing emitted source gives back the same structure."""

    def test_round_trip_structurally_equal(self) -> None:
        """parse(emit(T)) equals T for an error-free document."""
        first = parse(ROUND_TRIP_SOURCE)
        assert first.errors == ()

        second = parse(emit(first.document))

        assert second.diagnostics == ()
        assert _document_shape(second.document) == _document_shape(first.document)

    def test_emit_is_stable(self) -> None:
        """Emitting a reparsed document gives the same text."""
        once = emit(parse(ROUND_TRIP_SOURCE).document)
        twice = emit(parse(once).document)

        assert twice == once

    def test_comments_between_blocks(self) -> None:
        """Comments stay before the block they preceded."""
        source = "// intro\n--- core/text\nA\n\n// between\n--- core/text\nB\n"
        output = emit(parse(source).document)

        assert output == "// intro\n\n--- core/text\n\nA\n\n// between\n\n--- core/text\n\nB\n"


class TestEmitterFormat:
    """Canonical layout of emitted source."""

    def test_empty_document(self) -> None:
        """An empty document emits an empty string."""
        assert Emitter().emit(Document()) == ""

    def test_section_order(self) -> None:
        """Directives are written in canonical order regardless of field order."""
        document = Document(
            meta={"title": "T"},
            presets=("compact",),
            themes=("dark",),
            uses=("core",),
            inline_presets=(InlinePreset(name="tight", css=".a { margin: 0; }"),),
            inline_themes=(InlineTheme(name="brand", variables={"accent": "red"}),),
        )

        assert emit(document) == (
            "--- use: core\n\n"
            "--- define-theme: brand\naccent: red\n\n"
            "--- define-preset: tight\n.a { margin: 0; }\n\n"
            "--- theme: dark\n\n"
            "--- preset: compact\n\n"
            "--- meta\ntitle: T\n"
        )

    def test_block_layout(self) -> None:
        """Properties, a blank line, then content."""
        block = ParsedBlock(block_type="core/button", properties={"url": "https://x.io"}, content="Go").to_block(1)

        assert Emitter().emit_block(block) == "--- core/button\nurl: https://x.io\n\nGo"

    def test_container_always_closed(self) -> None:
        """Container types get a closer even without children."""
        block = ParsedBlock(block_type="core/section", label="Empty").to_block(1)

        assert Emitter().emit_block(block) == "--- core/section: Empty\n\n--- /core/section"

    def test_style_entries_follow_properties(self) -> None:
        """Recovered style entries are written after the properties."""
        block = ParsedBlock(
            block_type="core/card",
            properties={"image": "a.jpg"},
            content="Body",
            style_entries=["padding: 16px"],
        ).to_block(1)

        assert Emitter().emit_block(block) == "--- core/card\nimage: a.jpg\npadding: 16px\n\nBody"

    def test_quoted_value_survives(self) -> None:
        """Fully quoted values get an extra pair of quotes."""
        block = ParsedBlock(block_type="core/button", properties={"label": '"Hi"'}).to_block(1)
        output = Emitter().emit_block(block)

        assert 'label: ""Hi""' in output
        assert parse(output).document.blocks[0].properties == {"label": '"Hi"'}

    def test_empty_value_quoted(self) -> None:
        """Empty values are written as an empty quoted string."""
        block = ParsedBlock(block_type="core/image", properties={"src": "a.jpg", "alt": ""}).to_block(1)

        assert 'alt: ""' in Emitter().emit_block(block)

    def test_multiline_value_flattened(self) -> None:
        """Newlines in values become spaces."""
        block = ParsedBlock(block_type="core/button", properties={"label": "Read\nmore"}).to_block(1)

        assert "label: Read more" in Emitter().emit_block(block)

    def test_comment_shaped_content_escaped(self) -> None:
        """Content lines starting with // get a backslash and parse back unchanged."""
        block = ParsedBlock(block_type="core/text", content="// not a comment\n  \\// already escaped").to_block(1)
        output = Emitter().emit_block(block)

        assert output == "--- core/text\n\n\\// not a comment\n  \\\\// already escaped"
        result = parse(output)
        assert result.document.comments == ()
        assert result.document.blocks[0].content == "// not a comment\n  \\// already escaped"

    def test_verbatim_content_not_escaped(self) -> None:
        """Verbatim blocks keep // lines as written."""
        block = ParsedBlock(block_type="core/html", content="<script>\n// x\n</script>", verbatim=True).to_block(1)
        output = Emitter().emit_block(block)

        assert "\n// x\n" in output
        assert parse(output).document.blocks[0].content == "<script>\n// x\n</script>"
