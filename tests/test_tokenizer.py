"""Tests for the Tokenizer component."""

from mkly.pipeline import Tokenizer, tokenize


class TestTokenizerKinds:
    """Line classification tests."""

    def test_blank_line(self) -> None:
        """Whitespace-only lines are blank."""
        tokens = Tokenizer().tokenize("   \t")

        assert tokens[0].kind == "blank"

    def test_comment(self) -> None:
        """A // prefix marks a comment; the text is trimmed."""
        tokens = tokenize("  //  a note ")

        assert tokens[0].kind == "comment"
        assert tokens[0].text == "a note"

    def test_block_start(self) -> None:
        """--- type opens a block."""
        tokens = tokenize("--- core/card")

        assert tokens[0].kind == "block_start"
        assert tokens[0].block_type == "core/card"
        assert tokens[0].label is None

    def test_block_start_with_label(self) -> None:
        """A label follows the colon after the type."""
        tokens = tokenize("--- core/section: Top stories")

        assert tokens[0].kind == "block_start"
        assert tokens[0].block_type == "core/section"
        assert tokens[0].label == "Top stories"

    def test_unqualified_block_start(self) -> None:
        """Directive names without a kit prefix are block starts too."""
        tokens = tokenize("--- use: core")

        assert tokens[0].kind == "block_start"
        assert tokens[0].block_type == "use"
        assert tokens[0].label == "core"

    def test_block_end(self) -> None:
        """--- /type closes a block."""
        tokens = tokenize("--- /core/section")

        assert tokens[0].kind == "block_end"
        assert tokens[0].block_type == "core/section"

    def test_property(self) -> None:
        """key: value lines are properties."""
        tokens = tokenize("src: https://example.com/a.jpg")

        assert tokens[0].kind == "property"
        assert tokens[0].key == "src"
        assert tokens[0].value == "https://example.com/a.jpg"

    def test_property_requires_space(self) -> None:
        """A colon without a following space is not a property."""
        tokens = tokenize("note:value")

        assert tokens[0].kind == "text"

    def test_property_quotes_removed(self) -> None:
        """One pair of surrounding double quotes is removed."""
        tokens = tokenize('label: "Read more"')

        assert tokens[0].value == "Read more"

    def test_single_quote_kept(self) -> None:
        """A lone quote character is not treated as a pair."""
        tokens = tokenize('label: "')

        assert tokens[0].value == '"'

    def test_style_selector_property(self) -> None:
        """@-prefixed keys tokenize as properties."""
        tokens = tokenize("@bg: red")

        assert tokens[0].kind == "property"
        assert tokens[0].key == "@bg"

    def test_text_keeps_indentation(self) -> None:
        """Text lines keep the original line, indentation included."""
        tokens = tokenize("    indented code")

        assert tokens[0].kind == "text"
        assert tokens[0].text == "    indented code"

    def test_markdown_heading_is_text(self) -> None:
        """Markdown headings are plain text."""
        tokens = tokenize("## Title")

        assert tokens[0].kind == "text"


class TestTokenizerLines:
    """Line numbering and ending tests."""

    def test_one_token_per_line(self) -> None:
        """Every physical line yields one token, numbered from 1."""
        tokens = tokenize("--- core/text\nHello\n")

        assert [token.line for token in tokens] == [1, 2, 3]
        assert [token.kind for token in tokens] == ["block_start", "text", "blank"]

    def test_crlf_endings(self) -> None:
        """CRLF and CR endings are accepted."""
        tokens = tokenize("a\r\nb\rc")

        assert [token.raw for token in tokens] == ["a", "b", "c"]

    def test_raw_preserved(self) -> None:
        """The raw field always holds the untouched line."""
        tokens = tokenize("  title: X  ")

        assert tokens[0].raw == "  title: X  "
