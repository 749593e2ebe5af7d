"""Tests for block-level post-processing."""

from pagedistill.conversion import MarkdownConverter
from pagedistill.models.blocks import Block, BlockType, TableData
from pagedistill.models.config import PostProcessConfig
from pagedistill.postprocess import PostProcessor, github_slug


def heading(level: int, text: str) -> Block:
    return Block(type=BlockType.HEADING, level=level, text=text)


def paragraph(text: str) -> Block:
    return Block(type=BlockType.PARAGRAPH, text=text)


class TestCleanup:
    """Tests for character cleanup and empty block removal."""

    def test_strips_non_printable(self):
        """Test that zero-width and control characters are removed."""
        blocks = [paragraph("a\u200bb\u0007c"), Block(type=BlockType.LIST, items=["x\ufeff"])]

        result = PostProcessor().process(blocks)

        assert result[0].text == "abc"
        assert result[1].items == ["x"]

    def test_keeps_newlines_and_tabs(self):
        """Test that code whitespace survives cleanup."""
        code = Block(type=BlockType.CODE, code="def f():\n\treturn 1")

        result = PostProcessor().process([code])

        assert result[0].code == "def f():\n\treturn 1"

    def test_drops_blocks_left_empty(self):
        """Test that blocks with only invisible characters are dropped."""
        blocks = [paragraph("\u200b"), paragraph("kept"), Block(type=BlockType.TABLE, table=TableData())]

        result = PostProcessor().process(blocks)

        assert [b.text for b in result] == ["kept"]

    def test_cleanup_can_be_disabled(self):
        """Test that remove_non_printable=False leaves text alone."""
        processor = PostProcessor(PostProcessConfig(remove_non_printable=False))

        result = processor.process([paragraph("a\u200bb")])

        assert result[0].text == "a\u200bb"

    def test_does_not_mutate_input(self):
        """Test that the input blocks are left untouched."""
        blocks = [paragraph("a\u200bb")]

        PostProcessor().process(blocks)

        assert blocks[0].text == "a\u200bb"


class TestHeadingHierarchy:
    """Tests for heading level normalization."""

    def test_skipped_levels_closed(self):
        """Test that skipped heading levels are pulled up."""
        blocks = [heading(2, "A"), heading(3, "B"), heading(3, "C"), heading(2, "D")]

        result = PostProcessor().process(blocks)

        assert [b.level for b in result] == [1, 2, 2, 1]

    def test_siblings_share_a_level(self):
        """Test that sibling subheadings under a promoted heading stay siblings."""
        blocks = [heading(2, "A"), paragraph("x"), heading(3, "B"), paragraph("y"), heading(3, "C")]

        result = PostProcessor().process(blocks)

        assert [(b.level, b.text) for b in result if b.type == BlockType.HEADING] == [
            (1, "A"),
            (2, "B"),
            (2, "C"),
        ]

    def test_deep_jump_closed(self):
        """Test that an h1 followed by an h4 becomes h1, h2."""
        result = PostProcessor().process([heading(1, "A"), heading(4, "B"), heading(2, "C")])

        assert [b.level for b in result] == [1, 2, 2]

    def test_valid_hierarchy_unchanged(self):
        """Test that an already valid hierarchy keeps its levels."""
        blocks = [heading(1, "A"), heading(2, "B"), heading(3, "C"), heading(2, "D")]

        result = PostProcessor().process(blocks)

        assert [b.level for b in result] == [1, 2, 3, 2]

    def test_normalization_can_be_disabled(self):
        """Test that normalize_headings=False keeps original levels."""
        processor = PostProcessor(PostProcessConfig(normalize_headings=False))

        result = processor.process([heading(3, "Deep")])

        assert result[0].level == 3


class TestTableOfContents:
    """Tests for table of contents generation."""

    BLOCKS = [
        heading(1, "Intro"),
        paragraph("Text"),
        heading(2, "Getting Started: Install!"),
        paragraph("More"),
    ]

    def test_github_toc_after_first_heading(self):
        """Test that a GitHub TOC is inserted after the first heading."""
        processor = PostProcessor(PostProcessConfig(platform="github", table_of_contents=True))

        result = processor.process(self.BLOCKS)

        assert result[0].text == "Intro"
        assert result[1] == heading(2, "Table of Contents")
        assert result[2].items == [
            "[Intro](#intro)\n- [Getting Started: Install!](#getting-started-install)"
        ]
        assert result[3].text == "Text"

    def test_toc_renders_as_nested_list(self):
        """Test that the TOC renders with nested entries indented."""
        processor = PostProcessor(PostProcessConfig(platform="github", table_of_contents=True))

        markdown = MarkdownConverter().render(processor.process(self.BLOCKS))

        assert "## Table of Contents\n\n- [Intro](#intro)\n  - [Getting Started: Install!]" in markdown

    def test_obsidian_links(self):
        """Test that the obsidian platform uses wiki-style heading links."""
        processor = PostProcessor(PostProcessConfig(platform="obsidian", table_of_contents=True))

        result = processor.process(self.BLOCKS)

        assert result[2].items[0].startswith("[[#Intro]]")

    def test_no_toc_below_minimum(self):
        """Test that a single heading gets no TOC."""
        processor = PostProcessor(PostProcessConfig(table_of_contents=True))

        result = processor.process([heading(1, "Only"), paragraph("Text")])

        assert len(result) == 2

    def test_no_toc_by_default(self):
        """Test that the TOC is off unless enabled."""
        result = PostProcessor().process(self.BLOCKS)

        assert all(b.text != "Table of Contents" for b in result)

    def test_link_markup_removed_from_entries(self):
        """Test that heading links and emphasis are stripped in TOC entries."""
        blocks = [heading(1, "[API](https://example.com/api)"), heading(2, "**Bold** part")]
        processor = PostProcessor(PostProcessConfig(platform="github", table_of_contents=True))

        result = processor.process(blocks)

        assert result[2].items == ["[API](#api)\n- [Bold part](#bold-part)"]


class TestGithubSlug:
    """Tests for heading anchor slugs."""

    def test_punctuation_removed(self):
        """Test slug punctuation and whitespace rules."""
        assert github_slug("Getting Started: Install!") == "getting-started-install"

    def test_hyphens_and_underscores_kept(self):
        """Test that word characters and hyphens survive."""
        assert github_slug("snake_case and kebab-case") == "snake_case-and-kebab-case"
