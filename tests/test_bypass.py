"""Tests for the bypass heuristic."""

from pagedistill.dom import parse_document
from pagedistill.heuristics import BypassHeuristic
from pagedistill.models.config import BypassConfig
from pages import PRODUCT_PAGE, PRODUCT_TEXT, SCATTERED_PAGE, STRUCTURED_PAGE, TABLE

LONG_TEXT = PRODUCT_TEXT


class TestScatteredIslands:
    """Tests for the sibling-islands signal."""

    def test_islands_under_body_trigger_bypass(self):
        """Test that two substantive islands sharing only body trigger bypass."""
        soup = parse_document(SCATTERED_PAGE)

        decision = BypassHeuristic().decide(soup)

        assert decision.bypass is True
        assert "content islands" in decision.reason

    def test_islands_in_one_article_do_not_trigger(self):
        """Test that islands with a close common ancestor do not trigger bypass."""
        soup = parse_document(
            f"<body><article><div><p>{LONG_TEXT}</p></div>"
            f"<div><p>{LONG_TEXT}</p></div></article></body>"
        )

        assert BypassHeuristic().should_bypass(soup) is False

    def test_gap_threshold_is_configurable(self):
        """Test that a deep common ancestor triggers bypass when the gap is small."""
        soup = parse_document(
            f"<body><main><section><div><div><p>{LONG_TEXT}</p></div></div></section>"
            f"<section><div><div><p>{LONG_TEXT}</p></div></div></section></main></body>"
        )

        assert BypassHeuristic(BypassConfig(max_ancestor_gap=3)).should_bypass(soup) is False
        assert BypassHeuristic(BypassConfig(max_ancestor_gap=2)).should_bypass(soup) is True

    def test_link_heavy_islands_do_not_count(self):
        """Test that link lists are not substantive islands."""
        links = "".join(f"<a href='/p{i}'>Some linked page title {i}</a> " for i in range(12))
        soup = parse_document(
            f"<body><div><p>{LONG_TEXT}</p></div><div>{links}</div></body>"
        )

        assert BypassHeuristic().should_bypass(soup) is False


class TestStructuredDensity:
    """Tests for the tables / code density signal."""

    def test_tables_outside_main_trigger_bypass(self):
        """Test that many tables without a dominant container trigger bypass."""
        soup = parse_document(STRUCTURED_PAGE)

        decision = BypassHeuristic().decide(soup)

        assert decision.bypass is True
        assert "tables/code blocks" in decision.reason

    def test_tables_inside_main_do_not_trigger(self):
        """Test that tables held by one main container do not trigger bypass."""
        soup = parse_document(f"<body><main>{TABLE}{TABLE}<pre>code()</pre></main></body>")

        assert BypassHeuristic().should_bypass(soup) is False

    def test_nested_tables_count_once(self):
        """Test that a table inside a table is not counted separately."""
        nested = f"<table><tr><td>{TABLE}</td></tr></table>"
        soup = parse_document(f"<body><div>{nested}</div><div>{TABLE}</div></body>")

        assert BypassHeuristic().should_bypass(soup) is False


class TestTechnicalFingerprint:
    """Tests for datasheet and product fingerprints."""

    def test_datasheet_class_on_table_container(self):
        """Test that a specs-named table container triggers bypass."""
        soup = parse_document(f"<body><div class='tech-specs'>{TABLE}</div></body>")

        decision = BypassHeuristic().decide(soup)

        assert decision.bypass is True
        assert "datasheet fingerprint" in decision.reason

    def test_datasheet_class_without_table(self):
        """Test that a specs-named container without tabular data is ignored."""
        soup = parse_document("<body><div class='specs'><p>Short text</p></div></body>")

        assert BypassHeuristic().should_bypass(soup) is False

    def test_definition_list_counts(self):
        """Test that a definition list under a datasheet id triggers bypass."""
        soup = parse_document(
            "<body><section id='datasheet'><dl><dt>Mass</dt><dd>2 kg</dd></dl></section></body>"
        )

        assert BypassHeuristic().should_bypass(soup) is True

    def test_product_microdata(self):
        """Test that schema.org Product microdata triggers bypass."""
        soup = parse_document(PRODUCT_PAGE)

        decision = BypassHeuristic().decide(soup)

        assert decision.bypass is True
        assert decision.reasons == ["schema.org Product microdata"]


class TestDecisionProperties:
    """Tests for read-only and deterministic behavior."""

    def test_plain_article_stays_standard(self):
        """Test that an ordinary article yields no signal."""
        soup = parse_document(f"<body><nav>Menu</nav><article><h1>T</h1><p>{LONG_TEXT}</p></article></body>")

        decision = BypassHeuristic().decide(soup)

        assert decision.bypass is False
        assert decision.reasons == []
        assert decision.reason == "no bypass signal"

    def test_does_not_mutate_document(self):
        """Test that deciding leaves the document untouched."""
        soup = parse_document(
            f"<body><div><p>{LONG_TEXT}</p></div><div class='specs'>{TABLE}</div></body>"
        )
        before = str(soup)

        BypassHeuristic().decide(soup)

        assert str(soup) == before

    def test_is_deterministic(self):
        """Test that the same document always yields the same decision."""
        html = f"<body><div><p>{LONG_TEXT}</p></div><div><p>{LONG_TEXT}</p></div>{TABLE}</body>"
        heuristic = BypassHeuristic()

        decisions = [heuristic.decide(parse_document(html)) for _ in range(3)]

        assert all(d == decisions[0] for d in decisions)
