"""Tests for island scoring, pruning and quality assessment."""

from pagedistill.dom import parse_document
from pagedistill.models.config import ScoringConfig
from pagedistill.scoring import QualityAssessor, QualityMetrics, ScoringEngine
from pages import MEASURED_TEXT, WINNER_HTML

LONG_TEXT = MEASURED_TEXT


def body_of(html: str):
    return parse_document(html).body


class TestSelectWinner:
    """Tests for ScoringEngine.select_winner."""

    def test_prefers_article_over_link_list(self):
        """Test that a text-heavy article beats a link-heavy sidebar."""
        links = "".join(f"<a href='/p{i}'>Link number {i} with title</a> " for i in range(15))
        body = body_of(f"<div class='links'>{links}</div><article><p>{LONG_TEXT}</p></article>")

        winner = ScoringEngine().select_winner(body)

        assert winner.name == "article"

    def test_tie_goes_to_earlier_island(self):
        """Test that equal scores resolve to the earlier element in document order."""
        body = body_of(f"<article><p>{LONG_TEXT}</p></article><article><p>{LONG_TEXT}</p></article>")
        first, second = body.find_all("article")

        winner = ScoringEngine().select_winner(body)

        assert winner is first
        assert winner is not second

    def test_tie_break_is_stable_across_runs(self):
        """Test that repeated selection on fresh parses picks the same position."""
        html = f"<section><p>{LONG_TEXT}</p></section><section><p>{LONG_TEXT}</p></section>"
        engine = ScoringEngine()

        positions = []
        for _ in range(3):
            body = body_of(html)
            winner = engine.select_winner(body)
            sections = body.find_all("section")
            positions.append(next(i for i, section in enumerate(sections) if section is winner))

        assert positions == [0, 0, 0]

    def test_boilerplate_class_penalized(self):
        """Test that blocklisted class names lose to content class names."""
        body = body_of(
            f"<div class='related-posts'><p>{LONG_TEXT}</p></div>"
            f"<div class='post-body'><p>{LONG_TEXT}</p></div>"
        )

        winner = ScoringEngine().select_winner(body)

        assert winner["class"] == ["post-body"]

    def test_falls_back_to_body(self):
        """Test that the body is returned when no island is viable."""
        body = body_of("<p>Too short</p>")

        assert ScoringEngine().select_winner(body) is body

    def test_viability_threshold_from_config(self):
        """Test that min_viable_score controls the body fallback."""
        body = body_of(f"<article><p>{LONG_TEXT}</p></article>")

        strict = ScoringEngine(ScoringConfig(min_viable_score=1000.0))

        assert strict.select_winner(body) is body
        assert ScoringEngine().select_winner(body).name == "article"

    def test_rank_orders_by_score_then_position(self):
        """Test that rank returns every island, best first, ties in order."""
        body = body_of(
            f"<div class='sidebar'><p>{LONG_TEXT}</p></div>"
            f"<article><p>{LONG_TEXT}</p></article>"
            f"<article><p>{LONG_TEXT}</p></article>"
        )
        articles = body.find_all("article")

        ranked = ScoringEngine().rank(body)

        assert [island.element for island in ranked[:2]] == articles
        assert ranked[-1].element.name == "div"
        assert ranked[0].score >= ranked[1].score >= ranked[2].score

    def test_table_bonus(self):
        """Test that an island holding a table scores higher than plain text."""
        engine = ScoringEngine()
        body = body_of(
            f"<div><p>{LONG_TEXT}</p></div>"
            f"<div><p>{LONG_TEXT}</p><table><tr><td>x</td></tr></table></div>"
        )

        ranked = engine.rank(body)

        assert ranked[0].has_table is True


class TestPruneNode:
    """Tests for ScoringEngine.prune_node."""

    def test_removes_link_heavy_boilerplate(self):
        """Test that related links, menus and empty wrappers are pruned."""
        winner = body_of(WINNER_HTML).find(id="winner")

        ScoringEngine().prune_node(winner)

        assert winner.find(class_="related") is None
        assert winner.find("ul") is None
        assert "Other article one" not in winner.get_text()

    def test_never_touches_code_or_tables(self):
        """Test that pre, code and table subtrees survive pruning untouched."""
        winner = body_of(WINNER_HTML).find(id="winner")

        ScoringEngine().prune_node(winner)

        assert winner.find("pre").get_text() == "x = 1"
        assert winner.find("table") is not None
        # Inside a table cell nothing is scored, even obvious ads
        assert winner.find("td").find(class_="ad") is not None

    def test_is_idempotent(self):
        """Test that pruning an already pruned winner changes nothing."""
        engine = ScoringEngine()
        winner = body_of(WINNER_HTML).find(id="winner")

        once = str(engine.prune_node(winner))
        twice = str(engine.prune_node(winner))

        assert once == twice

    def test_returns_same_element(self):
        """Test that pruning works in place."""
        winner = body_of(WINNER_HTML).find(id="winner")

        assert ScoringEngine().prune_node(winner) is winner

    def test_keeps_paragraph_text(self):
        """Test that the main text survives pruning."""
        winner = body_of(WINNER_HTML).find(id="winner")

        ScoringEngine().prune_node(winner)

        assert "Measured description" in winner.get_text()


class TestQualityAssessor:
    """Tests for the 0-100 quality score."""

    def test_perfect_metrics(self):
        """Test that strong metrics reach the maximum score."""
        metrics = QualityMetrics(
            character_count=5000,
            paragraph_count=5,
            link_density=0.0,
            heading_count=3,
            signal_to_noise=0.6,
            structure_score=150.0,
        )

        assert QualityAssessor.score_metrics(metrics) == 100

    def test_empty_fragment_scores_zero(self):
        """Test that a missing fragment scores zero."""
        assert QualityAssessor().score(None) == 0

    def test_link_heavy_scores_lower(self):
        """Test that link-heavy fragments score below text fragments."""
        assessor = QualityAssessor()
        text = body_of(f"<article><h2>About</h2><p>{LONG_TEXT}</p><p>{LONG_TEXT}</p></article>")
        links = body_of("".join(f"<a href='/{i}'>Some link text {i}</a> " for i in range(30)))

        assert assessor.score(text) > assessor.score(links)

    def test_score_is_bounded(self):
        """Test that scores stay within 0-100."""
        paragraphs = f"<p>{LONG_TEXT}</p>" * 20
        body = body_of(f"<main><h1>T</h1>{paragraphs}</main>")

        assert 0 <= QualityAssessor().score(body) <= 100
