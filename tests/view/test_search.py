"""
Search Term and Timeline Tests
"""

import pytest

from debatemap.contracts import Statement, StatementKind
from debateview.search import highlight_spans, matches, parse_terms
from debateview.timeline import time_neighbors


class TestParseTerms:

    @pytest.mark.parametrize("query,terms", [
        ("", []),
        (None, []),
        ("Tax", ["tax"]),
        ("carbon  tax", ["carbon", "tax"]),
        ('"carbon tax" price', ["carbon tax", "price"]),
        ('price "Carbon Tax"', ["price", "carbon tax"]),
        ('""', []),
        ("tax TAX", ["tax"]),
    ])
    def test_terms(self, query, terms):
        assert parse_terms(query) == terms

    def test_unterminated_quote(self):
        assert parse_terms('"open ended') == ['"open', "ended"]


class TestMatches:

    def test_title_or_body(self):
        assert matches(["tax"], "Carbon Tax works")
        assert matches(["study"], "Title", "A study shows")
        assert not matches(["tax"], "Title", None)

    def test_no_terms_no_match(self):
        assert not matches([], "anything")


class TestHighlightSpans:

    def test_case_insensitive_spans(self):
        assert highlight_spans("Tax the tax", ["tax"]) == [(0, 3), (8, 11)]

    def test_overlaps_merge(self):
        assert highlight_spans("carbon tax", ["carbon t", "tax"]) == [(0, 10)]

    def test_empty(self):
        assert highlight_spans("", ["x"]) == []
        assert highlight_spans("text", []) == []


def node(node_id, mention):
    return Statement(id=node_id, kind=StatementKind.THESIS, participant_id="A",
                     title=node_id, first_mention=mention)


class TestTimeNeighbors:

    def test_lower_and_upper(self):
        nodes = [node("a", "00:01:00"), node("b", "00:03:00"), node("c", "00:02:00")]
        result = time_neighbors(nodes, "00:02:30")
        assert (result.lower_id, result.upper_id) == ("c", "b")
        assert result.ids() == frozenset({"c", "b"})

    def test_ties_keep_first(self):
        nodes = [node("a", "00:01:00"), node("b", "00:01:00")]
        assert time_neighbors(nodes, "00:01:00").lower_id == "a"
        assert time_neighbors(nodes, "00:00:01").upper_id == "a"

    def test_no_timestamps(self):
        result = time_neighbors([node("a", None), node("b", "later")], "00:00:00")
        assert result.ids() == frozenset()

    def test_bad_cursor(self):
        with pytest.raises(ValueError):
            time_neighbors([], "soon")
