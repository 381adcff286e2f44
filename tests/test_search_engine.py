"""Tests for the search engine: filtering, matching, ordering and capping."""

import time
from datetime import datetime

import pytest

from obsidian_search.core.document_store import VaultDocumentStore
from obsidian_search.core.search_engine import (
    SearchEngine,
    matches_filters,
    matches_yaml_property,
)
from obsidian_search.data_models import (
    Document,
    NaturalLanguageEntry,
    PatternEntry,
    QueryEntry,
    SearchFilters,
    SearchRequest,
)

from conftest import FIXED_NOW


@pytest.fixture
def engine(vault):
    return SearchEngine(VaultDocumentStore(vault), clock=lambda: FIXED_NOW)


def paths(results):
    return [result.document.path for result in results]


def query_request(query="", max_results=25, **entry_kwargs):
    return SearchRequest(entry=QueryEntry(query=query, **entry_kwargs), max_results=max_results)


class TestQueryMatching:
    """Test suite for free-text queries."""

    def test_exact_phrase_requires_contiguous_words(self, engine, write_note):
        write_note("a.md", "The project plan is due Friday.")
        write_note("b.md", "A plan for the project.")
        write_note("c.md", "Project\n  plan draft")

        results = engine.search(query_request("project plan"))
        assert sorted(paths(results)) == ["a.md", "c.md"]

    def test_documents_without_matches_are_excluded(self, engine, write_note):
        write_note("hit.md", "kubernetes cluster")
        write_note("miss.md", "nothing to see")

        results = engine.search(query_request("kubernetes"))
        assert paths(results) == ["hit.md"]
        assert all(result.matches for result in results)

    def test_any_term(self, engine, write_note):
        write_note("rest.md", "Our REST api")
        write_note("gql.md", "GraphQL schema")
        write_note("none.md", "grpc only")

        results = engine.search(query_request("api OR graphql"))
        assert sorted(paths(results)) == ["gql.md", "rest.md"]

    def test_operator_only_any_term_returns_nothing(self, engine, write_note):
        write_note("logic.md", "OR AND NOT gates")
        assert engine.search(query_request("OR AND NOT", strategy="any_term")) == []

    def test_all_terms_across_fields(self, engine, write_note):
        write_note("spread.md", "---\ntitle: Alpha\n---\nbeta and gamma in the body\n")
        write_note("partial.md", "alpha beta only\n")

        results = engine.search(query_request("alpha beta gamma"))
        assert paths(results) == ["spread.md"]

    @pytest.mark.slow
    def test_all_terms_with_term_outside_a_long_body(self, engine, write_note):
        write_note("gamma.md", "---\ntitle: Gamma\n---\nalpha beta " + "x " * 10_000)

        started = time.perf_counter()
        results = engine.search(query_request("alpha beta gamma"))
        assert time.perf_counter() - started < 2.0
        assert paths(results) == ["gamma.md"]

    def test_title_query_only_matches_titles(self, engine, write_note):
        write_note("Roadmap.md", "unrelated body")
        write_note("other.md", "---\naliases: [Team roadmap]\n---\nbody\n")
        write_note("body.md", "the roadmap is in the body")

        results = engine.search(query_request(title_query="roadmap"))
        assert sorted(paths(results)) == ["Roadmap.md", "other.md"]

    def test_include_content_false_ignores_body(self, engine, write_note):
        write_note("body.md", "needle in the body")
        write_note("meta.md", "---\nsummary: needle\n---\nhay\n")

        results = engine.search(query_request("needle", include_content=False))
        assert paths(results) == ["meta.md"]

    def test_raw_regex_reports_every_occurrence(self, engine, write_note):
        write_note("tickets.md", "TICKET-1 then TICKET-22 and TICKET-333")

        results = engine.search(query_request(r"ticket-\d+", use_regex=True))
        content_matches = [m for m in results[0].matches if m.type == "content"]
        assert [m.text for m in content_matches] == ["TICKET-1", "TICKET-22", "TICKET-333"]

    def test_invalid_regex_is_a_value_error(self, engine, write_note):
        write_note("a.md", "text")
        with pytest.raises(ValueError, match="regular expression"):
            engine.search(query_request("([unclosed", use_regex=True))

    def test_case_sensitive(self, engine, write_note):
        write_note("upper.md", "Python release")
        write_note("lower.md", "python snake")

        results = engine.search(query_request("Python", case_sensitive=True))
        assert paths(results) == ["upper.md"]


class TestRankingAndCapping:
    """Test suite for ordering and max_results."""

    def test_top_n_is_taken_after_sorting(self, engine, write_note):
        write_note("a.md", "widget")
        write_note("b.md", "---\ntitle: widget\n---\nwidget\n")
        write_note("c.md", "---\ntitle: Widget\nsummary: widget\n---\nwidget\n")

        outcome = engine.run(SearchRequest(entry=QueryEntry(query="widget"), max_results=2))
        assert paths(outcome.results) == ["c.md", "b.md"]
        assert outcome.total_count == 3

    def test_ranking_is_deterministic(self, engine, write_note):
        for name in ["d", "b", "a", "c"]:
            write_note(f"{name}.md", "same words here", modified=datetime(2025, 6, 1))

        first = paths(engine.search(query_request("same words")))
        second = paths(engine.search(query_request("same words")))
        assert first == second == ["a.md", "b.md", "c.md", "d.md"]

    def test_sort_by_modified_ascending(self, engine, write_note):
        write_note("new.md", "topic", modified=datetime(2025, 6, 10))
        write_note("old.md", "topic", modified=datetime(2025, 1, 10))

        request = SearchRequest(entry=QueryEntry(query="topic"), sort_by="modified", sort_order="asc")
        assert paths(engine.search(request)) == ["old.md", "new.md"]

    @pytest.mark.slow
    def test_content_type_filter_with_cap(self, engine, write_note):
        for index in range(150):
            write_note(f"References/ref-{index:03d}.md", f"---\ncontent type: Reference\n---\nReference {index}\n")
        for index in range(20):
            write_note(f"Articles/art-{index:03d}.md", f"---\ncontent type: Article\n---\nArticle {index}\n")

        request = SearchRequest(filters=SearchFilters(content_type=("Reference",)), max_results=10)
        outcome = engine.run(request)

        assert len(outcome.results) == 10
        assert outcome.total_count == 150
        assert all(result.document.content_type == "Reference" for result in outcome.results)


class TestFilters:
    """Test suite for metadata filters."""

    def test_filters_only_search_includes_everything_filtered(self, engine, write_note):
        write_note("a.md", "---\ntags: [work]\n---\nno query words\n")
        write_note("b.md", "---\ntags: ['#Work', home]\n---\nstill none\n")
        write_note("c.md", "---\ntags: home\n---\nnope\n")

        request = SearchRequest(filters=SearchFilters(tags=("work",)))
        assert sorted(paths(engine.search(request))) == ["a.md", "b.md"]

    def test_days_filter_uses_injected_clock(self, engine, write_note):
        write_note("recent.md", "log", modified=datetime(2025, 6, 12))
        write_note("old.md", "log", modified=datetime(2025, 5, 1))

        request = SearchRequest(entry=QueryEntry(query="log"), filters=SearchFilters(days=7))
        assert paths(engine.search(request)) == ["recent.md"]

    def test_folder_and_exclusions(self, engine, write_note):
        write_note("Projects/a.md", "draft")
        write_note("Projects/Archive/b.md", "draft")
        write_note("Inbox/c.md", "draft")

        request = SearchRequest(
            entry=QueryEntry(query="draft"),
            filters=SearchFilters(folder="Projects", exclude_folders=("Projects/Archive",)),
        )
        assert paths(engine.search(request)) == ["Projects/a.md"]

    def test_category_filter(self, engine, write_note):
        write_note("a.md", "---\ncategory: Food\nsub-category: Dessert\n---\nx\n")
        write_note("b.md", "---\ncategory: Food\nsub-category: Main\n---\nx\n")

        request = SearchRequest(filters=SearchFilters(category="food", sub_category="dessert"))
        assert paths(engine.search(request)) == ["a.md"]

    def test_yaml_property_filter(self, engine, write_note):
        write_note("a.md", "---\ncity: Toronto\ncuisine: [Italian, Pizza]\n---\nx\n")
        write_note("b.md", "---\ncity: Toronto\ncuisine: Thai\n---\nx\n")

        request = SearchRequest(filters=SearchFilters(yaml_properties={"city": "Toronto", "cuisine": "Italian"}))
        assert paths(engine.search(request)) == ["a.md"]


class TestYamlPropertyMatching:
    """Test suite for matches_yaml_property."""

    def test_scalar_comparison_is_case_insensitive(self):
        assert matches_yaml_property("Toronto", "toronto", "contains", False)

    def test_missing_values(self):
        assert not matches_yaml_property(None, "x", "contains", False)
        assert matches_yaml_property(None, "x", "contains", True)

    @pytest.mark.parametrize(
        "actual, expected, mode, result",
        [
            (["a", "b"], ["a", "b"], "exact", True),
            (["a", "b", "c"], ["a", "b"], "exact", False),
            (["a", "b", "c"], ["a", "b"], "contains", True),
            (["a"], ["a", "b"], "contains", False),
            (["a"], ["a", "b"], "any", True),
            (["c"], ["a", "b"], "any", False),
            ("a", ["a", "b"], "any", True),
            ("a", ["a"], "exact", True),
        ],
    )
    def test_array_modes(self, actual, expected, mode, result):
        assert matches_yaml_property(actual, expected, mode, False) is result

    def test_match_mode_any(self):
        document = Document(
            path="a.md",
            frontmatter={"city": "Paris"},
            body="",
            modified_at=FIXED_NOW,
            created_at=FIXED_NOW,
        )
        filters = SearchFilters(yaml_properties={"city": "Paris", "country": "Italy"}, match_mode="any")
        assert matches_filters(document, filters, FIXED_NOW)
        assert not matches_filters(document, SearchFilters(yaml_properties=filters.yaml_properties), FIXED_NOW)


class TestEntryModes:
    """Test suite for pattern and natural-language entry."""

    def test_pattern_mode(self, engine, write_note):
        write_note("Daily Notes/2025-06-01.md", "a")
        write_note("Daily Notes/2025-06-02.md", "b")
        write_note("Daily Notes/2024-12-31.md", "c")

        results = engine.search(SearchRequest(entry=PatternEntry(pattern="Daily Notes/2025-*")))
        assert sorted(paths(results)) == ["Daily Notes/2025-06-01.md", "Daily Notes/2025-06-02.md"]
        assert all(result.score == 1.0 for result in results)
        assert all(result.matches[0].type == "path" for result in results)

    def test_natural_language_filters(self, engine, write_note):
        write_note(
            "Restaurants/Nonna.md",
            "---\ncontent type: Restaurant\ncity: Toronto\ncuisine: [Italian, Pizza]\n---\nGreat pasta.\n",
        )
        write_note(
            "Restaurants/Luigi.md",
            "---\ncontent type: Restaurant\ncity: Montreal\ncuisine: Italian\n---\nAlso pasta.\n",
        )
        write_note(
            "Articles/Food.md",
            "---\ncontent type: Article\ncity: Toronto\ncuisine: Italian\n---\nAn article.\n",
        )

        outcome = engine.run(SearchRequest(entry=NaturalLanguageEntry(phrase="Italian restaurants in Toronto")))
        assert paths(outcome.results) == ["Restaurants/Nonna.md"]
        assert outcome.interpretation is not None
        assert "Restaurant" in outcome.interpretation.text
        assert "Toronto" in outcome.interpretation.text
        assert outcome.results[0].interpretation == outcome.interpretation

    def test_natural_language_without_filters_searches_text(self, engine, write_note):
        write_note("review.md", "The quarterly budget review happened.")
        write_note("other.md", "budget only")

        outcome = engine.run(SearchRequest(entry=NaturalLanguageEntry(phrase="quarterly budget review")))
        assert paths(outcome.results) == ["review.md"]
        assert "No structured filters" in outcome.interpretation.text


class _BrokenStore:
    """Store stand-in that hands out one document the matcher cannot handle."""

    def __init__(self, vault):
        self.vault = vault

    def list_candidate_documents(self, filters=None):
        good = Document(path="good.md", frontmatter={}, body="target", modified_at=FIXED_NOW, created_at=FIXED_NOW)
        broken = Document(path="broken.md", frontmatter=None, body="target", modified_at=FIXED_NOW, created_at=FIXED_NOW)
        return [broken, good]


class TestPartialFailure:
    """Test suite for per-document failure tolerance."""

    def test_failing_document_is_skipped(self, vault):
        engine = SearchEngine(_BrokenStore(vault), clock=lambda: FIXED_NOW)
        assert paths(engine.search(query_request("target"))) == ["good.md"]
