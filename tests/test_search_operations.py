"""End-to-end tests for budgeted search responses."""

from datetime import datetime

import pytest

from obsidian_search.constants import MIN_MAX_CHARACTERS
from obsidian_search.core.document_store import VaultDocumentStore
from obsidian_search.core.response_truncator import TokenBudgetConfig
from obsidian_search.core.search_engine import SearchEngine
from obsidian_search.core.search_operations import execute_search
from obsidian_search.core.validation import validate_max_results
from obsidian_search.data_models import (
    NaturalLanguageEntry,
    QueryEntry,
    SearchFilters,
    SearchRequest,
    VaultMetadata,
)
from obsidian_search.errors import InvalidTokenConfigError

from conftest import FIXED_NOW

PINNED = datetime(2025, 6, 1, 9, 0, 0)


@pytest.fixture
def engine(vault):
    return SearchEngine(VaultDocumentStore(vault), clock=lambda: FIXED_NOW)


@pytest.fixture
def big_notes(write_note):
    """Three notes whose detailed rendering is roughly 16,000 characters each."""
    for index, letter in enumerate("ABC", start=1):
        write_note(
            f"big-{index}.md",
            f"---\ntitle: {letter * 8000}\ntags: [big]\n---\nbody\n",
            modified=PINNED,
        )


def tagged_request(tag, max_results=25):
    return SearchRequest(filters=SearchFilters(tags=(tag,)), max_results=max_results)


class TestBudgetedSearch:
    """Test suite for execute_search."""

    def test_whole_results_only_within_budget(self, vault, engine, big_notes):
        budget = TokenBudgetConfig.from_characters(20_000)
        result = execute_search(vault, tagged_request("big"), budget=budget, engine=engine)

        content = result["content"]
        assert len(content) <= 20_000
        assert result["truncation"]["shown_count"] == 1
        assert result["truncation"]["total_count"] == 3
        assert content.startswith("Showing 1 of 3 results (limit reached)")
        assert "\n\n---\n\n" in content
        assert content.count("(Score:") == 1
        assert "B" * 100 not in content
        assert "C" * 100 not in content

    @pytest.mark.parametrize("max_characters", [MIN_MAX_CHARACTERS, 600, 2_000, 5_000, 20_000, 40_000, 100_000])
    def test_truncation_is_always_announced(self, vault, engine, big_notes, max_characters):
        budget = TokenBudgetConfig.from_characters(max_characters)
        result = execute_search(vault, tagged_request("big"), budget=budget, engine=engine)

        assert len(result["content"]) <= max_characters
        if result["total_count"] > result["shown_count"]:
            assert result["content"].startswith(f"Showing {result['shown_count']} of {result['total_count']}")
            assert result["truncation"]["truncated"]
        else:
            assert result["truncation"] is None

    def test_budget_too_small_for_the_notice_is_rejected(self, vault, engine, big_notes):
        with pytest.raises(InvalidTokenConfigError, match="at least"):
            execute_search(
                vault,
                tagged_request("big"),
                budget=TokenBudgetConfig.from_characters(150),
                engine=engine,
            )

    def test_notice_is_not_repeated(self, vault, engine, big_notes):
        budget = TokenBudgetConfig.from_characters(20_000)
        result = execute_search(vault, tagged_request("big"), budget=budget, engine=engine)
        assert result["content"].count("1 of 3") == 1

    def test_untruncated_response(self, vault, engine, write_note):
        write_note("a.md", "roadmap notes", modified=PINNED)
        write_note("b.md", "roadmap ideas", modified=PINNED)

        result = execute_search(vault, SearchRequest(entry=QueryEntry(query="roadmap")), engine=engine)
        assert result["truncation"] is None
        assert result["content"].startswith("Found 2 results:")
        assert "**1. a**" in result["content"]
        assert "obsidian://open?vault=test&file=a" in result["content"]

    def test_concise_format(self, vault, engine, write_note):
        write_note("Notes/Plan.md", "---\ntitle: The Plan\n---\nroadmap", modified=PINNED)

        result = execute_search(vault, SearchRequest(entry=QueryEntry(query="roadmap")), format="concise", engine=engine)
        assert "1. **The Plan** - `Notes/Plan.md`" in result["content"]
        assert "(Score:" not in result["content"]

    def test_no_results(self, vault, engine, write_note):
        write_note("a.md", "something")
        result = execute_search(vault, SearchRequest(entry=QueryEntry(query="absent")), engine=engine)
        assert result["content"] == "No results found."
        assert result["truncation"] is None

    @pytest.mark.slow
    def test_result_cap_is_announced(self, vault, engine, write_note):
        for index in range(150):
            write_note(f"refs/ref-{index:03d}.md", "---\ncontent type: Reference\n---\nsource\n")
        write_note("other.md", "---\ncontent type: Article\n---\nsource\n")

        validation = validate_max_results(10)
        request = SearchRequest(filters=SearchFilters(content_type=("Reference",)), max_results=validation.value)
        result = execute_search(vault, request, max_results_validation=validation, engine=engine)

        assert result["content"].startswith("Showing 10 of 150 results (limit reached)")
        assert result["truncation"]["limit_type"] == "token"
        assert result["max_results"] == {"value": 10, "adjusted": False}
        assert "other.md" not in result["content"]
        assert result["content"].count("`refs/ref-") == 10

    def test_clamped_max_results_is_reported(self, vault, engine, write_note):
        write_note("a.md", "x")
        validation = validate_max_results(500)
        result = execute_search(
            vault,
            SearchRequest(max_results=validation.value),
            max_results_validation=validation,
            engine=engine,
        )
        assert result["max_results"] == {"value": 100, "adjusted": True, "original_value": 500}

    def test_auto_downgrade_shows_more_results(self, vault, engine, write_note):
        for index, letter in enumerate("XYZ", start=1):
            write_note(f"mid-{index}.md", f"---\ntitle: {letter * 3000}\ntags: [mid]\n---\nbody\n", modified=PINNED)

        budget = TokenBudgetConfig.from_characters(10_000)
        detailed = execute_search(vault, tagged_request("mid"), budget=budget, engine=engine)
        downgraded = execute_search(vault, tagged_request("mid"), budget=budget, auto_downgrade=True, engine=engine)

        assert detailed["shown_count"] < downgraded["shown_count"]
        assert downgraded["truncation"]["auto_downgraded"] is True
        assert downgraded["truncation"]["format_used"] == "concise"
        assert len(downgraded["content"]) <= 10_000

    def test_natural_language_interpretation_is_shown(self, vault, engine, write_note):
        write_note("r.md", "---\ncontent type: Restaurant\ncity: Toronto\n---\nfood\n")

        request = SearchRequest(entry=NaturalLanguageEntry(phrase="restaurants in Toronto"))
        result = execute_search(vault, request, engine=engine)

        assert "**Interpretation:** Searching for:" in result["content"]
        assert result["interpretation"]["confidence"] == 0.5
        assert result["shown_count"] == 1

    def test_missing_vault(self, tmp_path):
        missing = VaultMetadata(name="gone", path=tmp_path / "gone", description="", exists=False)
        with pytest.raises(FileNotFoundError):
            execute_search(missing, SearchRequest())
