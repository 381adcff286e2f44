"""Tests for Pydantic input models.

This test suite validates the input validation logic for MCP tools,
ensuring that:
- Valid inputs are accepted and normalized correctly
- Invalid inputs raise ValidationError with descriptive messages
- Out-of-range result limits are clamped and reported, not rejected
- Entry modes resolve with the documented precedence
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from obsidian_search.core.validation import validate_max_results
from obsidian_search.data_models import NaturalLanguageEntry, PatternEntry, QueryEntry
from obsidian_search.models import ListVaultInput, SearchVaultInput, SetActiveVaultInput


class TestValidateMaxResults:
    """Test suite for the max_results clamp."""

    @pytest.mark.parametrize(
        "value, expected, adjusted",
        [(None, 25, False), (1, 1, False), (100, 100, False), (0, 1, True), (-5, 1, True), (150, 100, True)],
    )
    def test_clamp(self, value, expected, adjusted):
        validation = validate_max_results(value)
        assert validation.value == expected
        assert validation.adjusted is adjusted
        if adjusted:
            assert validation.original_value == value

    def test_payload_omits_original_when_unchanged(self):
        assert validate_max_results(10).as_payload() == {"value": 10, "adjusted": False}


class TestSearchVaultInput:
    """Test suite for SearchVaultInput model validation."""

    def test_defaults(self):
        model = SearchVaultInput()
        request = model.to_request()
        assert request.max_results == 25
        assert request.sort_by == "relevance"
        assert request.sort_order == "desc"
        assert isinstance(request.entry, QueryEntry)
        assert request.entry.query == ""

    def test_out_of_range_max_results_is_clamped(self):
        model = SearchVaultInput(query="x", max_results=500)
        assert model.to_request().max_results == 100
        assert model.validated_max_results().as_payload() == {
            "value": 100,
            "adjusted": True,
            "original_value": 500,
        }

    def test_pattern_wins_over_other_modes(self):
        model = SearchVaultInput(query="q", natural_language="restaurants", pattern="Projects/*")
        assert model.to_request().entry == PatternEntry(pattern="Projects/*")

    def test_natural_language_wins_over_query(self):
        model = SearchVaultInput(query="q", natural_language="restaurants in Paris")
        entry = model.to_request().entry
        assert isinstance(entry, NaturalLanguageEntry)
        assert entry.phrase == "restaurants in Paris"

    def test_blank_modes_are_ignored(self):
        model = SearchVaultInput(query="q", pattern="   ", natural_language="")
        assert model.to_request().entry.kind == "query"

    def test_query_options_flow_into_entry(self):
        model = SearchVaultInput(
            query="a b",
            query_strategy="ANY_TERM",
            case_sensitive=True,
            title_query="t",
            include_content=False,
        )
        entry = model.to_request().entry
        assert entry.strategy == "any_term"
        assert entry.case_sensitive
        assert entry.title_query == "t"
        assert not entry.include_content

    def test_filters(self):
        model = SearchVaultInput(
            content_type="Reference",
            tags=["work", " "],
            exclude_folders=["Archive"],
            days=7,
            modified_after="2025-01-01T00:00:00",
            yaml_properties={"city": "Paris"},
            match_mode="any",
        )
        filters = model.to_request().filters
        assert filters.content_type == ("Reference",)
        assert filters.tags == ("work",)
        assert filters.exclude_folders == ("Archive",)
        assert filters.days == 7
        assert filters.modified_after == datetime(2025, 1, 1)
        assert filters.yaml_properties == {"city": "Paris"}
        assert filters.match_mode == "any"

    def test_unknown_sort_by_is_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            SearchVaultInput(query="x", sort_by="size")
        assert "sort_by" in str(exc_info.value)

    def test_sort_fields_are_normalized(self):
        model = SearchVaultInput(sort_by=" Modified ", sort_order="ASC")
        assert (model.sort_by, model.sort_order) == ("modified", "asc")

    def test_invalid_sort_order(self):
        with pytest.raises(ValidationError):
            SearchVaultInput(sort_order="sideways")

    def test_invalid_strategy(self):
        with pytest.raises(ValidationError):
            SearchVaultInput(query="x", query_strategy="fuzzy")

    def test_negative_days(self):
        with pytest.raises(ValidationError):
            SearchVaultInput(days=-1)

    def test_invalid_format(self):
        with pytest.raises(ValidationError):
            SearchVaultInput(format="verbose")

    def test_empty_vault_name(self):
        with pytest.raises(ValidationError) as exc_info:
            SearchVaultInput(vault="   ")
        assert "Vault name cannot be empty" in str(exc_info.value)

    def test_vault_name_is_stripped(self):
        assert SearchVaultInput(vault=" personal ").vault == "personal"

    def test_schema_generation(self):
        schema = SearchVaultInput.model_json_schema()
        assert "query" in schema["properties"]
        assert "max_results" in schema["properties"]


class TestListVaultInput:
    """Test suite for ListVaultInput model validation."""

    def test_defaults(self):
        model = ListVaultInput()
        assert model.type == "auto"
        assert model.path == ""
        assert model.limit is None

    def test_type_is_normalized(self):
        assert ListVaultInput(type=" Recent_Notes ").type == "recent_notes"

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            ListVaultInput(type="tags")

    @pytest.mark.parametrize("path", ["/etc", "../outside", "a/../../b"])
    def test_unsafe_paths(self, path):
        with pytest.raises(ValidationError):
            ListVaultInput(path=path)

    def test_trailing_slash_is_removed(self):
        assert ListVaultInput(path="Projects/").path == "Projects"


class TestSetActiveVaultInput:
    """Test suite for SetActiveVaultInput model validation."""

    def test_valid(self):
        assert SetActiveVaultInput(vault=" work ").vault == "work"

    def test_blank(self):
        with pytest.raises(ValidationError):
            SetActiveVaultInput(vault="   ")
