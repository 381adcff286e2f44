"""Heuristic interpretation of conversational search phrases.

"Italian restaurants in Toronto" becomes a content-type hint (``Restaurant``),
a cuisine property (``Italian``) and a city property (``Toronto``). Every
interpretation carries a human-readable explanation that is echoed back to
the caller, including when nothing could be inferred.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from obsidian_search.data_models import ArrayMode, QueryInterpretation

LOCATIONS: dict[str, dict[str, str]] = {
    # Countries
    "canada": {"country": "Canada [CA]"},
    "united states": {"country": "United States [US]"},
    "usa": {"country": "United States [US]"},
    "france": {"country": "France [FR]"},
    "italy": {"country": "Italy [IT]"},
    "japan": {"country": "Japan [JP]"},
    "uk": {"country": "United Kingdom [UK]"},
    "united kingdom": {"country": "United Kingdom [UK]"},
    "india": {"country": "India [IN]"},
    # Provinces and states
    "quebec": {"state": "Quebec"},
    "ontario": {"state": "Ontario"},
    "british columbia": {"state": "British Columbia"},
    "alberta": {"state": "Alberta"},
    "manitoba": {"state": "Manitoba"},
    "nova scotia": {"state": "Nova Scotia"},
    "california": {"state": "California"},
    "new york": {"state": "New York"},
    "texas": {"state": "Texas"},
    "florida": {"state": "Florida"},
    "washington": {"state": "Washington"},
    "oregon": {"state": "Oregon"},
    # Cities
    "montreal": {"city": "Montreal"},
    "toronto": {"city": "Toronto"},
    "vancouver": {"city": "Vancouver"},
    "ottawa": {"city": "Ottawa"},
    "calgary": {"city": "Calgary"},
    "quebec city": {"city": "Quebec City"},
    "new york city": {"city": "New York"},
    "nyc": {"city": "New York"},
    "los angeles": {"city": "Los Angeles"},
    "san francisco": {"city": "San Francisco"},
    "chicago": {"city": "Chicago"},
    "boston": {"city": "Boston"},
    "seattle": {"city": "Seattle"},
    "paris": {"city": "Paris"},
    "london": {"city": "London"},
    "tokyo": {"city": "Tokyo"},
    "rome": {"city": "Rome"},
}

CUISINES: dict[str, str] = {
    "barbecue": "Barbecue",
    "bbq": "Barbecue",
    "italian": "Italian",
    "sushi": "Japanese",
    "japanese": "Japanese",
    "chinese": "Chinese",
    "thai": "Thai",
    "mexican": "Mexican",
    "indian": "Indian",
    "french": "French",
    "greek": "Greek",
    "korean": "Korean",
    "vietnamese": "Vietnamese",
    "pizza": "Pizza",
    "seafood": "Seafood",
    "vegetarian": "Vegetarian",
    "vegan": "Vegan",
    "cafe": "Cafe",
    "bakery": "Bakery",
}

CONTENT_TYPES: dict[str, str] = {
    "restaurants": "Restaurant",
    "restaurant": "Restaurant",
    "articles": "Article",
    "article": "Article",
    "recipes": "Recipe",
    "recipe": "Recipe",
    "books": "Book",
    "book": "Book",
    "movies": "Movie",
    "movie": "Movie",
    "people": "Person",
    "person": "Person",
    "projects": "Project",
    "project": "Project",
    "references": "Reference",
    "reference": "Reference",
    "daily notes": "Daily Note",
    "daily note": "Daily Note",
    "meetings": "Meeting",
    "meeting": "Meeting",
    "journals": "Journal",
    "journal": "Journal",
}

# Relative time phrases, in days back from now.
TEMPORAL: dict[str, int] = {
    "today": 0,
    "yesterday": 1,
    "recent": 7,
    "recently": 7,
    "this week": 7,
    "last week": 7,
    "past week": 7,
    "this month": 30,
    "last month": 30,
    "past month": 30,
}

STOP_WORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
        "i", "me", "my", "you", "your", "we", "they", "them", "their", "it",
        "find", "show", "get", "give", "want", "need", "looking", "search", "some", "any", "all",
        "that", "this", "these", "those", "what", "where", "when", "why", "how", "about",
        "there", "out", "visit", "try", "tried", "new", "good", "best", "notes", "note",
    }
)

CONFIDENCE_FOR_FILTERS_ONLY = 0.5

_NON_WORD = re.compile(r"[^\w\s]")


def _extract(text: str, table: dict[str, Any]) -> tuple[list[Any], str]:
    """Pull every phrase from ``table`` out of ``text``, longest phrases first."""
    found: list[Any] = []
    for phrase in sorted(table, key=len, reverse=True):
        pattern = re.compile(rf"\b{re.escape(phrase)}\b")
        if pattern.search(text):
            value = table[phrase]
            if value not in found:
                found.append(value)
            text = pattern.sub(" ", text)
    return found, text


class NaturalLanguageProcessor:
    """Turns a conversational phrase into structured search hints."""

    def interpret(self, phrase: str) -> QueryInterpretation:
        text = phrase.lower().strip()

        locations, text = _extract(text, LOCATIONS)
        cuisines, text = _extract(text, CUISINES)
        content_types, text = _extract(text, CONTENT_TYPES)
        temporal, text = _extract(text, TEMPORAL)

        yaml_properties: dict[str, Any] = {}
        parts: list[str] = []
        confidence = 0.0

        content_type: Optional[str] = None
        if content_types:
            content_type = content_types[0]
            parts.append(f"Content type: {content_type}")
            confidence += 0.3

        for location in locations:
            for key, value in location.items():
                yaml_properties.setdefault(key, value)
                parts.append(f"{key.capitalize()}: {value}")
                confidence += 0.2

        array_mode: ArrayMode = "contains"
        if len(cuisines) == 1:
            yaml_properties["cuisine"] = cuisines[0]
            parts.append(f"Cuisine: {cuisines[0]}")
            confidence += 0.3
        elif cuisines:
            yaml_properties["cuisine"] = cuisines
            parts.append(f"Cuisines: {', '.join(cuisines)}")
            array_mode = "any"
            confidence += 0.3

        days: Optional[int] = None
        if temporal:
            days = temporal[0]
            parts.append("Modified today" if days == 0 else f"Modified in the last {days} days")
            confidence += 0.2

        remainder = tuple(
            dict.fromkeys(
                word
                for word in _NON_WORD.sub(" ", text).split()
                if len(word) > 2 and word not in STOP_WORDS
            )
        )

        confidence = min(confidence, 1.0)
        if not parts:
            confidence = 0.0

        suggestions: list[str] = []
        if remainder:
            suggestions.append(f"Unrecognized terms: {', '.join(remainder)}")
        if confidence < 0.3:
            suggestions.append("Try naming a location, cuisine or content type (e.g. 'restaurants in Toronto')")

        if parts:
            summary = f"Searching for: {' | '.join(parts)}"
            if remainder and confidence < CONFIDENCE_FOR_FILTERS_ONLY:
                summary += f" (also matching text: {' '.join(remainder)})"
        else:
            summary = (
                "No structured filters inferred; "
                f"using the phrase as a free-text search: \"{phrase.strip()}\""
            )

        return QueryInterpretation(
            phrase=phrase,
            content_type=content_type,
            yaml_properties=yaml_properties,
            array_mode=array_mode,
            days=days,
            remainder=remainder,
            confidence=round(confidence, 2),
            text=summary,
            suggestions=tuple(suggestions),
        )

    @staticmethod
    def free_text_query(interpretation: QueryInterpretation) -> Optional[str]:
        """The free-text query to run alongside the inferred filters, if any.

        Without inferred filters the whole phrase is searched. With weak filters
        the unrecognized words are searched as alternatives.
        """
        if not interpretation.has_filters:
            return interpretation.phrase.strip() or None
        if interpretation.remainder and interpretation.confidence < CONFIDENCE_FOR_FILTERS_ONLY:
            return " OR ".join(interpretation.remainder)
        return None

    @staticmethod
    def format_interpretation(interpretation: QueryInterpretation) -> str:
        """Render an interpretation block for the response text."""
        lines = [f"**Interpretation:** {interpretation.text}"]
        if interpretation.has_filters:
            lines.append(f"Confidence: {round(interpretation.confidence * 100)}%")
        for suggestion in interpretation.suggestions:
            lines.append(f"- {suggestion}")
        return "\n".join(lines)
