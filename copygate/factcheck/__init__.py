"""
Fact-Check Provider: Abstract Interface

Providers look up a claim and return a verification payload:

    {"query": str, "results": [...], "signals": {has_reviews, review_count,
     ratings: {support, mixed, dispute, clarification}, ...}}

The gating pipeline never calls a provider itself; the hosting
process fetches payloads and hands them to the pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class FactCheckProvider(ABC):
    """Abstract base for fact-check lookups."""

    @abstractmethod
    async def search(
        self,
        query: str,
        language_code: str = "en",
        max_age_days: int = 365,
        page_size: int = 3,
    ) -> dict:
        """Look up a single claim."""
        ...
