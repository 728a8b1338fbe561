"""
Google Fact Check Tools provider.

Queries the claims:search endpoint with httpx and returns compact
results plus aggregated rating signals. Without an API key every
lookup returns an empty, non-reviewed payload.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

import httpx

from copygate.cache import VerificationCache
from copygate.factcheck import FactCheckProvider
from copygate.factcheck.signals import summarize_claims

logger = logging.getLogger("copygate.factcheck.google")

SEARCH_URL = "https://factchecktools.googleapis.com/v1alpha1/claims:search"


def _compact_claim(claim: dict) -> dict:
    reviews = []
    for r in claim.get("claimReview") or []:
        publisher = r.get("publisher") or {}
        reviews.append({
            "publisher": publisher.get("name") or publisher.get("site"),
            "site": publisher.get("site"),
            "url": r.get("url"),
            "title": r.get("title"),
            "textualRating": r.get("textualRating"),
            "reviewDate": r.get("reviewDate"),
            "languageCode": r.get("languageCode"),
        })
    return {
        "text": claim.get("text"),
        "claimant": claim.get("claimant"),
        "claimDate": claim.get("claimDate"),
        "reviews": reviews,
    }


class GoogleFactCheckProvider(FactCheckProvider):
    """Google Fact Check Tools client with a TTL cache."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        cache: Optional[VerificationCache] = None,
        timeout: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key if api_key is not None else os.getenv("GOOGLE_FACT_CHECK_TOOLS_KEY", "")
        self.cache = cache or VerificationCache()
        self._timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def search(
        self,
        query: str,
        language_code: str = "en",
        max_age_days: int = 365,
        page_size: int = 3,
    ) -> dict:
        if not self._api_key:
            return {"query": query, "results": [], "signals": {"has_reviews": False}}

        params = {
            "query": query,
            "languageCode": language_code,
            "maxAgeDays": max_age_days,
            "pageSize": page_size,
        }
        cached = await self.cache.get(params)
        if cached is not None:
            return cached

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.get(SEARCH_URL, params={**params, "key": self._api_key})
            resp.raise_for_status()
            data = resp.json()

        claims = data.get("claims") if isinstance(data, dict) else None
        results = [_compact_claim(c) for c in claims or [] if isinstance(c, dict)]
        value = {"query": query, "results": results, "signals": summarize_claims(results)}

        await self.cache.put(params, value)
        return value
