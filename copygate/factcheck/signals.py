"""
Fact-check signal helpers: rating buckets and per-claim summaries.
"""

from __future__ import annotations

import re
from typing import Optional

_SUPPORT = re.compile(r"true|accurate|mostly true|correct")
_MIXED = re.compile(r"mixed|partly|half|somewhat")
_DISPUTE = re.compile(r"false|incorrect|debunk|misleading|pants on fire")

BUCKETS = ("support", "mixed", "dispute", "clarification")


def bucket_from_textual_rating(rating: Optional[str]) -> str:
    """Map a publisher's free-text verdict onto a rating bucket."""
    text = str(rating or "").lower()
    # "incorrect" and "untrue" contain support words, so dispute wins ties
    if _DISPUTE.search(text) or "untrue" in text:
        return "dispute"
    if _SUPPORT.search(text):
        return "support"
    if _MIXED.search(text):
        return "mixed"
    return "clarification"


def summarize_claims(claims: list[dict]) -> dict:
    """Aggregate review ratings across compact claim results."""
    reviews = [r for c in claims for r in (c.get("reviews") or []) if isinstance(r, dict)]
    counts = {b: 0 for b in BUCKETS}
    for review in reviews:
        counts[bucket_from_textual_rating(review.get("textualRating"))] += 1

    dates = sorted(r["reviewDate"] for r in reviews if r.get("reviewDate"))
    return {
        "has_reviews": len(reviews) > 0,
        "review_count": len(reviews),
        "ratings": counts,
        "oldest_review_date": dates[0] if dates else None,
        "latest_review_date": dates[-1] if dates else None,
    }


def rating_counts(signals: Optional[dict]) -> dict:
    ratings = signals.get("ratings") if isinstance(signals, dict) else None
    if not isinstance(ratings, dict):
        ratings = {}
    out = {}
    for bucket in BUCKETS:
        try:
            out[bucket] = int(ratings.get(bucket) or 0)
        except (TypeError, ValueError):
            out[bucket] = 0
    return out


def is_disputed(signals: Optional[dict]) -> bool:
    """Reviewed, with at least one dispute and more disputes than support."""
    if not isinstance(signals, dict) or not signals.get("has_reviews"):
        return False
    counts = rating_counts(signals)
    return counts["dispute"] >= 1 and counts["dispute"] > counts["support"]
