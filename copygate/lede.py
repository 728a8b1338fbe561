"""
Lede Fallback: replace a weak opening sentence (stage >= 7).

Runs after the SUS gate. When the first sentence of the rewrite is
weak (empty, vacuous opener, or verbless) and the rewrite agent supplied
a lede_candidate built from verbatim spans, the candidate replaces
the first sentence. All-or-nothing: any failed condition leaves the
text untouched.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from copygate.text_analysis import contains_term, has_finite_verb, is_weak_lead, split_sentences

logger = logging.getLogger(__name__)

RULE_ID = "lede-fallback"


def lede_candidate_of(result: dict) -> str:
    """The candidate is top-level in the contract; some models nest it under rewrite."""
    candidate = result.get("lede_candidate")
    if not isinstance(candidate, str):
        candidate = result.get("rewrite", {}).get("lede_candidate")
    return candidate.strip() if isinstance(candidate, str) else ""


def rebuild_lede(text: str, candidate: str, flagged_terms: Iterable[str] = ()) -> Optional[str]:
    """Return the text with its first sentence replaced, or None if not applicable."""
    sentences = split_sentences(text)
    lead = sentences[0] if sentences else ""

    if not is_weak_lead(lead):
        return None
    if not candidate or not candidate.strip():
        return None
    if contains_term(candidate, list(flagged_terms)):
        return None
    if not has_finite_verb(candidate):
        return None

    return " ".join([candidate.strip()] + sentences[1:])


def apply_lede_fallback(
    result: dict,
    candidate: Optional[str] = None,
    flagged_terms: Iterable[str] = (),
) -> dict:
    """Apply the fallback to result["rewrite"]["text"] in place."""
    if candidate is None:
        candidate = lede_candidate_of(result)

    rewrite = result["rewrite"]
    before = rewrite["text"]
    after = rebuild_lede(before, candidate, flagged_terms)
    if after is None or after == before:
        return result

    rewrite["text"] = after
    rewrite["ops"].append({"rule_id": RULE_ID, "before": before, "after": after})
    rewrite["rationale"].append("Replaced weak lede with a candidate built from verbatim spans.")
    result["analysis"]["findings"].append({
        "rule_id": RULE_ID,
        "title": "Weak lede replaced",
        "level": "soft",
        "severity": 0.3,
        "confidence": 0.8,
        "evidence_snippet": candidate.strip()[:40],
        "cues_matched": ["weak-lede"],
        "guard_hits": [],
    })
    logger.info("Lede fallback applied", extra={"rule_id": RULE_ID})
    return result
