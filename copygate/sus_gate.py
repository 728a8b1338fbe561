"""
SUS Gate: Remove or Salvage Flagged Sentences (stage >= 7)

Takes the terms the sanity reviewer flagged at medium/high level (plus
its block_terms) and walks the rewrite sentence by sentence:

  - no flagged term     -> keep verbatim
  - flagged, default    -> drop the sentence
  - flagged, salvage on -> redact the terms and keep the remainder only
                           if it still reads as a complete statement

When the redaction may have taken the subject with it, the sentence
is dropped: a salvaged fragment must never imply a missing subject.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from copygate.text_analysis import (
    contains_term,
    finish_sentence,
    has_finite_verb,
    lacks_subject,
    redact_terms,
    split_sentences,
    strip_reporting_phrase,
    word_count,
)

logger = logging.getLogger(__name__)

RULE_ID = "sus-gate"
GATING_LEVELS = ("medium", "high")
MIN_SALVAGE_WORDS = 5


def collect_flagged_terms(sus_report: Optional[dict]) -> list[str]:
    """Medium/high flag terms plus block_terms, de-duplicated case-insensitively."""
    if not sus_report:
        return []

    candidates: list[str] = []
    for flag in sus_report.get("flags") or []:
        if isinstance(flag, dict) and flag.get("level") in GATING_LEVELS:
            candidates.append(flag.get("term") or "")
    candidates.extend(t for t in sus_report.get("block_terms") or [] if isinstance(t, str))

    terms: list[str] = []
    seen: set[str] = set()
    for term in candidates:
        term = term.strip()
        if term and term.lower() not in seen:
            seen.add(term.lower())
            terms.append(term)
    return terms


def salvage_sentence(sentence: str, terms: Iterable[str]) -> Optional[str]:
    """
    Try to keep the factual remainder of a flagged sentence.

    Returns the repaired sentence, or None when it should be dropped.
    """
    remainder = redact_terms(sentence, terms)
    if not remainder:
        return None

    # "X announced that <clause>": the subordinate clause carries the fact
    idx = remainder.lower().find(" that ")
    if idx != -1:
        remainder = remainder[idx + len(" that "):]

    remainder = strip_reporting_phrase(remainder).strip()
    if not remainder or lacks_subject(remainder):
        return None

    if not has_finite_verb(remainder) or word_count(remainder) < MIN_SALVAGE_WORDS:
        return None

    return finish_sentence(remainder)


def gate_text(text: str, terms: list[str], salvage: bool = False) -> str:
    """Apply the gate. Text without any flagged sentence comes back as is."""
    kept: list[str] = []
    hit = False
    for sentence in split_sentences(text):
        if not contains_term(sentence, terms):
            kept.append(sentence)
            continue
        hit = True
        if salvage:
            repaired = salvage_sentence(sentence, terms)
            if repaired:
                kept.append(repaired)
    return " ".join(kept) if hit else text


def apply_sus_gate(result: dict, sus_report: Optional[dict], salvage: bool = False) -> dict:
    """
    Gate result["rewrite"]["text"] in place. Records an Edit, a rationale
    note and a hard finding only when the text actually changed.
    """
    terms = collect_flagged_terms(sus_report)
    if not terms:
        return result

    rewrite = result["rewrite"]
    before = rewrite["text"]
    after = gate_text(before, terms, salvage=salvage)
    if after == before:
        return result

    rewrite["text"] = after
    rewrite["ops"].append({"rule_id": RULE_ID, "before": before, "after": after})
    rewrite["rationale"].append(
        "Applied SUS gate: removed sentence(s) containing flagged terms "
        f"(salvage={'on' if salvage else 'off'})."
    )
    result["analysis"]["findings"].append({
        "rule_id": RULE_ID,
        "title": "Sanity-check gate removed flagged content",
        "level": "hard",
        "severity": 0.9,
        "confidence": 0.7,
        "evidence_snippet": ", ".join(terms[:2]),
        "cues_matched": list(terms),
        "guard_hits": [],
    })
    logger.info("SUS gate changed rewrite", extra={"rule_id": RULE_ID, "sus_terms": terms})
    return result
