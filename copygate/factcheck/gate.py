"""
Fact-Check Gate: fold pre-fetched verifications into a result.

  - select_claims:      pick check-worthy sentences from a text
  - apply_fact_checks:  add "factcheck-dispute" findings and, at
                        stage >= 6, drop sentences that contain a
                        disputed claim
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Union

from copygate.factcheck.signals import is_disputed
from copygate.text_analysis import has_finite_verb, split_sentences

logger = logging.getLogger(__name__)

DISPUTE_RULE_ID = "factcheck-dispute"
GATE_RULE_ID = "factcheck-gate"
FACTCHECK_GATING_STAGE = 6
MAX_DISPUTE_FINDINGS = 3

Verifications = Union[Iterable[dict], Mapping[str, dict]]


def select_claims(
    text: str,
    max_claims: int = 5,
    min_len: int = 40,
    max_len: int = 240,
) -> list[str]:
    """Sentences of reasonable length that assert something."""
    candidates = [
        s for s in split_sentences(text)
        if min_len <= len(s) <= max_len and has_finite_verb(s)
    ]
    return candidates[: max(1, max_claims)]


def _as_items(verifications: Verifications) -> list[dict]:
    if isinstance(verifications, Mapping):
        pairs = verifications.items()
        return [
            {**payload, "query": payload.get("query") or claim}
            for claim, payload in pairs if isinstance(payload, dict)
        ]
    return [v for v in verifications if isinstance(v, dict)]


def _compact(item: dict) -> dict:
    signals = item.get("signals")
    results = item.get("results")
    return {
        "query": str(item.get("query") or ""),
        "signals": signals if isinstance(signals, dict) else {"has_reviews": False},
        "results": results if isinstance(results, list) else [],
    }


def apply_fact_checks(
    result: dict,
    verifications: Verifications,
    stage: int,
    mode: str = "auto",
) -> dict:
    """Fold verification payloads into result in place."""
    items = [_compact(i) for i in _as_items(verifications)]
    items = [i for i in items if i["query"]]
    if not items:
        return result

    disputed = [i for i in items if is_disputed(i["signals"])]

    result.setdefault("workshop", {})["fact_check_tools"] = {"mode": mode, "claims": items}

    findings = result["analysis"]["findings"]
    for item in disputed[:MAX_DISPUTE_FINDINGS]:
        findings.append({
            "rule_id": DISPUTE_RULE_ID,
            "title": "Claim disputed by external fact-checks",
            "level": "hard",
            "severity": 0.85,
            "confidence": 0.6,
            "evidence_snippet": item["query"][:80],
            "cues_matched": ["fact-check-tools"],
            "guard_hits": [],
        })

    if stage >= FACTCHECK_GATING_STAGE and disputed:
        _gate_disputed(result, [i["query"].lower() for i in disputed])

    return result


def _gate_disputed(result: dict, disputed_queries: list[str]) -> None:
    rewrite = result["rewrite"]
    before = rewrite["text"]
    kept = [
        s for s in split_sentences(before)
        if not any(q in s.lower() for q in disputed_queries)
    ]
    after = " ".join(kept)
    if len(kept) == len(split_sentences(before)):
        return

    rewrite["text"] = after
    rewrite["ops"].append({"rule_id": GATE_RULE_ID, "before": before, "after": after})
    rewrite["rationale"].append(
        "Applied fact-check gate: removed sentence(s) disputed by external reviews."
    )
    logger.info("Fact-check gate removed disputed sentences", extra={"rule_id": GATE_RULE_ID})
