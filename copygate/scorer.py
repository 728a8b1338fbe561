"""
Risk Scorer: Human Review Recommendation (stage >= 3)

Aggregates the final findings into a suspicion score:

  score = 2 * high_severity      (severity >= 0.8)
        + 3 * sus_gate_hits      (rule_id == "sus-gate")
        + 2 * temporal           (rule_id == "temporal-coherence", or
                                  evidence mentions "after" and the
                                  title mentions coherence)
        + 2 * extraordinary      (rule_id contains "extraordinary")

A recommendation is raised when score >= 5, or when the SUS gate fired
alongside more than two high-severity findings. Score >= 8 is critical.
"""

from __future__ import annotations

from typing import Optional

HIGH_SEVERITY = 0.8
REVIEW_THRESHOLD = 5
CRITICAL_THRESHOLD = 8


def _severity(finding: dict) -> float:
    try:
        return float(finding.get("severity", 0.0))
    except (TypeError, ValueError):
        return 0.0


def _is_temporal(finding: dict) -> bool:
    if finding.get("rule_id") == "temporal-coherence":
        return True
    evidence = str(finding.get("evidence_snippet") or "").lower()
    title = str(finding.get("title") or "").lower()
    return "after" in evidence and "coher" in title


def calculate_suspicion(findings: list[dict]) -> tuple[int, dict]:
    """Return (suspicion_score, component counts)."""
    counts = {
        "high_severity": sum(1 for f in findings if _severity(f) >= HIGH_SEVERITY),
        "sus_gate": sum(1 for f in findings if f.get("rule_id") == "sus-gate"),
        "temporal": sum(1 for f in findings if _is_temporal(f)),
        "extraordinary": sum(
            1 for f in findings if "extraordinary" in str(f.get("rule_id") or "")
        ),
    }
    score = (
        2 * counts["high_severity"]
        + 3 * counts["sus_gate"]
        + 2 * counts["temporal"]
        + 2 * counts["extraordinary"]
    )
    return score, counts


def recommend_human_review(findings: list[dict]) -> Optional[dict]:
    """Build a HumanReviewRecommendation, or None when below threshold."""
    score, counts = calculate_suspicion(findings)

    if not (
        score >= REVIEW_THRESHOLD
        or (counts["sus_gate"] > 0 and counts["high_severity"] > 2)
    ):
        return None

    details = []
    if counts["high_severity"]:
        details.append(f"{counts['high_severity']} high-severity finding(s)")
    if counts["sus_gate"]:
        details.append(f"{counts['sus_gate']} sanity-check gate removal(s)")
    if counts["temporal"]:
        details.append(f"{counts['temporal']} temporal coherence violation(s)")
    if counts["extraordinary"]:
        details.append(f"{counts['extraordinary']} extraordinary claim(s)")

    return {
        "flag": True,
        "severity": "critical" if score >= CRITICAL_THRESHOLD else "high",
        "reason": "Multiple credibility issues detected",
        "details": details,
        "recommendation": "Contains multiple red flags.",
        "suspicion_score": score,
    }


def apply_risk_scoring(result: dict) -> dict:
    """Attach the recommendation unless one is already present."""
    if result.get("human_review_recommended"):
        return result
    recommendation = recommend_human_review(result["analysis"]["findings"])
    if recommendation:
        result["human_review_recommended"] = recommendation
    return result
