"""
Result Normalizer: Strict Shape for Untrusted Model Output

Collaborator responses are untrusted. This module:
  1. Validates a parsed payload into a tagged result (Valid / Invalid)
  2. Builds deterministic fallback objects for failed calls
  3. Fills empty defaults for any missing field, without overwriting
     existing values, so downstream steps never need null checks

Findings and SUS flags are coerced one by one; entries that are not
objects are dropped, numeric scores are clamped into [0, 1].
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

RESULT_VERSION = "copygate/v1"
SUS_VERSION = "sus/v1"

FINDING_LEVELS = ("soft", "hard")
FLAG_CATEGORIES = ("fictionality", "jurisdiction", "impossible-scale", "nonsense", "other")
FLAG_LEVELS = ("none", "low", "medium", "high")

DEFAULT_TONE = {"polarity": "neutral", "confidence": 0.5}


@dataclass(frozen=True)
class Valid:
    payload: dict


@dataclass(frozen=True)
class Invalid:
    reason: str


ValidationResult = Union[Valid, Invalid]


def validate_payload(payload: Any) -> ValidationResult:
    """Only JSON objects are acceptable collaborator output."""
    if isinstance(payload, dict):
        return Valid(payload)
    return Invalid(f"expected a JSON object, got {type(payload).__name__}")


# ============================================================
# FALLBACKS
# ============================================================

def fallback_result(reason: str, details: Optional[str] = None) -> dict:
    """Blocked-output rewrite result used when the rewrite call fails."""
    rationale = [f"fallback: {reason} (blocked output)"]
    if details:
        rationale.append(f"details: {details}")
    return {
        "version": RESULT_VERSION,
        "analysis": {"findings": [], "tone": dict(DEFAULT_TONE)},
        "rewrite": {"text": "", "rationale": rationale, "ops": []},
    }


def fallback_sus_report(reason: str, details: Optional[str] = None) -> dict:
    """Empty sanity report used when the sanity call fails."""
    rationale = [f"fallback: {reason}"]
    if details:
        rationale.append(f"details: {details}")
    return {"version": SUS_VERSION, "flags": [], "block_terms": [], "rationale": rationale}


def invalid_output_review(
    details: str,
    reason: str = "invalid output from rewrite agent",
) -> dict:
    """Human review recommendation attached when the rewrite output was unusable."""
    return {
        "flag": True,
        "severity": "high",
        "reason": reason,
        "details": [details],
        "recommendation": "Rewrite was blocked; review the source text manually.",
    }


# ============================================================
# COERCION HELPERS
# ============================================================

def _unit(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if number != number:  # NaN
        return default
    return max(0.0, min(1.0, number))


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def normalize_finding(raw: dict) -> dict:
    level = raw.get("level")
    return {
        **raw,
        "rule_id": _text(raw.get("rule_id")),
        "title": _text(raw.get("title")),
        "level": level if level in FINDING_LEVELS else "soft",
        "severity": _unit(raw.get("severity"), 0.5),
        "confidence": _unit(raw.get("confidence"), 0.5),
        "evidence_snippet": _text(raw.get("evidence_snippet")),
        "cues_matched": _str_list(raw.get("cues_matched")),
        "guard_hits": _str_list(raw.get("guard_hits")),
    }


def _normalize_edit(raw: dict) -> dict:
    return {
        **raw,
        "rule_id": _text(raw.get("rule_id")),
        "before": _text(raw.get("before")),
        "after": _text(raw.get("after")),
    }


# ============================================================
# NORMALIZERS
# ============================================================

def normalize_result(result: dict) -> dict:
    """
    Ensure analysis.findings, analysis.tone, rewrite.text,
    rewrite.rationale and rewrite.ops exist. Mutates and returns result.
    """
    if not isinstance(result.get("version"), str) or not result["version"]:
        result["version"] = RESULT_VERSION

    analysis = result.get("analysis")
    if not isinstance(analysis, dict):
        analysis = result["analysis"] = {}

    findings = analysis.get("findings")
    analysis["findings"] = [
        normalize_finding(f) for f in findings if isinstance(f, dict)
    ] if isinstance(findings, list) else []

    tone = analysis.get("tone")
    if not isinstance(tone, dict):
        analysis["tone"] = dict(DEFAULT_TONE)
    else:
        if not isinstance(tone.get("polarity"), str):
            tone["polarity"] = DEFAULT_TONE["polarity"]
        tone["confidence"] = _unit(tone.get("confidence"), DEFAULT_TONE["confidence"])

    rewrite = result.get("rewrite")
    if not isinstance(rewrite, dict):
        rewrite = result["rewrite"] = {}

    rewrite["text"] = _text(rewrite.get("text"))
    rationale = rewrite.get("rationale")
    rewrite["rationale"] = _str_list(rationale) if isinstance(rationale, list) else []
    ops = rewrite.get("ops")
    rewrite["ops"] = [
        _normalize_edit(op) for op in ops if isinstance(op, dict)
    ] if isinstance(ops, list) else []

    return result


def normalize_sus_report(report: dict) -> dict:
    """Coerce a sanity report into {version, flags, block_terms, rationale}."""
    flags = []
    raw_flags = report.get("flags")
    for f in raw_flags if isinstance(raw_flags, list) else []:
        if not isinstance(f, dict):
            continue
        term = _text(f.get("term")).strip()
        if not term:
            continue
        category = f.get("category")
        level = f.get("level")
        flags.append({
            "term": term,
            "category": category if category in FLAG_CATEGORIES else "other",
            "level": level.lower() if isinstance(level, str) and level.lower() in FLAG_LEVELS else "none",
            "reason": _text(f.get("reason")),
        })

    return {
        "version": _text(report.get("version")) or SUS_VERSION,
        "flags": flags,
        "block_terms": [t.strip() for t in _str_list(report.get("block_terms")) if t.strip()],
        "rationale": _str_list(report.get("rationale")),
    }
