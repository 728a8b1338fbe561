"""
Pipeline: Staged Rewrite with Post-Generation Gating

Flow for one run:
  1. Clamp stage, load ruleset (read once per RulesetSource)
  2. Generation: rewrite call (+ concurrent SUS call at stage >= 6)
  3. Normalize the rewrite result into the strict shape
  4. SUS gate (stage >= 7)
  5. Fold pre-fetched fact-check verifications (gating at stage >= 6)
     or, after the run, fold_verifications for claims taken from the
     rewrite
  6. Lede fallback (stage >= 7)
  7. Risk scoring (stage >= 3)

The pipeline never raises: every failure resolves to a structurally
valid result, blocked rather than ungated when in doubt.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from copygate.factcheck.gate import Verifications, apply_fact_checks
from copygate.invoker import DEFAULT_TEMPERATURE, generate
from copygate.lede import apply_lede_fallback
from copygate.llm import LLMProvider
from copygate.normalizer import fallback_result, invalid_output_review, normalize_result
from copygate.ruleset import RulesetBundle, RulesetSource, parse_ruleset
from copygate.scorer import apply_risk_scoring
from copygate.stages import (
    GATING_STAGE,
    RISK_SCORING_STAGE,
    SUS_CHECK_STAGE,
    clamp_stage,
    stage_titles,
)
from copygate.sus_gate import apply_sus_gate, collect_flagged_terms

logger = logging.getLogger(__name__)


def _load_ruleset(ruleset: Optional[RulesetSource]) -> RulesetBundle:
    if ruleset is None:
        return parse_ruleset(b"")
    try:
        return ruleset.load()
    except Exception as e:
        logger.warning("Ruleset load failed, using empty ruleset: %s", e)
        return parse_ruleset(b"")


def _post_process(
    result: dict,
    stage: int,
    sus_report: Optional[dict],
    salvage: bool,
    verifications: Optional[Verifications],
) -> dict:
    flagged_terms = collect_flagged_terms(sus_report)

    if stage >= GATING_STAGE:
        apply_sus_gate(result, sus_report, salvage=salvage)

    if verifications:
        apply_fact_checks(result, verifications, stage)

    if stage >= GATING_STAGE:
        apply_lede_fallback(result, flagged_terms=flagged_terms)

    if stage >= RISK_SCORING_STAGE:
        apply_risk_scoring(result)

    return result


async def run_pipeline(
    text: str,
    stage=0,
    llm: Optional[LLMProvider] = None,
    ruleset: Optional[RulesetSource] = None,
    salvage: bool = False,
    verifications: Optional[Verifications] = None,
    temperature: float = DEFAULT_TEMPERATURE,
) -> dict:
    """
    Run the staged rewrite and gating pipeline for one text.

    Args:
        text: source copy.
        stage: requested stage; clamped into [0, 7].
        llm: generative collaborator; required for a real rewrite.
        ruleset: read-once ruleset source shared across runs.
        salvage: redact-and-keep flagged sentences instead of dropping them.
        verifications: pre-fetched fact-check payloads (list, or mapping
            claim -> payload).
    """
    start = time.monotonic()
    text = text if isinstance(text, str) else ""
    s = clamp_stage(stage)
    bundle = _load_ruleset(ruleset)

    if llm is None:
        result = fallback_result("no rewrite agent configured")
        sus_report = None
    else:
        generation = await generate(text, s, bundle, llm, temperature=temperature)
        result, sus_report = generation.result, generation.sus_report

    try:
        normalize_result(result)
        _post_process(result, s, sus_report, salvage, verifications)
    except Exception as e:
        logger.error("Post-processing failed, blocking output: %s", e, exc_info=True,
                     extra={"stage": s, "error_type": type(e).__name__})
        result = fallback_result("gating pipeline error", str(e))
        result["human_review_recommended"] = invalid_output_review(
            f"gating failed: {type(e).__name__}", reason="gating pipeline error",
        )

    result["catalog_version"] = bundle.catalog_version
    workshop = result.get("workshop") if isinstance(result.get("workshop"), dict) else {}
    workshop.update({"stage": s, "stage_titles": stage_titles(s)})
    if llm is not None:
        workshop["model"] = getattr(llm, "model", "unknown")
    if s >= SUS_CHECK_STAGE and sus_report is not None:
        workshop["sus"] = sus_report
    result["workshop"] = workshop

    logger.info(
        "Pipeline run complete",
        extra={
            "stage": s,
            "catalog_version": bundle.catalog_version,
            "findings_count": len(result["analysis"]["findings"]),
            "duration_ms": int((time.monotonic() - start) * 1000),
        },
    )
    return result


def fold_verifications(
    result: dict,
    verifications: Verifications,
    mode: str = "auto",
) -> dict:
    """
    Fold verifications fetched after generation into a finished result.

    Claims are usually selected from the gated rewrite itself, so they
    can only be looked up once run_pipeline has returned. Gating and
    risk scoring follow the stage already stamped on the result.
    """
    workshop = result.get("workshop") if isinstance(result.get("workshop"), dict) else {}
    s = clamp_stage(workshop.get("stage"))

    try:
        apply_fact_checks(result, verifications, s, mode=mode)
        if s >= RISK_SCORING_STAGE:
            apply_risk_scoring(result)
    except Exception as e:
        logger.error("Fact-check fold failed, blocking output: %s", e, exc_info=True,
                     extra={"stage": s, "error_type": type(e).__name__})
        blocked = fallback_result("fact-check fold error", str(e))
        blocked["human_review_recommended"] = invalid_output_review(
            f"fact-check fold failed: {type(e).__name__}", reason="gating pipeline error",
        )
        blocked["catalog_version"] = result.get("catalog_version", "")
        blocked["workshop"] = workshop
        return blocked

    return result
