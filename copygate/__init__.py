"""
Copygate: Staged Editorial Rewrite and Gating Engine

Escalating editorial rules (stages 0-7) drive a generative rewrite,
whose untrusted output is normalized and then gated after generation.

Public API:
  - run_pipeline:           Full staged run, never raises
  - fold_verifications:     Fold post-run fact-check lookups into a result
  - build_system_prompt:    Stage-dependent rewrite instructions
  - clamp_stage:            Coerce any stage value into [0, 7]
  - split_sentences:        Abbreviation-aware sentence segmentation
  - normalize_result:       Fill the strict result shape
  - apply_sus_gate:         Drop/salvage sentences with flagged terms
  - apply_lede_fallback:    Replace a weak lede with a span-built candidate
  - recommend_human_review: Aggregate findings into a review advisory
  - RulesetSource:          Read-once, content-hashed ruleset
  - LLMProvider:            Abstract LLM interface for provider swapping

Usage:
    from copygate import run_pipeline, RulesetSource, get_provider
    result = await run_pipeline(text, stage=7, llm=get_provider(),
                                ruleset=RulesetSource("data/ruleset.json"))
"""

__version__ = "1.0.0"

from copygate.stages import (
    CHUNKS,
    RULESET_STAGES,
    StageChunk,
    build_system_prompt,
    clamp_stage,
)
from copygate.text_analysis import split_sentences
from copygate.normalizer import normalize_result
from copygate.sus_gate import apply_sus_gate
from copygate.lede import apply_lede_fallback
from copygate.scorer import recommend_human_review
from copygate.ruleset import RulesetBundle, RulesetSource
from copygate.pipeline import fold_verifications, run_pipeline
from copygate.llm import LLMProvider
from copygate.llm.factory import get_provider

__all__ = [
    "CHUNKS",
    "RULESET_STAGES",
    "StageChunk",
    "build_system_prompt",
    "clamp_stage",
    "split_sentences",
    "normalize_result",
    "apply_sus_gate",
    "apply_lede_fallback",
    "recommend_human_review",
    "RulesetBundle",
    "RulesetSource",
    "run_pipeline",
    "fold_verifications",
    "LLMProvider",
    "get_provider",
]
