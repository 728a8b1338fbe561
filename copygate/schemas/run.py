"""
API Schemas: Request and Response Models

Pydantic models for the copygate API.
"""

from __future__ import annotations

from typing import Literal, Optional
from pydantic import BaseModel, Field


# ============================================================
# RESULT SHAPE
# ============================================================

class Finding(BaseModel):
    rule_id: str = ""
    title: str = ""
    level: Literal["soft", "hard"] = "soft"
    severity: float = Field(0.5, ge=0.0, le=1.0)
    confidence: float = Field(0.5, ge=0.0, le=1.0)
    evidence_snippet: str = ""
    cues_matched: list[str] = []
    guard_hits: list[str] = []


class Tone(BaseModel):
    polarity: str = "neutral"
    confidence: float = Field(0.5, ge=0.0, le=1.0)


class Analysis(BaseModel):
    findings: list[Finding] = []
    tone: Tone = Tone()


class Edit(BaseModel):
    rule_id: str
    before: str
    after: str


class Rewrite(BaseModel):
    text: str = ""
    rationale: list[str] = []
    ops: list[Edit] = []


class SusFlag(BaseModel):
    term: str
    category: Literal["fictionality", "jurisdiction", "impossible-scale", "nonsense", "other"]
    level: Literal["none", "low", "medium", "high"]
    reason: str = ""


class SusReport(BaseModel):
    version: str
    flags: list[SusFlag] = []
    block_terms: list[str] = []
    rationale: list[str] = []


class HumanReviewRecommendation(BaseModel):
    flag: bool
    severity: Literal["high", "critical"]
    reason: str
    details: list[str] = []
    recommendation: str
    suspicion_score: Optional[int] = None


class Workshop(BaseModel):
    model_config = {"extra": "allow"}

    stage: int = Field(..., ge=0, le=7)
    stage_titles: list[str]
    model: Optional[str] = None
    sus: Optional[SusReport] = None
    fact_check_tools: Optional[dict] = None


class RewriteResult(BaseModel):
    """Pipeline output. Extra model fields (spans, lede_candidate) pass through."""
    model_config = {"extra": "allow"}

    version: str
    analysis: Analysis
    rewrite: Rewrite
    catalog_version: str
    workshop: Workshop
    human_review_recommended: Optional[HumanReviewRecommendation] = None


# ============================================================
# RUN
# ============================================================

class RunOptions(BaseModel):
    clamp1500: bool = False
    salvage: Optional[bool] = Field(None, description="Override COPYGATE_SUS_SALVAGE for this run.")


class RunRequest(BaseModel):
    """POST /run request body."""
    text: str = Field(..., min_length=1, max_length=50_000,
                      description="Source copy to rewrite (at least 10 characters).")
    stage: Optional[float] = Field(0, description="Rule stage 0-7; out-of-range values are clamped.")
    options: RunOptions = RunOptions()
    factcheck_query: Optional[str] = Field(None, max_length=500,
                                           description="Single claim to look up in preview mode.")

    model_config = {"json_schema_extra": {"examples": [
        {"text": "The county will open two cooling centers Friday, officials said.", "stage": 7},
    ]}}


class RunReport(BaseModel):
    version: str
    model: str
    catalog_version: str
    stage: int
    findings_count: int
    tone: Tone
    status: str
    human_review_recommended: Optional[HumanReviewRecommendation] = None


class RunResult(BaseModel):
    corrected_text: str
    report: RunReport
    full: RewriteResult
    diff_spans: list[dict]


class RunResponse(BaseModel):
    """POST /run response body."""
    success: bool
    result: RunResult


# ============================================================
# CATALOG
# ============================================================

class StageInfo(BaseModel):
    id: int
    title: str


class StagesResponse(BaseModel):
    stages: list[StageInfo]


class RulesetResponse(BaseModel):
    success: bool
    ruleset: list
    version: str


# ============================================================
# FACT-CHECK
# ============================================================

class FactCheckRequest(BaseModel):
    """POST /factcheck request body."""
    query: str = Field(..., min_length=1, max_length=500)
    language_code: str = "en"
    max_age_days: int = Field(365, ge=1, le=3650)
    page_size: int = Field(3, ge=1, le=10)


class FactCheckResponse(BaseModel):
    success: bool
    result: dict


# ============================================================
# HEALTH
# ============================================================

class HealthResponse(BaseModel):
    status: str
    version: str
    llm_provider: str
    factcheck_mode: str
    catalog_version: str
    stages: int
