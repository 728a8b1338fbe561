"""
Stage Catalog: Escalating Editorial Rules

Eight ordered rule chunks (stage 0 through 7). A run at stage s is
instructed with the base block plus every chunk 0..s, so each stage
inherits all earlier rules. Later chunks override earlier ones where
they conflict (stage 2 replaces the keep-as-claim handling of stage 0,
for example).

Conditional appendices:
  - s >= 5: verbatim span extraction + lede_candidate contract
  - s >= 2: "higher stages override lower stages" note

The catalog is immutable and the assembled prompt depends only on s.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

MIN_STAGE = 0
MAX_STAGE = 7

SPANS_STAGE = 5
SUS_CHECK_STAGE = 6
GATING_STAGE = 7
OVERRIDE_NOTE_STAGE = 2
RISK_SCORING_STAGE = 3


@dataclass(frozen=True)
class StageChunk:
    """One escalating editorial policy."""
    id: int
    title: str
    body: str


def clamp_stage(value) -> int:
    """
    Coerce any stage value into [0, 7].

    Missing, non-numeric and non-finite values become 0; fractional
    values are truncated toward zero.
    """
    if value is None or isinstance(value, bool):
        return MIN_STAGE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return MIN_STAGE
    if not math.isfinite(number):
        return MIN_STAGE
    return max(MIN_STAGE, min(MAX_STAGE, int(number)))


# ============================================================
# BASE INSTRUCTIONS
# ============================================================

BASE_PROMPT = "\n".join([
    "ROLE: You are a senior newsroom copy editor responsible for consistency, clarity, and high editorial standards.",
    "AUTHORITATIVE CONTEXT: A RULESET (array of rules) is provided for style and quality decisions.",
    "OBJECTIVES:",
    "- Detect and explain issues against the RULESET (analysis.findings).",
    "- Produce a rewrite that adheres to the RULESET and journalism principles, improving clarity, concision, and consistency.",
    "- Use a news voice: concise, specific, active, third-person; avoid sensational or loaded language.",
    "CORE PRINCIPLES:",
    "- Accuracy and fairness; avoid speculation; preserve meaning.",
    "- Attribution for non-obvious claims; avoid plagiarism; respect context.",
    "- Accountability and harm minimization; avoid stereotypes and undue emphasis.",
    "NEWS DISCOURSE HINT (implicit):",
    "- Lead with who/what/when/where/why/how; follow with main event, background, consequences/next steps, reactions/attribution.",
    "- Do not label sections; reflect this structure in the flow.",
    "REWRITE SHAPE:",
    "- When appropriate, reshape into a brief: a short lede and compact follow-up paragraphs in inverted pyramid order.",
    "- Enforce style per RULESET (capitalization, numbers, dates/times, punctuation).",
    "- Keep names/facts from TEXT; do not add information not present in TEXT.",
    "ANTI-HALLUCINATION (MANDATORY): You MUST NOT invent or infer facts, names, numbers, dates, places, quotes, or sources. "
    "Use only TEXT or explicit RULESET info. If unspecified, omit it. Never guess or add new content.",
    "INPUT: TEXT (string), RULESET (array).",
    "OUTPUT (JSON only): {",
    '  "version":"copygate/v1",',
    '  "analysis": { "findings":[{',
    '    "rule_id","title","level","severity","confidence",',
    '    "evidence_snippet","cues_matched","guard_hits"',
    '  }], "tone":{"polarity","confidence"} },',
    '  "rewrite": { "text", "rationale":[string], "ops":[{ "rule_id","before","after"}] }',
    "}",
    'FIELD RULES: "level" is "soft" or "hard"; "severity" and "confidence" are numbers between 0 and 1.',
    "SCORING: base 0.6, +0.1 per extra cue beyond first; -0.2 if any guards hit.",
    "CONSTRAINTS:",
    "- Evidence snippets <= 40 chars.",
    "- Do not echo RULESET or add commentary; return JSON only.",
])


# ============================================================
# STAGE CHUNKS
# ============================================================

CHUNKS: tuple[StageChunk, ...] = (
    StageChunk(
        id=0,
        title="Baseline extraordinary-claim handling (keep-as-claim)",
        body="\n".join([
            "UNATTRIBUTED EXTRAORDINARY CLAIMS (BASELINE):",
            "- If a claim is extraordinary/improbable and lacks attribution in TEXT, do not assert it as fact.",
            '- In the rewrite, keep it as a claim (quote it or prefix "The text says: ..."), and move it out of the lede.',
            '- Add a high-severity finding with a rule_id containing "extraordinary" requiring attribution.',
            "REWRITE SIZE: Target ~120-200 words unless more is required to preserve meaning.",
        ]),
    ),
    StageChunk(
        id=1,
        title="Topic & Relevance Gate (soft)",
        body="\n".join([
            "TOPIC FOCUS (GUIDANCE): First, infer the primary event/topic from TEXT by salience and repetition.",
            "RELEVANCE RULE: Keep only sentences that directly describe that event or add necessary who/what/when/where/why/how or logistics.",
            "Omit sentences that are off-topic or non-supporting and would force external context. Do not replace them with speculation.",
        ]),
    ),
    StageChunk(
        id=2,
        title="Extraordinary Claim = Exclude (hard)",
        body="\n".join([
            "OVERRIDE - UNATTRIBUTED EXTRAORDINARY CLAIMS (MANDATORY):",
            "- If a claim is extraordinary/improbable and lacks attribution or corroboration in TEXT, do not include it in the rewrite at all.",
            "- Do not paraphrase, hedge, or relocate it. Exclude it from rewrite.text.",
            "- Record it only in analysis.findings with high severity and a brief evidence_snippet.",
        ]),
    ),
    StageChunk(
        id=3,
        title="Internal Coherence Filter",
        body="\n".join([
            "COHERENCE CHECK (MANDATORY): Remove any sentence that creates contradictions in time, place, actors, or scale relative to the dominant topic.",
            "If including a sentence would require unstated background or external knowledge to remain coherent, exclude it and log a finding.",
            'Log time-order contradictions with rule_id "temporal-coherence".',
        ]),
    ),
    StageChunk(
        id=4,
        title="Harm & Panic Minimization",
        body="\n".join([
            "HARM MINIMIZATION (MANDATORY): Exclude panic-inducing catastrophe claims that lack source attribution "
            "and are not essential to the public-service information in TEXT.",
            "Log a high-severity finding requiring verification/attribution.",
        ]),
    ),
    StageChunk(
        id=5,
        title="Quote & Nickname Discipline",
        body="\n".join([
            "QUOTE DISCIPLINE (GUIDANCE): Retain quotes only if they provide substantive facts or logistics about the primary event.",
            "Omit nicknames, slogans, novelty labels, and attention-bait that do not add factual content.",
        ]),
    ),
    StageChunk(
        id=6,
        title="External Sanity Cross-Check",
        body="\n".join([
            "SANITY CROSS-CHECK (MANDATORY): An independent reviewer flags terms that are fictional, out of jurisdiction, "
            "impossible in scale, or nonsensical by common knowledge.",
            "Treat any entity or event that would fail such a check as unverified: do not assert it, and log a high-severity finding.",
        ]),
    ),
    StageChunk(
        id=7,
        title="Selection-Only Constraint + Gating",
        body="\n".join([
            "SELECTION-ONLY REWRITE (MANDATORY): rewrite.text must be formed solely by selecting, lightly editing for style/clarity, "
            "and re-ordering information already present in TEXT.",
            "You may omit sentences per these rules; you may not invent new facts, entities, numbers, places, or quotes.",
            "GATING: sentences containing flagged terms will be removed after generation; the lede must stand on its own.",
        ]),
    ),
)

RULESET_STAGES = [{"id": c.id, "title": c.title} for c in CHUNKS]


# ============================================================
# APPENDICES
# ============================================================

SPANS_APPENDIX = "\n".join([
    "SPANS (MANDATORY): Also return a top-level \"spans\" object of VERBATIM substrings copied from TEXT, grouped by role:",
    '  "spans": { "subjects":[string], "actions":[string], "where":[string], "when":[string], "context":[string], "numbers":[string] }',
    "LEDE CANDIDATE (MANDATORY): Also return a top-level \"lede_candidate\" string built ONLY from those spans plus these glue words:",
    "  the, a, an, in, on, at, for, to, of, and, with, by, from, will, is, are, was, were, said, says.",
    "SUBJECT PRIORITY for the lede_candidate (use the first that applies):",
    "  1. An explicit location (city, county, state) from spans.where.",
    "  2. A person or role tied to the action, unless flagged as non-authoritative.",
    "  3. A named office or agency.",
    '  4. The generic subject "Officials".',
    '  5. Last resort: "The announcement".',
    "The lede_candidate must contain a finite verb and no invented facts.",
])

OVERRIDE_NOTE = "NOTE: Where any guidance conflicts, higher-stage rules override lower-stage rules."


SUS_PROMPT = "\n".join([
    "ROLE: You are an independent sanity reviewer for news copy.",
    "TASK: Read TEXT and flag terms that a careful editor would find suspicious using common-knowledge judgment only.",
    "You MUST NOT introduce new facts, rewrite the text, or verify claims against outside sources.",
    "CATEGORIES: fictionality (fictional characters, creatures, places), jurisdiction (an authority acting outside its remit), "
    "impossible-scale (numbers or events beyond physical plausibility), nonsense (incoherent or absurd statements), other.",
    "LEVELS: none, low, medium, high.",
    "INPUT: TEXT (string).",
    "OUTPUT (JSON only): {",
    '  "version":"sus/v1",',
    '  "flags":[{ "term", "category", "level", "reason" }],',
    '  "block_terms":[string],',
    '  "rationale":[string]',
    "}",
    "Each term must be copied verbatim from TEXT. block_terms lists terms that must not appear in published copy.",
])


def stage_titles(stage) -> list[str]:
    """Titles of the chunks active at the given stage."""
    s = clamp_stage(stage)
    return [c.title for c in CHUNKS[: s + 1]]


def build_system_prompt(stage) -> str:
    """Assemble the rewrite instructions for a stage."""
    s = clamp_stage(stage)
    parts = [BASE_PROMPT]

    for chunk in CHUNKS[: s + 1]:
        parts.append(f"\n### STAGE {chunk.id}: {chunk.title}\n{chunk.body}")

    if s >= SPANS_STAGE:
        parts.append(SPANS_APPENDIX)

    if s >= OVERRIDE_NOTE_STAGE:
        parts.append(OVERRIDE_NOTE)

    return "\n".join(parts)
