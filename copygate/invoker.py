"""
Generation Invoker: Rewrite + Sanity Check

Issues the rewrite call unconditionally and, at stage >= 6, the SUS
sanity-check call concurrently. Both are joined at a single
asyncio.gather barrier. Each call owns its own fallback:

  - call raises            -> fallback object, rationale annotated
  - output not JSON/object -> same fallback; the rewrite path also
                              sets human_review_recommended

Neither call can fail the other, and nothing here raises.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Optional

from copygate.llm import LLMProvider, MalformedOutputError
from copygate.normalizer import (
    Invalid,
    fallback_result,
    fallback_sus_report,
    invalid_output_review,
    normalize_sus_report,
    validate_payload,
)
from copygate.ruleset import RulesetBundle
from copygate.stages import SUS_CHECK_STAGE, SUS_PROMPT, build_system_prompt

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.35
SUS_TEMPERATURE = 0.1

# Set by the pipeline only, never taken from model output
CORE_OWNED_FIELDS = ("catalog_version", "workshop", "human_review_recommended")


@dataclass
class Generation:
    """Raw collaborator output for one run."""
    result: dict
    sus_report: Optional[dict] = None


def build_rewrite_payload(text: str, stage: int, ruleset: RulesetBundle) -> str:
    return json.dumps(
        {
            "TEXT": text,
            "RULESET": list(ruleset.rules),
            "_debug": {"stage": stage, "ruleset_path": ruleset.path},
        },
        indent=2,
    )


async def invoke_rewrite(
    text: str,
    stage: int,
    ruleset: RulesetBundle,
    llm: LLMProvider,
    temperature: float = DEFAULT_TEMPERATURE,
) -> dict:
    """Primary rewrite call. Always returns a dict."""
    try:
        payload = await llm.generate_json(
            build_rewrite_payload(text, stage, ruleset),
            system_instruction=build_system_prompt(stage),
            temperature=temperature,
        )
    except MalformedOutputError as e:
        logger.warning("Rewrite agent returned malformed output: %s", e,
                       extra={"stage": stage, "error_type": "MalformedOutputError"})
        result = fallback_result("invalid JSON from rewrite agent", str(e))
        result["human_review_recommended"] = invalid_output_review(str(e))
        return result
    except Exception as e:
        logger.warning("Rewrite agent call failed: %s", e,
                       extra={"stage": stage, "error_type": type(e).__name__})
        return fallback_result("rewrite agent call failed", str(e))

    checked = validate_payload(payload)
    if isinstance(checked, Invalid):
        logger.warning("Rewrite agent output rejected: %s", checked.reason,
                       extra={"stage": stage})
        result = fallback_result("invalid output from rewrite agent", checked.reason)
        result["human_review_recommended"] = invalid_output_review(checked.reason)
        return result
    return {k: v for k, v in checked.payload.items() if k not in CORE_OWNED_FIELDS}


async def invoke_sanity_check(text: str, llm: LLMProvider) -> dict:
    """Secondary SUS call. Always returns a normalized SusReport dict."""
    try:
        payload = await llm.generate_json(
            json.dumps({"TEXT": text}, indent=2),
            system_instruction=SUS_PROMPT,
            temperature=SUS_TEMPERATURE,
        )
    except MalformedOutputError as e:
        logger.warning("SUS agent returned malformed output: %s", e)
        return fallback_sus_report("invalid JSON from sanity agent", str(e))
    except Exception as e:
        logger.warning("SUS agent call failed: %s", e,
                       extra={"error_type": type(e).__name__})
        return fallback_sus_report("sanity agent call failed", str(e))

    checked = validate_payload(payload)
    if isinstance(checked, Invalid):
        logger.warning("SUS agent output rejected: %s", checked.reason)
        return fallback_sus_report("invalid output from sanity agent", checked.reason)
    return normalize_sus_report(checked.payload)


async def generate(
    text: str,
    stage: int,
    ruleset: RulesetBundle,
    llm: LLMProvider,
    temperature: float = DEFAULT_TEMPERATURE,
) -> Generation:
    """Run the rewrite call, plus the sanity call when stage >= 6."""
    rewrite_task = invoke_rewrite(text, stage, ruleset, llm, temperature)

    if stage < SUS_CHECK_STAGE:
        return Generation(result=await rewrite_task)

    result, sus_report = await asyncio.gather(
        rewrite_task,
        invoke_sanity_check(text, llm),
    )
    return Generation(result=result, sus_report=sus_report)
