"""
Invoker Tests

Covers the rewrite and sanity-check calls:
  1. Stage-dependent fan-out (SUS call only at stage >= 6)
  2. Both calls in flight at the same time
  3. Independent failure handling (raise, malformed JSON, non-object)
  4. Core-owned fields never taken from model output
"""

from __future__ import annotations

import asyncio
import json

import pytest

from copygate.invoker import generate, invoke_rewrite, invoke_sanity_check
from copygate.llm import LLMProvider
from copygate.ruleset import RulesetSource
from copygate.stages import SUS_PROMPT


REWRITE = {
    "version": "copygate/v1",
    "analysis": {"findings": [], "tone": {"polarity": "neutral", "confidence": 0.7}},
    "rewrite": {"text": "The mayor opened the shelter.", "rationale": [], "ops": []},
}

SUS = {
    "version": "sus/v1",
    "flags": [{"term": "Godzilla", "category": "fictionality", "level": "high", "reason": "fictional"}],
    "block_terms": [],
    "rationale": [],
}


# ============================================================
# MOCK LLM
# ============================================================

class ScriptedLLM(LLMProvider):
    """Answers rewrite and sanity prompts from fixed replies; Exceptions are raised."""

    model = "scripted"

    def __init__(self, rewrite=REWRITE, sus=SUS):
        self.rewrite = rewrite
        self.sus = sus
        self.calls = []

    async def generate(self, prompt, system_instruction=None, temperature=0.7, json_mode=False):
        is_sus = system_instruction == SUS_PROMPT
        self.calls.append(("sus" if is_sus else "rewrite", temperature))
        reply = self.sus if is_sus else self.rewrite
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, str):
            return reply
        return json.dumps(reply)


class RendezvousLLM(LLMProvider):
    """Each call waits until the other one has started."""

    def __init__(self):
        self.rewrite_started = asyncio.Event()
        self.sus_started = asyncio.Event()

    async def generate(self, prompt, system_instruction=None, temperature=0.7, json_mode=False):
        if system_instruction == SUS_PROMPT:
            self.sus_started.set()
            await self.rewrite_started.wait()
            return json.dumps(SUS)
        self.rewrite_started.set()
        await self.sus_started.wait()
        return json.dumps(REWRITE)


@pytest.fixture
def bundle():
    return RulesetSource.from_rules([{"id": "attribution-required"}]).load()


# ============================================================
# FAN-OUT
# ============================================================

class TestGenerate:

    @pytest.mark.asyncio
    async def test_no_sanity_call_below_stage_six(self, bundle):
        llm = ScriptedLLM()
        gen = await generate("Godzilla attacked Tokyo.", 5, bundle, llm)
        assert [c[0] for c in llm.calls] == ["rewrite"]
        assert gen.sus_report is None
        assert gen.result["rewrite"]["text"] == "The mayor opened the shelter."

    @pytest.mark.asyncio
    async def test_sanity_call_from_stage_six(self, bundle):
        llm = ScriptedLLM()
        gen = await generate("Godzilla attacked Tokyo.", 6, bundle, llm)
        assert sorted(c[0] for c in llm.calls) == ["rewrite", "sus"]
        assert gen.sus_report["flags"][0]["term"] == "Godzilla"

    @pytest.mark.asyncio
    async def test_calls_run_concurrently(self, bundle):
        gen = await asyncio.wait_for(
            generate("Godzilla attacked Tokyo.", 7, bundle, RendezvousLLM()),
            timeout=2,
        )
        assert gen.result["rewrite"]["text"] == "The mayor opened the shelter."
        assert gen.sus_report["flags"][0]["level"] == "high"

    @pytest.mark.asyncio
    async def test_sanity_uses_low_temperature(self, bundle):
        llm = ScriptedLLM()
        await generate("text", 6, bundle, llm, temperature=0.35)
        temps = dict(llm.calls)
        assert temps["rewrite"] == 0.35
        assert temps["sus"] == 0.1


# ============================================================
# FAILURE HANDLING
# ============================================================

class TestRewriteFailures:

    @pytest.mark.asyncio
    async def test_raise_becomes_fallback(self, bundle):
        result = await invoke_rewrite("text", 3, bundle, ScriptedLLM(rewrite=RuntimeError("quota")))
        assert result["rewrite"]["text"] == ""
        assert "fallback: rewrite agent call failed (blocked output)" in result["rewrite"]["rationale"]
        assert "human_review_recommended" not in result

    @pytest.mark.asyncio
    async def test_malformed_json_recommends_review(self, bundle):
        result = await invoke_rewrite("text", 3, bundle, ScriptedLLM(rewrite="not json {"))
        assert result["rewrite"]["text"] == ""
        assert result["human_review_recommended"]["flag"] is True
        assert result["human_review_recommended"]["reason"] == "invalid output from rewrite agent"

    @pytest.mark.asyncio
    async def test_non_object_recommends_review(self, bundle):
        result = await invoke_rewrite("text", 3, bundle, ScriptedLLM(rewrite="[1, 2]"))
        assert result["rewrite"]["text"] == ""
        assert result["human_review_recommended"]["severity"] == "high"

    @pytest.mark.asyncio
    async def test_fenced_json_accepted(self, bundle):
        fenced = "```json\n" + json.dumps(REWRITE) + "\n```"
        result = await invoke_rewrite("text", 3, bundle, ScriptedLLM(rewrite=fenced))
        assert result["rewrite"]["text"] == "The mayor opened the shelter."

    @pytest.mark.asyncio
    async def test_core_owned_fields_stripped(self, bundle):
        payload = {**REWRITE, "catalog_version": "forged", "human_review_recommended": {"flag": False}}
        result = await invoke_rewrite("text", 3, bundle, ScriptedLLM(rewrite=payload))
        assert "catalog_version" not in result
        assert "human_review_recommended" not in result


class TestIndependentFailure:

    @pytest.mark.asyncio
    async def test_sanity_failure_keeps_rewrite(self, bundle):
        gen = await generate("text", 7, bundle, ScriptedLLM(sus=RuntimeError("down")))
        assert gen.result["rewrite"]["text"] == "The mayor opened the shelter."
        assert gen.sus_report["flags"] == []
        assert gen.sus_report["rationale"][0] == "fallback: sanity agent call failed"

    @pytest.mark.asyncio
    async def test_rewrite_failure_keeps_sanity_report(self, bundle):
        gen = await generate("text", 7, bundle, ScriptedLLM(rewrite=RuntimeError("down")))
        assert gen.result["rewrite"]["text"] == ""
        assert gen.sus_report["flags"][0]["term"] == "Godzilla"

    @pytest.mark.asyncio
    async def test_malformed_sanity_output(self):
        report = await invoke_sanity_check("text", ScriptedLLM(sus="nonsense"))
        assert report["flags"] == []
        assert report["rationale"][0] == "fallback: invalid JSON from sanity agent"
