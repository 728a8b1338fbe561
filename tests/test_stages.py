"""
Stage Catalog Tests

Verifies stage clamping and that the assembled instructions are
fully determined by the stage: chunk order, cumulative inclusion,
and the two conditional appendices.
"""

from __future__ import annotations

import math

import pytest

from copygate.stages import (
    CHUNKS,
    OVERRIDE_NOTE,
    RULESET_STAGES,
    SPANS_APPENDIX,
    build_system_prompt,
    clamp_stage,
    stage_titles,
)


class TestClampStage:

    @pytest.mark.parametrize("value", range(-20, 40))
    def test_integers_land_in_range(self, value):
        assert 0 <= clamp_stage(value) <= 7

    def test_known_values(self):
        assert clamp_stage(float("nan")) == 0
        assert clamp_stage(-3) == 0
        assert clamp_stage(99) == 7
        assert clamp_stage(4) == 4

    def test_missing_and_non_finite(self):
        assert clamp_stage(None) == 0
        assert clamp_stage(math.inf) == 0
        assert clamp_stage(-math.inf) == 0
        assert clamp_stage("not a stage") == 0

    def test_numeric_strings_and_fractions(self):
        assert clamp_stage("5") == 5
        assert clamp_stage(3.9) == 3


class TestCatalog:

    def test_eight_ordered_chunks(self):
        assert [c.id for c in CHUNKS] == list(range(8))
        assert [s["id"] for s in RULESET_STAGES] == list(range(8))
        assert all(c.title and c.body for c in CHUNKS)

    def test_stage_titles_are_cumulative(self):
        assert stage_titles(0) == [CHUNKS[0].title]
        assert len(stage_titles(3)) == 4
        assert stage_titles(99) == [c.title for c in CHUNKS]


class TestBuildSystemPrompt:

    def test_stage_zero_has_only_first_chunk(self):
        prompt = build_system_prompt(0)
        assert "### STAGE 0:" in prompt
        assert "### STAGE 1:" not in prompt
        assert OVERRIDE_NOTE not in prompt
        assert SPANS_APPENDIX not in prompt

    def test_chunks_are_cumulative_and_ordered(self):
        prompt = build_system_prompt(7)
        positions = [prompt.index(f"### STAGE {i}:") for i in range(8)]
        assert positions == sorted(positions)

    def test_override_note_from_stage_two(self):
        assert OVERRIDE_NOTE not in build_system_prompt(1)
        assert OVERRIDE_NOTE in build_system_prompt(2)

    def test_spans_appendix_from_stage_five(self):
        assert SPANS_APPENDIX not in build_system_prompt(4)
        prompt = build_system_prompt(5)
        assert SPANS_APPENDIX in prompt
        assert "lede_candidate" in prompt
        assert prompt.index(SPANS_APPENDIX) < prompt.index(OVERRIDE_NOTE)

    def test_base_block_comes_first(self):
        prompt = build_system_prompt(3)
        assert prompt.startswith("ROLE:")
        assert prompt.index("ANTI-HALLUCINATION") < prompt.index("### STAGE 0:")

    def test_fully_determined_by_stage(self):
        assert build_system_prompt(6) == build_system_prompt(6)
        assert build_system_prompt(99) == build_system_prompt(7)
        assert build_system_prompt(float("nan")) == build_system_prompt(0)
