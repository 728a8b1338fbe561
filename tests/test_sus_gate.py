"""
SUS Gate Tests

Flagged terms at medium/high level (and block_terms) remove their
sentences; with salvage on, a redacted sentence survives only when it
still reads as a complete, subject-bearing statement.
"""

from __future__ import annotations

from copygate.normalizer import normalize_result
from copygate.sus_gate import (
    RULE_ID,
    apply_sus_gate,
    collect_flagged_terms,
    gate_text,
    salvage_sentence,
)


def _report(*flags, block_terms=()):
    return {
        "version": "sus/v1",
        "flags": [{"term": t, "category": "fictionality", "level": lvl, "reason": ""} for t, lvl in flags],
        "block_terms": list(block_terms),
        "rationale": [],
    }


def _result(text):
    return normalize_result({"rewrite": {"text": text}})


# ============================================================
# TERM COLLECTION
# ============================================================

class TestCollectFlaggedTerms:

    def test_only_medium_and_high(self):
        report = _report(("Godzilla", "high"), ("Zorg", "medium"), ("Tokyo", "low"), ("Mayor", "none"))
        assert collect_flagged_terms(report) == ["Godzilla", "Zorg"]

    def test_block_terms_included_and_deduplicated(self):
        report = _report(("Godzilla", "high"), block_terms=["godzilla", "Kaiju", " "])
        assert collect_flagged_terms(report) == ["Godzilla", "Kaiju"]

    def test_missing_report(self):
        assert collect_flagged_terms(None) == []
        assert collect_flagged_terms({}) == []


# ============================================================
# DROP MODE
# ============================================================

class TestDropMode:

    def test_flagged_sentence_removed(self):
        result = _result("Godzilla attacked Tokyo. The mayor opened the shelter.")
        apply_sus_gate(result, _report(("Godzilla", "high")))
        assert result["rewrite"]["text"] == "The mayor opened the shelter."

    def test_edit_rationale_and_finding_recorded(self):
        before = "Godzilla attacked Tokyo. The mayor opened the shelter."
        result = _result(before)
        apply_sus_gate(result, _report(("Godzilla", "high")))

        assert result["rewrite"]["ops"] == [
            {"rule_id": RULE_ID, "before": before, "after": "The mayor opened the shelter."}
        ]
        assert "salvage=off" in result["rewrite"]["rationale"][-1]

        finding = result["analysis"]["findings"][-1]
        assert finding["rule_id"] == RULE_ID
        assert finding["level"] == "hard"
        assert finding["severity"] == 0.9
        assert finding["confidence"] == 0.7
        assert finding["evidence_snippet"] == "Godzilla"
        assert finding["cues_matched"] == ["Godzilla"]

    def test_evidence_lists_first_two_terms(self):
        result = _result("Godzilla met Zorg and Kaiju. Crews left.")
        apply_sus_gate(result, _report(("Godzilla", "high"), ("Zorg", "high"), ("Kaiju", "medium")))
        finding = result["analysis"]["findings"][-1]
        assert finding["evidence_snippet"] == "Godzilla, Zorg"
        assert finding["cues_matched"] == ["Godzilla", "Zorg", "Kaiju"]

    def test_hyphen_variant_matches(self):
        result = _result("A mega-shark was seen offshore. Beaches stay open.")
        apply_sus_gate(result, _report(("Mega Shark", "high")))
        assert result["rewrite"]["text"] == "Beaches stay open."

    def test_all_sentences_removed(self):
        result = _result("Godzilla attacked Tokyo.")
        apply_sus_gate(result, _report(("Godzilla", "high")))
        assert result["rewrite"]["text"] == ""
        assert len(result["rewrite"]["ops"]) == 1

    def test_no_match_leaves_result_untouched(self):
        text = "The mayor  opened the shelter.   Crews left."
        result = _result(text)
        apply_sus_gate(result, _report(("Godzilla", "high")))
        assert result["rewrite"]["text"] == text
        assert result["rewrite"]["ops"] == []
        assert result["analysis"]["findings"] == []

    def test_low_level_flags_ignored(self):
        result = _result("Godzilla attacked Tokyo. The mayor opened the shelter.")
        apply_sus_gate(result, _report(("Godzilla", "low")))
        assert "Godzilla" in result["rewrite"]["text"]

    def test_no_report(self):
        result = _result("Godzilla attacked Tokyo.")
        apply_sus_gate(result, None)
        assert result["rewrite"]["text"] == "Godzilla attacked Tokyo."


# ============================================================
# SALVAGE MODE
# ============================================================

class TestSalvageMode:

    def test_short_remainder_dropped(self):
        result = _result("Godzilla attacked Tokyo. The mayor opened the shelter.")
        apply_sus_gate(result, _report(("Godzilla", "high")), salvage=True)
        text = result["rewrite"]["text"]
        assert text == "The mayor opened the shelter."
        assert "Godzilla" not in text
        assert "attacked" not in text
        assert "salvage=on" in result["rewrite"]["rationale"][-1]

    def test_subordinate_clause_salvaged(self):
        sentence = "Mayor Zorg announced that the county will open four cooling centers downtown."
        assert salvage_sentence(sentence, ["Mayor Zorg"]) == (
            "The county will open four cooling centers downtown."
        )

    def test_dangling_modal_dropped(self):
        sentence = "Officials confirmed that Zorg will fund the new bridge project."
        assert salvage_sentence(sentence, ["Zorg"]) is None

    def test_abstract_subject_dropped(self):
        sentence = "The Zorg initiative will expand bus service to every district."
        assert salvage_sentence(sentence, ["Zorg"]) is None

    def test_reported_clause_without_subject_dropped(self):
        sentence = "Officials said Godzilla will visit the downtown area Friday."
        assert salvage_sentence(sentence, ["Godzilla"]) is None

    def test_reported_clause_dropped_in_gate(self):
        text = "Officials said Godzilla will visit the downtown area Friday. The mayor opened the shelter."
        assert gate_text(text, ["Godzilla"], salvage=True) == "The mayor opened the shelter."

    def test_reported_clause_with_subject_salvaged(self):
        sentence = "Officials said Godzilla fans will crowd the downtown area Friday."
        assert salvage_sentence(sentence, ["Godzilla"]) == (
            "Officials said fans will crowd the downtown area Friday."
        )

    def test_term_only_sentence_dropped(self):
        assert salvage_sentence("Godzilla!", ["Godzilla"]) is None

    def test_gate_text_keeps_unflagged_sentences_verbatim(self):
        text = "Crews arrived at 9 a.m. on Friday. Godzilla attacked Tokyo."
        assert gate_text(text, ["Godzilla"], salvage=True) == "Crews arrived at 9 a.m. on Friday."
