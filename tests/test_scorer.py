"""
Risk Scorer Tests

Weighted suspicion score over final findings, and the human review
recommendation it drives.
"""

from __future__ import annotations

from copygate.scorer import apply_risk_scoring, calculate_suspicion, recommend_human_review


def _finding(severity, rule_id="r", title="", evidence=""):
    return {"rule_id": rule_id, "title": title, "severity": severity, "evidence_snippet": evidence}


class TestCalculateSuspicion:

    def test_three_high_severity(self):
        score, counts = calculate_suspicion([_finding(0.9), _finding(0.85), _finding(0.9)])
        assert score == 6
        assert counts["high_severity"] == 3

    def test_component_weights(self):
        findings = [
            _finding(0.9, rule_id="sus-gate"),
            _finding(0.2, rule_id="temporal-coherence"),
            _finding(0.5, rule_id="extraordinary-claim"),
        ]
        score, counts = calculate_suspicion(findings)
        assert counts == {"high_severity": 1, "sus_gate": 1, "temporal": 1, "extraordinary": 1}
        assert score == 2 + 3 + 2 + 2

    def test_temporal_by_title_and_evidence(self):
        score, counts = calculate_suspicion([
            _finding(0.2, title="Coherence issue", evidence="after the storm passed"),
        ])
        assert counts["temporal"] == 1
        assert score == 2

    def test_bad_severity_counts_as_zero(self):
        score, _ = calculate_suspicion([_finding("high")])
        assert score == 0


class TestRecommendHumanReview:

    def test_score_schema_accepts_score(self):
        from copygate.schemas.run import HumanReviewRecommendation
        review = recommend_human_review([_finding(0.9), _finding(0.85), _finding(0.9)])
        assert HumanReviewRecommendation(**review).suspicion_score == 6

    def test_threshold_reached(self):
        review = recommend_human_review([_finding(0.9), _finding(0.85), _finding(0.9)])
        assert review["flag"] is True
        assert review["severity"] == "high"
        assert review["suspicion_score"] == 6
        assert review["details"] == ["3 high-severity finding(s)"]

    def test_below_threshold(self):
        assert recommend_human_review([_finding(0.9), _finding(0.5)]) is None
        assert recommend_human_review([]) is None

    def test_critical(self):
        review = recommend_human_review([
            _finding(0.9, rule_id="sus-gate"), _finding(0.9), _finding(0.9),
        ])
        assert review["suspicion_score"] == 9
        assert review["severity"] == "critical"


class TestApplyRiskScoring:

    def test_attaches_recommendation(self):
        result = {"analysis": {"findings": [_finding(0.9), _finding(0.85), _finding(0.9)]}}
        apply_risk_scoring(result)
        assert result["human_review_recommended"]["suspicion_score"] == 6

    def test_never_overwrites_existing(self):
        existing = {"flag": True, "severity": "high", "reason": "invalid output from rewrite agent"}
        result = {
            "analysis": {"findings": [_finding(0.9, rule_id="sus-gate")] * 3},
            "human_review_recommended": existing,
        }
        apply_risk_scoring(result)
        assert result["human_review_recommended"] is existing

    def test_nothing_attached_below_threshold(self):
        result = {"analysis": {"findings": [_finding(0.1)]}}
        apply_risk_scoring(result)
        assert "human_review_recommended" not in result
