"""
Tests for result interpretation: label matching policy, confidence rules, disclaimer wording.
"""

from __future__ import annotations

import pytest

from app.ml.inference import ClassificationResult, ClassScore, interpret, match_label
from app.ml.inference.interpreter import (
    DISCLAIMER_MARKER,
    INCONCLUSIVE_MESSAGE,
    NEGATIVE_PATTERNS,
    POSITIVE_PATTERNS,
)


def _result(scores, anomaly=False):
    return ClassificationResult(
        results=tuple(ClassScore(label=label, value=value) for label, value in scores.items()),
        anomaly=anomaly,
    )


@pytest.mark.parametrize(
    "labels,expected",
    [
        (["healthy", "parkinson"], "parkinson"),
        (["Parkinsons", "Healthy"], "Parkinsons"),
        (["class_negative", "class_POSITIVE"], "class_POSITIVE"),
        (["A", "B"], None),
    ],
)
def test_match_label_positive(labels, expected):
    scores = [ClassScore(label=label, value=0.5) for label in labels]
    match = match_label(scores, POSITIVE_PATTERNS)
    assert (match.label if match else None) == expected


def test_match_label_negative_is_case_insensitive():
    scores = [ClassScore(label="PD", value=0.1), ClassScore(label="HEALTHY_control", value=0.9)]
    assert match_label(scores, NEGATIVE_PATTERNS).label == "HEALTHY_control"


def test_positive_branch():
    interpretation = interpret(_result({"parkinson": 0.73, "healthy": 0.27}, anomaly=True))
    assert interpretation.has_parkinson is True
    assert interpretation.confidence == 0.73
    assert "73.0%" in interpretation.message
    assert "screening tool only" in interpretation.message
    assert DISCLAIMER_MARKER in interpretation.message


def test_negative_branch_uses_negative_score():
    interpretation = interpret(_result({"healthy": 0.8, "parkinson": 0.2}))
    assert interpretation.has_parkinson is False
    assert interpretation.confidence == 0.8
    assert "80.0%" in interpretation.message
    assert DISCLAIMER_MARKER in interpretation.message


def test_negative_branch_without_negative_label():
    interpretation = interpret(_result({"parkinson": 0.25, "other": 0.9}))
    assert interpretation.has_parkinson is False
    assert interpretation.confidence == pytest.approx(0.75)
    assert "75.0%" in interpretation.message


def test_exactly_half_is_not_positive():
    interpretation = interpret(_result({"healthy": 0.5, "parkinson": 0.5}))
    assert interpretation.has_parkinson is False
    assert interpretation.confidence == 0.5


def test_label_order_is_irrelevant():
    a = interpret(_result({"healthy": 0.4, "parkinson": 0.6}))
    b = interpret(_result({"parkinson": 0.6, "healthy": 0.4}))
    assert a == b


@pytest.mark.parametrize("anomaly", [True, False])
def test_fallback_branch(anomaly):
    interpretation = interpret(_result({"A": 0.9, "B": 0.1}, anomaly=anomaly))
    assert interpretation.has_parkinson is anomaly
    assert interpretation.confidence == 0.5
    assert interpretation.message == INCONCLUSIVE_MESSAGE


@pytest.mark.parametrize(
    "scores",
    [
        {"parkinson": 0.99, "healthy": 0.01},
        {"parkinson": 0.01, "healthy": 0.99},
        {"positive": 0.6},
        {"negative": 0.6},
        {"A": 0.9, "B": 0.1},
    ],
)
def test_every_message_has_disclaimer(scores):
    assert DISCLAIMER_MARKER in interpret(_result(scores)).message


def test_to_dict_uses_camel_case_flag():
    data = interpret(_result({"healthy": 0.8, "parkinson": 0.2})).to_dict()
    assert set(data) == {"hasParkinson", "confidence", "message"}


def test_verdict_uses_fixed_decision_point():
    """The verdict splits at 0.5 regardless of the classifier's anomaly threshold."""
    interpretation = interpret(_result({"healthy": 0.4, "parkinson": 0.6}, anomaly=False))
    assert interpretation.has_parkinson is True
    assert interpretation.confidence == 0.6
    assert "60.0%" in interpretation.message
