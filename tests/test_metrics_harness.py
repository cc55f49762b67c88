from __future__ import annotations

import pytest

from evaluation.metrics import (
    Outcome,
    classify,
    compute_prf,
    evaluate_all_fixtures,
    evaluate_context,
    evaluate_fixture,
)
from otpsentinel.config import default_rules
from otpsentinel.detect.base import DetectionContext
from otpsentinel.detect.otp import OTPDetector


@pytest.mark.parametrize(
    "expected,predicted,counts",
    [
        ("482913", "482913", (1, 0, 0, 0)),
        ("482913", None, (0, 0, 1, 0)),
        (None, "482913", (0, 1, 0, 0)),
        (None, None, (0, 0, 0, 1)),
        ("482913", "739104", (0, 1, 1, 0)),
    ],
)
def test_classify(expected: str | None, predicted: str | None, counts: tuple[int, ...]) -> None:
    assert classify(expected, predicted) == counts


def test_compute_prf() -> None:
    outcomes = [
        Outcome("1", "1", 0.9, tp=1),
        Outcome("2", None, None, fn=1),
        Outcome(None, "3", 0.7, fp=1),
        Outcome(None, None, None, tn=1),
    ]
    prf = compute_prf(outcomes)
    assert (prf.tp, prf.fp, prf.fn, prf.tn) == (1, 1, 1, 1)
    assert prf.precision == pytest.approx(0.5)
    assert prf.recall == pytest.approx(0.5)
    assert prf.f1 == pytest.approx(0.5)


def test_compute_prf_empty() -> None:
    prf = compute_prf([])
    assert prf.precision == 0.0 and prf.recall == 0.0 and prf.f1 == 0.0


def test_evaluate_context() -> None:
    det = OTPDetector()
    outcome = evaluate_context(
        DetectionContext(body="Your verification code is 739104"), "739104", det
    )
    assert outcome.tp == 1
    assert outcome.predicted == "739104"
    assert outcome.confidence is not None


def test_fixture_smoke() -> None:
    outcome = evaluate_fixture("google_signin")
    assert outcome.expected == "482913"
    assert outcome.predicted == "482913"
    assert outcome.tp == 1


def test_all_fixtures_with_default_rules() -> None:
    report = evaluate_all_fixtures(default_rules())
    aggregate = report["aggregate"]
    assert aggregate.fp == 0
    assert aggregate.fn == 0
    assert aggregate.precision == pytest.approx(1.0)
    assert aggregate.recall == pytest.approx(1.0)
    assert set(report["fixtures"]) >= {"google_signin", "invoice_due"}
