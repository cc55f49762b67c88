"""Evaluation harness for OTP detection precision and recall.

Each fixture is one email with either an expected code or ``null`` when no
code should be reported.  Outcomes are counted per fixture:

* ``tp``: the expected code was returned
* ``fp``: a code was returned for an email without one, or the wrong code was
  returned (the wrong code also counts as ``fn``)
* ``fn``: the expected code was missed
* ``tn``: nothing was expected and nothing was returned
"""

from __future__ import annotations

from dataclasses import dataclass

from evaluation.fixtures import loader as fixtures_loader
from otpsentinel.config import OTPRules
from otpsentinel.detect.base import DetectionContext
from otpsentinel.detect.otp import OTPDetector

__all__ = [
    "Outcome",
    "PRF",
    "classify",
    "compute_prf",
    "evaluate_context",
    "evaluate_fixture",
    "evaluate_all_fixtures",
]


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Outcome:
    """Detection outcome for a single email."""

    expected: str | None
    predicted: str | None
    confidence: float | None
    tp: int = 0
    fp: int = 0
    fn: int = 0
    tn: int = 0


@dataclass(slots=True)
class PRF:
    """Precision/recall/F1 counts and scores."""

    tp: int
    fp: int
    fn: int
    tn: int
    precision: float
    recall: float
    f1: float


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def classify(expected: str | None, predicted: str | None) -> tuple[int, int, int, int]:
    """Return ``(tp, fp, fn, tn)`` counts for one email."""

    if expected is None:
        return (0, 1, 0, 0) if predicted is not None else (0, 0, 0, 1)
    if predicted is None:
        return 0, 0, 1, 0
    if predicted == expected:
        return 1, 0, 0, 0
    return 0, 1, 1, 0


def compute_prf(outcomes: list[Outcome]) -> PRF:
    """Aggregate ``outcomes`` into precision/recall/F1."""

    tp = sum(o.tp for o in outcomes)
    fp = sum(o.fp for o in outcomes)
    fn = sum(o.fn for o in outcomes)
    tn = sum(o.tn for o in outcomes)
    precision = tp / (tp + fp) if (tp + fp) else 0.0
    recall = tp / (tp + fn) if (tp + fn) else 0.0
    f1 = 2 * precision * recall / (precision + recall) if (precision + recall) else 0.0
    return PRF(tp, fp, fn, tn, precision, recall, f1)


# ---------------------------------------------------------------------------
# Public evaluation entry points
# ---------------------------------------------------------------------------


def evaluate_context(
    context: DetectionContext, expected: str | None, detector: OTPDetector
) -> Outcome:
    """Run ``detector`` on ``context`` and classify the result."""

    result = detector.detect(context)
    predicted = result.code if result is not None else None
    tp, fp, fn, tn = classify(expected, predicted)
    return Outcome(
        expected,
        predicted,
        result.confidence if result is not None else None,
        tp,
        fp,
        fn,
        tn,
    )


def evaluate_fixture(name: str, detector: OTPDetector | None = None) -> Outcome:
    """Evaluate fixture ``name`` with ``detector`` (default rules if omitted)."""

    context, expected = fixtures_loader.load_fixture(name)
    return evaluate_context(context, expected, detector or OTPDetector())


def evaluate_all_fixtures(rules: OTPRules | None = None) -> dict[str, object]:
    """Evaluate every fixture returning per-fixture outcomes and aggregate scores."""

    detector = OTPDetector(rules)
    per_fixture: dict[str, Outcome] = {}
    for name in fixtures_loader.list_fixtures():
        per_fixture[name] = evaluate_fixture(name, detector)
    return {
        "fixtures": per_fixture,
        "aggregate": compute_prf(list(per_fixture.values())),
    }
