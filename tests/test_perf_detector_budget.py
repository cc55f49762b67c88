from __future__ import annotations

import os
import time

import pytest

from evaluation.fixtures import loader as fixtures_loader
from evaluation.perf import profile_fixtures
from otpsentinel.detect.base import DetectionContext
from otpsentinel.detect.otp import OTPDetector

if os.getenv("SKIP_PERF_TESTS") == "1":
    pytest.skip("Performance tests skipped by SKIP_PERF_TESTS", allow_module_level=True)


def _get_env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, "").strip() or default)
    except ValueError:
        return default


def _get_env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, "").strip() or default)
    except ValueError:
        return default


def _synth_context(names: list[str], repeat: int) -> DetectionContext:
    bodies = [fixtures_loader.load_fixture(n)[0].body for n in names]
    base = "\n\n".join(bodies)
    return DetectionContext(
        subject="Your sign-in code",
        body="\n\n".join([base] * repeat),
        sender="noreply@example.com",
    )


def test_detector_budget() -> None:
    repeat = _get_env_int("PERF_REPEAT", 120)
    context = _synth_context(["newsletter", "invoice_due", "google_signin"], repeat)
    budget = _get_env_float("PERF_MAX_SEC_DET", 1.5)

    det = OTPDetector()
    start = time.perf_counter()
    det.detect(context)
    elapsed = time.perf_counter() - start
    assert elapsed <= budget, f"detect took {elapsed:.3f}s (budget {budget:.3f}s)"


def test_profile_fixtures_smoke() -> None:
    out = profile_fixtures(["google_signin", "newsletter"], repeat=3)
    assert [item["name"] for item in out] == ["google_signin", "newsletter"]
    for item in out:
        assert item["repeat"] == 3
        timings = item["timings"]
        assert isinstance(timings, dict)
        assert timings["total"] >= 0.0
