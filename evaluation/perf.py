"""Lightweight profiling harness for detector performance measurements.

``profile_detector``
    Time :meth:`OTPDetector.detect` on a single email context.

``profile_fixtures``
    Load evaluation fixtures, synthesise larger emails by repeating their
    bodies and return timings for each.

Neither function prints or logs; results are returned to the caller so tests or
tools can aggregate them as needed.
"""

from __future__ import annotations

import os
from dataclasses import replace
from time import perf_counter
from typing import Dict, List

from evaluation.fixtures import loader as fixtures_loader
from otpsentinel.config import OTPRules
from otpsentinel.detect.base import DetectionContext
from otpsentinel.detect.otp import OTPDetector

__all__ = ["profile_detector", "profile_fixtures"]


def profile_detector(
    context: DetectionContext, detector: OTPDetector, *, rounds: int = 1
) -> Dict[str, float]:
    """Return timings (seconds) for running ``detector`` on ``context``.

    ``total`` is the wall clock duration over all ``rounds`` and ``per_call``
    the mean duration of one :meth:`~OTPDetector.detect` call.
    """

    rounds = max(1, rounds)
    start = perf_counter()
    for _ in range(rounds):
        detector.detect(context)
    total = perf_counter() - start
    return {"total": total, "per_call": total / rounds}


def profile_fixtures(
    names: List[str] | None = None,
    *,
    rules: OTPRules | None = None,
    repeat: int | None = None,
) -> List[Dict[str, object]]:
    """Return timing bundles for fixture emails.

    Parameters
    ----------
    names:
        Optional list of fixture basenames.  When ``None`` all fixtures are
        profiled.
    rules:
        Rules for the detector; package defaults when ``None``.
    repeat:
        Number of times to repeat each fixture body.  ``None`` consults the
        ``OTPSENTINEL_PERF_REPEAT`` environment variable and falls back to
        ``200``.
    """

    all_names = fixtures_loader.list_fixtures()
    selected = all_names if names is None else [n for n in all_names if n in set(names)]

    if repeat is None:
        try:
            repeat = int(os.getenv("OTPSENTINEL_PERF_REPEAT", "200"))
        except ValueError:
            repeat = 200

    detector = OTPDetector(rules)
    results: List[Dict[str, object]] = []
    for name in selected:
        context, _expected = fixtures_loader.load_fixture(name)
        synthetic = replace(context, body="\n\n".join(context.body for _ in range(repeat)))
        timings = profile_detector(synthetic, detector)
        results.append(
            {
                "name": name,
                "chars": len(synthetic.body),
                "repeat": repeat,
                "timings": timings,
            }
        )
    return results


if __name__ == "__main__":  # pragma: no cover - convenience wrapper
    import argparse

    parser = argparse.ArgumentParser(description="Profile evaluation fixtures")
    parser.add_argument("--names", type=str, default=None, help="Comma separated fixture names")
    parser.add_argument("--repeat", type=int, default=None, help="Repeat count")
    args = parser.parse_args()

    names_arg = args.names.split(",") if args.names else None
    out = profile_fixtures(names_arg, repeat=args.repeat)

    header = f"{'name':<24} {'chars':>8} {'repeat':>6} {'total_ms':>9}"
    print(header)
    print("-" * len(header))
    for item in out:
        total_ms = item["timings"]["total"] * 1000.0  # type: ignore[index]
        print(f"{item['name']:<24} {item['chars']:>8} {item['repeat']:>6} {total_ms:>9.2f}")
