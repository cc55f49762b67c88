"""Time-bounded OTP detector.

:class:`OTPDetector` searches the subject, snippet and body of an email, in
that order, for the single most likely one-time passcode.  Within one field
every registered pattern is tried on its first match and the candidate with
the highest adjusted confidence wins; earlier patterns win ties.  Across
fields the strictly best candidate is kept, so ties favour the earlier field.
The confidence threshold is applied once to the overall winner.

A single soft deadline (``rules.max_processing_time``) bounds the whole search.
It is checked before each field is scanned; once it has passed, the best match
found so far is returned instead of nothing.

Rules are validated and patterns compiled at construction.  After that the
detector holds only read-only state, so :meth:`OTPDetector.detect` can be
called concurrently with independent contexts and never raises.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from datetime import datetime, timezone

from ..config.schema import OTPRules, default_rules, validate_rules
from ..utils.logging import get_logger
from .base import SEARCH_ORDER, DetectionContext, OTPResult, Source
from .patterns import Pattern, build_registry, compile_blocked_patterns
from .scoring import score_candidate, validate_candidate

__all__ = ["OTPDetector", "detect_otp", "get_detector", "is_plausible_code"]

log = get_logger(__name__)

_PLAUSIBLE_RX: re.Pattern[str] = re.compile(r"[A-Za-z0-9]{4,8}", re.ASCII)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OTPDetector:
    """Detect one-time passcodes in email text."""

    def __init__(
        self,
        rules: OTPRules | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._rules = validate_rules(rules if rules is not None else default_rules())
        self._patterns: tuple[Pattern, ...] = build_registry(self._rules)
        self._blocked = tuple(compile_blocked_patterns(self._rules.blocked_patterns))
        self._trusted = tuple(self._rules.trusted_otp_senders)
        self._budget = self._rules.max_processing_time.total_seconds()
        self._clock = clock
        self._now = now

    def name(self) -> str:  # pragma: no cover - trivial
        return "otp"

    @property
    def rules(self) -> OTPRules:
        return self._rules

    @property
    def patterns(self) -> tuple[Pattern, ...]:
        return self._patterns

    # ------------------------------------------------------------------
    def detect(self, context: DetectionContext) -> OTPResult | None:
        """Return the most likely code in ``context`` or ``None``."""

        deadline = self._clock() + self._budget
        best: OTPResult | None = None

        for source in SEARCH_ORDER:
            text = context.text_for(source)
            if not text:
                continue
            if self._clock() >= deadline:
                log.debug("time budget exhausted before scanning %s", source.value)
                break
            result = self.detect_in_text(text, source, context)
            if result is not None and (best is None or result.confidence > best.confidence):
                best = result

        if best is None:
            return None
        if best.confidence < self._rules.confidence_threshold:
            log.debug(
                "discarding %s match from %s: confidence %.2f below threshold %.2f",
                best.pattern_name,
                best.source.value,
                best.confidence,
                self._rules.confidence_threshold,
            )
            return None
        log.debug(
            "accepted %s match from %s with confidence %.2f",
            best.pattern_name,
            best.source.value,
            best.confidence,
        )
        return best

    def detect_in_text(
        self, text: str, source: Source, context: DetectionContext
    ) -> OTPResult | None:
        """Return the best candidate in a single field, ignoring the threshold."""

        best_code: str | None = None
        best_pattern: Pattern | None = None
        best_confidence = -1.0

        for pattern in self._patterns:
            raw = pattern.extract(text)
            if raw is None:
                continue
            code = validate_candidate(raw, pattern, text, self._blocked)
            if code is None:
                continue
            confidence = score_candidate(code, pattern.confidence, text, context, self._trusted)
            if confidence > best_confidence:
                best_code, best_pattern, best_confidence = code, pattern, confidence

        if best_code is None or best_pattern is None:
            return None
        return OTPResult(
            code=best_code,
            confidence=best_confidence,
            source=source,
            pattern_name=best_pattern.name,
            expires_at=self._now() + self._rules.expiry_duration,
        )


def detect_otp(
    subject: str,
    body: str,
    snippet: str,
    sender: str,
    rules: OTPRules | None = None,
) -> OTPResult | None:
    """Build a detector for ``rules`` and run it on one email."""

    detector = OTPDetector(rules)
    return detector.detect(
        DetectionContext(subject=subject, body=body, snippet=snippet, sender=sender)
    )


def is_plausible_code(code: str) -> bool:
    """Return ``True`` if ``code`` is 4 to 8 ASCII letters or digits."""

    return _PLAUSIBLE_RX.fullmatch(code) is not None


def get_detector(rules: OTPRules | None = None) -> OTPDetector:
    """Return an :class:`OTPDetector` instance."""

    return OTPDetector(rules)
