"""Confidence scoring and false-positive heuristics for OTP candidates.

All helpers are pure functions.  A raw capture is first checked by its
pattern's validator, then normalized, then screened by
:func:`is_likely_false_positive` and the configured blocked patterns.  Only
candidates that survive are scored:

1. start from the pattern's base confidence
2. ``+0.10`` if the sender contains a trusted sender entry
3. ``+0.10`` if the subject carries OTP context keywords
4. ``+0.05`` if the normalized code occurs more than once in the searched text
5. clamp to ``1.0``

The exclusion keywords and the repetition count both look at the whole
searched text rather than the sentence holding the candidate.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from .base import DetectionContext
from .patterns import Pattern

__all__ = [
    "OTP_CONTEXT_KEYWORDS",
    "FALSE_POSITIVE_KEYWORDS",
    "TRUSTED_SENDER_BOOST",
    "SUBJECT_CONTEXT_BOOST",
    "REPETITION_BOOST",
    "normalize_code",
    "has_otp_context",
    "contains_exclusion_keyword",
    "is_sequential",
    "is_repeating",
    "is_likely_false_positive",
    "is_trusted_sender",
    "score_candidate",
    "validate_candidate",
]

OTP_CONTEXT_KEYWORDS: tuple[str, ...] = (
    "otp",
    "code",
    "verification",
    "authenticate",
    "authentication",
    "2fa",
    "two-factor",
    "two factor",
    "security code",
    "access code",
    "confirmation code",
    "verify",
    "login code",
    "signin code",
)

FALSE_POSITIVE_KEYWORDS: tuple[str, ...] = (
    "invoice",
    "order",
    "transaction",
    "receipt",
    "reference",
    "confirmation",
    "tracking",
    "phone",
    "fax",
    "extension",
)

TRUSTED_SENDER_BOOST = 0.10
SUBJECT_CONTEXT_BOOST = 0.10
REPETITION_BOOST = 0.05

_MIN_PATTERN_LENGTH = 4
_SEPARATORS = str.maketrans("", "", "- _")


def normalize_code(raw: str) -> str:
    """Strip hyphens, spaces and underscores and uppercase the remainder."""

    return raw.translate(_SEPARATORS).strip().upper()


def has_otp_context(text: str) -> bool:
    """Return ``True`` when ``text`` mentions codes or verification."""

    lowered = text.lower()
    return any(keyword in lowered for keyword in OTP_CONTEXT_KEYWORDS)


def contains_exclusion_keyword(text: str) -> bool:
    """Return ``True`` when ``text`` looks like an invoice, order, phone, ..."""

    lowered = text.lower()
    return any(keyword in lowered for keyword in FALSE_POSITIVE_KEYWORDS)


def _steps(code: str) -> set[int]:
    return {ord(b) - ord(a) for a, b in zip(code, code[1:])}


def is_sequential(code: str) -> bool:
    """Return ``True`` for strictly ascending or descending runs like ``123456``."""

    if len(code) < _MIN_PATTERN_LENGTH:
        return False
    steps = _steps(code)
    return steps == {1} or steps == {-1}


def is_repeating(code: str) -> bool:
    """Return ``True`` for runs of one repeated character like ``111111``."""

    if len(code) < _MIN_PATTERN_LENGTH:
        return False
    return _steps(code) == {0}


def is_likely_false_positive(code: str, text: str) -> bool:
    """Return ``True`` if ``code`` found in ``text`` is unlikely to be an OTP."""

    return contains_exclusion_keyword(text) or is_sequential(code) or is_repeating(code)


def is_trusted_sender(sender: str, trusted_senders: Iterable[str]) -> bool:
    """Case-insensitive substring match of ``sender`` against trusted entries."""

    lowered = sender.lower()
    return any(entry and entry.lower() in lowered for entry in trusted_senders)


def score_candidate(
    code: str,
    base_confidence: float,
    text: str,
    context: DetectionContext,
    trusted_senders: Sequence[str],
) -> float:
    """Return the adjusted confidence of normalized ``code`` found in ``text``."""

    confidence = base_confidence
    if is_trusted_sender(context.sender, trusted_senders):
        confidence += TRUSTED_SENDER_BOOST
    if has_otp_context(context.subject):
        confidence += SUBJECT_CONTEXT_BOOST
    if text.upper().count(code) > 1:
        confidence += REPETITION_BOOST
    return round(min(confidence, 1.0), 6)


def validate_candidate(
    raw: str,
    pattern: Pattern,
    text: str,
    blocked: Sequence[re.Pattern[str]] = (),
) -> str | None:
    """Return the normalized code for ``raw`` or ``None`` if it is rejected."""

    if not pattern.validator(raw):
        return None
    code = normalize_code(raw)
    if not code:
        return None
    if is_likely_false_positive(code, text):
        return None
    if any(rx.search(code) for rx in blocked):
        return None
    return code
