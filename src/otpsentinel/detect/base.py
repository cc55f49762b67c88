"""Core detection model and protocol definitions.

This module defines the small immutable value types shared by the OTP
detector and its callers.  A :class:`DetectionContext` carries the text fields
of a single email; an :class:`OTPResult` is the detector's answer.  Neither
type holds a reference back to the detector, so results can be handed to
storage or the clipboard manager freely.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol, runtime_checkable


class Source(Enum):
    """Email field a code was found in.

    Declaration order is the fixed search order of the detector.
    """

    SUBJECT = "subject"
    SNIPPET = "snippet"
    BODY = "body"


SEARCH_ORDER: tuple[Source, ...] = tuple(Source)


@dataclass(slots=True, frozen=True)
class DetectionContext:
    """Text fields of one email supplied per detection request."""

    subject: str = ""
    body: str = ""
    snippet: str = ""
    sender: str = ""

    def text_for(self, source: Source) -> str:
        """Return the text of the field named by ``source``."""

        if source is Source.SUBJECT:
            return self.subject
        if source is Source.SNIPPET:
            return self.snippet
        return self.body


@dataclass(slots=True, frozen=True)
class OTPResult:
    """Detected one-time passcode.

    ``code`` is always normalized (separators removed, uppercased) and
    ``confidence`` must be between ``0`` and ``1``.
    """

    code: str
    confidence: float
    source: Source
    pattern_name: str
    expires_at: datetime

    def __post_init__(self) -> None:  # noqa: D401 - simple validation
        if not self.code:
            raise ValueError("code must not be empty")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0.0, 1.0]")

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` once ``now`` has reached ``expires_at``."""

        return now >= self.expires_at


@runtime_checkable
class CodeDetector(Protocol):
    """Protocol for OTP detectors."""

    def name(self) -> str:
        """Return a short, stable identifier for the detector."""

        ...

    def detect(self, context: DetectionContext) -> OTPResult | None:
        """Return the most likely code in ``context`` or ``None``."""

        ...
