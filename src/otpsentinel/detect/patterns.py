"""Built-in and user supplied OTP patterns.

Patterns span a confidence spectrum.  Keyword anchored matches such as
``your verification code is 451829`` start at ``0.90`` while bare digit runs,
which are common in invoices and tracking numbers, start at ``0.50`` to
``0.60``.  Each pattern carries a :class:`Validator` describing how the raw
capture is checked before scoring.  Validators are a tagged variant rather than
bare callables so that patterns remain comparable and printable.

Custom patterns from :class:`~otpsentinel.config.OTPRules` are compiled when a
detector is constructed; a pattern that fails to compile raises
:class:`~otpsentinel.utils.errors.InvalidPattern` instead of being skipped.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from ..config.schema import OTPRules
from ..utils.errors import InvalidPattern

__all__ = [
    "ValidatorKind",
    "Validator",
    "Pattern",
    "builtin_patterns",
    "compile_custom_pattern",
    "compile_blocked_patterns",
    "build_registry",
]


class ValidatorKind(Enum):
    """Kinds of checks applied to a raw capture."""

    NONE = "none"
    NUMERIC = "numeric"
    ALPHANUMERIC = "alphanumeric"
    CUSTOM = "custom"


@dataclass(slots=True, frozen=True)
class Validator:
    """Check applied to the raw captured substring of a pattern."""

    kind: ValidatorKind = ValidatorKind.NONE
    predicate: Callable[[str], bool] | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.kind is ValidatorKind.CUSTOM and self.predicate is None:
            raise ValueError("custom validators require a predicate")
        if self.kind is not ValidatorKind.CUSTOM and self.predicate is not None:
            raise ValueError("only custom validators take a predicate")

    @classmethod
    def none(cls) -> "Validator":
        return cls(ValidatorKind.NONE)

    @classmethod
    def numeric(cls) -> "Validator":
        return cls(ValidatorKind.NUMERIC)

    @classmethod
    def alphanumeric(cls) -> "Validator":
        return cls(ValidatorKind.ALPHANUMERIC)

    @classmethod
    def custom(cls, predicate: Callable[[str], bool]) -> "Validator":
        return cls(ValidatorKind.CUSTOM, predicate)

    def __call__(self, raw: str) -> bool:
        if self.kind is ValidatorKind.NONE:
            return True
        if self.kind is ValidatorKind.NUMERIC:
            return bool(raw) and raw.isascii() and raw.isdigit()
        if self.kind is ValidatorKind.ALPHANUMERIC:
            return bool(raw) and raw.isascii() and raw.isalnum()
        if self.predicate is None:
            return False
        return bool(self.predicate(raw))


@dataclass(slots=True, frozen=True)
class Pattern:
    """A named regular expression with a base confidence."""

    name: str
    regex: re.Pattern[str]
    confidence: float
    capture_group: int = 1
    validator: Validator = field(default_factory=Validator.none)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError("confidence must be within [0.0, 1.0]")
        if not 0 <= self.capture_group <= self.regex.groups:
            raise ValueError(
                f"pattern {self.name!r} has no capture group {self.capture_group}"
            )

    def extract(self, text: str) -> str | None:
        """Return the capture of the first match in ``text``, if any."""

        match = self.regex.search(text)
        if match is None:
            return None
        return match.group(self.capture_group)


def _builtin(name: str, regex: str, confidence: float, validator: Validator) -> Pattern:
    return Pattern(name, re.compile(regex, re.ASCII), confidence, 1, validator)


def builtin_patterns() -> list[Pattern]:
    """Return the built-in patterns in match priority order."""

    numeric = Validator.numeric()
    alnum = Validator.alphanumeric()
    return [
        # High confidence patterns with context keywords
        _builtin("code_keyword_6digit", r"(?i)(?:code|otp|token|pin)[\s:]*(\d{6})", 0.85, numeric),
        _builtin(
            "your_code_is",
            r"(?i)your\s+(?:code|otp|token|verification code|pin)\s+(?:is|:)[\s:]*([A-Z0-9]{4,8})",
            0.90,
            alnum,
        ),
        _builtin("verification_code", r"(?i)verification\s+code[\s:]*(\d{6})", 0.85, numeric),
        _builtin("use_code", r"(?i)use\s+(?:code|otp)[\s:]*([A-Z0-9]{4,8})", 0.80, alnum),
        _builtin("code_in_quotes", r"[\"']([0-9]{6})[\"']", 0.75, numeric),
        # Bare runs
        _builtin("8_digit_numeric", r"\b(\d{8})\b", 0.50, numeric),
        _builtin("6_digit_numeric", r"\b(\d{6})\b", 0.60, numeric),
        _builtin("6_char_alphanumeric", r"\b([A-Z0-9]{6})\b", 0.55, alnum),
        # Short or separated codes
        _builtin("4_digit_pin", r"(?i)(?:pin|code)[\s:]*(\d{4})\b", 0.70, numeric),
        _builtin("hyphenated_code", r"\b(\d{3}-\d{3})\b", 0.65, Validator.none()),
    ]


def compile_custom_pattern(name: str, pattern: str, confidence: float) -> Pattern:
    """Compile a user pattern whose first group captures the code.

    Like the built-ins, ``\\d``, ``\\w`` and ``\\b`` only match ASCII.
    """

    try:
        regex = re.compile(pattern, re.ASCII)
    except re.error as exc:
        raise InvalidPattern(name, str(exc)) from exc
    if regex.groups < 1:
        raise InvalidPattern(name, "pattern must define a capture group")
    try:
        return Pattern(name, regex, confidence)
    except ValueError as exc:
        raise InvalidPattern(name, str(exc)) from exc


def compile_blocked_patterns(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    """Compile blocked code patterns."""

    compiled: list[re.Pattern[str]] = []
    for raw in patterns:
        try:
            compiled.append(re.compile(raw, re.ASCII))
        except re.error as exc:
            raise InvalidPattern(raw, str(exc)) from exc
    return compiled


def build_registry(rules: OTPRules) -> tuple[Pattern, ...]:
    """Return built-in patterns followed by the compiled custom patterns."""

    registry = builtin_patterns()
    for custom in rules.custom_patterns:
        registry.append(compile_custom_pattern(custom.name, custom.pattern, custom.confidence))
    return tuple(registry)
