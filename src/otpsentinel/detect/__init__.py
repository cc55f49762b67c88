"""OTP detection: value types, pattern registry, scoring and the detector."""

from .base import CodeDetector, DetectionContext, OTPResult, Source
from .otp import OTPDetector, detect_otp, get_detector, is_plausible_code
from .patterns import Pattern, Validator, ValidatorKind, build_registry, builtin_patterns
from .scoring import is_likely_false_positive, normalize_code, score_candidate

__all__ = [
    "CodeDetector",
    "DetectionContext",
    "OTPResult",
    "Source",
    "OTPDetector",
    "detect_otp",
    "get_detector",
    "is_plausible_code",
    "Pattern",
    "Validator",
    "ValidatorKind",
    "build_registry",
    "builtin_patterns",
    "is_likely_false_positive",
    "normalize_code",
    "score_candidate",
]
