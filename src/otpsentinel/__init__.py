"""Verification-code detection for email notifications.

The package finds the most likely one-time passcode in the text of an email,
scores how confident it is, and can place the code on the OS clipboard for a
bounded time before wiping it again.
"""

from .clipboard import SecureClipboard, get_clipboard_manager
from .config import OTPRules, default_rules, load_rules
from .detect import DetectionContext, OTPDetector, OTPResult, Source, detect_otp

__version__ = "0.1.0"

__all__ = [
    "DetectionContext",
    "OTPDetector",
    "OTPResult",
    "OTPRules",
    "SecureClipboard",
    "Source",
    "default_rules",
    "detect_otp",
    "get_clipboard_manager",
    "load_rules",
    "__version__",
]
