"""Typed exceptions for rule validation, pattern compilation and the clipboard."""


class OTPSentinelError(Exception):
    """Base class for all package errors."""


class ConfigurationError(OTPSentinelError, ValueError):
    """Base class for errors raised while building a detector."""


class InvalidRules(ConfigurationError):
    """Raised when thresholds or durations are out of range."""


class InvalidPattern(ConfigurationError):
    """Raised when a custom or blocked pattern fails to compile."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"invalid pattern {name!r}: {reason}")
        self.name = name
        self.reason = reason


class ClipboardError(OTPSentinelError, RuntimeError):
    """Base class for OS clipboard failures."""


class ClipboardWriteFailed(ClipboardError):
    """Raised when the OS clipboard rejects a write."""
