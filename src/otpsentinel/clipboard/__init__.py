"""Secure clipboard handling for copied one-time passcodes."""

from .secure import ClipboardBackend, SecureClipboard, get_clipboard_manager, secure_zero

__all__ = ["ClipboardBackend", "SecureClipboard", "get_clipboard_manager", "secure_zero"]
