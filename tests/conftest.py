from __future__ import annotations

import threading

import pyperclip
import pytest

from otpsentinel.clipboard.secure import SecureClipboard


class FakeClipboard:
    """In-memory stand-in for the OS clipboard."""

    def __init__(self) -> None:
        self.content = ""
        self.writes: list[str] = []
        self.fail_writes = False
        self._lock = threading.Lock()

    def copy(self, text: str) -> None:
        if self.fail_writes:
            raise pyperclip.PyperclipException("clipboard unavailable")
        with self._lock:
            self.writes.append(text)
            self.content = text

    def paste(self) -> str:
        return self.content


@pytest.fixture
def fake_backend() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def manager(fake_backend: FakeClipboard):
    mgr = SecureClipboard(fake_backend)
    yield mgr
    fake_backend.fail_writes = False
    mgr.clear()
