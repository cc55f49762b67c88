"""Secure clipboard lifecycle for copied one-time passcodes.

:class:`SecureClipboard` is a two state machine (*idle* and *active*) guarding
the OS clipboard while it holds a code.  Every transition happens under one
lock:

``copy``
    Write the code to the OS clipboard.  Only after the write succeeded is any
    pending auto-clear cancelled, the previous secret zeroed and the new one
    stored.
``schedule_auto_clear``
    Arm a one-shot timer, replacing any pending one.  At most one timer is ever
    pending, so a burst of copies is cleared once, after the last delay.
``clear``
    Empty the clipboard and zero the stored secret, cancelling any timer.

Timers carry the copy generation they were armed for.  A timer that already
started running when a newer code was copied finds a different generation once
it acquires the lock and does nothing, so it can never clear the newer code
early.

Security notes
--------------
The code is kept in a :class:`bytearray` that is overwritten with zeros before
it is released.  Python ``str`` objects passed in by callers or handed to the
clipboard backend cannot be wiped, so zeroing is best effort.  Codes are never
logged.
"""

from __future__ import annotations

import atexit
import threading
from datetime import timedelta
from typing import Protocol

import pyperclip

from ..utils.durations import to_seconds
from ..utils.errors import ClipboardError, ClipboardWriteFailed
from ..utils.logging import get_logger

__all__ = [
    "ClipboardBackend",
    "SecureClipboard",
    "get_clipboard_manager",
    "secure_zero",
]

log = get_logger(__name__)


class ClipboardBackend(Protocol):
    """Minimal clipboard interface; the :mod:`pyperclip` module satisfies it."""

    def copy(self, text: str) -> None:
        ...

    def paste(self) -> str:
        ...


def secure_zero(buffer: bytearray) -> None:
    """Overwrite ``buffer`` with zeros in place."""

    buffer[:] = bytes(len(buffer))


class SecureClipboard:
    """Owns the OS clipboard while it holds a one-time passcode."""

    def __init__(self, backend: ClipboardBackend = pyperclip) -> None:
        self._backend = backend
        self._lock = threading.Lock()
        self._secret: bytearray | None = None
        self._active = False
        self._timer: threading.Timer | None = None
        self._delay = 0.0
        self._generation = 0
        self._failed_clear: ClipboardWriteFailed | None = None
        self._idle = threading.Event()
        self._idle.set()

    # ------------------------------------------------------------------
    def copy(self, code: str) -> None:
        """Copy ``code`` to the clipboard and mark the manager active.

        A pending auto-clear from an earlier copy is cancelled and re-armed
        with the same delay for this code.  Raises :class:`ClipboardWriteFailed`
        without changing any state when the OS write fails.
        """

        with self._lock:
            self._write(code)
            self._failed_clear = None
            pending = self._timer is not None
            self._cancel_timer()
            self._zero_secret()
            self._secret = bytearray(code.encode("utf-8"))
            self._active = True
            self._idle.clear()
            if pending:
                self._arm(self._delay)
        log.debug("copied code to clipboard")

    def schedule_auto_clear(self, duration: timedelta | float) -> None:
        """Clear the clipboard after ``duration`` unless a newer copy happens."""

        delay = max(0.0, to_seconds(duration))
        with self._lock:
            self._cancel_timer()
            self._arm(delay)
        log.debug("auto-clear scheduled in %.3fs", delay)

    def clear(self, *, force: bool = False) -> None:
        """Empty the clipboard and zero the stored code.

        Idle managers are left alone unless ``force`` is set.  The in-memory
        secret is zeroed even when the clipboard write fails, in which case
        :class:`ClipboardWriteFailed` is raised afterwards.
        """

        with self._lock:
            self._cancel_timer()
            if not (self._active or force):
                return
            try:
                self._write("")
                self._failed_clear = None
            finally:
                self._reset()

    def auto_clear_failure(self) -> ClipboardWriteFailed | None:
        """Return the error of the last auto-clear if its write failed.

        The code may still be on the OS clipboard in that case.  A later
        successful copy or clear resets it.
        """

        return self._failed_clear

    def is_active(self) -> bool:
        """Return ``True`` while a copied code may still be on the clipboard."""

        return self._active

    def read(self) -> str:
        """Return the current clipboard text."""

        try:
            return self._backend.paste()
        except pyperclip.PyperclipException as exc:
            raise ClipboardError(f"failed to read clipboard: {exc}") from exc

    def wait_until_idle(self, timeout: float | None = None) -> bool:
        """Block until the manager is idle; return ``False`` on timeout."""

        return self._idle.wait(timeout)

    def close(self) -> None:
        """Clear any held code; used when the process exits."""

        try:
            self.clear(force=self._failed_clear is not None)
        except ClipboardWriteFailed as exc:
            log.warning("clipboard could not be emptied on exit: %s", exc)

    # ------------------------------------------------------------------
    def _write(self, text: str) -> None:
        try:
            self._backend.copy(text)
        except (pyperclip.PyperclipException, OSError) as exc:
            raise ClipboardWriteFailed(f"failed to write clipboard: {exc}") from exc

    def _arm(self, delay: float) -> None:
        timer = threading.Timer(delay, self._auto_clear, args=(self._generation,))
        timer.daemon = True
        self._timer = timer
        self._delay = delay
        timer.start()

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _zero_secret(self) -> None:
        if self._secret is not None:
            secure_zero(self._secret)
            self._secret = None

    def _reset(self) -> None:
        self._zero_secret()
        self._active = False
        self._idle.set()

    def _auto_clear(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
            if not self._active:
                return
            try:
                self._write("")
            except ClipboardWriteFailed as exc:
                self._failed_clear = exc
                log.warning("auto-clear could not empty the clipboard: %s", exc)
            finally:
                self._reset()
        log.debug("auto-clear completed")


_manager: SecureClipboard | None = None
_manager_lock = threading.Lock()


def get_clipboard_manager() -> SecureClipboard:
    """Return the process-wide :class:`SecureClipboard`."""

    global _manager
    with _manager_lock:
        if _manager is None:
            _manager = SecureClipboard()
            atexit.register(_manager.close)
        return _manager
