"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
An empty string means the bounded wait expired without input.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x03": "CTRL_C",
    b"\x12": "CTRL_R",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_CSI_FINAL_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}

_CSI_TILDE_KEYS: dict[bytes, str] = {
    b"1": "HOME",
    b"7": "HOME",
    b"4": "END",
    b"8": "END",
    b"5": "PAGE_UP",
    b"6": "PAGE_DOWN",
}


class KeyReader:
    """Decode key tokens from a file descriptor, keeping unread bytes."""

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self._pending: list[bytes] = []

    def _read_ready_byte(self, timeout_ms: int) -> bytes | None:
        if self._pending:
            return self._pending.pop(0)
        ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
        ch = os.read(self.fd, 1)
        return ch or None

    def _read_utf8_tail(self, lead: bytes) -> str:
        first = lead[0]
        if first >= 0xF0:
            extra = 3
        elif first >= 0xE0:
            extra = 2
        elif first >= 0xC0:
            extra = 1
        else:
            extra = 0
        raw = lead
        for _ in range(extra):
            nxt = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if nxt is None:
                break
            raw += nxt
        return raw.decode("utf-8", errors="replace")

    def read_key(self, timeout_ms: int | None = None) -> str:
        """Return the next key token, or ``""`` when ``timeout_ms`` expires."""
        if self._pending:
            ch = self._pending.pop(0)
        else:
            if timeout_ms is not None:
                ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
                if not ready:
                    return ""
            ch = os.read(self.fd, 1)
            if not ch:
                return ""

        token = _CONTROL_KEYS.get(ch)
        if token is not None:
            return token
        if ch != b"\x1b":
            return self._read_utf8_tail(ch)

        seq = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return "ESC"
        if seq not in {b"[", b"O"}:
            self._pending.append(seq)
            return "ESC"
        final = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        token = _CSI_FINAL_KEYS.get(final)
        if token is not None:
            return token
        token = _CSI_TILDE_KEYS.get(final)
        if token is not None:
            tail = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if tail == b"~":
                return token
        return "ESC"


__all__ = ["ESC_SEQUENCE_TIMEOUT_MS", "KeyReader"]
