from __future__ import annotations

from typing import Optional


class ParseError(ValueError):
    pass


class InsufficientInputError(ParseError):
    """Input ran out before a decoder had the bytes it asked for."""

    def __init__(self, bytes_read: int, needed: Optional[int] = None, available: int = 0):
        self.bytes_read = bytes_read
        self.needed = needed
        self.available = available
        if needed is None:
            msg = f"input exhausted after {bytes_read} bytes"
        else:
            msg = f"input exhausted after {bytes_read} bytes: need {needed}, have {available}"
        super().__init__(msg)
