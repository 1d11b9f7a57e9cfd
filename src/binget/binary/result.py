from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from .codecs.chunkview import ByteView, BytesChunk


@dataclass(frozen=True)
class Finished:
    """A computation that produced its value. ``remaining`` is the unconsumed input."""

    value: Any
    remaining: ByteView
    bytes_read: int

    @property
    def done(self) -> bool:
        return True


@dataclass(frozen=True)
class Suspended:
    """
    A computation waiting for input.

    The continuation is a plain value: feeding the same ``Suspended`` twice
    gives two independent results. ``needed`` is the byte count the stalled
    step asked for when it knows one.
    """

    continuation: Callable[[Optional[BytesChunk]], "Result"] = field(repr=False)
    bytes_read: int
    needed: Optional[int]
    buffered: int

    @property
    def done(self) -> bool:
        return False

    def feed(self, chunk: BytesChunk) -> "Result":
        """Append ``chunk`` to the buffer and retry the stalled step."""
        if chunk is None:
            raise TypeError("feed() needs a chunk; use end_of_input() to signal EOF")
        return self.continuation(chunk)

    def end_of_input(self) -> "Result":
        """
        Tell the computation no more chunks will arrive.
        Raises InsufficientInputError unless the stalled step accepts EOF.
        """
        return self.continuation(None)


Result = Union[Finished, Suspended]
