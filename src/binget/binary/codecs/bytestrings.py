from __future__ import annotations

from ..get import Get, await_input, get_bytes, is_empty, peek_buffer, pure, skip
from .chunkview import ByteView


def get_byte_string(n: int) -> Get[bytes]:
    """``n`` bytes copied out into a ``bytes`` object."""
    return get_bytes(n).map(ByteView.tobytes)


def _collect(acc) -> ByteView:
    parts = []
    while acc is not None:
        parts.append(acc[0])
        acc = acc[1]
    parts.reverse()
    return ByteView.concat(parts)


def get_lazy_byte_string(n: int) -> Get[ByteView]:
    """
    ``n`` bytes as a multi-chunk view. Unlike ``get_bytes`` this consumes
    whatever is buffered before waiting, so the cursor advances chunk by
    chunk and nothing is held back for a single large split.
    """
    if n < 0:
        raise ValueError(f"get_lazy_byte_string: negative count {n}")

    def loop(left: int, acc) -> Get[ByteView]:
        if left == 0:
            return pure(_collect(acc))

        def step(buf: ByteView) -> Get[ByteView]:
            if len(buf) >= left:
                return get_bytes(left).map(lambda part: _collect((part, acc)))
            if not buf:
                return await_input(left).then(loop(left, acc))
            return get_bytes(len(buf)).bind(lambda part: loop(left - len(part), (part, acc)))

        return peek_buffer().bind(step)

    return loop(n, None)


def get_lazy_byte_string_nul() -> Get[ByteView]:
    """Bytes up to the next NUL. The NUL is consumed but not returned."""

    def loop(acc) -> Get[ByteView]:
        def step(buf: ByteView) -> Get[ByteView]:
            idx = buf.find(0)
            if idx >= 0:
                return get_bytes(idx).bind(lambda part: skip(1).then(pure(_collect((part, acc)))))
            if not buf:
                return await_input(1).then(loop(acc))
            return get_bytes(len(buf)).bind(lambda part: loop((part, acc)))

        return peek_buffer().bind(step)

    return loop(None)


def get_remaining_lazy_byte_string() -> Get[ByteView]:
    """Everything left in the stream; completes at end of input."""

    def loop(acc) -> Get[ByteView]:
        def step(buf: ByteView) -> Get[ByteView]:
            if buf:
                return get_bytes(len(buf)).bind(lambda part: loop((part, acc)))
            return is_empty().bind(lambda done: pure(_collect(acc)) if done else loop(acc))

        return peek_buffer().bind(step)

    return loop(None)
