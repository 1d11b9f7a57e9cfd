from __future__ import annotations

import re
from typing import Iterator, List, Optional, Tuple, Union

BytesChunk = Union[bytes, bytearray, memoryview]

# consumed chunks are dropped from an arena once they outnumber the live ones
_COMPACT_AT = 32


def as_chunk(chunk: BytesChunk) -> memoryview:
    if not isinstance(chunk, (bytes, bytearray, memoryview)):
        raise TypeError(f"expected a bytes-like chunk, got {type(chunk).__name__}")
    mv = memoryview(chunk)
    if mv.format != "B" or mv.ndim != 1:
        mv = mv.cast("B")
    return mv.toreadonly()


class ByteView:
    """
    Immutable view over a run of appended chunks.

    Chunks live in an append-only list (the arena) shared by every view cut
    from it. A view covers ``arena[start:end]``, beginning ``offset`` bytes
    into the first chunk and ending ``stop`` bytes into the last. Splitting
    only computes new indices. Extending a view that ends at the arena's
    tail appends in place; any other view is copied into a fresh arena
    first, so views never see each other's growth.
    """

    __slots__ = ("_arena", "_start", "_offset", "_end", "_stop", "_size")

    def __init__(self, arena: Optional[List[memoryview]] = None, start: int = 0, offset: int = 0,
                 end: int = 0, stop: int = 0, size: int = 0):
        self._arena = arena if arena is not None else []
        self._start = start
        self._offset = offset
        self._end = end
        self._stop = stop
        self._size = size

    @classmethod
    def empty(cls) -> "ByteView":
        return _EMPTY

    @classmethod
    def of(cls, data: BytesChunk) -> "ByteView":
        return _EMPTY.extend(data)

    @classmethod
    def concat(cls, views) -> "ByteView":
        """Join views end to end, sharing their chunks."""
        parts = [part for view in views for part in view.chunks()]
        if not parts:
            return _EMPTY
        return ByteView(parts, 0, 0, len(parts), len(parts[-1]), sum(len(p) for p in parts))

    # -----------------------------
    # Growth and splitting
    # -----------------------------

    def extend(self, chunk: BytesChunk) -> "ByteView":
        """Return a new view with ``chunk`` appended. Empty chunks are ignored."""
        mv = as_chunk(chunk)
        if not len(mv):
            return self
        size = self._size + len(mv)
        if not self._size:
            return ByteView([mv], 0, 0, 1, len(mv), size)

        arena = self._arena
        if self._end == len(arena) and self._stop == len(arena[-1]):
            start = self._start
            if start > _COMPACT_AT and start * 2 > len(arena):
                arena = arena[start:]
                start = 0
            arena.append(mv)
            return ByteView(arena, start, self._offset, len(arena), len(mv), size)

        live = list(self.chunks())
        live.append(mv)
        return ByteView(live, 0, 0, len(live), len(mv), size)

    def split(self, n: int) -> Tuple["ByteView", "ByteView"]:
        """
        Split into (first ``min(n, len)`` bytes, the rest).
        ``n <= 0`` gives an empty prefix and ``self`` as the suffix.
        """
        if n <= 0:
            return _EMPTY, self
        if n >= self._size:
            return self, _EMPTY

        arena = self._arena
        i = self._start
        pos = self._offset + n
        # n < size, so the cut lands before the view's own stop
        while pos >= len(arena[i]):
            pos -= len(arena[i])
            i += 1

        rest = self._size - n
        if pos:
            return (ByteView(arena, self._start, self._offset, i + 1, pos, n),
                    ByteView(arena, i, pos, self._end, self._stop, rest))
        return (ByteView(arena, self._start, self._offset, i, len(arena[i - 1]), n),
                ByteView(arena, i, 0, self._end, self._stop, rest))

    def take(self, n: int) -> "ByteView":
        return self.split(n)[0]

    def drop(self, n: int) -> "ByteView":
        return self.split(n)[1]

    # -----------------------------
    # Inspection
    # -----------------------------

    def chunks(self) -> Tuple[memoryview, ...]:
        """Covered chunk slices, zero copy."""
        if not self._size:
            return ()
        arena, s, e = self._arena, self._start, self._end
        if e - s == 1:
            return (arena[s][self._offset:self._stop],)
        first = arena[s][self._offset:] if self._offset else arena[s]
        last = arena[e - 1]
        if self._stop != len(last):
            last = last[:self._stop]
        return (first,) + tuple(arena[s + 1:e - 1]) + (last,)

    def tobytes(self) -> bytes:
        parts = self.chunks()
        if len(parts) == 1:
            return parts[0].tobytes()
        return b"".join(parts)

    def find(self, value: int) -> int:
        """Index of the first byte equal to ``value``, or -1. Searches the chunks in place."""
        pattern = re.compile(re.escape(bytes([value])))
        base = 0
        for part in self.chunks():
            m = pattern.search(part)
            if m:
                return base + m.start()
            base += len(part)
        return -1

    def __bytes__(self) -> bytes:
        return self.tobytes()

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __iter__(self) -> Iterator[int]:
        for part in self.chunks():
            yield from part

    def __getitem__(self, key):
        if isinstance(key, slice):
            start, stop, step = key.indices(self._size)
            if step != 1:
                return ByteView.of(self.tobytes()[key])
            return self.drop(start).take(max(0, stop - start))
        idx = key + self._size if key < 0 else key
        if not (0 <= idx < self._size):
            raise IndexError("ByteView index out of range")
        for part in self.chunks():
            if idx < len(part):
                return part[idx]
            idx -= len(part)
        raise IndexError("ByteView index out of range")

    def __eq__(self, other) -> bool:
        if isinstance(other, ByteView):
            return self._size == other._size and self.tobytes() == other.tobytes()
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.tobytes() == bytes(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.tobytes())

    def __repr__(self) -> str:
        return f"ByteView({self.tobytes()!r}, chunks={self._end - self._start})"


_EMPTY = ByteView()
