from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, List, NamedTuple, Optional, Tuple, TypeVar

from .codecs.chunkview import ByteView, BytesChunk, as_chunk
from .errors import InsufficientInputError
from .result import Finished, Result, Suspended

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class _State(NamedTuple):
    buffer: ByteView
    bytes_read: int
    eof: bool


# -----------------------------
# Computation nodes
# -----------------------------

class Get(Generic[T]):
    """
    An inert decoding computation yielding a ``T``.

    Nothing runs until the computation is handed to a driver
    (``binget.binary.reader``) or to ``evaluate``.
    """

    __slots__ = ()

    def bind(self, fn: Callable[[T], "Get[U]"]) -> "Get[U]":
        return _Bind(self, fn)

    def map(self, fn: Callable[[T], U]) -> "Get[U]":
        return _Bind(self, lambda value: _Pure(fn(value)))

    def then(self, nxt: "Get[U]") -> "Get[U]":
        return _Bind(self, lambda _: nxt)


class _Pure(Get):
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value

    def __repr__(self) -> str:
        return f"pure({self.value!r})"


class _Bind(Get):
    __slots__ = ("inner", "fn")

    def __init__(self, inner: Get, fn: Callable[[Any], Get]):
        self.inner = inner
        self.fn = fn

    def __repr__(self) -> str:
        return f"bind({self.inner!r}, {getattr(self.fn, '__name__', 'fn')})"


class _Prim(Get):
    """A primitive step. ``step`` returns ``(state, value)`` or ``None`` when it needs more input."""

    __slots__ = ("step", "name", "needed")

    def __init__(self, step: Callable[[_State], Optional[Tuple[_State, Any]]], name: str, needed: Optional[int] = None):
        self.step = step
        self.name = name
        self.needed = needed

    def __repr__(self) -> str:
        return self.name


class _Mark(Get):
    """Checkpoint, run ``inner``, then keep or roll back consumption depending on ``keep(value)``."""

    __slots__ = ("inner", "keep")

    def __init__(self, inner: Get, keep: Callable[[Any], bool]):
        self.inner = inner
        self.keep = keep

    def __repr__(self) -> str:
        return f"look_ahead({self.inner!r})"


# stack frames
class _Then(NamedTuple):
    fn: Callable[[Any], Get]


class _Restore(NamedTuple):
    buffer: ByteView
    bytes_read: int
    keep: Callable[[Any], bool]


# -----------------------------
# Evaluation
# -----------------------------
#
# The frame stack and the open checkpoints are persistent cons lists,
# ``(head, rest)`` tuples ending in ``None``, so a suspension captures them
# without copying. ``marks`` holds, for each open ``_Restore`` frame
# (innermost first), a view of the chunks fed since it was pushed.

def _run(node: Get, stack, marks, state: _State) -> Result:
    while True:
        while True:
            kind = type(node)
            if kind is _Bind:
                stack = (_Then(node.fn), stack)
                node = node.inner
            elif kind is _Mark:
                stack = (_Restore(state.buffer, state.bytes_read, node.keep), stack)
                marks = (ByteView.empty(), marks)
                node = node.inner
            else:
                break

        if kind is _Pure:
            value = node.value
        elif kind is _Prim:
            out = node.step(state)
            if out is None:
                if state.eof:
                    raise InsufficientInputError(state.bytes_read, node.needed, len(state.buffer))
                return _suspend(node, stack, marks, state)
            state, value = out
        else:
            raise TypeError(f"not a Get computation: {node!r}")

        while stack is not None:
            frame, stack = stack
            if type(frame) is _Then:
                node = frame.fn(value)
                break
            fed, marks = marks
            if not frame.keep(value):
                buffer = ByteView.concat((frame.buffer, fed)) if fed else frame.buffer
                state = _State(buffer, frame.bytes_read, state.eof)
        else:
            return Finished(value, state.buffer, state.bytes_read)


def _feed_marks(marks, chunk: memoryview):
    fed = []
    while marks is not None:
        view, marks = marks
        fed.append(view.extend(chunk))
    out = None
    for view in reversed(fed):
        out = (view, out)
    return out


def _suspend(node: _Prim, stack, marks, state: _State) -> Suspended:
    logger.debug("%s suspended after %d bytes (buffered %d)", node.name, state.bytes_read, len(state.buffer))

    def resume(chunk: Optional[BytesChunk]) -> Result:
        if chunk is None:
            logger.debug("%s resumed at end of input", node.name)
            return _run(node, stack, marks, state._replace(eof=True))
        mv = as_chunk(chunk)
        return _run(node, stack, _feed_marks(marks, mv), state._replace(buffer=state.buffer.extend(mv)))

    return Suspended(resume, bytes_read=state.bytes_read, needed=node.needed, buffered=len(state.buffer))


def evaluate(g: Get[T], initial: BytesChunk = b"") -> Result:
    """Start ``g`` over ``initial`` (usually empty) and run until it finishes or suspends."""
    return _run(g, None, None, _State(ByteView.of(initial), 0, False))


# -----------------------------
# Composition
# -----------------------------

def pure(value: T) -> Get[T]:
    return _Pure(value)


def bind(g: Get[T], fn: Callable[[T], Get[U]]) -> Get[U]:
    return _Bind(g, fn)


def fmap(fn: Callable[[T], U], g: Get[T]) -> Get[U]:
    return g.map(fn)


def sequence(gets: Iterable[Get[Any]]) -> Get[List[Any]]:
    """Run each computation in order, yielding the list of their values."""
    gets = tuple(gets)

    # values accumulate in an immutable cons list so a Suspended stays re-feedable
    def step(i: int, acc) -> Get:
        if i == len(gets):
            out = []
            while acc is not None:
                out.append(acc[0])
                acc = acc[1]
            out.reverse()
            return _Pure(out)
        return _Bind(gets[i], lambda value: step(i + 1, (value, acc)))

    return step(0, None)


def replicate(n: int, g: Get[T]) -> Get[List[T]]:
    return sequence([g] * n)


# -----------------------------
# Primitives
# -----------------------------

def get_bytes(n: int) -> Get[ByteView]:
    """
    The next ``n`` bytes as a zero-copy view. Suspends until that many
    bytes are buffered; the request may span any number of chunks.
    """
    if n < 0:
        raise ValueError(f"get_bytes: negative count {n}")
    if n == 0:
        return _Pure(ByteView.empty())

    def step(s: _State):
        if len(s.buffer) < n:
            return None
        head, rest = s.buffer.split(n)
        return _State(rest, s.bytes_read + n, s.eof), head

    return _Prim(step, f"get_bytes({n})", n)


def skip(n: int) -> Get[None]:
    return _Bind(get_bytes(n), _unit)


def _unit(_) -> Get[None]:
    return _Pure(None)


def bytes_read() -> Get[int]:
    """Bytes consumed since the computation began."""
    return _Prim(lambda s: (s, s.bytes_read), "bytes_read")


def buffered() -> Get[int]:
    """Bytes currently buffered. Never asks for input."""
    return _Prim(lambda s: (s, len(s.buffer)), "buffered")


def remaining() -> Get[int]:
    """
    Total unconsumed bytes in the stream.

    Waits for end of input, so every remaining chunk is pulled into memory
    first. Use ``buffered`` to stay streaming.
    """
    return _Prim(lambda s: (s, len(s.buffer)) if s.eof else None, "remaining")


def is_empty() -> Get[bool]:
    """True iff nothing is buffered and no more input will arrive. Consumes nothing."""

    def step(s: _State):
        if s.buffer:
            return s, False
        if s.eof:
            return s, True
        return None

    return _Prim(step, "is_empty")


def await_input(needed: Optional[int] = None) -> Get[None]:
    """Suspend until at least one byte is buffered."""
    return _Prim(lambda s: (s, None) if s.buffer else None, "await_input", needed)


def peek_buffer() -> Get[ByteView]:
    """Everything currently buffered, without consuming it."""
    return _Prim(lambda s: (s, s.buffer), "peek_buffer")


# -----------------------------
# Lookahead
# -----------------------------

@dataclass(frozen=True)
class Left(Generic[T]):
    value: T


@dataclass(frozen=True)
class Right(Generic[T]):
    value: T


def _never(_) -> bool:
    return False


def _present(value) -> bool:
    return value is not None


def _is_right(value) -> bool:
    return isinstance(value, Right)


def look_ahead(g: Get[T]) -> Get[T]:
    """Run ``g`` and hand back its value without consuming any input."""
    return _Mark(g, _never)


def look_ahead_m(g: Get[Optional[T]]) -> Get[Optional[T]]:
    """Run ``g``; keep its consumption if it yields a value, roll back on ``None``."""
    return _Mark(g, _present)


def look_ahead_e(g: Get[Any]) -> Get[Any]:
    """Run ``g``; keep its consumption on ``Right``, roll back on ``Left``."""
    return _Mark(g, _is_right)
