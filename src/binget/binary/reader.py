from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Optional, TypeVar, Union

from .codecs.chunkview import BytesChunk
from .errors import InsufficientInputError, ParseError
from .get import Get, evaluate
from .result import Finished, Result, Suspended
from binget.models.outcome import RunOutcome
from binget.models.settings import DecodeSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")

BytesLike = Union[str, Path, bytes, bytearray, memoryview, BinaryIO, Iterable[BytesChunk]]

__all__ = [
    "BytesLike", "InsufficientInputError", "ParseError",
    "feed", "iter_chunks", "run_get", "run_get_incremental", "run_get_state",
]


# -----------------------------
# Chunk sources
# -----------------------------

def _read_stream(fh: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    while True:
        block = fh.read(chunk_size)
        if not block:
            return
        yield block


def _iter_path(path: Path, chunk_size: int) -> Iterator[bytes]:
    with path.open("rb") as fh:
        yield from _read_stream(fh, chunk_size)


def iter_chunks(data: BytesLike, settings: Optional[DecodeSettings] = None) -> Iterator[BytesChunk]:
    """
    Turn ``data`` into a stream of non-empty chunks.

    In-memory buffers are passed through whole, or cut into zero-copy
    ``chunk_size`` slices when ``settings.split_buffers`` is set. Paths and
    binary file objects are read ``chunk_size`` bytes at a time. Anything
    else is taken to be an iterable of chunks already.
    """
    settings = settings or DecodeSettings()
    size = settings.chunk_size

    if isinstance(data, (bytes, bytearray, memoryview)):
        mv = memoryview(data)
        if not settings.split_buffers:
            chunks: Iterable[BytesChunk] = (mv,)
        else:
            chunks = (mv[i:i + size] for i in range(0, len(mv), size))
    elif isinstance(data, (str, Path)):
        chunks = _iter_path(Path(data), size)
    elif hasattr(data, "read"):
        chunks = _read_stream(data, size)
    else:
        chunks = data

    for chunk in chunks:
        if len(chunk):
            yield chunk


# -----------------------------
# Driving
# -----------------------------

def run_get_incremental(g: Get[T]) -> Result:
    """Start ``g`` on empty input; drive the returned result with ``feed`` or by hand."""
    return evaluate(g)


def feed(result: Result, chunks: Iterable[BytesChunk]) -> Result:
    """
    Feed ``chunks`` in order until ``result`` finishes or the chunks run
    out. End of input is not signalled, so the result may still be
    Suspended afterwards.
    """
    for chunk in chunks:
        if not len(chunk):
            continue
        if isinstance(result, Finished):
            raise ParseError("computation already finished; unconsumed chunk left over")
        result = result.feed(chunk)
    return result


def _drive(g: Get[T], data: BytesLike, settings: Optional[DecodeSettings], keep_rest: bool) -> RunOutcome:
    result = evaluate(g)
    fed = 0
    chunks = iter_chunks(data, settings)

    try:
        while isinstance(result, Suspended):
            chunk = next(chunks, None)
            if chunk is None:
                logger.debug("input exhausted after %d chunks, %d bytes read", fed, result.bytes_read)
                result = result.end_of_input()
                continue
            fed += 1
            result = result.feed(chunk)

        remaining = result.remaining
        if keep_rest:
            # the computation may finish before the source is drained
            for chunk in chunks:
                remaining = remaining.extend(chunk)
                fed += 1
    finally:
        chunks.close()

    logger.debug("finished after %d bytes (%d chunks, %d left over)", result.bytes_read, fed, len(remaining))
    return RunOutcome(value=result.value, remaining=remaining, bytes_read=result.bytes_read, chunks_fed=fed)


def run_get(g: Get[T], data: BytesLike, settings: Optional[DecodeSettings] = None) -> T:
    """
    Run ``g`` over all of ``data`` and return its value.
    Raises InsufficientInputError if the input ends first.
    """
    return _drive(g, data, settings, keep_rest=False).value


def run_get_state(g: Get[T], data: BytesLike, settings: Optional[DecodeSettings] = None) -> RunOutcome:
    """Like ``run_get`` but also reports the unconsumed input and byte/chunk counts."""
    return _drive(g, data, settings, keep_rest=True)
