import pytest

from binget.binary.codecs.bytestrings import (
    get_byte_string, get_lazy_byte_string, get_lazy_byte_string_nul,
    get_remaining_lazy_byte_string,
)
from binget.binary.errors import InsufficientInputError
from binget.binary.get import evaluate, skip
from binget.binary.result import Finished, Suspended


def test_byte_string_is_materialized():
    r = evaluate(get_byte_string(3), b"abcd")
    assert type(r.value) is bytes
    assert r.value == b"abc"


def test_lazy_byte_string_advances_per_chunk():
    r = evaluate(get_lazy_byte_string(5)).feed(b"ab")
    assert isinstance(r, Suspended)
    assert r.bytes_read == 2 and r.needed == 3

    r = r.feed(b"cd")
    assert r.bytes_read == 4

    r = r.feed(b"efg")
    assert isinstance(r, Finished)
    assert r.value == b"abcde"
    assert len(r.value.chunks()) == 3
    assert r.remaining == b"fg"


def test_lazy_byte_string_zero_and_short():
    assert evaluate(get_lazy_byte_string(0)).value == b""
    with pytest.raises(InsufficientInputError) as exc:
        evaluate(get_lazy_byte_string(4), b"ab").end_of_input()
    assert exc.value.bytes_read == 2
    assert exc.value.needed == 2


def test_nul_terminated():
    r = evaluate(get_lazy_byte_string_nul(), b"abc\x00rest")
    assert r.value == b"abc"
    assert r.remaining == b"rest"
    assert r.bytes_read == 4


def test_nul_terminated_across_chunks():
    r = evaluate(get_lazy_byte_string_nul()).feed(b"ab").feed(b"c").feed(b"\x00z")
    assert r.value == b"abc"
    assert r.remaining == b"z"


def test_nul_missing():
    with pytest.raises(InsufficientInputError):
        evaluate(get_lazy_byte_string_nul(), b"abc").end_of_input()


def test_remaining_lazy_byte_string():
    r = evaluate(skip(1).then(get_remaining_lazy_byte_string()), b"abc")
    assert isinstance(r, Suspended)
    r = r.feed(b"de").end_of_input()
    assert r.value == b"bcde"
    assert len(r.remaining) == 0
    assert r.bytes_read == 5
