"""
Fixed-width unsigned integer decoders.

Every decoder takes exactly ``k`` bytes via ``get_bytes(k)`` and assembles
an unsigned int:

  big-endian     value = sum(b[i] << 8*(k-1-i))
  little-endian  value = sum(b[i] << 8*i)

Host-endian reads use the byte order of the machine running the decoder
(``sys.byteorder``), so their results are platform defined.
"""
from __future__ import annotations

import struct
from typing import Optional

from ..get import Get, get_bytes
from binget.models.settings import DecodeSettings

# native machine word, in bytes (8 on 64-bit interpreters)
HOST_WORD_SIZE = struct.calcsize("P")

_HOST_FORMATS = {1: "=B", 2: "=H", 4: "=I", 8: "=Q"}


def _unpack(fmt: str, n: int) -> Get[int]:
    return get_bytes(n).map(lambda view: struct.unpack(fmt, view.tobytes())[0])


def get_word8() -> Get[int]:
    return _unpack(">B", 1)


# big-endian
def get_word16be() -> Get[int]: return _unpack(">H", 2)
def get_word32be() -> Get[int]: return _unpack(">I", 4)
def get_word64be() -> Get[int]: return _unpack(">Q", 8)


# little-endian
def get_word16le() -> Get[int]: return _unpack("<H", 2)
def get_word32le() -> Get[int]: return _unpack("<I", 4)
def get_word64le() -> Get[int]: return _unpack("<Q", 8)


# host-endian, unaligned
def get_word16host() -> Get[int]: return _unpack("=H", 2)
def get_word32host() -> Get[int]: return _unpack("=I", 4)


def get_word64host(settings: Optional[DecodeSettings] = None) -> Get[int]:
    """
    A 64-bit word in host byte order. When ``settings.host_word_size`` is 4
    the value is built from two native 32-bit words (see
    ``get_word64host_split``).
    """
    size = settings.host_word_size if settings else HOST_WORD_SIZE
    if size == 4:
        return get_word64host_split()
    return _unpack("=Q", 8)


def get_word64host_split() -> Get[int]:
    """
    Two native 32-bit words composed as ``(high << 32) | low``. The first
    word read is ``high`` whatever the host byte order is.
    """
    return get_word32host().bind(
        lambda high: get_word32host().map(lambda low: (high << 32) | low)
    )


def get_wordhost(settings: Optional[DecodeSettings] = None) -> Get[int]:
    """One native machine word, ``settings.host_word_size`` bytes wide (pointer size by default)."""
    size = settings.host_word_size if settings else HOST_WORD_SIZE
    return _unpack(_HOST_FORMATS[size], size)
