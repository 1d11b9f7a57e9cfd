from __future__ import annotations
import struct
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field

class DecodeSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    chunk_size: int = Field(64 * 1024, ge=1)
    split_buffers: bool = False   # feed in-memory buffers as chunk_size pieces
    host_word_size: Literal[4, 8] = struct.calcsize("P")
