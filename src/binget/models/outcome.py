from __future__ import annotations
from typing import Any
from pydantic import BaseModel, ConfigDict, Field
from ..binary.codecs.chunkview import ByteView

class RunOutcome(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    value: Any = None
    remaining: ByteView = Field(default_factory=ByteView.empty)
    bytes_read: int = Field(0, ge=0)
    chunks_fed: int = Field(0, ge=0)
