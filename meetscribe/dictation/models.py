from __future__ import annotations

"""
Typed dictation engine events.

Design intent:
- Model engine callbacks as a closed set of messages fed to one state machine.
- Keep the same payload shape for in-process engines and browser relays.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class RecognitionAlternative(BaseModel):
    transcript: str = ""
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)


class RecognitionResult(BaseModel):
    is_final: bool = False
    alternatives: list[RecognitionAlternative] = Field(default_factory=list)

    @property
    def best_transcript(self) -> str:
        if not self.alternatives:
            return ""
        return self.alternatives[0].transcript


class EngineStarted(BaseModel):
    type: Literal["start"] = "start"


class EngineEnded(BaseModel):
    type: Literal["end"] = "end"


class EngineResult(BaseModel):
    type: Literal["result"] = "result"
    result_index: int = Field(default=0, ge=0)
    results: list[RecognitionResult] = Field(default_factory=list)


class EngineFailed(BaseModel):
    type: Literal["error"] = "error"
    error: str = Field(min_length=1)


DictationEvent = Annotated[
    Union[EngineStarted, EngineEnded, EngineResult, EngineFailed],
    Field(discriminator="type"),
]
