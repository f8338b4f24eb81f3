from __future__ import annotations

from typing import Optional, Sequence

from .base import DictationEngine, EngineEvent, EngineListener
from .models import (
    EngineEnded,
    EngineFailed,
    EngineResult,
    EngineStarted,
    RecognitionAlternative,
    RecognitionResult,
)


class MockDictationEngine(DictationEngine):
    """Scriptable in-process engine; tests drive callbacks explicitly."""

    def __init__(self, *, start_error: Optional[BaseException] = None) -> None:
        self.start_error = start_error
        self.start_calls: list[dict[str, object]] = []
        self.stop_calls = 0
        self._listener: Optional[EngineListener] = None

    def set_listener(self, listener: Optional[EngineListener]) -> None:
        self._listener = listener

    def start(self, *, language: str, continuous: bool = True, interim_results: bool = True) -> None:
        self.start_calls.append(
            {"language": language, "continuous": continuous, "interim_results": interim_results}
        )
        if self.start_error is not None:
            raise self.start_error

    def stop(self) -> None:
        self.stop_calls += 1

    def name(self) -> str:
        return "mock"

    def emit(self, event: EngineEvent) -> None:
        if self._listener is not None:
            self._listener(event)

    def emit_started(self) -> None:
        self.emit(EngineStarted())

    def emit_ended(self) -> None:
        self.emit(EngineEnded())

    def emit_error(self, code: str) -> None:
        self.emit(EngineFailed(error=code))

    def emit_results(self, results: Sequence[tuple[str, bool]], *, result_index: int = 0) -> None:
        self.emit(
            EngineResult(
                result_index=result_index,
                results=[
                    RecognitionResult(
                        is_final=is_final,
                        alternatives=[RecognitionAlternative(transcript=text)],
                    )
                    for text, is_final in results
                ],
            )
        )
