from __future__ import annotations

"""
Speech-capture session state machine.

Design intent:
- Keep one explicit state record (idle/listening/unsupported) per editor.
- Process engine callbacks one at a time, in arrival order.
- Report every engine failure as a notice and always fall back to idle.
"""

import logging
from collections import deque
from typing import Deque, Optional, Protocol

from meetscribe.dictation.base import DictationEngine, EngineEvent
from meetscribe.dictation.models import EngineEnded, EngineFailed, EngineResult, EngineStarted
from meetscribe.dictation.transcript import collect_final_text
from meetscribe.internal_core.contracts import DictationSnapshot, DictationState
from meetscribe.internal_core.errors import (
    AudioCaptureError,
    CapabilityUnavailableError,
    DictationError,
    EngineBusyError,
    NoSpeechError,
    PermissionDeniedError,
)
from meetscribe.internal_core.notifications import NotificationSink

logger = logging.getLogger(__name__)

STATUS_IDLE = "Press the button to start dictation."
STATUS_LISTENING = "Listening..."
STATUS_UNSUPPORTED = "Speech recognition is not available."

_PERMISSION_MESSAGE = (
    "The app cannot access the microphone. Allow this site to use your microphone "
    "in the browser settings. You may need to reload the page after granting access."
)

_ENGINE_ERRORS: dict[str, tuple[type[DictationError], str]] = {
    "not-allowed": (PermissionDeniedError, _PERMISSION_MESSAGE),
    "permission-denied": (PermissionDeniedError, _PERMISSION_MESSAGE),
    "no-speech": (NoSpeechError, "No speech was detected. Please try again."),
    "audio-capture": (
        AudioCaptureError,
        "Audio capture failed. Make sure your microphone is working properly.",
    ),
}


def map_engine_error(code: str) -> DictationError:
    entry = _ENGINE_ERRORS.get(code)
    if entry is None:
        return DictationError(f"Speech recognition problem: {code}", code=code)
    error_cls, message = entry
    return error_cls(message, code=code)


class TranscriptTarget(Protocol):
    def begin_dictation(self) -> None: ...

    def append_transcript(self, chunk: str) -> bool: ...


class DictationSession:
    def __init__(
        self,
        engine: Optional[DictationEngine],
        target: TranscriptTarget,
        sink: NotificationSink,
        *,
        language: str,
    ) -> None:
        self._engine = engine
        self._target = target
        self._sink = sink
        self._language = language
        self._pending: Deque[EngineEvent] = deque()
        self._dispatching = False
        # Set between a user stop and the engine's end event; final results
        # arriving in that window are still committed.
        self._draining = False
        if engine is None:
            self._state: DictationState = "unsupported"
            self._sink.report(
                CapabilityUnavailableError(
                    "Sorry! Your browser does not support speech-to-text."
                ),
                title="Browser not supported",
            )
        else:
            self._state = "idle"
            engine.set_listener(self.handle)

    @property
    def engine(self) -> Optional[DictationEngine]:
        return self._engine

    @property
    def state(self) -> DictationState:
        return self._state

    @property
    def status_text(self) -> str:
        if self._state == "listening":
            return STATUS_LISTENING
        if self._state == "unsupported":
            return STATUS_UNSUPPORTED
        return STATUS_IDLE

    def snapshot(self) -> DictationSnapshot:
        return DictationSnapshot(
            state=self._state, status_text=self.status_text, language=self._language
        )

    def start(self) -> bool:
        if self._engine is None:
            self._sink.report(
                CapabilityUnavailableError(
                    "Speech recognition is not available in this browser.",
                ),
                title="Feature unavailable",
            )
            return False
        if self._state == "listening":
            logger.debug("dictation_start_ignored state=listening")
            return True

        self._target.begin_dictation()
        # Listening before the call so synchronous engine callbacks see it.
        self._state = "listening"
        self._draining = False
        try:
            self._engine.start(language=self._language, continuous=True, interim_results=True)
        except PermissionDeniedError as exc:
            self._state = "idle"
            self._sink.report(exc, title="Could not start recording")
            return False
        except Exception as exc:
            self._state = "idle"
            reason = exc.message if isinstance(exc, DictationError) else str(exc)
            self._sink.report(
                EngineBusyError(
                    f"Could not start recording: {reason}. "
                    "Make sure no other application is using the microphone."
                ),
                title="Could not start recording",
            )
            return False

        logger.info("dictation_started engine=%s language=%s", self._engine.name(), self._language)
        return True

    def stop(self) -> None:
        if self._engine is None:
            return
        if self._state != "listening" and not self._draining:
            return
        self._state = "idle"
        self._draining = True
        self._stop_engine(self._engine)

    def toggle(self) -> bool:
        if self._state == "listening":
            self.stop()
            return False
        return self.start()

    def teardown(self) -> None:
        if self._engine is None:
            return
        if self._state == "listening" or self._draining:
            self._stop_engine(self._engine)
        self._state = "idle"
        self._draining = False
        self._pending.clear()
        self._engine.set_listener(None)

    def handle(self, event: EngineEvent) -> None:
        self._pending.append(event)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                self._dispatch(self._pending.popleft())
        finally:
            self._dispatching = False

    def _dispatch(self, event: EngineEvent) -> None:
        if self._state == "unsupported":
            return
        if isinstance(event, EngineStarted):
            if self._draining:
                logger.debug("dictation_engine_start_ignored reason=stop_requested")
                return
            self._state = "listening"
        elif isinstance(event, EngineEnded):
            self._state = "idle"
            self._draining = False
            logger.info("dictation_ended")
        elif isinstance(event, EngineResult):
            self._on_result(event)
        elif isinstance(event, EngineFailed):
            error = map_engine_error(event.error)
            self._state = "idle"
            self._draining = False
            self._sink.report(error, title="Speech recognition problem")

    def _on_result(self, event: EngineResult) -> None:
        if self._state != "listening" and not self._draining:
            logger.debug("dictation_result_dropped state=%s", self._state)
            return
        chunk = collect_final_text(event.results, event.result_index)
        if self._target.append_transcript(chunk):
            logger.debug("dictation_chunk_committed chars=%s", len(chunk))

    def _stop_engine(self, engine: DictationEngine) -> None:
        try:
            engine.stop()
        except Exception as exc:
            # The engine may already be stopping; the state machine stays idle.
            logger.warning("dictation_stop_failed engine=%s error=%s", engine.name(), exc)
