from __future__ import annotations

"""
Single-flight orchestration of AI enrichment requests.

Design intent:
- Install a pending result immediately so the UI can show the label and a spinner.
- Tag every request with a generation token; a newer request, a note switch
  or a dictation restart makes older completions stale and they are dropped.
- Convert failures into a failed result plus one notice; never retry.
"""

import logging
from typing import Callable, Optional

from meetscribe.internal_core.contracts import ENRICHMENT_LABELS, EnrichmentKind, EnrichmentResult
from meetscribe.internal_core.errors import EnrichmentError, ValidationError
from meetscribe.internal_core.notifications import NotificationSink

from .base import TextEnrichmentService
from .formatting import error_fragment

logger = logging.getLogger(__name__)

ResultListener = Callable[[Optional[EnrichmentResult]], None]


class EnrichmentController:
    def __init__(self, service: TextEnrichmentService, sink: NotificationSink) -> None:
        self._service = service
        self._sink = sink
        self._generation = 0
        self._result: Optional[EnrichmentResult] = None
        self._listeners: list[ResultListener] = []

    @property
    def result(self) -> Optional[EnrichmentResult]:
        return self._result

    @property
    def is_loading(self) -> bool:
        return self._result is not None and self._result.status == "pending"

    @property
    def service_name(self) -> str:
        return self._service.name()

    def add_listener(self, listener: ResultListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def discard(self) -> None:
        self._generation += 1
        if self._result is not None:
            self._set(None)

    async def enrich(self, transcript: str, kind: EnrichmentKind) -> Optional[EnrichmentResult]:
        label = ENRICHMENT_LABELS.get(kind)
        if label is None:
            self._sink.report(
                ValidationError(f"Unsupported enrichment kind: {kind}", code="unknown_kind"),
                title="AI problem",
            )
            return None
        if not (transcript or "").strip():
            self._sink.report(
                ValidationError("Please enter the note text first.", code="empty_transcript"),
                title="Text required",
            )
            return None

        self._generation += 1
        token = self._generation
        self._set(EnrichmentResult(kind=kind, label=label, status="pending"))
        logger.info("enrichment_started kind=%s service=%s token=%s", kind, self._service.name(), token)

        call = self._service.summarize if kind == "summarize" else self._service.extract_action_items
        try:
            raw = await call(transcript)
        except Exception as exc:
            if token != self._generation:
                logger.debug("enrichment_stale_dropped kind=%s token=%s outcome=error", kind, token)
                return None
            error = exc if isinstance(exc, EnrichmentError) else EnrichmentError(str(exc) or type(exc).__name__)
            self._set(
                EnrichmentResult(
                    kind=kind, label=label, content=error_fragment(error.message), status="failed"
                )
            )
            self._sink.report(
                EnrichmentError(f"The AI service call failed: {error.message}", code=error.code),
                title="AI problem",
            )
            return self._result

        if token != self._generation:
            logger.debug("enrichment_stale_dropped kind=%s token=%s outcome=ok", kind, token)
            return None
        content = self._service.format_for_display(raw)
        self._set(EnrichmentResult(kind=kind, label=label, content=content, status="ready"))
        logger.info("enrichment_ready kind=%s token=%s chars=%s", kind, token, len(content))
        return self._result

    def _set(self, result: Optional[EnrichmentResult]) -> None:
        self._result = result
        for listener in list(self._listeners):
            listener(result)
