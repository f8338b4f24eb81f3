from __future__ import annotations

"""
Composition root for the dictation and note synchronization controller.

Design intent:
- Wire auth, notices, note sync, editor, enrichment and dictation into one
  explicit object; nothing lives in module globals.
- Pick the enrichment backend from configuration.
"""

import datetime as _dt
import logging
from typing import Callable, Optional

from meetscribe.dictation.base import DictationEngine
from meetscribe.dictation.session import DictationSession
from meetscribe.enrichment.base import TextEnrichmentService
from meetscribe.enrichment.controller import EnrichmentController
from meetscribe.enrichment.local import LocalExtractiveEnricher
from meetscribe.enrichment.openai_compat import OpenAICompatEnricher
from meetscribe.internal_core.auth import AuthProvider, AuthSession
from meetscribe.internal_core.config import NotesConfig
from meetscribe.internal_core.contracts import EnrichmentKind
from meetscribe.internal_core.note_store import NoteStore
from meetscribe.internal_core.notifications import NotificationSink
from meetscribe.note.editor import NoteEditorState, utc_today
from meetscribe.note.sync import NoteCollectionSync

logger = logging.getLogger(__name__)


def build_enrichment_service(cfg: NotesConfig) -> TextEnrichmentService:
    if cfg.MEETSCRIBE_ENRICHMENT_BACKEND == "openai":
        if cfg.external_enrichment_ready():
            return OpenAICompatEnricher(
                base_url=cfg.MEETSCRIBE_OPENAI_BASE_URL,
                api_key=cfg.MEETSCRIBE_OPENAI_API_KEY,
                model=cfg.MEETSCRIBE_OPENAI_MODEL,
                timeout_s=cfg.MEETSCRIBE_ENRICHMENT_TIMEOUT_SEC,
                max_chars=cfg.MEETSCRIBE_ENRICHMENT_MAX_CHARS,
            )
        logger.warning(
            "enrichment_backend_fallback requested=openai reason=missing MEETSCRIBE_OPENAI_API_KEY"
        )
    return LocalExtractiveEnricher(max_chars=cfg.MEETSCRIBE_SUMMARY_MAX_CHARS)


class MeetingNotesController:
    def __init__(
        self,
        cfg: NotesConfig,
        *,
        auth_provider: AuthProvider,
        store: NoteStore,
        service: TextEnrichmentService,
        engine: Optional[DictationEngine],
        today: Callable[[], _dt.date] = utc_today,
    ) -> None:
        self.cfg = cfg
        self.notices = NotificationSink()
        self.auth = AuthSession(auth_provider)
        self.sync = NoteCollectionSync(store, self.notices)
        self.enrichment = EnrichmentController(service, self.notices)
        self.editor = NoteEditorState(
            auth=self.auth,
            sync=self.sync,
            enrichment=self.enrichment,
            sink=self.notices,
            delimiter=cfg.MEETSCRIBE_TRANSCRIPT_DELIMITER,
            today=today,
        )
        self.dictation = DictationSession(
            engine,
            self.editor,
            self.notices,
            language=cfg.MEETSCRIBE_DICTATION_LANGUAGE,
        )
        self._detach_sync = self.sync.attach(self.auth)
        self.auth.start()

    async def enrich(self, kind: EnrichmentKind):
        return await self.enrichment.enrich(self.editor.transcript, kind)

    def close(self) -> None:
        self.dictation.teardown()
        self._detach_sync()
        self.sync.close()
        self.auth.close()
