import asyncio
import datetime as _dt
from typing import Optional

import pytest

from meetscribe.controller import MeetingNotesController
from meetscribe.dictation.mock import MockDictationEngine
from meetscribe.enrichment.base import TextEnrichmentService
from meetscribe.internal_core.auth import InMemoryAuthProvider
from meetscribe.internal_core.config import NotesConfig
from meetscribe.internal_core.contracts import NoteDraft
from meetscribe.internal_core.note_store import InMemoryNoteStore

TODAY = _dt.date(2024, 5, 6)

_UNSET = object()


class RecordingNoteStore(InMemoryNoteStore):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, object]] = []
        self.fail_with: Optional[Exception] = None

    async def create(self, draft: NoteDraft) -> str:
        self.calls.append(("create", draft))
        if self.fail_with is not None:
            raise self.fail_with
        return await super().create(draft)

    async def update(self, note_id: str, changes: NoteDraft) -> None:
        self.calls.append(("update", (note_id, changes)))
        if self.fail_with is not None:
            raise self.fail_with
        await super().update(note_id, changes)

    async def delete(self, note_id: str) -> None:
        self.calls.append(("delete", note_id))
        if self.fail_with is not None:
            raise self.fail_with
        await super().delete(note_id)


class ScriptedEnricher(TextEnrichmentService):
    """Each call parks on a future the test resolves, unless `reply` is set."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.pending: list[asyncio.Future] = []
        self.reply: Optional[str] = None

    async def summarize(self, transcript: str) -> str:
        return await self._call("summarize", transcript)

    async def extract_action_items(self, transcript: str) -> str:
        return await self._call("action_items", transcript)

    def name(self) -> str:
        return "scripted"

    async def _call(self, kind: str, transcript: str) -> str:
        self.calls.append((kind, transcript))
        if self.reply is not None:
            return self.reply
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


@pytest.fixture
def cfg() -> NotesConfig:
    return NotesConfig(
        MEETSCRIBE_DICTATION_LANGUAGE="km-KH",
        MEETSCRIBE_TRANSCRIPT_DELIMITER="។ ",
        MEETSCRIBE_ENRICHMENT_BACKEND="local",
        MEETSCRIBE_OPENAI_BASE_URL="https://api.openai.com",
        MEETSCRIBE_OPENAI_API_KEY="",
        MEETSCRIBE_OPENAI_MODEL="gpt-4o-mini",
        MEETSCRIBE_ENRICHMENT_TIMEOUT_SEC=30.0,
        MEETSCRIBE_ENRICHMENT_MAX_CHARS=20000,
        MEETSCRIBE_SUMMARY_MAX_CHARS=900,
        MEETSCRIBE_LOG_LEVEL="INFO",
    )


@pytest.fixture
def store() -> RecordingNoteStore:
    return RecordingNoteStore()


@pytest.fixture
def enricher() -> ScriptedEnricher:
    return ScriptedEnricher()


@pytest.fixture
def engine() -> MockDictationEngine:
    return MockDictationEngine()


@pytest.fixture
def make_controller(cfg, store, enricher, engine):
    created: list[MeetingNotesController] = []

    def _make(*, user_id: Optional[str] = "user_1", engine_override=_UNSET, auth_provider=None):
        provider = auth_provider or InMemoryAuthProvider(user_id)
        controller = MeetingNotesController(
            cfg,
            auth_provider=provider,
            store=store,
            service=enricher,
            engine=engine if engine_override is _UNSET else engine_override,
            today=lambda: TODAY,
        )
        created.append(controller)
        return controller

    yield _make
    for controller in created:
        controller.close()


@pytest.fixture
def today() -> _dt.date:
    return TODAY
