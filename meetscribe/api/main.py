from __future__ import annotations

"""
HTTP surface for the Meetscribe controller.

Design intent:
- Keep API orchestration thin: every endpoint is one controller command
  followed by a state read.
- Domain failures are already notices; endpoints return state, not errors,
  except for unknown note ids.
- The browser hosts the speech recognizer and relays its callbacks here.
"""

import datetime as _dt
import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from meetscribe.controller import MeetingNotesController, build_enrichment_service
from meetscribe.dictation.models import DictationEvent
from meetscribe.dictation.relay import RelayDictationEngine
from meetscribe.internal_core.auth import InMemoryAuthProvider
from meetscribe.internal_core.config import configure_logging, load_config
from meetscribe.internal_core.contracts import (
    DictationSnapshot,
    EditorSnapshot,
    EnrichmentKind,
    EnrichmentResult,
    MeetingNote,
    NoteField,
)
from meetscribe.internal_core.note_store import InMemoryNoteStore

_EDITOR_FIELDS: tuple[NoteField, ...] = ("title", "attendees", "date", "transcript")


class SignInRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=128)


class EditorPatchRequest(BaseModel):
    title: Optional[str] = None
    attendees: Optional[str] = None
    date: Optional[_dt.date] = None
    transcript: Optional[str] = None


class DictationEventRequest(BaseModel):
    event: DictationEvent


class EnrichRequest(BaseModel):
    kind: EnrichmentKind


class NoticePayload(BaseModel):
    title: str
    message: str
    is_confirmation: bool = False
    confirm_label: Optional[str] = None


class DictationStatusResponse(BaseModel):
    dictation: DictationSnapshot
    command: Optional[str] = None
    command_seq: int = 0


class ControllerStateResponse(BaseModel):
    user_id: Optional[str] = None
    editor: EditorSnapshot
    enrichment: Optional[EnrichmentResult] = None
    enrichment_loading: bool = False
    dictation: DictationSnapshot
    notice: Optional[NoticePayload] = None
    debug: dict[str, Any] = Field(default_factory=dict)


app = FastAPI(title="meetscribe service")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_controller() -> MeetingNotesController:
    existing = getattr(app.state, "controller", None)
    if isinstance(existing, MeetingNotesController):
        return existing
    cfg = load_config()
    configure_logging(cfg)
    auth_provider = InMemoryAuthProvider()
    created = MeetingNotesController(
        cfg,
        auth_provider=auth_provider,
        store=InMemoryNoteStore(),
        service=build_enrichment_service(cfg),
        engine=RelayDictationEngine(),
    )
    setattr(app.state, "auth_provider", auth_provider)
    setattr(app.state, "controller", created)
    return created


def _get_auth_provider() -> InMemoryAuthProvider:
    _get_controller()
    provider = getattr(app.state, "auth_provider", None)
    if not isinstance(provider, InMemoryAuthProvider):
        raise HTTPException(status_code=501, detail="Sign-in is managed by an external provider.")
    return provider


def _notice_payload(controller: MeetingNotesController) -> Optional[NoticePayload]:
    notice = controller.notices.current
    if notice is None:
        return None
    return NoticePayload(
        title=notice.title,
        message=notice.message,
        is_confirmation=notice.is_confirmation,
        confirm_label=notice.confirm_label,
    )


def _state(controller: MeetingNotesController) -> ControllerStateResponse:
    return ControllerStateResponse(
        user_id=controller.auth.identity,
        editor=controller.editor.snapshot(),
        enrichment=controller.enrichment.result,
        enrichment_loading=controller.enrichment.is_loading,
        dictation=controller.dictation.snapshot(),
        notice=_notice_payload(controller),
        debug={
            "notes_count": len(controller.sync.snapshot),
            "enrichment_service": controller.enrichment.service_name,
        },
    )


def _find_note_or_404(controller: MeetingNotesController, note_id: str) -> MeetingNote:
    note = controller.sync.find(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail=f"Note not found: {note_id}")
    return note


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/auth/sign-in", response_model=ControllerStateResponse)
async def auth_sign_in(payload: SignInRequest) -> ControllerStateResponse:
    try:
        _get_auth_provider().sign_in(payload.user_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _state(_get_controller())


@app.post("/auth/sign-out", response_model=ControllerStateResponse)
async def auth_sign_out() -> ControllerStateResponse:
    _get_auth_provider().sign_out()
    return _state(_get_controller())


@app.get("/notes", response_model=list[MeetingNote])
async def list_notes() -> list[MeetingNote]:
    return _get_controller().sync.snapshot


@app.get("/editor", response_model=ControllerStateResponse)
async def editor_state() -> ControllerStateResponse:
    return _state(_get_controller())


@app.patch("/editor", response_model=ControllerStateResponse)
async def editor_patch(payload: EditorPatchRequest) -> ControllerStateResponse:
    controller = _get_controller()
    for name in _EDITOR_FIELDS:
        if name in payload.model_fields_set:
            controller.editor.set_field(name, getattr(payload, name))
    return _state(controller)


@app.post("/editor/new", response_model=ControllerStateResponse)
async def editor_new() -> ControllerStateResponse:
    controller = _get_controller()
    controller.editor.new_note()
    return _state(controller)


@app.post("/editor/load/{note_id}", response_model=ControllerStateResponse)
async def editor_load(note_id: str) -> ControllerStateResponse:
    controller = _get_controller()
    controller.editor.load_note(_find_note_or_404(controller, note_id))
    return _state(controller)


@app.post("/editor/save", response_model=ControllerStateResponse)
async def editor_save() -> ControllerStateResponse:
    controller = _get_controller()
    await controller.editor.save()
    return _state(controller)


@app.post("/notes/{note_id}/delete", response_model=ControllerStateResponse)
async def note_delete(note_id: str) -> ControllerStateResponse:
    controller = _get_controller()
    _find_note_or_404(controller, note_id)
    controller.editor.delete(note_id)
    return _state(controller)


@app.get("/notification", response_model=Optional[NoticePayload])
async def notification_current() -> Optional[NoticePayload]:
    return _notice_payload(_get_controller())


@app.post("/notification/accept", response_model=ControllerStateResponse)
async def notification_accept() -> ControllerStateResponse:
    controller = _get_controller()
    await controller.notices.accept()
    return _state(controller)


@app.post("/notification/dismiss", response_model=ControllerStateResponse)
async def notification_dismiss() -> ControllerStateResponse:
    controller = _get_controller()
    controller.notices.dismiss()
    return _state(controller)


@app.post("/enrich", response_model=ControllerStateResponse)
async def enrich(payload: EnrichRequest) -> ControllerStateResponse:
    controller = _get_controller()
    await controller.enrich(payload.kind)
    return _state(controller)


@app.get("/enrichment", response_model=Optional[EnrichmentResult])
async def enrichment_current() -> Optional[EnrichmentResult]:
    return _get_controller().enrichment.result


def _dictation_status(controller: MeetingNotesController) -> DictationStatusResponse:
    engine = controller.dictation.engine
    if isinstance(engine, RelayDictationEngine):
        return DictationStatusResponse(
            dictation=controller.dictation.snapshot(),
            command=engine.command,
            command_seq=engine.command_seq,
        )
    return DictationStatusResponse(dictation=controller.dictation.snapshot())


@app.get("/dictation", response_model=DictationStatusResponse)
async def dictation_status() -> DictationStatusResponse:
    return _dictation_status(_get_controller())


@app.post("/dictation/start", response_model=DictationStatusResponse)
async def dictation_start() -> DictationStatusResponse:
    controller = _get_controller()
    controller.dictation.start()
    return _dictation_status(controller)


@app.post("/dictation/stop", response_model=DictationStatusResponse)
async def dictation_stop() -> DictationStatusResponse:
    controller = _get_controller()
    controller.dictation.stop()
    return _dictation_status(controller)


@app.post("/dictation/events", response_model=ControllerStateResponse)
async def dictation_event(payload: DictationEventRequest) -> ControllerStateResponse:
    controller = _get_controller()
    engine = controller.dictation.engine
    if isinstance(engine, RelayDictationEngine):
        engine.deliver(payload.event)
    else:
        logger.warning("dictation_event_ignored reason=engine_not_relayed type=%s", payload.event.type)
    return _state(controller)
