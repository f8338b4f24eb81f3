from __future__ import annotations

import datetime as _dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DictationState = Literal["idle", "listening", "unsupported"]

EnrichmentKind = Literal["summarize", "action_items"]

EnrichmentStatus = Literal["pending", "ready", "failed"]

NoteField = Literal["title", "attendees", "date", "transcript"]

ENRICHMENT_LABELS: dict[str, str] = {
    "summarize": "Meeting Summary",
    "action_items": "Action Items",
}


class NoteDraft(BaseModel):
    """Fields a client may write; id and timestamps belong to the store."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    attendees: str = ""
    date: _dt.date
    transcript: str = ""


class MeetingNote(BaseModel):
    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    user_id: str
    title: str = ""
    attendees: Optional[str] = None
    date: Optional[_dt.date] = None
    transcript: Optional[str] = None
    created_at: Optional[_dt.datetime] = None
    updated_at: Optional[_dt.datetime] = None


class EditorSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    note_id: Optional[str] = None
    title: str = ""
    attendees: str = ""
    date: _dt.date
    transcript: str = ""
    is_new: bool = True
    can_save: bool = False


class EnrichmentResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: EnrichmentKind
    label: str
    content: str = ""
    status: EnrichmentStatus = "pending"


class DictationSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    state: DictationState
    status_text: str
    language: str
