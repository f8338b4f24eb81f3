from __future__ import annotations

"""
In-progress meeting note owned by one editing session.

Design intent:
- Hold title/attendees/date/transcript plus the note identity (new vs saved).
- Keep the editor open after save; only "new note" and "load" replace it.
- Validate locally before any store call and report outcomes as notices.
"""

import datetime as _dt
import logging
from typing import Callable, Optional, Union

from meetscribe.dictation.transcript import TranscriptBuffer
from meetscribe.enrichment.controller import EnrichmentController
from meetscribe.internal_core.auth import AuthSession
from meetscribe.internal_core.contracts import EditorSnapshot, MeetingNote, NoteDraft, NoteField
from meetscribe.internal_core.errors import StoreError, ValidationError
from meetscribe.internal_core.notifications import NotificationSink
from meetscribe.note.sync import NoteCollectionSync

logger = logging.getLogger(__name__)

FieldValue = Union[str, _dt.date, None]


def utc_today() -> _dt.date:
    return _dt.datetime.now(_dt.timezone.utc).date()


def _coerce_date(value: FieldValue, fallback: _dt.date) -> _dt.date:
    if value is None or value == "":
        return fallback
    if isinstance(value, _dt.datetime):
        return value.date()
    if isinstance(value, _dt.date):
        return value
    try:
        return _dt.date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise ValidationError(f"Invalid date: {value}", code="invalid_date") from exc


def _as_store_error(exc: Exception) -> StoreError:
    return exc if isinstance(exc, StoreError) else StoreError(str(exc) or type(exc).__name__)


class NoteEditorState:
    def __init__(
        self,
        *,
        auth: AuthSession,
        sync: NoteCollectionSync,
        enrichment: EnrichmentController,
        sink: NotificationSink,
        delimiter: str,
        today: Callable[[], _dt.date] = utc_today,
    ) -> None:
        self._auth = auth
        self._sync = sync
        self._enrichment = enrichment
        self._sink = sink
        self._today = today
        self._transcript = TranscriptBuffer(delimiter=delimiter)
        self._note_id: Optional[str] = None
        self._title = ""
        self._attendees = ""
        self._date = today()
        # Bumped whenever the editor is replaced; a create that completes
        # afterwards must not attach its id to the replacement note.
        self._session = 0

    @property
    def note_id(self) -> Optional[str]:
        return self._note_id

    @property
    def title(self) -> str:
        return self._title

    @property
    def attendees(self) -> str:
        return self._attendees

    @property
    def date(self) -> _dt.date:
        return self._date

    @property
    def transcript(self) -> str:
        return self._transcript.text

    @property
    def can_save(self) -> bool:
        return bool(self._auth.identity) and bool(self._title.strip())

    def snapshot(self) -> EditorSnapshot:
        return EditorSnapshot(
            note_id=self._note_id,
            title=self._title,
            attendees=self._attendees,
            date=self._date,
            transcript=self._transcript.text,
            is_new=self._note_id is None,
            can_save=self.can_save,
        )

    def new_note(self) -> None:
        self._session += 1
        self._note_id = None
        self._title = ""
        self._attendees = ""
        self._date = self._today()
        self._transcript.clear()
        self._enrichment.discard()

    def load_note(self, note: MeetingNote) -> None:
        self.new_note()
        self._note_id = note.id
        self._title = note.title or ""
        self._attendees = note.attendees or ""
        self._date = note.date or self._today()
        self._transcript.replace(note.transcript or "")
        logger.info("note_loaded note_id=%s", note.id)

    def set_field(self, name: NoteField, value: FieldValue) -> bool:
        try:
            if name == "title":
                self._title = str(value or "")
            elif name == "attendees":
                self._attendees = str(value or "")
            elif name == "date":
                self._date = _coerce_date(value, self._today())
            elif name == "transcript":
                self._transcript.replace(str(value or ""))
            else:
                raise ValidationError(f"Unknown note field: {name}", code="unknown_field")
        except ValidationError as exc:
            self._sink.report(exc, title="Invalid input")
            return False
        return True

    def begin_dictation(self) -> None:
        self._transcript.clear()
        self._enrichment.discard()

    def append_transcript(self, chunk: str) -> bool:
        return self._transcript.append_chunk(chunk)

    async def save(self) -> Optional[str]:
        """
        Create or update the open note.

        Returns the note id on success, None when validation or the store
        failed (a notice has been issued in both cases).
        """

        try:
            identity = self._auth.require_identity()
        except ValidationError as exc:
            self._sink.report(exc, title="Cannot save")
            return None
        title = self._title.strip()
        if not title:
            self._sink.report(
                ValidationError("Please enter a title for your note.", code="missing_title"),
                title="Title required",
            )
            return None

        draft = NoteDraft(
            user_id=identity,
            title=title,
            attendees=self._attendees.strip(),
            date=self._date,
            transcript=self._transcript.text.strip(),
        )
        note_id = self._note_id
        created = note_id is None
        session = self._session
        try:
            if note_id is not None:
                await self._sync.update(note_id, draft)
            else:
                note_id = await self._sync.create(draft)
        except Exception as exc:
            error = _as_store_error(exc)
            self._sink.report(
                StoreError(f"Could not save the note: {error.message}", code=error.code),
                title="Save failed",
            )
            return None

        if created:
            if session == self._session:
                self._note_id = note_id
            else:
                logger.info("note_created_after_editor_reset note_id=%s", note_id)
            self._sink.notify("Saved", "Your note was saved successfully.")
        else:
            self._sink.notify("Updated", "Your note was updated successfully.")
        logger.info("note_saved note_id=%s", note_id)
        return note_id

    def delete(self, note_id: Optional[str] = None) -> bool:
        """Ask for confirmation; the delete runs only when the notice is accepted."""

        try:
            self._auth.require_identity()
            target = note_id or self._note_id
            if not target:
                raise ValidationError("There is no saved note to delete.", code="no_note")
        except ValidationError as exc:
            self._sink.report(exc, title="Cannot delete")
            return False

        async def _confirmed() -> None:
            await self._perform_delete(target)

        self._sink.confirm(
            "Confirm delete",
            "Are you sure you want to delete this note? This cannot be undone.",
            on_confirm=_confirmed,
            confirm_label="Delete",
        )
        return True

    async def _perform_delete(self, note_id: str) -> None:
        # Identity may have been lost while the confirmation was open.
        try:
            self._auth.require_identity()
        except ValidationError as exc:
            self._sink.report(exc, title="Cannot delete")
            return
        try:
            await self._sync.delete(note_id)
        except Exception as exc:
            error = _as_store_error(exc)
            self._sink.report(
                StoreError(f"Could not delete the note: {error.message}", code=error.code),
                title="Delete failed",
            )
            return
        logger.info("note_deleted note_id=%s", note_id)
        self._sink.notify("Deleted", "The note was deleted successfully.")
        if self._note_id == note_id:
            self.new_note()
