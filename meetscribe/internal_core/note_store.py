from __future__ import annotations

import datetime as _dt
import logging
import uuid
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Callable, Dict, List

from .contracts import MeetingNote, NoteDraft
from .errors import StoreError

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[MeetingNote]], None]
ErrorCallback = Callable[[StoreError], None]
Unsubscribe = Callable[[], None]


def _now() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc)


class NoteStore(ABC):
    """Remote note persistence with a live per-user subscription."""

    @abstractmethod
    def subscribe(
        self, identity: str, on_snapshot: SnapshotCallback, on_error: ErrorCallback
    ) -> Unsubscribe: ...

    @abstractmethod
    async def create(self, draft: NoteDraft) -> str: ...

    @abstractmethod
    async def update(self, note_id: str, changes: NoteDraft) -> None: ...

    @abstractmethod
    async def delete(self, note_id: str) -> None: ...


class InMemoryNoteStore(NoteStore):
    def __init__(self) -> None:
        self._lock = RLock()
        self._notes: Dict[str, Dict[str, Any]] = {}
        self._subscribers: Dict[str, List[SnapshotCallback]] = {}
        self._seq = 0

    def subscribe(
        self, identity: str, on_snapshot: SnapshotCallback, on_error: ErrorCallback
    ) -> Unsubscribe:
        if not identity:
            raise StoreError("Missing user id for note subscription.")
        with self._lock:
            self._subscribers.setdefault(identity, []).append(on_snapshot)
            snapshot = self._snapshot_for(identity)

        def _unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(identity, [])
                if on_snapshot in callbacks:
                    callbacks.remove(on_snapshot)

        on_snapshot(snapshot)
        return _unsubscribe

    async def create(self, draft: NoteDraft) -> str:
        note_id = uuid.uuid4().hex
        now = _now()
        with self._lock:
            self._seq += 1
            self._notes[note_id] = {
                "note": MeetingNote(
                    id=note_id,
                    user_id=draft.user_id,
                    title=draft.title,
                    attendees=draft.attendees,
                    date=draft.date,
                    transcript=draft.transcript,
                    created_at=now,
                    updated_at=now,
                ),
                "seq": self._seq,
            }
        self._publish(draft.user_id)
        return note_id

    async def update(self, note_id: str, changes: NoteDraft) -> None:
        with self._lock:
            record = self._notes.get(note_id)
            if record is None:
                raise StoreError(f"No note to update: {note_id}")
            current: MeetingNote = record["note"]
            if current.user_id != changes.user_id:
                raise StoreError("A note cannot be moved to another user.")
            self._seq += 1
            record["note"] = current.model_copy(
                update={
                    "title": changes.title,
                    "attendees": changes.attendees,
                    "date": changes.date,
                    "transcript": changes.transcript,
                    "updated_at": _now(),
                }
            )
            record["seq"] = self._seq
        self._publish(changes.user_id)

    async def delete(self, note_id: str) -> None:
        with self._lock:
            record = self._notes.pop(note_id, None)
        if record is None:
            return
        self._publish(record["note"].user_id)

    def get(self, note_id: str) -> MeetingNote:
        with self._lock:
            record = self._notes.get(note_id)
            if record is None:
                raise KeyError(f"Unknown note_id: {note_id}")
            return record["note"]

    def _snapshot_for(self, identity: str) -> List[MeetingNote]:
        records = [item for item in self._notes.values() if item["note"].user_id == identity]
        records.sort(key=lambda item: item["seq"], reverse=True)
        return [item["note"] for item in records]

    def _publish(self, identity: str) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(identity, []))
            snapshot = self._snapshot_for(identity)
        for callback in callbacks:
            try:
                callback(list(snapshot))
            except Exception:
                logger.exception("note_snapshot_callback_failed user_id=%s", identity)
