from __future__ import annotations

"""
Keep the signed-in user's note collection current from a live subscription.

Design intent:
- Replace the local snapshot wholesale on every delivery, preserving store order.
- Drop deliveries from subscriptions that were already torn down.
- Pass create/update/delete straight through; callers translate failures.
"""

import logging
from typing import Callable, List, Optional

from meetscribe.internal_core.auth import AuthSession
from meetscribe.internal_core.contracts import MeetingNote, NoteDraft
from meetscribe.internal_core.errors import StoreError
from meetscribe.internal_core.note_store import NoteStore, Unsubscribe
from meetscribe.internal_core.notifications import NotificationSink

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[List[MeetingNote]], None]


class NoteCollectionSync:
    def __init__(self, store: NoteStore, sink: NotificationSink) -> None:
        self._store = store
        self._sink = sink
        self._identity: Optional[str] = None
        self._unsubscribe: Optional[Unsubscribe] = None
        self._generation = 0
        self._snapshot: tuple[MeetingNote, ...] = ()
        self._listeners: list[SnapshotListener] = []

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    @property
    def snapshot(self) -> List[MeetingNote]:
        return list(self._snapshot)

    def add_listener(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def attach(self, auth: AuthSession) -> Callable[[], None]:
        remove = auth.add_listener(self.set_identity)
        self.set_identity(auth.identity)
        return remove

    def find(self, note_id: str) -> Optional[MeetingNote]:
        for note in self._snapshot:
            if note.id == note_id:
                return note
        return None

    def set_identity(self, identity: Optional[str]) -> None:
        identity = identity or None
        if identity == self._identity:
            return
        self._teardown()
        self._identity = identity
        if self._snapshot:
            self._replace([])
        if identity is None:
            return

        self._generation += 1
        token = self._generation

        def _on_snapshot(notes: List[MeetingNote]) -> None:
            if token != self._generation:
                logger.debug("note_snapshot_stale_dropped token=%s", token)
                return
            self._replace(notes)

        def _on_error(exc: Exception) -> None:
            if token != self._generation:
                return
            self._report_subscription_error(exc)

        try:
            self._unsubscribe = self._store.subscribe(identity, _on_snapshot, _on_error)
        except Exception as exc:
            self._report_subscription_error(exc)

    def close(self) -> None:
        self._teardown()

    async def create(self, draft: NoteDraft) -> str:
        return await self._store.create(draft)

    async def update(self, note_id: str, changes: NoteDraft) -> None:
        await self._store.update(note_id, changes)

    async def delete(self, note_id: str) -> None:
        await self._store.delete(note_id)

    def _teardown(self) -> None:
        # Invalidate callbacks of the current subscription before unsubscribing.
        self._generation += 1
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            try:
                unsubscribe()
            except Exception as exc:
                logger.warning("note_unsubscribe_failed error=%s", exc)

    def _replace(self, notes: List[MeetingNote]) -> None:
        self._snapshot = tuple(notes)
        logger.debug("note_snapshot_replaced count=%s", len(self._snapshot))
        for listener in list(self._listeners):
            listener(list(self._snapshot))

    def _report_subscription_error(self, exc: Exception) -> None:
        message = exc.message if isinstance(exc, StoreError) else str(exc)
        self._sink.report(
            StoreError(f"Could not load your notes: {message}", code="subscription"),
            title="Problem loading notes",
        )
