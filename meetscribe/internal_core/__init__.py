from .auth import AuthProvider, AuthSession, InMemoryAuthProvider
from .config import NotesConfig, load_config
from .note_store import InMemoryNoteStore, NoteStore
from .notifications import Notice, NotificationSink

__all__ = [
    "AuthProvider",
    "AuthSession",
    "InMemoryAuthProvider",
    "NotesConfig",
    "load_config",
    "InMemoryNoteStore",
    "NoteStore",
    "Notice",
    "NotificationSink",
]
