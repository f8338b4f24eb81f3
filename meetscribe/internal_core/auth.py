from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .errors import ValidationError

logger = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[str]], None]
Unsubscribe = Callable[[], None]


class AuthProvider(ABC):
    @abstractmethod
    def on_auth_change(self, callback: IdentityListener) -> Unsubscribe: ...


class InMemoryAuthProvider(AuthProvider):
    """Sign-in state held in process; new subscribers get the current identity."""

    def __init__(self, user_id: Optional[str] = None) -> None:
        self._user_id = user_id
        self._callbacks: list[IdentityListener] = []

    def on_auth_change(self, callback: IdentityListener) -> Unsubscribe:
        self._callbacks.append(callback)
        callback(self._user_id)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    def sign_in(self, user_id: str) -> None:
        user_id = (user_id or "").strip()
        if not user_id:
            raise ValueError("user_id is required")
        self._emit(user_id)

    def sign_out(self) -> None:
        self._emit(None)

    def _emit(self, user_id: Optional[str]) -> None:
        self._user_id = user_id
        for callback in list(self._callbacks):
            callback(user_id)


class AuthSession:
    def __init__(self, provider: AuthProvider) -> None:
        self._provider = provider
        self._identity: Optional[str] = None
        self._listeners: list[IdentityListener] = []
        self._unsubscribe: Optional[Unsubscribe] = None

    @property
    def identity(self) -> Optional[str]:
        return self._identity

    def start(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self._provider.on_auth_change(self._on_change)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def add_listener(self, listener: IdentityListener) -> Unsubscribe:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def require_identity(self) -> str:
        if not self._identity:
            raise ValidationError("You are not signed in. Please sign in and try again.", code="no_identity")
        return self._identity

    def _on_change(self, identity: Optional[str]) -> None:
        identity = identity or None
        if identity == self._identity:
            return
        logger.info("auth_changed signed_in=%s", identity is not None)
        self._identity = identity
        for listener in list(self._listeners):
            listener(identity)
