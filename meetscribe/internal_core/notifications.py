from __future__ import annotations

"""
Single-slot user notice surface shared by every controller component.

Design intent:
- Convert domain failures into one visible notice instead of raising to the UI.
- Keep confirmation actions inert until the user explicitly accepts them.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from .errors import MeetscribeError

logger = logging.getLogger(__name__)

ConfirmAction = Callable[[], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class Notice:
    title: str
    message: str
    is_confirmation: bool = False
    on_confirm: Optional[ConfirmAction] = None
    confirm_label: Optional[str] = None


NoticeListener = Callable[[Optional[Notice]], None]


class NotificationSink:
    def __init__(self) -> None:
        self._current: Optional[Notice] = None
        self._listeners: list[NoticeListener] = []

    @property
    def current(self) -> Optional[Notice]:
        return self._current

    def add_listener(self, listener: NoticeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def notify(self, title: str, message: str) -> Notice:
        notice = Notice(title=title, message=message)
        self._set(notice)
        return notice

    def confirm(
        self,
        title: str,
        message: str,
        on_confirm: ConfirmAction,
        confirm_label: str = "Confirm",
    ) -> Notice:
        notice = Notice(
            title=title,
            message=message,
            is_confirmation=True,
            on_confirm=on_confirm,
            confirm_label=confirm_label,
        )
        self._set(notice)
        return notice

    def report(self, error: MeetscribeError, title: str) -> Notice:
        logger.warning(
            "notice_error title=%s type=%s code=%s message=%s",
            title,
            type(error).__name__,
            error.code,
            error.message,
        )
        return self.notify(title, error.message)

    def dismiss(self) -> None:
        if self._current is not None:
            self._set(None)

    async def accept(self) -> bool:
        """
        Run the pending confirmation action, if any.

        The notice is cleared before the action runs so that the action can
        publish its own outcome notice. Returns True when an action ran.
        """

        notice = self._current
        if notice is None or not notice.is_confirmation or notice.on_confirm is None:
            self.dismiss()
            return False
        self._set(None)
        result = notice.on_confirm()
        if inspect.isawaitable(result):
            await result
        return True

    def _set(self, notice: Optional[Notice]) -> None:
        self._current = notice
        for listener in list(self._listeners):
            try:
                listener(notice)
            except Exception:
                # Presenter failures must never break controller flow.
                logger.exception("notice_listener_failed")
