from __future__ import annotations

"""
Dictation engine proxy for a browser-hosted recognizer.

Design intent:
- The browser owns the microphone and the recognizer; the server owns state.
- Start/stop become pending commands the client polls and acknowledges.
- Recognizer callbacks come back as typed events through `deliver`.
"""

from typing import Literal, Optional

from .base import DictationEngine, EngineEvent, EngineListener

RelayCommand = Literal["start", "stop"]


class RelayDictationEngine(DictationEngine):
    def __init__(self) -> None:
        self._listener: Optional[EngineListener] = None
        self.command: Optional[RelayCommand] = None
        self.command_seq = 0
        self.language = ""
        self.continuous = True
        self.interim_results = True

    def set_listener(self, listener: Optional[EngineListener]) -> None:
        self._listener = listener

    def start(self, *, language: str, continuous: bool = True, interim_results: bool = True) -> None:
        self.language = language
        self.continuous = continuous
        self.interim_results = interim_results
        self._issue("start")

    def stop(self) -> None:
        self._issue("stop")

    def name(self) -> str:
        return "relay"

    def deliver(self, event: EngineEvent) -> None:
        if self._listener is not None:
            self._listener(event)

    def _issue(self, command: RelayCommand) -> None:
        self.command = command
        self.command_seq += 1
