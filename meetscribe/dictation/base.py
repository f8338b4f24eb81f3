from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional, Union

from .models import EngineEnded, EngineFailed, EngineResult, EngineStarted

EngineEvent = Union[EngineStarted, EngineEnded, EngineResult, EngineFailed]
EngineListener = Callable[[EngineEvent], None]


class DictationEngine(ABC):
    """
    Continuous speech-to-text capability.

    `start` raises `DictationError` (or any exception) when capture cannot
    begin; results and lifecycle changes arrive later through the listener.
    """

    @abstractmethod
    def set_listener(self, listener: Optional[EngineListener]) -> None: ...

    @abstractmethod
    def start(self, *, language: str, continuous: bool = True, interim_results: bool = True) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...

    @abstractmethod
    def name(self) -> str: ...
