from __future__ import annotations

from abc import ABC, abstractmethod

from .formatting import format_for_display


class TextEnrichmentService(ABC):
    @abstractmethod
    async def summarize(self, transcript: str) -> str: ...

    @abstractmethod
    async def extract_action_items(self, transcript: str) -> str: ...

    @abstractmethod
    def name(self) -> str: ...

    def format_for_display(self, raw_text: str) -> str:
        return format_for_display(raw_text)
