from __future__ import annotations

"""
Offline enrichment used when no external model is configured.

Design intent:
- Produce useful, deterministic output without any network call.
- Summaries are extractive (leading sentences); action items come from
  commitment cue phrases.
"""

import re

from .base import TextEnrichmentService

# Latin sentence punctuation plus the Khmer khan (U+17D4) and bariyoosan (U+17D5).
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?។៕])\s*")
_ACTION_CUE_RE = re.compile(
    r"\b(will|should|must|need to|needs to|to do|todo|action|follow up|follow-up|assign(?:ed)?|deadline|by (?:monday|tuesday|wednesday|thursday|friday|tomorrow|next week))\b",
    flags=re.IGNORECASE,
)


def split_sentences(text: str) -> list[str]:
    normalized = " ".join((text or "").split()).strip()
    if not normalized:
        return []
    return [part.strip() for part in _SENTENCE_SPLIT_RE.split(normalized) if part.strip()]


class LocalExtractiveEnricher(TextEnrichmentService):
    def __init__(self, *, max_chars: int = 900, max_sentences: int = 3) -> None:
        self.max_chars = max_chars
        self.max_sentences = max_sentences

    async def summarize(self, transcript: str) -> str:
        sentences = split_sentences(transcript)
        summary = " ".join(sentences[: self.max_sentences]).strip()
        return summary[: self.max_chars].rstrip()

    async def extract_action_items(self, transcript: str) -> str:
        items = [s for s in split_sentences(transcript) if _ACTION_CUE_RE.search(s)]
        if not items:
            return "No action items found."
        return "\n".join(f"* {item}" for item in items)

    def name(self) -> str:
        return "local:extractive"
