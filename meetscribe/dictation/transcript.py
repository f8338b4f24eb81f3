from __future__ import annotations

"""
Editing-session transcript buffer fed by incremental recognition results.

Design intent:
- Commit only engine-finalized text; interim hypotheses never reach the buffer.
- Append every committed chunk with the literal sentence delimiter.
- Let direct user edits replace the whole text at any time.
"""

from typing import Sequence

from .models import RecognitionResult


def collect_final_text(results: Sequence[RecognitionResult], resume_index: int = 0) -> str:
    """Concatenate final results from `resume_index` to the end, in order."""

    start = max(0, int(resume_index))
    parts: list[str] = []
    for result in results[start:]:
        if result.is_final:
            parts.append(result.best_transcript)
    return "".join(parts)


class TranscriptBuffer:
    def __init__(self, *, delimiter: str, text: str = "") -> None:
        self._delimiter = delimiter
        self._text = text

    @property
    def text(self) -> str:
        return self._text

    @property
    def delimiter(self) -> str:
        return self._delimiter

    def append_chunk(self, chunk: str) -> bool:
        if not (chunk or "").strip():
            return False
        self._text = f"{self._text}{chunk}{self._delimiter}"
        return True

    def replace(self, text: str) -> None:
        self._text = text or ""

    def clear(self) -> None:
        self._text = ""
