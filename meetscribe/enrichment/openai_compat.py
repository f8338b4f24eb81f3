from __future__ import annotations

"""
OpenAI-compatible chat-completions enrichment service.

Design intent:
- Keep the HTTP call small and fail closed: any transport, status or payload
  problem becomes an EnrichmentError with a short human-readable message.
- Cap the transcript sent upstream.
"""

import logging
from typing import Any

import httpx

from meetscribe.internal_core.errors import EnrichmentError

from .base import TextEnrichmentService

logger = logging.getLogger(__name__)

SUMMARY_PROMPT = (
    "You summarize meeting transcripts. Reply in the language of the transcript. "
    "Write a short overview paragraph followed by the key points as a bullet list."
)
ACTION_ITEMS_PROMPT = (
    "You extract action items from meeting transcripts. Reply in the language of the "
    "transcript. Return a bullet list; each item names the task, the owner if mentioned "
    "and the deadline if mentioned. If there are none, say so in one sentence."
)


def _join_base(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + "/" + path.lstrip("/")


class OpenAICompatEnricher(TextEnrichmentService):
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        model: str,
        timeout_s: float = 30.0,
        max_chars: int = 20000,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.api_key = api_key
        self.model = model
        self.timeout_s = timeout_s
        self.max_chars = max_chars
        self._transport = transport

    async def summarize(self, transcript: str) -> str:
        return await self._complete(SUMMARY_PROMPT, transcript)

    async def extract_action_items(self, transcript: str) -> str:
        return await self._complete(ACTION_ITEMS_PROMPT, transcript)

    def name(self) -> str:
        return f"external:openai:{self.model}"

    async def _complete(self, system_prompt: str, transcript: str) -> str:
        url = _join_base(self.base_url, "/v1/chat/completions")
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": transcript[: self.max_chars]},
            ],
            "temperature": 0.2,
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                resp = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("enrichment_request_failed model=%s error=%s", self.model, exc)
            raise EnrichmentError("The AI service could not be reached.", code="external_request_failed") from exc

        if resp.status_code >= 400:
            raise EnrichmentError(
                f"The AI service returned HTTP {resp.status_code}.",
                code=f"external_http_{resp.status_code}",
            )

        try:
            data = resp.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise EnrichmentError(
                "The AI service returned an unexpected response.", code="external_bad_response"
            ) from exc
        if not isinstance(content, str):
            raise EnrichmentError(
                "The AI service returned an unexpected response.", code="external_bad_response"
            )
        return content
