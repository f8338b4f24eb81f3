from __future__ import annotations

import logging
import os
from dataclasses import dataclass


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


def _getenv_choice(name: str, default: str, choices: set[str]) -> str:
    value = _getenv_str(name, default).strip().lower()
    if value not in choices:
        raise ValueError(f"{name} must be one of {sorted(choices)}, got {value!r}")
    return value


@dataclass(frozen=True)
class NotesConfig:
    MEETSCRIBE_DICTATION_LANGUAGE: str
    MEETSCRIBE_TRANSCRIPT_DELIMITER: str
    MEETSCRIBE_ENRICHMENT_BACKEND: str
    MEETSCRIBE_OPENAI_BASE_URL: str
    MEETSCRIBE_OPENAI_API_KEY: str
    MEETSCRIBE_OPENAI_MODEL: str
    MEETSCRIBE_ENRICHMENT_TIMEOUT_SEC: float
    MEETSCRIBE_ENRICHMENT_MAX_CHARS: int
    MEETSCRIBE_SUMMARY_MAX_CHARS: int
    MEETSCRIBE_LOG_LEVEL: str

    def external_enrichment_ready(self) -> bool:
        return self.MEETSCRIBE_ENRICHMENT_BACKEND == "openai" and bool(
            self.MEETSCRIBE_OPENAI_API_KEY.strip()
        )


def load_config() -> NotesConfig:
    return NotesConfig(
        MEETSCRIBE_DICTATION_LANGUAGE=_getenv_str("MEETSCRIBE_DICTATION_LANGUAGE", "km-KH"),
        # Delimiter is appended verbatim, whitespace included.
        MEETSCRIBE_TRANSCRIPT_DELIMITER=_getenv_str("MEETSCRIBE_TRANSCRIPT_DELIMITER", "។ "),
        MEETSCRIBE_ENRICHMENT_BACKEND=_getenv_choice(
            "MEETSCRIBE_ENRICHMENT_BACKEND", "local", {"local", "openai"}
        ),
        MEETSCRIBE_OPENAI_BASE_URL=_getenv_str(
            "MEETSCRIBE_OPENAI_BASE_URL", "https://api.openai.com"
        ),
        MEETSCRIBE_OPENAI_API_KEY=_getenv_str("MEETSCRIBE_OPENAI_API_KEY", ""),
        MEETSCRIBE_OPENAI_MODEL=_getenv_str("MEETSCRIBE_OPENAI_MODEL", "gpt-4o-mini"),
        MEETSCRIBE_ENRICHMENT_TIMEOUT_SEC=_getenv_float("MEETSCRIBE_ENRICHMENT_TIMEOUT_SEC", 30.0),
        MEETSCRIBE_ENRICHMENT_MAX_CHARS=_getenv_int("MEETSCRIBE_ENRICHMENT_MAX_CHARS", 20000),
        MEETSCRIBE_SUMMARY_MAX_CHARS=_getenv_int("MEETSCRIBE_SUMMARY_MAX_CHARS", 900),
        MEETSCRIBE_LOG_LEVEL=_getenv_str("MEETSCRIBE_LOG_LEVEL", "INFO"),
    )


def configure_logging(cfg: NotesConfig) -> None:
    level = getattr(logging, cfg.MEETSCRIBE_LOG_LEVEL.strip().upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
