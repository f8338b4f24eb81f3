from __future__ import annotations


class MeetscribeError(RuntimeError):
    """Base for every failure the controller converts into a user-facing notice."""

    default_code = "error"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message


class ValidationError(MeetscribeError):
    """Local precondition failed; raised before any network boundary."""

    default_code = "validation"


class CapabilityUnavailableError(MeetscribeError):
    default_code = "capability_unavailable"


class DictationError(MeetscribeError):
    """Engine-reported failure; `code` carries the raw engine code."""

    default_code = "dictation"


class EngineBusyError(DictationError):
    default_code = "engine_busy"


class PermissionDeniedError(DictationError):
    default_code = "permission-denied"


class NoSpeechError(DictationError):
    default_code = "no-speech"


class AudioCaptureError(DictationError):
    default_code = "audio-capture"


class StoreError(MeetscribeError):
    """Note store failure; the backend message is passed through verbatim."""

    default_code = "store"


class EnrichmentError(MeetscribeError):
    default_code = "enrichment"
