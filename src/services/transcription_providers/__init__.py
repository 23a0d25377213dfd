"""Speech-to-text providers for the caption pipeline."""

from services.transcription_providers.base import SUPPORTED_LANGUAGES, TranscriptionProvider
from services.transcription_providers.local_whisper import LocalWhisperProvider
from services.transcription_providers.openai_whisper import OpenAIWhisperProvider, estimate_cost
from services.transcription_providers.unconfigured import UnconfiguredTranscriptionProvider

__all__ = [
    "TranscriptionProvider",
    "OpenAIWhisperProvider",
    "LocalWhisperProvider",
    "UnconfiguredTranscriptionProvider",
    "SUPPORTED_LANGUAGES",
    "estimate_cost",
]
