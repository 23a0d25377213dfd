"""Placeholder provider used when no speech-to-text backend is configured."""

from typing import Optional

from models.transcript import TranscriptionResult
from services.errors import ProviderError
from services.transcription_providers.base import TranscriptionProvider


class UnconfiguredTranscriptionProvider(TranscriptionProvider):
    """Fails every request so the video ends in ERROR instead of fake captions."""

    def get_provider_name(self) -> str:
        return "none"

    def is_configured(self) -> bool:
        return False

    async def transcribe(self, audio_ref: str, language: Optional[str] = None) -> TranscriptionResult:
        raise ProviderError(
            "No transcription provider configured. Set OPENAI_API_KEY or TRANSCRIPTION_PROVIDER=local."
        )
