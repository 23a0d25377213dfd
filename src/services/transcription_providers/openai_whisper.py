"""OpenAI Whisper API transcription provider."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import aiohttp

from models.transcript import TranscriptionResult, TranscriptionSegment
from services.errors import ProviderError
from services.transcription_providers.base import (
    TranscriptionProvider,
    language_hint,
    normalize_language,
)
from utils.retry import APIRateLimitError, NetworkError, TemporaryServiceError, retry_api_call

logger = logging.getLogger(__name__)

# Whisper API pricing: $0.006 per minute
PRICE_PER_MINUTE = 0.006


def estimate_cost(duration_seconds: float) -> float:
    """Estimate the Whisper API cost of transcribing a clip, in USD."""
    minutes = max(duration_seconds, 0) / 60
    return round(minutes * PRICE_PER_MINUTE, 4)


class OpenAIWhisperProvider(TranscriptionProvider):
    """Transcribes media with OpenAI's hosted whisper-1 model.

    Requests verbose_json so every segment comes back with timing and an
    avg_logprob score, which is kept as the segment confidence.
    """

    API_URL = "https://api.openai.com/v1/audio/transcriptions"

    def __init__(self, api_key: Optional[str], model: str = "whisper-1", timeout_seconds: float = 120.0):
        """Initialize the provider.

        Args:
            api_key: OpenAI API key
            model: Hosted model name
            timeout_seconds: Upper bound for one HTTP request
        """
        self.api_key = api_key or ""
        self.model = model
        self.timeout_seconds = timeout_seconds

    def get_provider_name(self) -> str:
        return "openai"

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def transcribe(self, audio_ref: str, language: Optional[str] = None) -> TranscriptionResult:
        """Upload the media to Whisper and parse the timed segments.

        Raises:
            ProviderError: Missing key, unreadable media or a rejected request
            NetworkError: OpenAI unreachable after retries
            TemporaryServiceError: OpenAI rate limited or failing after retries
        """
        if not self.api_key:
            raise ProviderError("OPENAI_API_KEY is not configured")

        filename, audio = await self._load_media(audio_ref)
        logger.info(f"Sending {filename} ({len(audio) / 1024 / 1024:.1f} MB) to Whisper")

        data = await self._post(filename, audio, language_hint(language))
        return self._parse_response(data, language)

    async def _load_media(self, audio_ref: str) -> tuple[str, bytes]:
        if audio_ref.startswith(("http://", "https://")):
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            try:
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    async with session.get(audio_ref) as response:
                        if response.status != 200:
                            raise ProviderError(f"Could not fetch media: HTTP {response.status}")
                        content = await response.read()
            except aiohttp.ClientError as e:
                raise ProviderError(f"Could not fetch media: {e}") from e
            return Path(audio_ref.split("?", 1)[0]).name or "audio.mp4", content

        path = Path(audio_ref)
        if not path.is_file():
            raise ProviderError(f"Media file not found: {audio_ref}")
        return path.name, await asyncio.to_thread(path.read_bytes)

    @retry_api_call(max_retries=2, base_delay=2.0)
    async def _post(self, filename: str, audio: bytes, language: Optional[str]) -> dict:
        form = aiohttp.FormData()
        form.add_field("file", audio, filename=filename)
        form.add_field("model", self.model)
        form.add_field("response_format", "verbose_json")
        form.add_field("timestamp_granularities[]", "segment")
        if language:
            form.add_field("language", language)

        headers = {"Authorization": f"Bearer {self.api_key}"}
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self.API_URL, data=form, headers=headers) as response:
                    if response.status == 401:
                        raise ProviderError("OpenAI rejected the API key")
                    if response.status == 429:
                        raise APIRateLimitError("OpenAI rate limit exceeded")
                    if response.status >= 500:
                        raise TemporaryServiceError(f"OpenAI API returned status {response.status}")
                    if response.status != 200:
                        body = await response.text()
                        raise ProviderError(f"OpenAI API returned status {response.status}: {body[:200]}")
                    return await response.json()

        except aiohttp.ClientError as e:
            logger.error(f"Whisper request failed: {e}")
            raise NetworkError(f"OpenAI network error: {e}") from e
        except asyncio.TimeoutError as e:
            raise NetworkError("OpenAI request timed out") from e

    def _parse_response(self, data: dict, requested_language: Optional[str]) -> TranscriptionResult:
        if not isinstance(data, dict) or "text" not in data:
            raise ProviderError("Malformed Whisper response: missing text")

        fallback_language = language_hint(requested_language) or "en"
        segments = []
        try:
            for index, seg in enumerate(data.get("segments") or []):
                segments.append(
                    TranscriptionSegment(
                        id=index,
                        start=float(seg["start"]),
                        end=float(seg["end"]),
                        text=str(seg.get("text", "")),
                        confidence=seg.get("avg_logprob"),
                    )
                )
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f"Malformed Whisper segment: {e}") from e

        result = TranscriptionResult(
            text=str(data["text"]).strip(),
            language=normalize_language(data.get("language"), default=fallback_language),
            segments=segments,
        )
        logger.info(
            f"Transcription complete: {len(segments)} segments, "
            f"{result.duration or 0:.1f}s duration, language: {result.language}"
        )
        return result
