"""Base abstraction for speech-to-text providers."""

from abc import ABC, abstractmethod
from typing import Optional

from models.transcript import TranscriptionResult

# Languages accepted as a transcription hint; "auto" lets the provider detect it.
SUPPORTED_LANGUAGES = (
    ("en", "English"),
    ("es", "Spanish"),
    ("fr", "French"),
    ("de", "German"),
    ("it", "Italian"),
    ("pt", "Portuguese"),
    ("ru", "Russian"),
    ("ja", "Japanese"),
    ("ko", "Korean"),
    ("zh", "Chinese"),
    ("ar", "Arabic"),
    ("hi", "Hindi"),
    ("nl", "Dutch"),
    ("sv", "Swedish"),
    ("no", "Norwegian"),
    ("da", "Danish"),
    ("fi", "Finnish"),
    ("pl", "Polish"),
    ("tr", "Turkish"),
    ("he", "Hebrew"),
    ("th", "Thai"),
    ("vi", "Vietnamese"),
    ("id", "Indonesian"),
    ("ms", "Malay"),
    ("auto", "Auto-detect"),
)

_CODES_BY_NAME = {name.lower(): code for code, name in SUPPORTED_LANGUAGES if code != "auto"}


def normalize_language(language: Optional[str], default: str = "en") -> str:
    """Turn a provider language answer ("english", "EN", None) into a short code."""
    if not language:
        return default
    lowered = language.strip().lower()
    return _CODES_BY_NAME.get(lowered, lowered) or default


def language_hint(language: Optional[str]) -> Optional[str]:
    """Language to pass to a provider, None when it should auto-detect."""
    if not language or language.strip().lower() == "auto":
        return None
    return language.strip().lower()


class TranscriptionProvider(ABC):
    """Abstract base class for speech-to-text providers."""

    @abstractmethod
    async def transcribe(self, audio_ref: str, language: Optional[str] = None) -> TranscriptionResult:
        """Transcribe an audio or video file.

        Args:
            audio_ref: Local file path or http(s) URL of the media
            language: Optional language hint ("auto" or None to detect)

        Returns:
            TranscriptionResult with ordered, timed segments

        Raises:
            ProviderError: The provider failed, rejected the request or is not configured
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the name of this provider (e.g., "openai", "local")."""

    def is_configured(self) -> bool:
        """Check if this provider has required configuration (API keys, etc.).

        Default implementation returns True (no config required).
        """
        return True
