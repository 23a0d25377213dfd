"""Local transcription with faster-whisper (install the "local" extra)."""

import asyncio
import logging
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import Optional

from models.transcript import TranscriptionResult, TranscriptionSegment
from services.errors import ProviderError
from services.transcription_providers.base import (
    TranscriptionProvider,
    language_hint,
    normalize_language,
)
from utils.config import get_supported_video_formats

logger = logging.getLogger(__name__)


class LocalWhisperProvider(TranscriptionProvider):
    """Runs a faster-whisper model in-process.

    The model is loaded on first use and transcriptions are serialized, since
    one model instance is not safe to share between threads. The lock is held
    by the worker thread, so a cancelled transcribe() keeps it until the
    model is actually done.
    """

    def __init__(self, model_name: str = "base", device: str = "auto", compute_type: str = "auto"):
        self.model_name = model_name
        self.device = device
        self.compute_type = compute_type
        self.model = None
        self._model_lock = threading.Lock()

    def get_provider_name(self) -> str:
        return "local"

    def _load_model(self) -> None:
        from faster_whisper import WhisperModel

        logger.info(f"Loading Whisper model: {self.model_name}")
        self.model = WhisperModel(self.model_name, device=self.device, compute_type=self.compute_type)
        logger.info(
            f"Loaded faster-whisper model {self.model_name} "
            f"(device={self.device}, compute_type={self.compute_type})"
        )

    async def transcribe(self, audio_ref: str, language: Optional[str] = None) -> TranscriptionResult:
        """Transcribe a local audio or video file.

        Raises:
            ProviderError: The file is missing, remote, or could not be decoded
        """
        if audio_ref.startswith(("http://", "https://")):
            raise ProviderError("Local transcription needs a file on disk, got a URL")

        file_path = Path(audio_ref)
        if not file_path.is_file():
            raise ProviderError(f"Media file not found: {audio_ref}")

        logger.info(f"Starting transcription of: {file_path.name}")

        try:
            return await asyncio.to_thread(self._transcribe_file, file_path, language_hint(language))
        except ProviderError:
            raise
        except Exception as e:
            logger.error(f"Transcription failed for {file_path}: {e}")
            raise ProviderError(f"Local transcription failed: {e}") from e

    def _transcribe_file(self, file_path: Path, language: Optional[str]) -> TranscriptionResult:
        with self._model_lock:
            return self._run_model(file_path, language)

    def _run_model(self, file_path: Path, language: Optional[str]) -> TranscriptionResult:
        if self.model is None:
            self._load_model()

        if file_path.suffix.lower() in get_supported_video_formats():
            audio_path = self._extract_audio_from_video(file_path)
            cleanup_audio = True
        else:
            audio_path = file_path
            cleanup_audio = False

        try:
            # faster-whisper returns a generator of segments and info
            segments_generator, info = self.model.transcribe(str(audio_path), language=language)

            segments = []
            for index, seg in enumerate(segments_generator):
                segments.append(
                    TranscriptionSegment(
                        id=index,
                        start=float(seg.start),
                        end=float(seg.end),
                        text=str(seg.text),
                        confidence=getattr(seg, "avg_logprob", None),
                    )
                )
        finally:
            if cleanup_audio:
                Path(audio_path).unlink(missing_ok=True)

        result = TranscriptionResult(
            text=" ".join(seg.text.strip() for seg in segments).strip(),
            language=normalize_language(info.language, default=language or "en"),
            segments=segments,
        )
        logger.info(
            f"Transcription complete: {len(segments)} segments, "
            f"{float(info.duration):.1f}s duration, language: {result.language}"
        )
        return result

    def _extract_audio_from_video(self, video_path: Path) -> str:
        """Extract 16 kHz mono audio from a video file using ffmpeg.

        Args:
            video_path: Path to video file

        Returns:
            Path to extracted audio file
        """
        logger.info(f"Extracting audio from video: {video_path.name}")

        with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as temp_file:
            audio_path = temp_file.name

        cmd = [
            "ffmpeg",
            "-i",
            str(video_path),
            "-vn",
            "-acodec",
            "pcm_s16le",
            "-ar",
            "16000",
            "-ac",
            "1",
            "-y",
            audio_path,
        ]

        try:
            subprocess.run(cmd, capture_output=True, text=True, check=True)
        except FileNotFoundError as e:
            Path(audio_path).unlink(missing_ok=True)
            raise ProviderError("ffmpeg is not installed") from e
        except subprocess.CalledProcessError as e:
            logger.error(f"FFmpeg failed: {e.stderr}")
            Path(audio_path).unlink(missing_ok=True)
            raise ProviderError(f"Audio extraction failed: {e.stderr}") from e

        logger.debug(f"Audio extraction completed: {audio_path}")
        return audio_path
