"""Service singletons and dependency injection for the Reelsmith API."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException

from services.caption_pipeline import CaptionPipeline
from services.generation_orchestrator import GenerationOrchestrator
from services.media_resolver import StockMediaResolver
from services.media_sources import FallbackMediaSource, PexelsMediaSource, StockMediaSource
from services.run_registry import RunRegistry
from services.transcription_providers import (
    LocalWhisperProvider,
    OpenAIWhisperProvider,
    TranscriptionProvider,
    UnconfiguredTranscriptionProvider,
)
from services.video_store import VideoStore, get_video_store
from utils.config import load_config

# Service singletons
_config: dict | None = None
_run_registry: RunRegistry | None = None
_media_resolver: StockMediaResolver | None = None
_transcription_provider: TranscriptionProvider | None = None


def get_config() -> dict:
    """Get the process-wide configuration, loaded once."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def build_media_source(config: dict) -> StockMediaSource:
    """Create the stock media adapter selected by MEDIA_PROVIDER."""
    if config.get("media_provider") == "pexels":
        return PexelsMediaSource(
            api_key=config.get("pexels_api_key") or "",
            timeout_seconds=config.get("provider_timeout_seconds", 15.0),
        )
    return FallbackMediaSource()


def build_media_resolver(config: dict) -> StockMediaResolver:
    """Create a resolver over the configured stock media adapter."""
    return StockMediaResolver(
        build_media_source(config),
        per_page=config.get("media_results_per_page", 5),
        timeout_seconds=config.get("provider_timeout_seconds", 15.0),
        max_concurrent=config.get("max_concurrent_resolves", 4),
    )


def build_transcription_provider(config: dict) -> TranscriptionProvider:
    """Create the speech-to-text adapter selected by TRANSCRIPTION_PROVIDER."""
    provider = config.get("transcription_provider")
    if provider == "openai":
        return OpenAIWhisperProvider(
            api_key=config.get("openai_api_key"),
            timeout_seconds=config.get("transcription_timeout_seconds", 120.0),
        )
    if provider == "local":
        return LocalWhisperProvider(model_name=config.get("whisper_model", "base"))
    return UnconfiguredTranscriptionProvider()


def get_run_registry() -> RunRegistry:
    """Get or create the background run registry."""
    global _run_registry
    if _run_registry is None:
        _run_registry = RunRegistry()
    return _run_registry


def get_media_resolver() -> StockMediaResolver:
    """Get or create the stock media resolver."""
    global _media_resolver
    if _media_resolver is None:
        _media_resolver = build_media_resolver(get_config())
    return _media_resolver


def get_transcription_provider() -> TranscriptionProvider:
    """Get or create the speech-to-text provider."""
    global _transcription_provider
    if _transcription_provider is None:
        _transcription_provider = build_transcription_provider(get_config())
    return _transcription_provider


async def get_store() -> VideoStore:
    """Get the connected video store."""
    return await get_video_store(get_config()["database_path"])


def get_generation_orchestrator(
    store: Annotated[VideoStore, Depends(get_store)],
    resolver: Annotated[StockMediaResolver, Depends(get_media_resolver)],
    registry: Annotated[RunRegistry, Depends(get_run_registry)],
) -> GenerationOrchestrator:
    """Build the generation orchestrator over the shared services."""
    return GenerationOrchestrator(store=store, resolver=resolver, registry=registry)


def get_caption_pipeline(
    store: Annotated[VideoStore, Depends(get_store)],
    provider: Annotated[TranscriptionProvider, Depends(get_transcription_provider)],
    registry: Annotated[RunRegistry, Depends(get_run_registry)],
) -> CaptionPipeline:
    """Build the caption pipeline over the shared services."""
    config = get_config()
    return CaptionPipeline(
        store=store,
        provider=provider,
        registry=registry,
        timeout_seconds=config.get("transcription_timeout_seconds", 120.0),
        upload_dir=config.get("upload_dir"),
    )


def get_current_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Caller identity, set by the upstream identity provider or gateway."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


UserId = Annotated[str, Depends(get_current_user_id)]
Store = Annotated[VideoStore, Depends(get_store)]
