"""Configuration loading and validation for reelsmith."""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

# Get the project root directory (parent of src)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load environment variables from .env file in project root
load_dotenv(PROJECT_ROOT / ".env")

MEDIA_PROVIDERS = ("pexels", "fallback")
TRANSCRIPTION_PROVIDERS = ("openai", "local", "none")


def load_config() -> dict:
    """Load configuration from environment variables."""

    # Helper function to resolve paths relative to project root
    def resolve_path(path: str | None, default_relative: str) -> str:
        if not path:
            return str(PROJECT_ROOT / default_relative)
        if Path(path).is_absolute():
            return path
        return str(PROJECT_ROOT / path)

    pexels_api_key = os.getenv("PEXELS_API_KEY")
    openai_api_key = os.getenv("OPENAI_API_KEY")

    config = {
        # Persistence
        "database_path": resolve_path(os.getenv("DATABASE_PATH"), ".reelsmith/reelsmith.db"),
        "upload_dir": resolve_path(os.getenv("UPLOAD_DIR"), "uploads"),
        "max_upload_size_mb": int(os.getenv("MAX_UPLOAD_SIZE_MB", "100")),
        # Stock media provider
        "media_provider": os.getenv(
            "MEDIA_PROVIDER", "pexels" if pexels_api_key else "fallback"
        ).lower(),
        "pexels_api_key": pexels_api_key,
        "media_results_per_page": int(os.getenv("MEDIA_RESULTS_PER_PAGE", "5")),
        "max_concurrent_resolves": int(os.getenv("MAX_CONCURRENT_RESOLVES", "4")),
        # Speech-to-text provider
        "transcription_provider": os.getenv(
            "TRANSCRIPTION_PROVIDER", "openai" if openai_api_key else "none"
        ).lower(),
        "openai_api_key": openai_api_key,
        "whisper_model": os.getenv("WHISPER_MODEL", "base"),
        # Every provider call is bounded by this
        "provider_timeout_seconds": float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "15")),
        # Whole-file transcription takes longer than a search
        "transcription_timeout_seconds": float(os.getenv("TRANSCRIPTION_TIMEOUT_SECONDS", "120")),
        # Logging
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "log_json": os.getenv("LOG_JSON", "false").lower() == "true",
        # HTTP
        "cors_origins": [
            origin.strip()
            for origin in os.getenv(
                "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
            ).split(",")
            if origin.strip()
        ],
    }

    return config


def validate_config(config: dict) -> list[str]:
    """Validate configuration and return list of errors."""
    errors = []

    media_provider = config.get("media_provider")
    if media_provider not in MEDIA_PROVIDERS:
        errors.append(
            f"MEDIA_PROVIDER must be one of {', '.join(MEDIA_PROVIDERS)}, got '{media_provider}'"
        )
    elif media_provider == "pexels" and not config.get("pexels_api_key"):
        errors.append("PEXELS_API_KEY is required when MEDIA_PROVIDER=pexels")

    transcription_provider = config.get("transcription_provider")
    if transcription_provider not in TRANSCRIPTION_PROVIDERS:
        errors.append(
            "TRANSCRIPTION_PROVIDER must be one of "
            f"{', '.join(TRANSCRIPTION_PROVIDERS)}, got '{transcription_provider}'"
        )
    elif transcription_provider == "openai" and not config.get("openai_api_key"):
        errors.append("OPENAI_API_KEY is required when TRANSCRIPTION_PROVIDER=openai")

    if config.get("provider_timeout_seconds", 0) <= 0:
        errors.append("PROVIDER_TIMEOUT_SECONDS must be positive")

    if config.get("transcription_timeout_seconds", 0) <= 0:
        errors.append("TRANSCRIPTION_TIMEOUT_SECONDS must be positive")

    if config.get("media_results_per_page", 0) <= 0:
        errors.append("MEDIA_RESULTS_PER_PAGE must be positive")

    if config.get("max_concurrent_resolves", 0) <= 0:
        errors.append("MAX_CONCURRENT_RESOLVES must be positive")

    # Validate local paths exist
    upload_dir = config.get("upload_dir")
    if upload_dir:
        try:
            Path(upload_dir).mkdir(parents=True, exist_ok=True)
        except Exception as e:
            errors.append(f"Cannot create upload folder: {e}")

    return errors


def setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration with Rich for terminal output (CLI use)."""
    # Clear any existing handlers
    logging.root.handlers.clear()

    # Logs go to stderr so stdout stays clean for --json output
    rich_handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,  # Disable markup to avoid conflicts
    )

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        handlers=[rich_handler],
        format="%(message)s",
    )

    # Suppress noisy third-party loggers
    for logger_name in ("aiohttp", "aiosqlite", "httpx", "urllib3.connectionpool"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def get_supported_video_formats() -> list[str]:
    """Return list of supported video file extensions."""
    return [".mp4", ".avi", ".mov", ".mkv", ".wmv", ".flv", ".webm", ".m4v"]
