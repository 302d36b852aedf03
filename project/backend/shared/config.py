"""
Configuration management.

Centralized environment variable management and validation.
"""

from typing import Literal, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from shared.errors import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow case-insensitive env var matching
        extra="ignore"
    )

    # Environment
    environment: Literal["development", "staging", "production", "test"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    # LOG_FILE: optional path of a rotating JSON log file (stdout only when unset)
    log_file: Optional[str] = None

    # Transcoding engine
    ffmpeg_path: str = "ffmpeg"
    ffprobe_path: str = "ffprobe"

    # Merge pipeline
    merge_temp_prefix: str = "merge-av-"
    merge_output_audio_codec: str = "aac"
    # Bounded wait for ffmpeg: max(floor, factor * video_duration).
    # MERGE_TIMEOUT_FACTOR=0 disables the timeout entirely.
    merge_timeout_factor: float = 4.0
    merge_timeout_floor_seconds: float = 60.0
    # Used when the video duration is unknown
    merge_timeout_default_seconds: float = 600.0

    # Uploads
    max_upload_size_mb: int = 500

    # Fallback media kept after a failed merge, bounded per kind (video, audio)
    media_store_max_items_per_kind: int = 32
    media_store_max_mb_per_kind: int = 1024

    # Video understanding (Gemini)
    gemini_api_key: Optional[str] = None
    gemini_video_model: str = "gemini-2.0-flash-exp"
    gemini_frame_model: str = "gemini-1.5-flash"

    # Voice synthesis (ElevenLabs)
    elevenlabs_api_key: Optional[str] = None
    elevenlabs_base_url: str = "https://api.elevenlabs.io/v1"
    elevenlabs_default_voice_id: str = "JBFqnCBsd6RMkjVDRZzb"
    elevenlabs_model_id: str = "eleven_multilingual_v2"
    elevenlabs_output_format: str = "mp3_44100_128"
    upstream_timeout_seconds: float = 120.0

    @field_validator("gemini_api_key", "elevenlabs_api_key")
    @classmethod
    def strip_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank keys as not configured."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("merge_timeout_factor", "merge_timeout_floor_seconds", "merge_timeout_default_seconds")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Timeout knobs cannot be negative."""
        if v < 0:
            raise ConfigError("Merge timeout settings must be non-negative")
        return v

    @field_validator("elevenlabs_base_url")
    @classmethod
    def validate_elevenlabs_base_url(cls, v: str) -> str:
        """Validate ElevenLabs base URL format."""
        if not v.startswith(("http://", "https://")):
            raise ConfigError("ELEVENLABS_BASE_URL must be a valid HTTP/HTTPS URL")
        return v.rstrip("/")

    @field_validator("media_store_max_items_per_kind", "media_store_max_mb_per_kind")
    @classmethod
    def validate_store_limits(cls, v: int) -> int:
        """Store limits must be positive."""
        if v <= 0:
            raise ConfigError("Media store limits must be positive")
        return v

    @property
    def media_store_max_bytes_per_kind(self) -> int:
        return self.media_store_max_mb_per_kind * 1024 * 1024


# Singleton instance
try:
    settings = Settings()
except Exception as e:
    # Re-raise as ConfigError for consistency
    if isinstance(e, ConfigError):
        raise
    raise ConfigError(f"Failed to load configuration: {str(e)}") from e
