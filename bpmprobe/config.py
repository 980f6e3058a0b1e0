"""Application configuration."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings with env var overrides."""

    # Audio (raw PCM assumptions)
    sample_rate: int = Field(default=44100, gt=0)
    channels: int = Field(default=2, gt=0)

    # Onset detection
    frame_size: int = Field(default=1024, gt=0)
    hop_size: int = Field(default=256, gt=0)
    pre_emphasis: float = 0.95
    threshold_k: float = 1.5  # stddevs above local mean
    min_onset_interval: float = 0.25  # seconds

    # Tempo
    cluster_tolerance: float = 0.05  # seconds
    min_onsets: int = 8
    min_bpm: int = 60
    max_bpm: int = 200
    default_bpm: int = 120

    # Remote audio
    storage_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("BPMPROBE_STORAGE_URL", "SUPABASE_URL"),
    )
    storage_bucket: str = "audio-files"
    fetch_timeout: float = 30.0
    max_download_mb: int = 100

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    max_upload_mb: int = 50

    model_config = {"env_prefix": "BPMPROBE_", "populate_by_name": True}


settings = Settings()
