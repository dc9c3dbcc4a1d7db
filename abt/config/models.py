import os
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

def default_capacity(cpu_count: Optional[int] = None) -> int:
    """One transcode per core minus one; the encoder is single threaded."""
    cpus = cpu_count if cpu_count is not None else (os.cpu_count() or 1)
    return max(1, max(cpus, 2) - 1)

class GeneralConfig(BaseModel):
    threads: Optional[int] = Field(default=None)
    keep_originals: bool = False
    threshold_kbps: int = Field(default=128, gt=0)
    target_bitrate_kbps: int = Field(default=128, gt=0)
    extensions: List[str] = Field(default_factory=lambda: ["mp3", "flac", "mpc", "ogg"])
    progress_interval_s: float = Field(default=0.5, gt=0)
    ffmpeg_bin: str = "ffmpeg"
    ffprobe_bin: str = "ffprobe"
    debug: bool = False
    log_path: Optional[str] = None

    @field_validator("threads")
    @classmethod
    def clamp_threads(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            return v
        return max(1, v)

    @field_validator("extensions")
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        normalized = [ext.lower().lstrip(".") for ext in v if ext and ext.strip(".")]
        if not normalized:
            raise ValueError("extensions must not be empty")
        return normalized

    @property
    def capacity(self) -> int:
        return self.threads if self.threads is not None else default_capacity()

class UiConfig(BaseModel):
    """UI display configuration."""
    activity_feed_max_items: int = Field(default=8, ge=1, le=50)
    refresh_per_second: int = Field(default=4, ge=1, le=20)

class AppConfig(BaseModel):
    general: GeneralConfig = Field(default_factory=GeneralConfig)
    ui: UiConfig = Field(default_factory=UiConfig)
