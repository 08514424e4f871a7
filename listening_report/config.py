"""Report configuration loaded from environment variables"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ReportSettings(BaseSettings):
    """Where to read the export from and how to shape the report"""
    data_dir: str = Field("Spotify Account Data", description="Directory holding the Spotify export")
    history_pattern: str = Field("StreamingHistory_music_*.json", description="Glob for streaming history files")
    output_dir: str = Field("output", description="Directory for the PDF and CSV outputs")
    top_n: int = Field(10, ge=1, description="Number of artists in the ranking")
    strict: bool = Field(True, description="Abort on the first malformed record")
    zero_fill_months: bool = Field(True, description="Chart all twelve months, even silent ones")
    artist_images_dir: Optional[str] = Field(None, description="Directory of <artist>.png images")

    model_config = SettingsConfigDict(
        env_prefix="LISTENING_REPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> ReportSettings:
    return ReportSettings()
