"""
Pydantic v2 models for parsed yt-dlp formats and the HTTP front end.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from typing import Optional


class MediaKind(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"


# ──────────────────────────────────────────────
# Parsed listing rows
# ──────────────────────────────────────────────
class FormatDescriptor(BaseModel):
    """One row of the `yt-dlp -F` table."""
    id: str
    extension: str
    description: str = ""
    resolution: Optional[int] = None        # vertical pixels, from "WxH"
    kind: MediaKind = MediaKind.VIDEO
    filesize: Optional[str] = None          # e.g. "100.5 MiB"

    @property
    def is_video(self) -> bool:
        return self.kind is MediaKind.VIDEO

    @property
    def is_audio(self) -> bool:
        return self.kind is MediaKind.AUDIO


class QualityOption(BaseModel):
    """Entry of the video quality menu."""
    label: str                  # "1080p MP4 (~100.5 MiB)"
    resolution: int
    format: FormatDescriptor


# ──────────────────────────────────────────────
# Formats endpoint
# ──────────────────────────────────────────────
class FormatsRequest(BaseModel):
    url: str = Field(..., description="Video URL understood by yt-dlp")


class FormatsResponse(BaseModel):
    formats: list[FormatDescriptor]
    video_options: list[QualityOption] = []
    audio_options: list[FormatDescriptor] = []
    best_audio: Optional[str] = None        # format id
    error: Optional[str] = None             # why video_options is empty


# ──────────────────────────────────────────────
# Download endpoint
# ──────────────────────────────────────────────
class DownloadRequest(BaseModel):
    url: str
    mode: MediaKind = MediaKind.VIDEO
    format_id: Optional[str] = Field(
        None,
        description="Video format id (combined with best audio) or audio format spec",
    )


class DownloadResponse(BaseModel):
    format_spec: str
    attempts: int
    used_fallback: bool = False
    output_dir: str
