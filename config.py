"""
Configuration values shared by the CLI and the HTTP front end.
"""

from __future__ import annotations

import os


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# ──────────────────────────────────────────────
# External tool
# ──────────────────────────────────────────────
YTDLP_BIN = os.getenv("YTDLP_BIN", "yt-dlp")

# Shared by every invocation (listing, download, fallback)
NETWORK_ARGS = ["--no-check-certificates", "--force-ipv4"]

# ──────────────────────────────────────────────
# Format selection
# ──────────────────────────────────────────────
VIDEO_CONTAINER = "mp4"
AUDIO_CONTAINER = "m4a"              # muxes cleanly into mp4
AUDIO_CODEC = os.getenv("AUDIO_CODEC", "mp3")

MAX_VIDEO_OPTIONS = _int_env("MAX_VIDEO_OPTIONS", 5)
MAX_AUDIO_OPTIONS = _int_env("MAX_AUDIO_OPTIONS", 5)

SIZE_UNITS = ("KiB", "MiB", "GiB")
APPROX_MARKERS = ("~", "≈")
AUDIO_ONLY_MARKER = "audio only"

VIDEO_FALLBACK_SPEC = "bestvideo+bestaudio/best"
AUDIO_FALLBACK_SPEC = "bestaudio"

# ──────────────────────────────────────────────
# HTTP front end
# ──────────────────────────────────────────────
DOWNLOAD_DIR = os.getenv("DOWNLOAD_DIR", "./downloads")
