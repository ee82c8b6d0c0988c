"""
Parsing and grouping of the `yt-dlp -F` format table.

A listing row looks like::

    299  mp4   1920x1080  30  |  ~100.5 MiB  2500k https  avc1.64002a  1080p
    140  m4a   audio only      |    3.2 MiB   128k https  mp4a.40.2

Only whitespace tokens are used; anything that does not parse is skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from config import (
    APPROX_MARKERS,
    AUDIO_CONTAINER,
    AUDIO_ONLY_MARKER,
    MAX_AUDIO_OPTIONS,
    MAX_VIDEO_OPTIONS,
    SIZE_UNITS,
    VIDEO_CONTAINER,
)
from errors import NoCompatibleFormat
from models import FormatDescriptor, MediaKind, QualityOption

logger = logging.getLogger(__name__)

# table header and "[info]"/"[youtube]"-style log lines
SKIP_PREFIXES = ("ID", "[")


# ----------------------------
# Listing rows
# ----------------------------
def _parse_uint(text: str) -> Optional[int]:
    # plain ASCII digits only: no sign, underscores or other scripts
    if text.isascii() and text.isdecimal():
        return int(text)
    return None


def _parse_resolution(tokens: list[str]) -> Optional[int]:
    # First token carrying an "x" wins, even if what follows is not a number
    for token in tokens:
        if "x" in token:
            return _parse_uint(token.split("x")[1])
    return None


def _strip_approx(token: str) -> str:
    for marker in APPROX_MARKERS:
        token = token.lstrip(marker)
    return token


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def _find_size(tokens: list[str]) -> Optional[int]:
    """Index of the size value (the token before a unit marker), if any."""
    for i, token in enumerate(tokens):
        if token in SIZE_UNITS:
            if i > 0 and _is_number(_strip_approx(tokens[i - 1])):
                return i - 1
            return None
    return None


def parse_format_line(line: str) -> Optional[FormatDescriptor]:
    tokens = line.split()
    if len(tokens) < 3:
        return None

    kind = MediaKind.AUDIO if AUDIO_ONLY_MARKER in line else MediaKind.VIDEO

    size_pos = _find_size(tokens)
    if size_pos is None:
        filesize = None
        description = " ".join(tokens[2:])
    else:
        filesize = f"{_strip_approx(tokens[size_pos])} {tokens[size_pos + 1]}"
        description = " ".join(tokens[2:max(2, size_pos)])

    return FormatDescriptor(
        id=tokens[0],
        extension=tokens[1],
        description=description,
        resolution=_parse_resolution(tokens),
        kind=kind,
        filesize=filesize,
    )


def parse_available_formats(text: str) -> list[FormatDescriptor]:
    formats = []
    for line in text.splitlines():
        if not line.strip() or line.startswith(SKIP_PREFIXES):
            continue
        fmt = parse_format_line(line)
        if fmt is None:
            logger.debug("Skipping listing line: %r", line)
            continue
        formats.append(fmt)
    return formats


# ----------------------------
# Grouping and selection
# ----------------------------
@dataclass
class FormatCatalog:
    """Parsed formats split by media kind; video grouped by height."""
    video: dict[Optional[int], list[FormatDescriptor]] = field(default_factory=dict)
    audio: list[FormatDescriptor] = field(default_factory=list)

    @classmethod
    def from_formats(cls, formats: list[FormatDescriptor]) -> "FormatCatalog":
        catalog = cls()
        for fmt in formats:
            if fmt.is_audio:
                catalog.audio.append(fmt)
            else:
                catalog.video.setdefault(fmt.resolution, []).append(fmt)
        return catalog

    @classmethod
    def from_listing(cls, text: str) -> "FormatCatalog":
        return cls.from_formats(parse_available_formats(text))


def bitrate_of(description: str) -> int:
    """Bitrate in k from the first "...k" token of a description, else 0."""
    for token in description.split():
        if token.endswith("k"):
            return _parse_uint(token.rstrip("k")) or 0
    return 0


def best_audio(catalog: FormatCatalog) -> FormatDescriptor:
    if not catalog.audio:
        raise NoCompatibleFormat(MediaKind.AUDIO, "No audio formats found")
    for fmt in catalog.audio:
        if fmt.extension == AUDIO_CONTAINER:
            return fmt
    return catalog.audio[0]


def _best_for_resolution(formats: list[FormatDescriptor]) -> Optional[FormatDescriptor]:
    best = None
    best_rate = -1
    for fmt in formats:
        if fmt.extension != VIDEO_CONTAINER:
            continue
        rate = bitrate_of(fmt.description)
        # ties go to the later row
        if rate >= best_rate:
            best, best_rate = fmt, rate
    return best


def quality_label(resolution: int, fmt: FormatDescriptor) -> str:
    label = f"{resolution}p {VIDEO_CONTAINER.upper()}"
    if fmt.filesize:
        label += f" (~{fmt.filesize})"
    return label


def video_quality_options(
    catalog: FormatCatalog, limit: int = MAX_VIDEO_OPTIONS
) -> list[QualityOption]:
    options = []
    for resolution, formats in catalog.video.items():
        if resolution is None:
            continue
        best = _best_for_resolution(formats)
        if best is not None:
            options.append(QualityOption(
                label=quality_label(resolution, best),
                resolution=resolution,
                format=best,
            ))

    options.sort(key=lambda o: o.resolution, reverse=True)
    options = options[:limit]

    if not options:
        raise NoCompatibleFormat(
            MediaKind.VIDEO,
            f"No suitable {VIDEO_CONTAINER.upper()} formats found",
        )
    return options


def audio_options(
    catalog: FormatCatalog, limit: int = MAX_AUDIO_OPTIONS
) -> list[FormatDescriptor]:
    return catalog.audio[:limit]


def audio_label(fmt: FormatDescriptor) -> str:
    label = f"{fmt.id} - {fmt.extension}"
    if fmt.filesize:
        label += f" ({fmt.filesize})"
    return label


def combined_spec(video: FormatDescriptor, audio: FormatDescriptor) -> str:
    return f"{video.id}+{audio.id}"
