"""
Everything that talks to the yt-dlp executable.

Commands are built as plain argument lists and handed to a ``Runner``;
``SubprocessRunner`` is the real one.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

import typer
from yt_dlp.utils import shell_quote

from config import (
    AUDIO_CODEC,
    AUDIO_FALLBACK_SPEC,
    NETWORK_ARGS,
    VIDEO_CONTAINER,
    VIDEO_FALLBACK_SPEC,
    YTDLP_BIN,
)
from errors import DownloadFailed, ListFormatsFailed, ToolNotFound
from models import MediaKind

logger = logging.getLogger(__name__)

# what a shell reports for "command not found"
SPAWN_FAILED = 127


class Operation(str, Enum):
    LIST_FORMATS = "list-formats"
    DOWNLOAD = "download"


@dataclass
class RunResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class Runner(Protocol):
    def run(self, operation: Operation, args: list[str]) -> RunResult:
        ...


class SubprocessRunner:
    """Runs yt-dlp; only listings are captured, downloads stream to the terminal."""

    def __init__(self, executable: str = YTDLP_BIN, verbose: bool = False) -> None:
        self.executable = executable
        self.verbose = verbose

    def run(self, operation: Operation, args: list[str]) -> RunResult:
        cmd = [self.executable, *args]
        if self.verbose:
            typer.secho("\nRunning command:", fg=typer.colors.CYAN, bold=True)
            typer.echo(shell_quote(cmd))
        logger.debug("%s: %s", operation.value, cmd)

        capture = operation is Operation.LIST_FORMATS
        # yt-dlp output may carry bytes that are not valid UTF-8
        p = subprocess.run(
            cmd, capture_output=capture, text=True, encoding="utf-8", errors="replace",
        )
        return RunResult(p.returncode, p.stdout or "", p.stderr or "")


def ensure_ytdlp(executable: str = YTDLP_BIN) -> str:
    """Resolve the executable on PATH or raise ToolNotFound."""
    path = shutil.which(executable)
    if path is None:
        raise ToolNotFound(executable)
    return path


# ----------------------------
# Arguments
# ----------------------------
def output_template(output_dir: str | os.PathLike, kind: MediaKind) -> str:
    if kind is MediaKind.VIDEO:
        return os.path.join(str(output_dir), "%(title)s_%(height)sp.%(ext)s")
    return os.path.join(str(output_dir), "%(title)s.%(ext)s")


def list_formats_args(url: str) -> list[str]:
    return [url, "-F", *NETWORK_ARGS]


def _kind_args(kind: MediaKind) -> list[str]:
    if kind is MediaKind.VIDEO:
        return ["--merge-output-format", VIDEO_CONTAINER, "--prefer-ffmpeg"]
    return ["-x", "--audio-format", AUDIO_CODEC, "--prefer-ffmpeg"]


def download_args(url: str, format_spec: str, template: str, kind: MediaKind) -> list[str]:
    return [
        url,
        "-f", format_spec,
        "-o", template,
        "--progress",
        *NETWORK_ARGS,
        "--geo-bypass",
        "--no-playlist",
        *_kind_args(kind),
    ]


def fallback_spec(kind: MediaKind) -> str:
    return VIDEO_FALLBACK_SPEC if kind is MediaKind.VIDEO else AUDIO_FALLBACK_SPEC


def fallback_args(url: str, template: str, kind: MediaKind) -> list[str]:
    return [
        url,
        "-f", fallback_spec(kind),
        "-o", template,
        *NETWORK_ARGS,
        *_kind_args(kind),
    ]


# ----------------------------
# Operations
# ----------------------------
def _tail(text: str, n: int = 5) -> str:
    lines = [ln for ln in text.splitlines() if ln.strip()]
    return "\n".join(lines[-n:])


def list_formats(runner: Runner, url: str) -> str:
    """Return the raw `yt-dlp -F` table for ``url``."""
    try:
        result = runner.run(Operation.LIST_FORMATS, list_formats_args(url))
    except OSError as exc:
        raise ListFormatsFailed(f"Failed to list formats: {exc}") from exc

    if not result.ok:
        if not result.stdout.strip():
            detail = _tail(result.stderr) or f"exit code {result.returncode}"
            raise ListFormatsFailed(f"Failed to list formats: {detail}")
        logger.warning("yt-dlp exited with code %s while listing formats", result.returncode)
    return result.stdout


@dataclass
class DownloadOutcome:
    format_spec: str        # the spec that succeeded
    attempts: int
    used_fallback: bool


def _attempt(runner: Runner, args: list[str]) -> RunResult:
    try:
        return runner.run(Operation.DOWNLOAD, args)
    except OSError as exc:
        logger.error("Failed to execute yt-dlp: %s", exc)
        return RunResult(SPAWN_FAILED, "", str(exc))


def download_with_fallback(
    runner: Runner,
    url: str,
    format_spec: str,
    template: str,
    kind: MediaKind,
    on_retry: Optional[Callable[[RunResult], None]] = None,
) -> DownloadOutcome:
    """Download with ``format_spec``; on failure retry once with a broad spec."""
    result = _attempt(runner, download_args(url, format_spec, template, kind))
    if result.ok:
        return DownloadOutcome(format_spec, attempts=1, used_fallback=False)

    logger.warning("Primary download (%s) exited with code %s", format_spec, result.returncode)
    if on_retry is not None:
        on_retry(result)

    retry = _attempt(runner, fallback_args(url, template, kind))
    if retry.ok:
        return DownloadOutcome(fallback_spec(kind), attempts=2, used_fallback=True)

    what = "Download" if kind is MediaKind.VIDEO else "Audio download"
    raise DownloadFailed(
        f"{what} failed after retry. Please try a different format or URL."
    )
