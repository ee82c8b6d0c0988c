"""
Error kinds surfaced to the top level of the downloader.
"""

from __future__ import annotations

from models import MediaKind


class DownloaderError(Exception):
    """Base class: a terminal, user-visible failure."""

    exit_code = 1


class ToolNotFound(DownloaderError):
    def __init__(self, executable: str):
        super().__init__(f"{executable} not found")
        self.executable = executable


class ListFormatsFailed(DownloaderError):
    pass


class NoCompatibleFormat(DownloaderError):
    def __init__(self, kind: MediaKind, message: str | None = None):
        if message is None:
            message = f"No compatible {kind.value} format found"
        super().__init__(message)
        self.kind = kind


class DownloadFailed(DownloaderError):
    pass


class DirectoryCreateFailed(DownloaderError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to create output directory: {path} ({reason})")


class UserAborted(DownloaderError):
    exit_code = 130

    def __init__(self, message: str = "Aborted by user"):
        super().__init__(message)
