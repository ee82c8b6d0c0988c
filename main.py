"""
Video Downloader: FastAPI front end
──────────────────────────────────
Exposes the same list → select → download pipeline as the interactive
CLI (video_downloader.py) over HTTP.

Requests are handled synchronously: a download call returns once yt-dlp
(and, if needed, its single fallback attempt) has exited.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from config import DOWNLOAD_DIR, YTDLP_BIN
from errors import (
    DirectoryCreateFailed,
    DownloaderError,
    DownloadFailed,
    ListFormatsFailed,
    NoCompatibleFormat,
    ToolNotFound,
)
from formats import (
    FormatCatalog,
    audio_options,
    best_audio,
    combined_spec,
    parse_available_formats,
    video_quality_options,
)
from models import (
    DownloadRequest,
    DownloadResponse,
    FormatsRequest,
    FormatsResponse,
    MediaKind,
)
from video_downloader import ensure_dir
from ytdlp import (
    Runner,
    SubprocessRunner,
    download_with_fallback,
    ensure_ytdlp,
    list_formats,
    output_template,
)


app = FastAPI(
    title="Video Downloader API",
    version="1.0.0",
    description="yt-dlp format listing and download API",
)

_STATUS_CODES = {
    ToolNotFound: 503,
    ListFormatsFailed: 502,
    NoCompatibleFormat: 422,
    DownloadFailed: 502,
    DirectoryCreateFailed: 500,
}


@app.exception_handler(DownloaderError)
async def downloader_error_handler(request: Request, exc: DownloaderError):
    status = _STATUS_CODES.get(type(exc), 500)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def get_runner() -> Runner:
    return SubprocessRunner(ensure_ytdlp(YTDLP_BIN))


# ──────────────────────────────────────────────
# POST /api/formats: parsed format table and menus
# ──────────────────────────────────────────────
@app.post("/api/formats", response_model=FormatsResponse)
def get_formats(req: FormatsRequest, runner: Runner = Depends(get_runner)):
    url = req.url.strip()
    if not url:
        raise HTTPException(status_code=400, detail="URL cannot be empty")

    formats = parse_available_formats(list_formats(runner, url))
    catalog = FormatCatalog.from_formats(formats)
    response = FormatsResponse(formats=formats, audio_options=audio_options(catalog))

    problems = []
    try:
        response.video_options = video_quality_options(catalog)
    except NoCompatibleFormat as e:
        problems.append(str(e))
    try:
        response.best_audio = best_audio(catalog).id
    except NoCompatibleFormat as e:
        problems.append(str(e))

    if problems:
        response.error = "; ".join(problems)
    return response


# ──────────────────────────────────────────────
# POST /api/download: primary attempt + one fallback
# ──────────────────────────────────────────────
def _video_spec(runner: Runner, url: str, format_id: str | None) -> str:
    catalog = FormatCatalog.from_listing(list_formats(runner, url))
    audio = best_audio(catalog)
    if format_id is None:
        return combined_spec(video_quality_options(catalog)[0].format, audio)

    for formats in catalog.video.values():
        for fmt in formats:
            if fmt.id == format_id:
                return combined_spec(fmt, audio)
    raise HTTPException(status_code=404, detail=f"Unknown video format: {format_id}")


@app.post("/api/download", response_model=DownloadResponse)
def start_download(req: DownloadRequest, runner: Runner = Depends(get_runner)):
    url = req.url.strip()
    if not url:
        raise HTTPException(status_code=400, detail="URL cannot be empty")

    save_dir = ensure_dir(Path(DOWNLOAD_DIR)).resolve()

    if req.mode is MediaKind.VIDEO:
        format_spec = _video_spec(runner, url, req.format_id)
    else:
        format_spec = req.format_id or "bestaudio"

    outcome = download_with_fallback(
        runner,
        url,
        format_spec,
        output_template(save_dir, req.mode),
        req.mode,
    )
    return DownloadResponse(
        format_spec=outcome.format_spec,
        attempts=outcome.attempts,
        used_fallback=outcome.used_fallback,
        output_dir=str(save_dir),
    )


# ──────────────────────────────────────────────
# Health check
# ──────────────────────────────────────────────
@app.get("/api/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


# ──────────────────────────────────────────────
# Run server
# ──────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("main:app", host=host, port=port, reload=True)
