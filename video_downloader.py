# Video Downloader - interactive front end for yt-dlp
# Flow:
#   - list the formats yt-dlp offers for a URL (`yt-dlp -F`)
#   - pick video (MP4 + best audio, muxed) or audio (extracted to mp3)
#   - download, retrying once with a broad format spec on failure
#
# Requirements:
#   py -m pip install -U yt-dlp typer
# Recommended:
#   ffmpeg installed (ffmpeg -version)

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from config import YTDLP_BIN
from errors import DirectoryCreateFailed, DownloaderError, ToolNotFound
from formats import (
    FormatCatalog,
    audio_label,
    audio_options,
    best_audio,
    combined_spec,
    video_quality_options,
)
from models import MediaKind
from prompts import ConsolePrompts, PromptProvider
from ytdlp import (
    DownloadOutcome,
    Runner,
    RunResult,
    SubprocessRunner,
    download_with_fallback,
    ensure_ytdlp,
    list_formats,
    output_template,
)

APP_NAME = "YouTube Video Downloader"

logger = logging.getLogger(__name__)


# ----------------------------
# Console output
# ----------------------------
def _ytdlp_version() -> str:
    try:
        from yt_dlp.version import __version__
    except ImportError:
        return "unknown"
    return __version__


def print_banner() -> None:
    typer.secho(APP_NAME, fg=typer.colors.BLUE, bold=True, underline=True)
    typer.echo(f"yt-dlp: {_ytdlp_version()}")


def print_install_hints(executable: str) -> None:
    typer.secho(f"{executable} is not installed. Please install it first:", fg=typer.colors.RED, bold=True)
    typer.echo("For Ubuntu/Debian: sudo apt install yt-dlp")
    typer.echo("With pip: py -m pip install -U yt-dlp")
    typer.echo("For other systems, visit: https://github.com/yt-dlp/yt-dlp#installation")


def heading(text: str) -> None:
    typer.secho(f"\n{text}", fg=typer.colors.CYAN, bold=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
    )


# ----------------------------
# Menus
# ----------------------------
DIRECTORY_OPTIONS = [
    "Current directory (./)",
    "Downloads directory (~/Downloads)",
    "Documents directory (~/Documents)",
    "Videos directory (~/Videos)",
    "Custom path (enter manually)",
]


def choose_download_directory(prompts: PromptProvider, cli_dir: Optional[Path] = None) -> Path:
    if cli_dir is not None:
        return Path(cli_dir).expanduser()

    choice = prompts.select("Select download directory", DIRECTORY_OPTIONS, default=0)
    if choice == 0:
        return Path(".")
    if choice == 1:
        return Path.home() / "Downloads"
    if choice == 2:
        return Path.home() / "Documents"
    if choice == 3:
        return Path.home() / "Videos"
    return Path(prompts.text("Enter custom download path", "./downloads")).expanduser()


def ensure_dir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreateFailed(str(path), exc.strerror or str(exc)) from exc
    return path


def choose_kind(prompts: PromptProvider) -> MediaKind:
    choice = prompts.select("Select download type", ["Video", "Audio"], default=0)
    return MediaKind.VIDEO if choice == 0 else MediaKind.AUDIO


def choose_video_format(prompts: PromptProvider, catalog: FormatCatalog, output_dir: Path) -> str:
    audio = best_audio(catalog)
    options = video_quality_options(catalog)

    heading("Available Video Resolutions (MP4 only):")
    labels = [f"{o.label}  {o.format.description}" for o in options]
    idx = prompts.select("Select video quality (will be combined with best audio)", labels, default=0)
    selected = options[idx]

    heading("Starting download...")
    typer.echo(f"Quality: {selected.label}")
    typer.echo(f"Video format: {selected.format.id} (MP4)")
    typer.echo(f"Audio format: {audio.id} ({audio.description})")
    typer.echo(f"Download location: {output_dir}")
    return combined_spec(selected.format, audio)


def choose_audio_format(prompts: PromptProvider, catalog: FormatCatalog, output_dir: Path) -> str:
    top = audio_options(catalog)

    heading("Available Audio Formats:")
    if len(top) < len(catalog.audio):
        typer.secho(
            f"Showing only top {len(top)} audio formats. Use verbose mode (-v) to see all.",
            fg=typer.colors.YELLOW,
        )

    labels = [f"{audio_label(f)}  {f.description}" for f in top]
    labels.append("Best audio (automatic selection)")
    labels.append("Custom format (enter format ID directly)")
    idx = prompts.select("Select audio format", labels, default=len(labels) - 2)

    if idx < len(top):
        format_spec = top[idx].id
    elif idx == len(top):
        format_spec = "bestaudio"
    else:
        format_spec = prompts.text(
            "Enter format ID or format specification (e.g. '140' or 'bestaudio')",
            "bestaudio",
        )

    heading("Starting audio download...")
    typer.echo(f"Format specification: {format_spec}")
    typer.echo(f"Download location: {output_dir}")
    return format_spec


# ----------------------------
# Flow
# ----------------------------
def _retry_notice(result: RunResult) -> None:
    typer.secho(
        "Download failed with primary format. Retrying with alternative method...",
        fg=typer.colors.YELLOW,
        bold=True,
    )


def download_media(
    url: str,
    output_dir: Path,
    prompts: PromptProvider,
    runner: Runner,
    verbose: bool = False,
) -> DownloadOutcome:
    typer.secho("Checking available formats...", fg=typer.colors.GREEN, bold=True)
    listing = list_formats(runner, url)
    if verbose:
        heading("Available formats (raw):")
        typer.echo(listing)

    catalog = FormatCatalog.from_listing(listing)
    logger.debug(
        "Parsed %d video resolutions, %d audio formats",
        len(catalog.video),
        len(catalog.audio),
    )

    kind = choose_kind(prompts)
    if kind is MediaKind.VIDEO:
        format_spec = choose_video_format(prompts, catalog, output_dir)
    else:
        format_spec = choose_audio_format(prompts, catalog, output_dir)

    outcome = download_with_fallback(
        runner,
        url,
        format_spec,
        output_template(output_dir, kind),
        kind,
        on_retry=_retry_notice,
    )

    done = "Download" if kind is MediaKind.VIDEO else "Audio download"
    typer.secho(f"{done} completed successfully!", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"File saved to: {output_dir}")
    return outcome


def run(
    url: Optional[str] = None,
    output_dir: Optional[Path] = None,
    verbose: bool = False,
    prompts: Optional[PromptProvider] = None,
    runner: Optional[Runner] = None,
) -> DownloadOutcome:
    executable = ensure_ytdlp(YTDLP_BIN)
    if prompts is None:
        prompts = ConsolePrompts()
    if runner is None:
        runner = SubprocessRunner(executable, verbose=verbose)

    print_banner()

    if not url:
        url = prompts.text("Enter the URL to download")

    target = ensure_dir(choose_download_directory(prompts, output_dir))
    typer.echo(f"Download directory: {target}")

    return download_media(url, target, prompts, runner, verbose=verbose)


app = typer.Typer(
    add_completion=False,
    help="A versatile media downloader supporting YouTube and other platforms",
)


@app.command()
def cli(
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Optional URL to download directly"),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Output directory for downloaded files (prompted for when omitted)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show raw format listings and commands"),
) -> None:
    configure_logging(verbose)
    try:
        run(url, output_dir, verbose)
    except ToolNotFound as exc:
        print_install_hints(exc.executable)
        raise typer.Exit(code=exc.exit_code)
    except DownloaderError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, bold=True, err=True)
        raise typer.Exit(code=exc.exit_code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
