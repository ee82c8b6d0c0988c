import pytest

from errors import NoCompatibleFormat
from formats import (
    FormatCatalog,
    audio_label,
    audio_options,
    best_audio,
    bitrate_of,
    combined_spec,
    parse_available_formats,
    parse_format_line,
    video_quality_options,
)
from models import FormatDescriptor, MediaKind


def video(id, height, rate="1000k", ext="mp4", size=None):
    return FormatDescriptor(
        id=id,
        extension=ext,
        description=f"{height}p {rate}",
        resolution=height,
        kind=MediaKind.VIDEO,
        filesize=size,
    )


def audio(id, ext):
    return FormatDescriptor(id=id, extension=ext, description="audio only", kind=MediaKind.AUDIO)


# ----------------------------
# Listing rows
# ----------------------------
def test_short_lines_are_rejected():
    assert parse_format_line("140 m4a") is None
    assert parse_format_line("") is None


def test_id_and_extension_are_first_tokens():
    fmt = parse_format_line("sb0  mhtml  storyboard")
    assert fmt.id == "sb0"
    assert fmt.extension == "mhtml"
    assert fmt.description == "storyboard"


@pytest.mark.parametrize("token, height", [
    ("1920x1080", 1080),
    ("abcxdef", None),
    ("1080p", None),
    ("256x1_080", None),
    ("x-5", None),
    ("640x+360", None),
    ("640x\u0661\u0660\u0668\u0660", None),
    ("1920x", None),
])
def test_resolution(token, height):
    fmt = parse_format_line(f"22 mp4 {token} 30")
    assert fmt.resolution == height


def test_audio_only_anywhere_in_line_is_audio():
    fmt = parse_format_line("140 m4a audio only 128k")
    assert fmt.kind is MediaKind.AUDIO
    assert fmt.is_audio and not fmt.is_video

    # whole-line match, even inside the notes column
    assert parse_format_line("18 mp4 640x360 notes: audio only fallback").is_audio


def test_line_without_marker_is_video():
    fmt = parse_format_line("299 mp4 1920x1080 2500k")
    assert fmt.kind is MediaKind.VIDEO
    assert fmt.is_video and not fmt.is_audio


def test_size_and_description():
    fmt = parse_format_line("299 mp4 1920x1080 60 100.5 MiB 2500k https")
    assert fmt.filesize == "100.5 MiB"
    assert fmt.description == "1920x1080 60"


@pytest.mark.parametrize("marker", ["~", "≈"])
def test_approximate_size_marker_is_stripped(marker):
    fmt = parse_format_line(f"299 mp4 1920x1080 {marker}100.5 MiB 2500k")
    assert fmt.filesize == "100.5 MiB"


def test_unit_without_number_is_not_a_size():
    fmt = parse_format_line("299 mp4 1920x1080 | MiB 2500k")
    assert fmt.filesize is None
    assert fmt.description == "1920x1080 | MiB 2500k"


def test_listing_skips_headers_info_and_blank_lines(listing):
    formats = parse_available_formats(listing)
    assert [f.id for f in formats] == ["140", "251", "299"]


def test_listing_is_deterministic(listing):
    assert parse_available_formats(listing) == parse_available_formats(listing)


# ----------------------------
# Grouping and selection
# ----------------------------
def test_catalog_groups_video_by_height_and_keeps_audio_order():
    no_height = FormatDescriptor(id="sb0", extension="mhtml", description="storyboard")
    catalog = FormatCatalog.from_formats([
        video("137", 1080), audio("251", "webm"), video("22", 720),
        video("299", 1080), no_height, audio("140", "m4a"),
    ])
    assert [f.id for f in catalog.video[1080]] == ["137", "299"]
    assert [f.id for f in catalog.video[None]] == ["sb0"]
    assert [f.id for f in catalog.audio] == ["251", "140"]


@pytest.mark.parametrize("order", [["140", "251"], ["251", "140"]])
def test_best_audio_prefers_m4a(order):
    exts = {"140": "m4a", "251": "webm"}
    catalog = FormatCatalog.from_formats([audio(i, exts[i]) for i in order])
    assert best_audio(catalog).id == "140"


def test_best_audio_falls_back_to_first_listed():
    catalog = FormatCatalog.from_formats([audio("251", "webm"), audio("250", "webm")])
    assert best_audio(catalog).id == "251"


def test_best_audio_without_audio_is_a_typed_error():
    catalog = FormatCatalog.from_formats([video("299", 1080)])
    with pytest.raises(NoCompatibleFormat) as exc:
        best_audio(catalog)
    assert exc.value.kind is MediaKind.AUDIO


@pytest.mark.parametrize("description, rate", [
    ("1080p 2500k https", 2500),
    ("audio only", 0),
    ("fastk 300k", 0),
    ("1_500k https", 0),
    ("-300k", 0),
    ("\u0661\u0662\u0668k", 0),
])
def test_bitrate_of(description, rate):
    assert bitrate_of(description) == rate


def test_video_options_keep_top_five_heights():
    heights = [1080, 1080, 720, 480, 360, 240, 144]
    catalog = FormatCatalog.from_formats([video(str(i), h) for i, h in enumerate(heights)])
    options = video_quality_options(catalog)
    assert [o.resolution for o in options] == [1080, 720, 480, 360, 240]


def test_video_options_pick_highest_bitrate_mp4():
    catalog = FormatCatalog.from_formats([
        video("136", 720, "1500k"),
        video("298", 720, "3000k"),
        video("247", 720, "4000k", ext="webm"),
    ])
    [option] = video_quality_options(catalog)
    assert option.format.id == "298"


def test_video_options_drop_heights_without_mp4():
    catalog = FormatCatalog.from_formats([video("248", 1080, ext="webm"), video("22", 720)])
    assert [o.resolution for o in video_quality_options(catalog)] == [720]


def test_video_options_without_mp4_is_a_typed_error():
    catalog = FormatCatalog.from_formats([video("248", 1080, ext="webm"), audio("140", "m4a")])
    with pytest.raises(NoCompatibleFormat) as exc:
        video_quality_options(catalog)
    assert exc.value.kind is MediaKind.VIDEO


def test_quality_label_includes_size():
    catalog = FormatCatalog.from_formats([video("299", 1080, size="100.5 MiB")])
    assert video_quality_options(catalog)[0].label == "1080p MP4 (~100.5 MiB)"


def test_audio_options_and_labels():
    catalog = FormatCatalog.from_formats([audio(str(i), "webm") for i in range(7)])
    top = audio_options(catalog)
    assert [f.id for f in top] == ["0", "1", "2", "3", "4"]
    assert audio_label(top[0]) == "0 - webm"


def test_listing_to_combined_spec():
    text = "140 m4a audio only 128k\n299 mp4 1920x1080 2500k\n"
    catalog = FormatCatalog.from_listing(text)
    [option] = video_quality_options(catalog)
    assert option.label == "1080p MP4"
    assert combined_spec(option.format, best_audio(catalog)) == "299+140"
