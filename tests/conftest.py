from __future__ import annotations

import pytest

from errors import UserAborted
from ytdlp import RunResult


LISTING = """\
[youtube] Extracting URL: https://www.youtube.com/watch?v=abc
[info] Available formats for abc:
ID  EXT  RESOLUTION FPS |   FILESIZE   TBR PROTO | VCODEC        ACODEC
-----------------------------------------------------------------------
140 m4a  audio only     |    3.2 MiB  128k https | audio only    mp4a.40.2
251 webm audio only     |    3.5 MiB  135k https | audio only    opus
299 mp4  1920x1080  60  |  ~100.5 MiB 2500k https | avc1.64002a   video only
"""


class FakeRunner:
    """Records every call and answers from a queue of results."""

    def __init__(self, listing: str = "", results: list[RunResult] | None = None):
        self.listing = listing
        self.results = list(results or [])
        self.calls: list[tuple] = []

    def run(self, operation, args):
        self.calls.append((operation, list(args)))
        if operation.value == "list-formats":
            return RunResult(0, self.listing, "")
        if self.results:
            return self.results.pop(0)
        return RunResult(0)

    @property
    def downloads(self):
        return [args for op, args in self.calls if op.value == "download"]


class ScriptedPrompts:
    """Answers prompts from fixed queues; an empty queue means the user gave up."""

    def __init__(self, choices=(), texts=()):
        self.choices = list(choices)
        self.texts = list(texts)
        self.asked: list[tuple[str, list[str]]] = []

    def select(self, prompt, options, default=0):
        self.asked.append((prompt, list(options)))
        if not self.choices:
            raise UserAborted()
        choice = self.choices.pop(0)
        return default if choice is None else choice

    def text(self, prompt, default=None):
        self.asked.append((prompt, []))
        if not self.texts:
            raise UserAborted()
        value = self.texts.pop(0)
        if value is None:
            return default
        return value


@pytest.fixture
def listing():
    return LISTING


@pytest.fixture
def fake_which(monkeypatch):
    monkeypatch.setattr("ytdlp.shutil.which", lambda name: f"/usr/bin/{name}")
