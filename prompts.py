"""
Interactive prompts.

The download flow only talks to a ``PromptProvider``; the console version
below reads from stdin, tests pass a scripted one.
"""

from __future__ import annotations

from typing import Protocol, Sequence

import typer

from errors import UserAborted


class PromptProvider(Protocol):
    def select(self, prompt: str, options: Sequence[str], default: int = 0) -> int:
        """Return the index of the chosen option."""
        ...

    def text(self, prompt: str, default: str | None = None) -> str:
        ...


def _input(prompt: str) -> str:
    try:
        return input(prompt)
    except (KeyboardInterrupt, EOFError):
        typer.echo("")
        raise UserAborted()


# ----------------------------
# Console UI helpers
# ----------------------------
def ask(prompt: str, default: str | None = None) -> str:
    if default is None:
        return _input(f"{prompt}: ").strip()
    v = _input(f"{prompt} [{default}]: ").strip()
    return v if v else default


def ask_int(prompt: str, default: int, minv: int | None = None, maxv: int | None = None) -> int:
    while True:
        s = ask(prompt, str(default))
        try:
            v = int(s)
            if minv is not None and v < minv:
                typer.echo(f"Invalid input: must be >= {minv}")
                continue
            if maxv is not None and v > maxv:
                typer.echo(f"Invalid input: must be <= {maxv}")
                continue
            return v
        except ValueError:
            typer.echo("Invalid input: please enter a number.")


class ConsolePrompts:
    """Numbered menus and free-text questions on the terminal."""

    def select(self, prompt: str, options: Sequence[str], default: int = 0) -> int:
        if not options:
            raise ValueError("select() needs at least one option")
        typer.secho(prompt, bold=True)
        for i, option in enumerate(options, start=1):
            typer.echo(f"  {i}) {option}")
        return ask_int("Choose", default + 1, 1, len(options)) - 1

    def text(self, prompt: str, default: str | None = None) -> str:
        while True:
            value = ask(prompt, default)
            if value:
                return value
            typer.echo("Value cannot be empty.")
