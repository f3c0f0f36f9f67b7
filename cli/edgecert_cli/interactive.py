from __future__ import annotations

import sys
from typing import IO, Iterable

import questionary
import typer
from questionary import Choice, Style

from edgecert_core import CertificateStrategy

from . import console

_SELECT_STYLE = Style(
    [
        ("pointer", "ansiyellow bold"),
        ("selected", "ansicyan bold"),
        ("highlighted", "ansicyan bold"),
        ("instruction", "ansiblack"),
    ]
)


def is_interactive() -> bool:
    return sys.stdin.isatty()


def select_strategy(choices: Iterable[CertificateStrategy]) -> CertificateStrategy:
    items = [Choice(title=strategy.label, value=strategy.value) for strategy in choices]
    try:
        result = questionary.select(
            "CDN proxy detected. Choose how to obtain the certificate",
            choices=items,
            default=None,
            use_shortcuts=False,
            pointer="▶",
            style=_SELECT_STYLE,
        ).ask()
    except KeyboardInterrupt:
        _abort_interactive()
    if result is None:
        _abort_interactive()
    return CertificateStrategy(result)


def confirm_choice(message: str, *, default: bool = False) -> bool:
    choices = [
        Choice(title="Yes", value=True),
        Choice(title="No", value=False),
    ]
    try:
        result = questionary.select(
            message,
            choices=choices,
            default=default,
            use_shortcuts=False,
            pointer="▶",
            style=_SELECT_STYLE,
        ).ask()
    except KeyboardInterrupt:
        _abort_interactive()
    if result is None:
        _abort_interactive()
    return bool(result)


def wait_for_enter(message: str) -> None:
    typer.prompt(message, default="", show_default=False)


def read_pem_block(label: str, stream: IO[str] | None = None) -> str:
    """Read pasted PEM content until its END line or EOF (Ctrl+D)."""
    source = stream or sys.stdin
    console.info(f"Paste the {label} (ends at the -----END line, or Ctrl+D):")
    lines: list[str] = []
    for line in source:
        lines.append(line.rstrip("\r\n"))
        if line.strip().startswith("-----END "):
            break
    return "\n".join(lines).strip()


def _abort_interactive() -> None:
    console.err("Aborted by user.")
    raise typer.Exit(code=1)
