from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


class SetupError(RuntimeError):
    def __init__(self, message: str, *, stdout: str | None = None, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stdout = stdout or ""
        self.stderr = stderr or ""


@dataclass
class ExecContext:
    """Runs external tools and writes files on the local host.

    In dry-run mode nothing is executed or written; actions are recorded in
    ``planned`` so the caller can show them.
    """

    dry_run: bool = False
    planned: list[str] = field(default_factory=list)
    planned_files: dict[str, str] = field(default_factory=dict)

    def run(self, command: list[str]) -> subprocess.CompletedProcess:
        printable = " ".join(command)
        if self.dry_run:
            self.planned.append(f"run: {printable}")
            return subprocess.CompletedProcess(command, 0, stdout="", stderr="")
        logger.debug("run: %s", printable)
        return subprocess.run(command, text=True, capture_output=True)

    def run_checked(self, command: list[str], *, label: str) -> subprocess.CompletedProcess:
        res = self.run(command)
        if res.returncode != 0:
            raise SetupError(f"Failed to {label}.", stdout=res.stdout, stderr=res.stderr)
        return res

    def write_file(self, path: str | Path, content: str, *, mode: int = 0o644) -> None:
        target = Path(path)
        if self.dry_run:
            self.planned.append(f"write: {target} (mode {mode:o})")
            self.planned_files[str(target)] = content
            return
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            os.chmod(target, mode)
        except OSError as exc:
            raise SetupError(f"Failed to write {target}: {exc}") from exc

    def symlink(self, source: str | Path, link: str | Path) -> None:
        link_path = Path(link)
        if self.dry_run:
            self.planned.append(f"link: {link_path} -> {source}")
            return
        try:
            link_path.parent.mkdir(parents=True, exist_ok=True)
            if link_path.is_symlink() or link_path.exists():
                link_path.unlink()
            link_path.symlink_to(source)
        except OSError as exc:
            raise SetupError(f"Failed to link {link_path}: {exc}") from exc

    def remove(self, path: str | Path) -> None:
        target = Path(path)
        if self.dry_run:
            if target.is_symlink() or target.exists():
                self.planned.append(f"remove: {target}")
            return
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise SetupError(f"Failed to remove {target}: {exc}") from exc


def is_root() -> bool:
    return os.geteuid() == 0


def tail(text: str, *, limit: int = 8) -> str:
    if not text:
        return ""
    lines = text.splitlines()
    if len(lines) <= limit:
        return text
    return "\n".join(lines[-limit:])
