"""Host clipboard access through the platform's command-line tools."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Sequence

from clipnote.capture.clipboard import TEXT_MIME, ClipboardUnavailableError

# X11 targets that carry plain text under a non-MIME name.
_X11_TEXT_TARGETS = ("UTF8_STRING", "text/plain;charset=utf-8", "STRING", "TEXT")


def _run(args: list[str], timeout: float) -> bytes:
    try:
        proc = subprocess.run(args, capture_output=True, timeout=timeout, check=False)
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        raise ClipboardUnavailableError(f"{args[0]}: {e}") from e
    if proc.returncode != 0:
        err = proc.stderr.decode("utf-8", errors="replace").strip()
        raise ClipboardUnavailableError(f"{args[0]} exited with {proc.returncode}: {err}")
    return proc.stdout


class CommandEntry:
    """The single clipboard entry exposed by wl-paste, xclip or pbpaste."""

    def __init__(self, clipboard: CommandClipboard, targets: Sequence[str]) -> None:
        self._clipboard = clipboard
        self._aliases: dict[str, str] = {}
        types: list[str] = []
        for target in targets:
            if "/" in target:
                mime = target.split(";", 1)[0].strip()
                if mime not in self._aliases:
                    self._aliases[mime] = target
                    types.append(mime)
        if TEXT_MIME not in self._aliases:
            for target in _X11_TEXT_TARGETS:
                if target in targets:
                    self._aliases[TEXT_MIME] = target
                    types.append(TEXT_MIME)
                    break
        self._types = types

    @property
    def types(self) -> Sequence[str]:
        return self._types

    def get_type(self, mime: str) -> bytes:
        return self._clipboard.fetch(self._aliases.get(mime, mime))


class CommandClipboard:
    """Clipboard backend that shells out to wl-paste (Wayland), xclip (X11) or pbpaste (macOS)."""

    def __init__(self, tool: str | None = None, *, timeout: float = 2.0) -> None:
        self._tool = tool
        self.timeout = timeout

    @property
    def tool(self) -> str:
        if self._tool is None:
            self._tool = detect_tool()
        return self._tool

    def _targets(self) -> list[str]:
        if self.tool == "wl-paste":
            out = _run(["wl-paste", "--list-types"], self.timeout)
        elif self.tool == "xclip":
            out = _run(["xclip", "-selection", "clipboard", "-t", "TARGETS", "-o"], self.timeout)
        else:
            return [TEXT_MIME]
        return [line.strip() for line in out.decode("utf-8", errors="replace").splitlines() if line.strip()]

    def fetch(self, target: str) -> bytes:
        if self.tool == "wl-paste":
            return _run(["wl-paste", "--no-newline", "--type", target], self.timeout)
        if self.tool == "xclip":
            return _run(["xclip", "-selection", "clipboard", "-t", target, "-o"], self.timeout)
        if target != TEXT_MIME:
            raise ClipboardUnavailableError(f"pbpaste cannot read {target}")
        return _run(["pbpaste"], self.timeout)

    def read(self) -> list[CommandEntry]:
        return [CommandEntry(self, self._targets())]

    def read_text(self) -> str:
        if self.tool == "wl-paste":
            out = _run(["wl-paste", "--no-newline"], self.timeout)
        elif self.tool == "xclip":
            out = _run(["xclip", "-selection", "clipboard", "-o"], self.timeout)
        else:
            out = _run(["pbpaste"], self.timeout)
        return out.decode("utf-8", errors="replace")


def detect_tool() -> str:
    """Pick the clipboard tool for this session, or raise if none is installed."""
    if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-paste"):
        return "wl-paste"
    if shutil.which("xclip"):
        return "xclip"
    if shutil.which("pbpaste"):
        return "pbpaste"
    raise ClipboardUnavailableError("No clipboard tool found (install wl-clipboard or xclip)")
