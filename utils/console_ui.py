"""Console presentation helpers for the attack harness."""
from __future__ import annotations

import os
import shutil
import sys
from typing import Optional

import colorama
import pyfiglet
from colorama import Fore, Style

__all__ = [
    "init",
    "banner",
    "step_header",
    "section",
    "kv",
    "bullet",
    "success",
    "warning",
    "error",
    "elapsed",
    "rule",
    "line",
    "recovered",
]

_width = 100
_plain_mode = False
_symbols = {"success": "✓", "warning": "!", "error": "✗", "bullet": "•"}
_colors = {"success": "", "warning": "", "error": "", "step": "", "data": ""}


def init(plain: bool = False) -> None:
    """Pick width, colours and symbols for the current terminal."""

    global _width, _plain_mode, _symbols, _colors

    _width = shutil.get_terminal_size(fallback=(100, 24)).columns or 100
    is_tty = bool(getattr(sys.stdout, "isatty", lambda: False)())
    _plain_mode = plain or bool(os.environ.get("NO_COLOR")) or not is_tty

    if _plain_mode:
        _symbols = {"success": "[OK]", "warning": "[!]", "error": "[X]", "bullet": "-"}
        _colors = {key: "" for key in _colors}
        return

    colorama.init(autoreset=True)
    _symbols = {"success": "✓", "warning": "!", "error": "✗", "bullet": "•"}
    _colors = {
        "success": Fore.GREEN + Style.BRIGHT,
        "warning": Fore.YELLOW + Style.BRIGHT,
        "error": Fore.RED + Style.BRIGHT,
        "step": Fore.CYAN + Style.BRIGHT,
        "data": Fore.MAGENTA,
    }


def _apply(kind: str, message: str) -> str:
    prefix = _colors.get(kind, "")
    if not prefix:
        return message
    return f"{prefix}{message}{Style.RESET_ALL}"


def rule(char: str = "=", width: Optional[int] = None) -> None:
    count = width if width is not None else _width
    print(char * max(1, count))


def banner(title: str) -> None:
    if _plain_mode:
        print(f"=== {title} ===".center(_width))
        return
    print(pyfiglet.figlet_format(title, width=_width))


def step_header(i: int, n: int, title: str) -> None:
    print(_apply("step", f"[{i}/{n}] Running: {title}"))


def section(title: str) -> None:
    rule("=")
    print(f" {title.upper()}")
    rule("=")


def kv(key: str, value: str) -> None:
    print(f"{key}: {value}")


def bullet(msg: str) -> None:
    print(f"{_symbols['bullet']} {msg}")


def success(msg: str) -> None:
    print(_apply("success", f"{_symbols['success']} {msg}"))


def warning(msg: str) -> None:
    print(_apply("warning", f"{_symbols['warning']} {msg}"))


def error(msg: str) -> None:
    print(_apply("error", f"{_symbols['error']} {msg}"))


def elapsed(prefix: str, seconds: float) -> None:
    print(f"{prefix} {seconds:.2f}s")


def line() -> None:
    rule("-")


def recovered(label: str, data: bytes, limit: int = 96) -> None:
    """Show recovered bytes, printable when possible, truncated to ``limit``."""

    shown = data[:limit]
    text = shown.decode("ascii", errors="backslashreplace")
    more = f" ... (+{len(data) - limit} bytes)" if len(data) > limit else ""
    print(f"{label}: {_apply('data', repr(text))}{more}")
