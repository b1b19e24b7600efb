# console.py
from __future__ import annotations

import sys
from typing import Optional, TextIO


class Console:
    """User-facing terminal output for the chat loop."""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def prompt(self) -> str:
        return "you> "

    def banner(self, text: str) -> None:
        print(text, file=self.out, flush=True)

    def assistant(self, text: str) -> None:
        print(f"assistant> {text}", file=self.out, flush=True)

    def tool(self, name: str, ok: bool) -> None:
        mark = "✓" if ok else "✗"
        print(f"  [{mark} {name}]", file=self.out, flush=True)

    def finish_turn(self) -> None:
        print("", file=self.out, flush=True)

    def error(self, message: str) -> None:
        print(f"[error] {message}", file=self.err, flush=True)

    def goodbye(self) -> None:
        print("bye!", file=self.out, flush=True)
