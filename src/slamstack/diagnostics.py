"""Leveled, optionally colored diagnostics written to stderr.

Every message is also kept as a structured record so a run can be inspected
or exported after the fact, whether or not it was printed.
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any, Literal

from rich.console import Console
from rich.markup import escape

Level = Literal["ok", "info", "warn", "fail"]

LEVEL_STYLES: dict[Level, tuple[str, str]] = {
    "ok": ("+", "green"),
    "info": ("*", "blue"),
    "warn": ("!", "yellow"),
    "fail": ("x", "bold red"),
}


def color_supported(stream: IO[str], *, no_color: bool) -> bool:
    """Resolve whether ANSI styling should be used for ``stream``."""
    if no_color:
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


@dataclass(slots=True)
class Diagnostics:
    quiet: bool = False
    color: bool = False
    stream: IO[str] | None = None
    records: list[dict[str, Any]] = field(default_factory=list)
    _console: Console | None = field(default=None, init=False, repr=False)

    @classmethod
    def for_terminal(
        cls, *, quiet: bool = False, no_color: bool = False, stream: IO[str] | None = None
    ) -> Diagnostics:
        target = stream if stream is not None else sys.stderr
        return cls(quiet=quiet, color=color_supported(target, no_color=no_color), stream=target)

    @property
    def console(self) -> Console:
        if self._console is None:
            self._console = Console(
                file=self.stream if self.stream is not None else sys.stderr,
                force_terminal=self.color,
                no_color=not self.color,
                color_system="standard" if self.color else None,
                highlight=False,
                emoji=False,
                soft_wrap=True,
                quiet=self.quiet,
            )
        return self._console

    def ok(self, message: str, *, stage: str | None = None, **extra: Any) -> None:
        self.emit("ok", message, stage=stage, extra=extra)

    def info(self, message: str, *, stage: str | None = None, **extra: Any) -> None:
        self.emit("info", message, stage=stage, extra=extra)

    def warn(self, message: str, *, stage: str | None = None, **extra: Any) -> None:
        self.emit("warn", message, stage=stage, extra=extra)

    def fail(self, message: str, *, stage: str | None = None, **extra: Any) -> None:
        self.emit("fail", message, stage=stage, extra=extra)

    def emit(
        self,
        level: Level,
        message: str,
        *,
        stage: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        record: dict[str, Any] = {"level": level, "stage": stage, "message": message}
        if extra:
            record["extra"] = extra
        self.records.append(record)
        if self.quiet:
            return
        tag, style = LEVEL_STYLES[level]
        self.console.print(f"[{style}]\\[{tag}][/{style}] {escape(message)}")

    def records_for_stage(self, stage: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("stage") == stage]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True, default=str) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path
