"""Shared test fixtures."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from slamstack.commands import Command, CommandResult
from slamstack.diagnostics import Diagnostics
from slamstack.pipeline import Pipeline


@dataclass
class FakeRunner:
    """Records commands instead of running them.

    ``returncodes`` maps a substring of the command text to the exit codes the
    next matching invocations return, in order. Unmatched commands succeed.
    A successful ``git clone`` creates the checkout's ``.git`` directory.
    """

    returncodes: dict[str, list[int]] = field(default_factory=dict)
    calls: list[Command] = field(default_factory=list)

    def run(self, command: Command) -> CommandResult:
        self.calls.append(command)
        text = command.text()
        returncode = 0
        for needle, codes in self.returncodes.items():
            if needle in text and codes:
                returncode = codes.pop(0)
                break
        if returncode == 0 and command.program == "git" and command.args[:1] == ("clone",):
            (Path(command.args[-1]) / ".git").mkdir(parents=True, exist_ok=True)
        return CommandResult(command=command, returncode=returncode)

    @property
    def texts(self) -> list[str]:
        return [command.text() for command in self.calls]

    def programs(self) -> set[str]:
        return {command.program for command in self.calls}


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def diagnostics() -> Diagnostics:
    """Collects records without printing anything."""
    return Diagnostics(quiet=True)


@pytest.fixture
def stderr() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def debian_marker(tmp_path: Path) -> Path:
    marker = tmp_path / "etc" / "debian_version"
    marker.parent.mkdir(parents=True)
    marker.write_text("12.5\n", encoding="utf-8")
    return marker


@pytest.fixture
def system_header(tmp_path: Path) -> Path:
    header = tmp_path / "include" / "suitesparse" / "cs.h"
    header.parent.mkdir(parents=True)
    header.write_text("/* cs.h */\n", encoding="utf-8")
    return header


@pytest.fixture
def make_pipeline(
    runner: FakeRunner,
    diagnostics: Diagnostics,
    debian_marker: Path,
    system_header: Path,
):
    """Build a pipeline wired to fakes; keyword arguments override any collaborator."""

    def factory(**overrides: object) -> Pipeline:
        sleeps: list[float] = []
        options: dict[str, object] = {
            "diagnostics": diagnostics,
            "runner": runner,
            "geteuid": lambda: 1000,
            "which": lambda name: f"/usr/bin/{name}",
            "marker": debian_marker,
            "probe": lambda: True,
            "system_header": system_header,
            "sleep": sleeps.append,
        }
        options.update(overrides)
        return Pipeline(**options)  # type: ignore[arg-type]

    return factory
