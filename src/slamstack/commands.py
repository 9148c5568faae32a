"""Typed external command descriptors and the runners that execute them."""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Protocol

from slamstack.errors import CommandError

# Statuses a POSIX shell reports for commands it cannot run.
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


def exit_zero(returncode: int) -> bool:
    return returncode == 0


@dataclass(frozen=True, slots=True)
class Command:
    """One invocation of an external program.

    ``env`` entries are passed through ``env`` so they survive privilege
    escalation wrappers such as ``sudo``.
    """

    program: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None
    env: Mapping[str, str] = field(default_factory=dict)
    escalation: tuple[str, ...] = ()
    success: Callable[[int], bool] = field(default=exit_zero, compare=False)

    @property
    def argv(self) -> list[str]:
        argv = [*self.escalation]
        if self.env:
            argv.extend(["env", *(f"{key}={value}" for key, value in sorted(self.env.items()))])
        argv.extend([self.program, *self.args])
        return argv

    def text(self) -> str:
        return shlex.join(self.argv)

    def escalated(self, escalation: tuple[str, ...]) -> Command:
        return replace(self, escalation=escalation)


@dataclass(frozen=True, slots=True)
class CommandResult:
    command: Command
    returncode: int

    @property
    def ok(self) -> bool:
        return self.command.success(self.returncode)


class CommandRunner(Protocol):
    def run(self, command: Command) -> CommandResult:
        """Execute ``command`` to completion and report its exit status."""


@dataclass(slots=True)
class SubprocessRunner:
    """Runs commands on the host, streaming their output to the terminal."""

    def run(self, command: Command) -> CommandResult:
        try:
            completed = subprocess.run(
                command.argv,
                cwd=str(command.cwd) if command.cwd is not None else None,
                check=False,
            )
        except PermissionError:
            return CommandResult(command=command, returncode=EXIT_NOT_EXECUTABLE)
        except FileNotFoundError:
            return CommandResult(command=command, returncode=EXIT_NOT_FOUND)
        return CommandResult(command=command, returncode=completed.returncode)


def run_checked(runner: CommandRunner, command: Command, *, operation: str) -> CommandResult:
    """Run ``command`` once and raise :class:`CommandError` on failure."""
    result = runner.run(command)
    if not result.ok:
        raise CommandError(
            f"Command failed during {operation}.",
            returncode=result.returncode,
            hint="Inspect the command output above; fatal steps are not retried.",
            context={"operation": operation, "command": command.text()},
        )
    return result
