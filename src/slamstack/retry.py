"""Bounded retry with linear backoff for network-sensitive commands."""

from __future__ import annotations

import time
from collections.abc import Callable

from slamstack.commands import Command, CommandResult, CommandRunner
from slamstack.diagnostics import Diagnostics
from slamstack.errors import TransientCommandError, ValidationError

DEFAULT_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 5.0


def backoff_delay(attempt: int, backoff: float = DEFAULT_BACKOFF_SECONDS) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
    return attempt * backoff


def run_with_retry(
    runner: CommandRunner,
    command: Command,
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    backoff: float = DEFAULT_BACKOFF_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    diagnostics: Diagnostics | None = None,
    operation: str = "retry",
) -> CommandResult:
    """Run ``command`` until it succeeds or ``attempts`` runs have failed."""
    if attempts < 1:
        raise ValidationError(f"Retry attempts must be positive, got {attempts}.")

    for attempt in range(1, attempts):
        result = runner.run(command)
        if result.ok:
            return result
        delay = backoff_delay(attempt, backoff)
        if diagnostics is not None:
            diagnostics.warn(
                f"Attempt {attempt}/{attempts} failed (exit {result.returncode}): "
                f"{command.text()}; retrying in {delay:g}s",
                stage=operation,
            )
        sleep(delay)

    result = runner.run(command)
    if result.ok:
        return result
    raise TransientCommandError(
        f"Command still failing after {attempts} attempts during {operation}.",
        returncode=result.returncode,
        attempts=attempts,
        hint="Check network connectivity and package mirrors, then re-run.",
        context={"operation": operation, "command": command.text()},
    )
