"""Typed provisioning errors with stable codes and process exit statuses."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum

EXIT_FAILURE = 1
EXIT_BAD_USAGE = 2
EXIT_CONFIGURATION = 2


class ErrorCode(StrEnum):
    """Stable error identifiers used in diagnostics and summaries."""

    GENERIC = "E_GENERIC"
    VALIDATION = "E_VALIDATION"
    USAGE = "E_USAGE"
    CONFIGURATION = "E_CONFIGURATION"
    TRANSIENT = "E_TRANSIENT"
    COMMAND = "E_COMMAND"


class SlamStackError(Exception):
    """Base error class that carries code, exit status, optional hint, and context."""

    code: str
    exit_status: int
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.GENERIC,
        exit_status: int = EXIT_FAILURE,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.exit_status = exit_status
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "exit_status": self.exit_status,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(SlamStackError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class UsageError(SlamStackError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = "Run with --help for usage.",
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.USAGE,
            exit_status=EXIT_BAD_USAGE,
            hint=hint,
            context=context,
        )


class ConfigurationError(SlamStackError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.CONFIGURATION,
            exit_status=EXIT_CONFIGURATION,
            hint=hint,
            context=context,
        )


class CommandError(SlamStackError):
    """An external command failed; the process exits with the command's own status."""

    returncode: int

    def __init__(
        self,
        message: str,
        *,
        returncode: int,
        code: ErrorCode = ErrorCode.COMMAND,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            exit_status=_exit_status_for(returncode),
            hint=hint,
            context={**(context or {}), "returncode": str(returncode)},
        )
        self.returncode = returncode


class TransientCommandError(CommandError):
    """A network-sensitive command kept failing after every retry attempt."""

    attempts: int

    def __init__(
        self,
        message: str,
        *,
        returncode: int,
        attempts: int,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(
            message,
            returncode=returncode,
            code=ErrorCode.TRANSIENT,
            hint=hint,
            context={**(context or {}), "attempts": str(attempts)},
        )
        self.attempts = attempts


def _exit_status_for(returncode: int) -> int:
    # Negative return codes mean the child was killed by a signal.
    if returncode < 0:
        return 128 - returncode
    if returncode == 0 or returncode > 255:
        return EXIT_FAILURE
    return returncode


__all__ = [
    "EXIT_BAD_USAGE",
    "EXIT_CONFIGURATION",
    "EXIT_FAILURE",
    "CommandError",
    "ConfigurationError",
    "ErrorCode",
    "SlamStackError",
    "TransientCommandError",
    "UsageError",
    "ValidationError",
]
