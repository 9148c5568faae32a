"""Provision a Debian host with pinned source builds of g2o and openvslam."""

from .commands import Command, CommandResult, CommandRunner, SubprocessRunner
from .diagnostics import Diagnostics
from .errors import (
    CommandError,
    ConfigurationError,
    ErrorCode,
    SlamStackError,
    TransientCommandError,
    UsageError,
    ValidationError,
)
from .models import BuildTarget, Config, HeaderResolution, RepoDescriptor
from .options import parse_options
from .pipeline import Pipeline, Summary
from .repository import RepositorySynchronizer, RepoState, SyncResult
from .retry import run_with_retry

__all__ = [
    "BuildTarget",
    "Command",
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "Config",
    "ConfigurationError",
    "Diagnostics",
    "ErrorCode",
    "HeaderResolution",
    "Pipeline",
    "RepoDescriptor",
    "RepoState",
    "RepositorySynchronizer",
    "SlamStackError",
    "SubprocessRunner",
    "Summary",
    "SyncResult",
    "TransientCommandError",
    "UsageError",
    "ValidationError",
    "parse_options",
    "run_with_retry",
]
