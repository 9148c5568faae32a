"""Clone-or-update of source checkouts, pinned to a revision when one is given."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Literal

from slamstack.commands import Command, CommandRunner, run_checked
from slamstack.diagnostics import Diagnostics
from slamstack.models import RepoDescriptor

SyncAction = Literal["clone", "fetch"]


class RepoState(StrEnum):
    ABSENT = "absent"
    PRESENT = "present"
    PINNED = "pinned"


@dataclass(frozen=True, slots=True)
class SyncResult:
    name: str
    path: Path
    state: RepoState
    action: SyncAction
    revision: str


def inspect_checkout(path: Path) -> RepoState:
    return RepoState.PRESENT if (path / ".git").exists() else RepoState.ABSENT


def git(*args: str, cwd: Path | None = None) -> Command:
    if cwd is not None:
        return Command("git", ("-C", str(cwd), *args))
    return Command("git", args)


@dataclass(slots=True)
class RepositorySynchronizer:
    runner: CommandRunner
    diagnostics: Diagnostics

    def sync(
        self,
        name: str,
        repo: RepoDescriptor,
        path: Path,
        *,
        resync_submodules: bool = False,
    ) -> SyncResult:
        """Bring ``path`` to ``repo``'s pinned revision, or its latest default branch.

        ``resync_submodules`` re-initialises submodules on every run; without
        it submodules are only fetched by the initial recursive clone.
        """
        state = inspect_checkout(path)
        if state is RepoState.ABSENT:
            action: SyncAction = "clone"
            self.diagnostics.info(f"Cloning {name} from {repo.url}", stage=name)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._git(name, "clone", "--recursive", repo.url, str(path))
        else:
            action = "fetch"
            self.diagnostics.info(f"Updating existing {name} checkout at {path}", stage=name)
            self._git(name, "fetch", "--all", "--tags", cwd=path)
        state = RepoState.PRESENT

        if repo.pinned:
            self._git(name, "checkout", "--detach", repo.revision, cwd=path)
            state = RepoState.PINNED
            self.diagnostics.ok(f"{name} pinned at {repo.revision}", stage=name)
        else:
            self.diagnostics.ok(f"{name} tracking the remote default branch", stage=name)

        if resync_submodules:
            self._git(name, "submodule", "sync", "--recursive", cwd=path)
            self._git(name, "submodule", "update", "--init", "--recursive", cwd=path)

        return SyncResult(name=name, path=path, state=state, action=action, revision=repo.revision)

    def _git(self, name: str, *args: str, cwd: Path | None = None) -> None:
        run_checked(self.runner, git(*args, cwd=cwd), operation=f"{name} git {args[0]}")
