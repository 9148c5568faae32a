"""Core typed records threaded through the provisioning pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal

Toggle = str
HeaderKind = Literal["system", "vendored", "missing"]

ON = "ON"
OFF = "OFF"

DEFAULT_PREFIX = Path("/usr/local")
DEFAULT_SRC_DIRNAME = "slamstack-src"
DEFAULT_JOBS = 2
CXX_STANDARD = "17"
BUILD_TYPE = "Release"

G2O_REPO = "https://github.com/RainerKuemmerle/g2o.git"
G2O_COMMIT = "9b41a4ea5ade8e1250b9c1b279f3a9c098811b5a"
OPENVSLAM_REPO = "https://github.com/laxnpander/openvslam.git"
OPENVSLAM_COMMIT = ""


@dataclass(frozen=True, slots=True)
class RepoDescriptor:
    """A source repository and an optional pinned revision.

    An empty ``revision`` means the checkout tracks the remote default branch.
    """

    url: str
    revision: str = ""

    @property
    def pinned(self) -> bool:
        return bool(self.revision)


@dataclass(frozen=True, slots=True)
class Config:
    """Immutable configuration record produced by option parsing.

    ``escalation``, ``generator`` and ``csparse_include`` are derived fields.
    They are filled in once via :meth:`derive` and never recomputed.
    """

    prefix: Path = DEFAULT_PREFIX
    src_dir: Path = field(default_factory=lambda: Path.home() / DEFAULT_SRC_DIRNAME)
    g2o: RepoDescriptor = RepoDescriptor(url=G2O_REPO, revision=G2O_COMMIT)
    openvslam: RepoDescriptor = RepoDescriptor(url=OPENVSLAM_REPO, revision=OPENVSLAM_COMMIT)
    jobs: int = DEFAULT_JOBS
    build_examples: Toggle = ON
    build_tests: Toggle = ON
    use_pangolin: Toggle = OFF
    skip_apt: bool = False
    quiet: bool = False
    color: bool = True
    summary_out: Path | None = None
    escalation: tuple[str, ...] | None = None
    generator: str | None = None
    csparse_include: Path | None = None

    @property
    def g2o_dir(self) -> Path:
        return self.src_dir / "g2o"

    @property
    def openvslam_dir(self) -> Path:
        return self.src_dir / "openvslam"

    def derive(
        self,
        *,
        escalation: tuple[str, ...] | None = None,
        generator: str | None = None,
        csparse_include: Path | None = None,
    ) -> Config:
        """Return a copy with the given derived fields set.

        A derived field that already has a value is left untouched.
        """
        return replace(
            self,
            escalation=self.escalation if self.escalation is not None else escalation,
            generator=self.generator if self.generator is not None else generator,
            csparse_include=(
                self.csparse_include if self.csparse_include is not None else csparse_include
            ),
        )


@dataclass(frozen=True, slots=True)
class HeaderResolution:
    kind: HeaderKind
    path: Path | None = None

    @property
    def include_dir(self) -> Path | None:
        return self.path.parent if self.path is not None else None


@dataclass(frozen=True, slots=True)
class BuildTarget:
    """A native CMake project checked out and built under the source root."""

    name: str
    source_dir: Path
    options: tuple[tuple[str, str], ...] = ()

    @property
    def build_dir(self) -> Path:
        return self.source_dir / "build"


__all__ = [
    "BUILD_TYPE",
    "CXX_STANDARD",
    "DEFAULT_JOBS",
    "DEFAULT_PREFIX",
    "DEFAULT_SRC_DIRNAME",
    "G2O_COMMIT",
    "G2O_REPO",
    "OFF",
    "ON",
    "OPENVSLAM_COMMIT",
    "OPENVSLAM_REPO",
    "BuildTarget",
    "Config",
    "HeaderKind",
    "HeaderResolution",
    "RepoDescriptor",
    "Toggle",
]
