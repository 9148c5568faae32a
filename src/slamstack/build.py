"""Configure, build, and install CMake projects."""

from __future__ import annotations

import shutil
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from slamstack.commands import Command, CommandRunner, run_checked
from slamstack.diagnostics import Diagnostics
from slamstack.models import BUILD_TYPE, CXX_STANDARD, OFF, ON, BuildTarget, Config

NINJA_GENERATOR = "Ninja"
MAKE_GENERATOR = "Unix Makefiles"
CACHE_GENERATOR_KEY = "CMAKE_GENERATOR:INTERNAL="


def choose_generator(which: Callable[[str], str | None] = shutil.which) -> str:
    return NINJA_GENERATOR if which("ninja") is not None else MAKE_GENERATOR


def cached_generator(build_dir: Path) -> str | None:
    """Return the generator recorded in an existing CMake cache, if any."""
    cache = build_dir / "CMakeCache.txt"
    if not cache.is_file():
        return None
    for line in cache.read_text(encoding="utf-8", errors="replace").splitlines():
        if line.startswith(CACHE_GENERATOR_KEY):
            return line[len(CACHE_GENERATOR_KEY) :].strip()
    return None


def define(options: Sequence[tuple[str, str]]) -> list[str]:
    return [f"-D{key}={value}" for key, value in options]


def g2o_target(config: Config) -> BuildTarget:
    return BuildTarget(
        name="g2o",
        source_dir=config.g2o_dir,
        options=(
            ("BUILD_SHARED_LIBS", ON),
            ("BUILD_UNITTESTS", OFF),
            ("G2O_USE_CHOLMOD", OFF),
            ("G2O_USE_CSPARSE", ON),
            ("G2O_USE_OPENGL", OFF),
            ("G2O_USE_OPENMP", ON),
        ),
    )


def openvslam_target(config: Config) -> BuildTarget:
    options = [
        ("USE_SOCKET_PUBLISHER", OFF),
        ("USE_STACK_TRACE_LOGGER", ON),
        ("BUILD_TESTS", config.build_tests),
        ("BUILD_EXAMPLES", config.build_examples),
        ("USE_PANGOLIN_VIEWER", config.use_pangolin),
        ("INSTALL_PANGOLIN_VIEWER", config.use_pangolin),
    ]
    if config.csparse_include is not None:
        # Compile lines are run by a shell, so the path stays one word.
        options.append(("CMAKE_CXX_FLAGS", f'-I"{config.csparse_include}"'))
    return BuildTarget(name="openvslam", source_dir=config.openvslam_dir, options=tuple(options))


@dataclass(slots=True)
class CMakeProject:
    target: BuildTarget
    config: Config
    runner: CommandRunner
    diagnostics: Diagnostics

    @property
    def generator(self) -> str:
        return self.config.generator or MAKE_GENERATOR

    def configure_command(self) -> Command:
        return Command(
            "cmake",
            (
                "-S",
                str(self.target.source_dir),
                "-B",
                str(self.target.build_dir),
                "-G",
                self.generator,
                f"-DCMAKE_BUILD_TYPE={BUILD_TYPE}",
                f"-DCMAKE_INSTALL_PREFIX={self.config.prefix}",
                f"-DCMAKE_CXX_STANDARD={CXX_STANDARD}",
                *define(self.target.options),
            ),
        )

    def build_command(self) -> Command:
        return Command(
            "cmake",
            ("--build", str(self.target.build_dir), "--parallel", str(self.config.jobs)),
        )

    def install_command(self) -> Command:
        return Command(
            "cmake",
            ("--install", str(self.target.build_dir)),
            escalation=self.config.escalation or (),
        )

    def configure(self) -> None:
        self._reset_stale_cache()
        self.target.build_dir.mkdir(parents=True, exist_ok=True)
        self._step("configure", self.configure_command())

    def build(self) -> None:
        self._step("build", self.build_command())

    def install(self) -> None:
        self._step("install", self.install_command())

    def run(self) -> None:
        self.configure()
        self.build()
        self.install()
        self.diagnostics.ok(
            f"{self.target.name} installed to {self.config.prefix}", stage=self.target.name
        )

    def _step(self, step: str, command: Command) -> None:
        name = self.target.name
        self.diagnostics.info(f"{name} {step}: {command.text()}", stage=name)
        run_checked(self.runner, command, operation=f"{name} {step}")

    def _reset_stale_cache(self) -> None:
        # CMake refuses to switch generators in an existing build tree.
        previous = cached_generator(self.target.build_dir)
        if previous is None or previous == self.generator:
            return
        self.diagnostics.warn(
            f"{self.target.name} build tree was configured with {previous!r}; "
            f"clearing its cache to use {self.generator!r}",
            stage=self.target.name,
        )
        (self.target.build_dir / "CMakeCache.txt").unlink()
        shutil.rmtree(self.target.build_dir / "CMakeFiles", ignore_errors=True)
