"""System package installation through apt-get."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence

from slamstack.commands import Command, CommandRunner
from slamstack.diagnostics import Diagnostics
from slamstack.retry import DEFAULT_ATTEMPTS, DEFAULT_BACKOFF_SECONDS, run_with_retry

TOOLCHAIN_PACKAGES = (
    "build-essential",
    "pkg-config",
    "cmake",
    "ninja-build",
    "git",
    "wget",
    "curl",
    "unzip",
)

LIBRARY_PACKAGES = (
    "libeigen3-dev",
    "libsuitesparse-dev",
    "libopencv-dev",
    "libyaml-cpp-dev",
    "gdal-bin",
    "libcgal-dev",
    "libpcl-dev",
    "exiv2",
    "libexiv2-dev",
    "libgoogle-glog-dev",
)

PANGOLIN_PACKAGES = ("libglew-dev",)

NONINTERACTIVE_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def package_groups(*, with_pangolin: bool = False) -> tuple[tuple[str, ...], ...]:
    libraries = LIBRARY_PACKAGES + (PANGOLIN_PACKAGES if with_pangolin else ())
    return (TOOLCHAIN_PACKAGES, libraries)


def update_command(escalation: tuple[str, ...] = ()) -> Command:
    return Command("apt-get", ("update", "-y", "--quiet"), escalation=escalation)


def install_command(packages: Sequence[str], escalation: tuple[str, ...] = ()) -> Command:
    return Command(
        "apt-get",
        ("-y", "--quiet", "--no-install-recommends", "install", *packages),
        env=NONINTERACTIVE_ENV,
        escalation=escalation,
    )


def install_packages(
    groups: Sequence[Sequence[str]],
    *,
    runner: CommandRunner,
    diagnostics: Diagnostics,
    escalation: tuple[str, ...] = (),
    skip: bool = False,
    attempts: int = DEFAULT_ATTEMPTS,
    backoff: float = DEFAULT_BACKOFF_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
) -> list[Command]:
    """Refresh the package index and install each group of packages.

    Returns the commands that ran, or that would have run when ``skip`` is set.
    Repeated runs rely on apt-get leaving already-installed packages alone.
    """
    commands = [update_command(escalation)]
    commands.extend(install_command(group, escalation) for group in groups if group)

    if skip:
        names = " ".join(name for group in groups for name in group)
        diagnostics.info(f"Skipping package installation; would install: {names}", stage="packages")
        for command in commands:
            diagnostics.info(f"would run: {command.text()}", stage="packages")
        return commands

    for command in commands:
        diagnostics.info(f"Running {command.text()}", stage="packages")
        run_with_retry(
            runner,
            command,
            attempts=attempts,
            backoff=backoff,
            sleep=sleep,
            diagnostics=diagnostics,
            operation="packages",
        )
    diagnostics.ok("System packages are installed", stage="packages")
    return commands
