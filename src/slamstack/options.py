"""Command-line option parsing into an immutable :class:`Config`."""

from __future__ import annotations

import argparse
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from slamstack.errors import UsageError
from slamstack.models import (
    DEFAULT_JOBS,
    DEFAULT_PREFIX,
    DEFAULT_SRC_DIRNAME,
    G2O_COMMIT,
    G2O_REPO,
    OFF,
    ON,
    OPENVSLAM_COMMIT,
    OPENVSLAM_REPO,
    Config,
    RepoDescriptor,
    Toggle,
)

TRUTHY = frozenset({"on", "true", "yes", "1"})
FALSY = frozenset({"off", "false", "no", "0"})

PROG = "slamstack"
DESCRIPTION = "Install system packages, then build and install pinned g2o and openvslam."


def normalize_toggle(token: str) -> Toggle:
    """Map boolean-like tokens to ON/OFF; anything else is returned unchanged."""
    lowered = token.strip().lower()
    if lowered in TRUTHY:
        return ON
    if lowered in FALSY:
        return OFF
    return token


def detect_jobs(cpu_count: Callable[[], int | None] = os.cpu_count) -> int:
    try:
        count = cpu_count()
    except NotImplementedError:
        count = None
    return count if count and count > 0 else DEFAULT_JOBS


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from None
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return parsed


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(f"{self.prog}: {message}")


@dataclass(frozen=True, slots=True)
class ParsedOptions:
    config: Config
    show_help: bool
    usage: str


def build_parser(*, home: Path | None = None, jobs: int | None = None) -> argparse.ArgumentParser:
    home = home if home is not None else Path.home()
    jobs = jobs if jobs is not None else detect_jobs()

    parser = _ArgumentParser(
        prog=PROG,
        description=DESCRIPTION,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("-h", "--help", action="store_true", help="Show this message and exit.")

    paths = parser.add_argument_group("locations")
    paths.add_argument(
        "--prefix",
        type=Path,
        default=DEFAULT_PREFIX,
        metavar="DIR",
        help="Install prefix for both libraries (default: %(default)s).",
    )
    paths.add_argument(
        "--src-dir",
        type=Path,
        default=home / DEFAULT_SRC_DIRNAME,
        metavar="DIR",
        help="Directory holding the checkouts and build trees (default: %(default)s).",
    )

    sources = parser.add_argument_group("sources")
    sources.add_argument("--g2o-repo", default=G2O_REPO, metavar="URL")
    sources.add_argument(
        "--g2o-commit",
        default=G2O_COMMIT,
        metavar="REV",
        help="Revision to pin g2o to; empty tracks the default branch.",
    )
    sources.add_argument("--openvslam-repo", default=OPENVSLAM_REPO, metavar="URL")
    sources.add_argument(
        "--openvslam-commit",
        default=OPENVSLAM_COMMIT,
        metavar="REV",
        help="Revision to pin openvslam to; empty tracks the default branch.",
    )

    build = parser.add_argument_group("build")
    build.add_argument(
        "--jobs",
        type=_positive_int,
        default=jobs,
        metavar="N",
        help="Parallel build jobs (default: %(default)s).",
    )
    for flag, default, text in (
        ("--build-examples", ON, "Build openvslam examples."),
        ("--build-tests", ON, "Build openvslam tests."),
        ("--use-pangolin", OFF, "Build and install the Pangolin viewer."),
    ):
        build.add_argument(
            flag,
            nargs="?",
            const=ON,
            default=default,
            type=normalize_toggle,
            metavar="on|off",
            help=f"{text} (default: {default})",
        )

    behavior = parser.add_argument_group("behavior")
    behavior.add_argument(
        "--skip-apt",
        action="store_true",
        help="Do not install system packages; only print what would run.",
    )
    behavior.add_argument("--quiet", action="store_true", help="Suppress all diagnostics.")
    behavior.add_argument("--no-color", action="store_true", help="Disable colored output.")
    behavior.add_argument(
        "--summary-out",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write the final summary as JSON, or CBOR when PATH ends in .cbor.",
    )
    return parser


def parse_options(
    argv: Sequence[str],
    *,
    home: Path | None = None,
    jobs: int | None = None,
) -> ParsedOptions:
    """Parse ``argv`` (without the program name); raise :class:`UsageError` on bad input."""
    parser = build_parser(home=home, jobs=jobs)
    args = parser.parse_args(list(argv))
    config = Config(
        prefix=args.prefix,
        src_dir=args.src_dir,
        g2o=RepoDescriptor(url=args.g2o_repo, revision=args.g2o_commit),
        openvslam=RepoDescriptor(url=args.openvslam_repo, revision=args.openvslam_commit),
        jobs=args.jobs,
        build_examples=args.build_examples,
        build_tests=args.build_tests,
        use_pangolin=args.use_pangolin,
        skip_apt=args.skip_apt,
        quiet=args.quiet,
        color=not args.no_color,
        summary_out=args.summary_out,
    )
    return ParsedOptions(config=config, show_help=args.help, usage=parser.format_help())
