"""Command-line entrypoint: parse options, run the pipeline, map errors to exit codes."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import IO

from slamstack.diagnostics import Diagnostics
from slamstack.errors import SlamStackError, UsageError
from slamstack.options import parse_options
from slamstack.pipeline import Pipeline

EXIT_OK = 0


def main(
    argv: Sequence[str] | None = None,
    *,
    pipeline: Pipeline | None = None,
    stdout: IO[str] | None = None,
    stderr: IO[str] | None = None,
) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr

    try:
        parsed = parse_options(argv)
    except UsageError as exc:
        # Quiet/no-color are not known yet, so usage errors are always shown.
        Diagnostics.for_terminal(stream=err).fail(str(exc), stage="options")
        return exc.exit_status

    if parsed.show_help:
        out.write(parsed.usage)
        return EXIT_OK

    config = parsed.config
    diagnostics = Diagnostics.for_terminal(
        quiet=config.quiet, no_color=not config.color, stream=err
    )
    if pipeline is None:
        pipeline = Pipeline(diagnostics=diagnostics)
    else:
        pipeline.diagnostics = diagnostics

    try:
        pipeline.run(config)
    except SlamStackError as exc:
        diagnostics.fail(str(exc), stage="pipeline", code=exc.code)
        return exc.exit_status
    except KeyboardInterrupt:
        diagnostics.fail("Interrupted", stage="pipeline")
        return 130
    diagnostics.ok("Provisioning complete", stage="pipeline")
    return EXIT_OK


def run() -> None:
    sys.exit(main())
