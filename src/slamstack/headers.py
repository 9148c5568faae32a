"""Locate the CSparse header openvslam needs from g2o's dependency set."""

from __future__ import annotations

from pathlib import Path

from slamstack.diagnostics import Diagnostics
from slamstack.errors import ConfigurationError
from slamstack.models import HeaderResolution

SYSTEM_CSPARSE_HEADER = Path("/usr/include/suitesparse/cs.h")

# g2o has moved its bundled CSparse between releases.
VENDORED_CSPARSE_HEADERS = (
    Path("g2o/EXTERNAL/csparse/cs.h"),
    Path("EXTERNAL/csparse/cs.h"),
)


def find_csparse_header(
    g2o_dir: Path,
    *,
    system_header: Path = SYSTEM_CSPARSE_HEADER,
) -> HeaderResolution:
    if system_header.is_file():
        return HeaderResolution(kind="system", path=system_header)
    for relative in VENDORED_CSPARSE_HEADERS:
        candidate = g2o_dir / relative
        if candidate.is_file():
            return HeaderResolution(kind="vendored", path=candidate)
    return HeaderResolution(kind="missing")


def resolve_csparse_header(
    g2o_dir: Path,
    diagnostics: Diagnostics,
    *,
    system_header: Path = SYSTEM_CSPARSE_HEADER,
) -> HeaderResolution:
    """Return the header to put on openvslam's include path, or raise if there is none."""
    resolution = find_csparse_header(g2o_dir, system_header=system_header)
    if resolution.kind == "system":
        diagnostics.ok(f"Using system CSparse header {resolution.path}", stage="headers")
    elif resolution.kind == "vendored":
        diagnostics.warn(
            f"{system_header} not found; falling back to g2o's bundled {resolution.path}",
            stage="headers",
        )
    else:
        raise ConfigurationError(
            "CSparse header `cs.h` not found.",
            hint="Install libsuitesparse-dev or make sure the g2o checkout is complete.",
            context={
                "operation": "headers",
                "system_header": str(system_header),
                "vendored_candidates": ", ".join(
                    str(g2o_dir / relative) for relative in VENDORED_CSPARSE_HEADERS
                ),
            },
        )
    return resolution
