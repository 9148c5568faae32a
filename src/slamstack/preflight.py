"""Environment checks that run before any mutating step."""

from __future__ import annotations

import os
import shutil
import socket
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from slamstack.diagnostics import Diagnostics
from slamstack.errors import ConfigurationError
from slamstack.models import Config

DEBIAN_MARKER = Path("/etc/debian_version")
PROBE_HOST = "github.com"
PROBE_PORT = 443
PROBE_TIMEOUT_SECONDS = 5.0

Which = Callable[[str], str | None]


@dataclass(frozen=True, slots=True)
class PreflightReport:
    escalation: tuple[str, ...]
    distribution: str
    network_ok: bool


def resolve_privilege(
    *,
    geteuid: Callable[[], int] = os.geteuid,
    which: Which = shutil.which,
) -> tuple[str, ...]:
    """Return the command prefix needed to run privileged steps."""
    if geteuid() == 0:
        return ()
    if which("sudo") is not None:
        return ("sudo",)
    raise ConfigurationError(
        "Not running as root and `sudo` is not available.",
        hint="Re-run as root or install sudo; package and install steps need root.",
        context={"operation": "preflight", "check": "privilege"},
    )


def detect_distribution(marker: Path = DEBIAN_MARKER) -> str:
    """Return the Debian release named by the marker file."""
    if not marker.is_file():
        raise ConfigurationError(
            "Unsupported host: this installer requires a Debian-based distribution.",
            hint="Package installation uses apt-get and only works on Debian/Ubuntu hosts.",
            context={"operation": "preflight", "check": "distribution", "marker": str(marker)},
        )
    release = marker.read_text(encoding="utf-8", errors="replace").strip()
    return release or "unknown"


def probe_network(
    host: str = PROBE_HOST,
    port: int = PROBE_PORT,
    *,
    timeout: float = PROBE_TIMEOUT_SECONDS,
    connect: Callable[..., socket.socket] = socket.create_connection,
) -> bool:
    try:
        with connect((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def run_preflight(
    config: Config,
    diagnostics: Diagnostics,
    *,
    geteuid: Callable[[], int] = os.geteuid,
    which: Which = shutil.which,
    marker: Path = DEBIAN_MARKER,
    probe: Callable[[], bool] = probe_network,
) -> tuple[Config, PreflightReport]:
    """Run the checks in order and return the config with derived fields set."""
    escalation = resolve_privilege(geteuid=geteuid, which=which)
    if escalation:
        diagnostics.info(
            f"Privileged steps will run through `{' '.join(escalation)}`", stage="preflight"
        )
    else:
        diagnostics.info("Running as root", stage="preflight")

    distribution = detect_distribution(marker)
    diagnostics.ok(f"Debian-based host detected (release {distribution})", stage="preflight")

    network_ok = probe()
    if network_ok:
        diagnostics.ok(f"{PROBE_HOST} is reachable", stage="preflight")
    else:
        diagnostics.warn(
            f"Cannot reach {PROBE_HOST}:{PROBE_PORT}; continuing in case sources are cached",
            stage="preflight",
        )

    report = PreflightReport(
        escalation=escalation, distribution=distribution, network_ok=network_ok
    )
    return config.derive(escalation=escalation), report
