"""Fail-fast sequencing of the provisioning stages."""

from __future__ import annotations

import json
import os
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import cbor2

from slamstack.build import CMakeProject, choose_generator, g2o_target, openvslam_target
from slamstack.commands import CommandRunner, SubprocessRunner
from slamstack.diagnostics import Diagnostics
from slamstack.errors import ValidationError
from slamstack.headers import SYSTEM_CSPARSE_HEADER, resolve_csparse_header
from slamstack.models import ON, Config, HeaderResolution
from slamstack.packages import install_packages, package_groups
from slamstack.preflight import DEBIAN_MARKER, probe_network, run_preflight
from slamstack.repository import RepositorySynchronizer, SyncResult


@dataclass(frozen=True, slots=True)
class Summary:
    src_dir: Path
    prefix: Path
    generator: str
    header: HeaderResolution
    checkouts: tuple[SyncResult, ...]
    schema_version: int = 1

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def write(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        if output_path.suffix == ".cbor":
            self.to_cbor(output_path)
        else:
            self.to_json(output_path)
        return output_path

    def _payload(self) -> dict[str, object]:
        return {
            "schema_version": self.schema_version,
            "src_dir": str(self.src_dir),
            "prefix": str(self.prefix),
            "generator": self.generator,
            "header": {
                "kind": self.header.kind,
                "path": str(self.header.path) if self.header.path is not None else None,
            },
            "checkouts": [
                {
                    "name": checkout.name,
                    "path": str(checkout.path),
                    "state": checkout.state.value,
                    "action": checkout.action,
                    "revision": checkout.revision,
                }
                for checkout in self.checkouts
            ],
        }


@dataclass(slots=True)
class Pipeline:
    """Runs every stage in order; the first fatal error propagates to the caller.

    The host-facing collaborators are injectable so a run can be exercised
    without touching apt, git, cmake, or the network.
    """

    diagnostics: Diagnostics
    runner: CommandRunner = field(default_factory=SubprocessRunner)
    geteuid: Callable[[], int] = os.geteuid
    which: Callable[[str], str | None] = shutil.which
    marker: Path = DEBIAN_MARKER
    probe: Callable[[], bool] = probe_network
    system_header: Path = SYSTEM_CSPARSE_HEADER
    sleep: Callable[[float], None] = time.sleep

    def run(self, config: Config) -> Summary:
        config, _ = run_preflight(
            config,
            self.diagnostics,
            geteuid=self.geteuid,
            which=self.which,
            marker=self.marker,
            probe=self.probe,
        )

        install_packages(
            package_groups(with_pangolin=config.use_pangolin == ON),
            runner=self.runner,
            diagnostics=self.diagnostics,
            escalation=config.escalation or (),
            skip=config.skip_apt,
            sleep=self.sleep,
        )
        config = config.derive(generator=choose_generator(self.which))
        self.diagnostics.info(f"Using CMake generator {config.generator!r}", stage="build")

        sync = RepositorySynchronizer(runner=self.runner, diagnostics=self.diagnostics)
        g2o_checkout = sync.sync("g2o", config.g2o, config.g2o_dir)
        CMakeProject(g2o_target(config), config, self.runner, self.diagnostics).run()

        header = resolve_csparse_header(
            config.g2o_dir, self.diagnostics, system_header=self.system_header
        )
        config = config.derive(csparse_include=header.include_dir)

        openvslam_checkout = sync.sync(
            "openvslam", config.openvslam, config.openvslam_dir, resync_submodules=True
        )
        CMakeProject(openvslam_target(config), config, self.runner, self.diagnostics).run()

        summary = Summary(
            src_dir=config.src_dir,
            prefix=config.prefix,
            generator=config.generator or "",
            header=header,
            checkouts=(g2o_checkout, openvslam_checkout),
        )
        self._report(summary, config)
        return summary

    def _report(self, summary: Summary, config: Config) -> None:
        for checkout in summary.checkouts:
            revision = checkout.revision or "default branch"
            self.diagnostics.ok(
                f"{checkout.name}: {checkout.path} ({checkout.state.value}, {revision})",
                stage="summary",
            )
        self.diagnostics.ok(f"Install prefix: {summary.prefix}", stage="summary")
        self.diagnostics.ok(f"CMake generator: {summary.generator}", stage="summary")
        self.diagnostics.ok(
            f"CSparse header: {summary.header.path} ({summary.header.kind})", stage="summary"
        )
        if config.summary_out is not None:
            try:
                written = summary.write(config.summary_out)
            except OSError as exc:
                raise ValidationError(
                    "Could not write the summary.",
                    hint="Pass a writable file path to --summary-out.",
                    context={
                        "operation": "summary",
                        "path": str(config.summary_out),
                        "error": exc.strerror or str(exc),
                    },
                ) from exc
            self.diagnostics.ok(f"Summary written to {written}", stage="summary")
