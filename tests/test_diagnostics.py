import io
import json
from pathlib import Path

from slamstack.diagnostics import Diagnostics, color_supported


class _TTY(io.StringIO):
    def isatty(self) -> bool:
        return True


def test_each_level_prints_its_tag_without_color() -> None:
    stream = io.StringIO()
    diagnostics = Diagnostics(stream=stream)

    diagnostics.ok("done")
    diagnostics.info("working")
    diagnostics.warn("careful")
    diagnostics.fail("broken [badly]")

    assert stream.getvalue().splitlines() == [
        "[+] done",
        "[*] working",
        "[!] careful",
        "[x] broken [badly]",
    ]
    assert "\x1b[" not in stream.getvalue()


def test_quiet_suppresses_output_but_keeps_records() -> None:
    stream = io.StringIO()
    diagnostics = Diagnostics(quiet=True, stream=stream)

    diagnostics.fail("still recorded", stage="build", returncode=2)

    assert stream.getvalue() == ""
    assert diagnostics.records == [
        {
            "level": "fail",
            "stage": "build",
            "message": "still recorded",
            "extra": {"returncode": 2},
        }
    ]


def test_color_only_for_terminals_and_never_with_no_color() -> None:
    assert color_supported(_TTY(), no_color=False) is True
    assert color_supported(_TTY(), no_color=True) is False
    assert color_supported(io.StringIO(), no_color=False) is False


def test_colored_output_uses_ansi_styles() -> None:
    stream = _TTY()
    diagnostics = Diagnostics.for_terminal(stream=stream)

    diagnostics.warn("heads up")

    assert diagnostics.color is True
    assert "\x1b[" in stream.getvalue()
    assert "heads up" in stream.getvalue()


def test_records_filter_by_stage_and_export_as_json_lines(tmp_path: Path) -> None:
    diagnostics = Diagnostics(quiet=True)
    diagnostics.info("a", stage="packages")
    diagnostics.ok("b", stage="g2o")
    diagnostics.ok("c", stage="packages")

    assert [r["message"] for r in diagnostics.records_for_stage("packages")] == ["a", "c"]

    output = diagnostics.to_json_lines(tmp_path / "logs" / "run.jsonl")
    lines = output.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["message"] for line in lines] == ["a", "b", "c"]
