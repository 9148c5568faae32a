from slamstack.packages import (
    LIBRARY_PACKAGES,
    PANGOLIN_PACKAGES,
    TOOLCHAIN_PACKAGES,
    install_command,
    install_packages,
    package_groups,
)


def test_install_command_is_noninteractive_and_minimal() -> None:
    command = install_command(["git", "cmake"], escalation=("sudo",))

    assert command.argv == [
        "sudo",
        "env",
        "DEBIAN_FRONTEND=noninteractive",
        "apt-get",
        "-y",
        "--quiet",
        "--no-install-recommends",
        "install",
        "git",
        "cmake",
    ]


def test_pangolin_adds_viewer_dependencies() -> None:
    assert package_groups() == (TOOLCHAIN_PACKAGES, LIBRARY_PACKAGES)
    assert package_groups(with_pangolin=True)[1] == LIBRARY_PACKAGES + PANGOLIN_PACKAGES


def test_skip_only_logs_intended_commands(runner, diagnostics) -> None:
    commands = install_packages(
        package_groups(),
        runner=runner,
        diagnostics=diagnostics,
        escalation=("sudo",),
        skip=True,
    )

    assert runner.calls == []
    assert [command.args[0] for command in commands] == ["update", "-y", "-y"]
    messages = [record["message"] for record in diagnostics.records_for_stage("packages")]
    assert "libeigen3-dev" in messages[0]
    assert any(message.startswith("would run: sudo apt-get update") for message in messages)


def test_update_then_each_group_is_installed(runner, diagnostics) -> None:
    install_packages(
        package_groups(),
        runner=runner,
        diagnostics=diagnostics,
        escalation=("sudo",),
        sleep=lambda _: None,
    )

    assert len(runner.calls) == 3
    assert runner.texts[0] == "sudo apt-get update -y --quiet"
    assert runner.calls[1].args[-len(TOOLCHAIN_PACKAGES) :] == TOOLCHAIN_PACKAGES
    assert runner.calls[2].args[-len(LIBRARY_PACKAGES) :] == LIBRARY_PACKAGES


def test_flaky_install_is_retried_as_a_unit(runner, diagnostics) -> None:
    runner.returncodes["install build-essential"] = [100]
    sleeps: list[float] = []

    install_packages(
        package_groups(),
        runner=runner,
        diagnostics=diagnostics,
        sleep=sleeps.append,
    )

    toolchain_runs = [text for text in runner.texts if "install build-essential" in text]
    assert len(toolchain_runs) == 2
    assert sleeps == [5.0]
