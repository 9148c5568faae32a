from slamstack.errors import (
    CommandError,
    ConfigurationError,
    ErrorCode,
    SlamStackError,
    TransientCommandError,
    UsageError,
    ValidationError,
)


def test_error_codes_are_stable_and_machine_readable() -> None:
    errors = [
        SlamStackError("unexpected"),
        ValidationError("bad input"),
        UsageError("unknown flag"),
        ConfigurationError("no sudo"),
        CommandError("cmake failed", returncode=2),
        TransientCommandError("apt-get failed", returncode=100, attempts=3),
    ]
    assert [error.code for error in errors] == [
        ErrorCode.GENERIC.value,
        ErrorCode.VALIDATION.value,
        ErrorCode.USAGE.value,
        ErrorCode.CONFIGURATION.value,
        ErrorCode.COMMAND.value,
        ErrorCode.TRANSIENT.value,
    ]
    assert [error.exit_status for error in errors] == [1, 1, 2, 2, 2, 100]


def test_command_exit_status_mirrors_the_command() -> None:
    assert CommandError("x", returncode=-9).exit_status == 137
    assert CommandError("x", returncode=0).exit_status == 1
    assert CommandError("x", returncode=300).exit_status == 1


def test_error_renders_hint_and_context() -> None:
    error = CommandError(
        "Command failed during g2o build.",
        returncode=2,
        hint="Inspect the output.",
        context={"command": "cmake --build build"},
    )

    assert str(error).splitlines() == [
        "Command failed during g2o build.",
        "Hint: Inspect the output.",
        "  command: cmake --build build",
        "  returncode: 2",
    ]
    payload = error.to_dict()
    assert payload["code"] == "E_COMMAND"
    assert payload["exit_status"] == 2
    assert payload["context"] == {"command": "cmake --build build", "returncode": "2"}
