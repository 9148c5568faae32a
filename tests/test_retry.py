import pytest

from slamstack.commands import Command
from slamstack.diagnostics import Diagnostics
from slamstack.errors import ErrorCode, TransientCommandError, ValidationError
from slamstack.retry import backoff_delay, run_with_retry


def test_backoff_grows_with_each_attempt() -> None:
    assert [backoff_delay(attempt, 5) for attempt in (1, 2, 3)] == [5, 10, 15]


def test_fails_twice_then_succeeds_within_three_attempts(runner) -> None:
    runner.returncodes["apt-get update"] = [100, 100, 0]
    sleeps: list[float] = []

    result = run_with_retry(
        runner,
        Command("apt-get", ("update",)),
        attempts=3,
        backoff=5,
        sleep=sleeps.append,
    )

    assert result.ok
    assert len(runner.calls) == 3
    assert sleeps == [5, 10]
    assert sum(sleeps) == backoff_delay(1, 5) + backoff_delay(2, 5)


def test_first_success_does_not_sleep(runner) -> None:
    sleeps: list[float] = []

    run_with_retry(runner, Command("apt-get", ("update",)), sleep=sleeps.append)

    assert len(runner.calls) == 1
    assert sleeps == []


def test_exhausted_attempts_propagate_final_failure(runner) -> None:
    runner.returncodes["apt-get"] = [1, 1, 100]
    sleeps: list[float] = []
    diagnostics = Diagnostics(quiet=True)

    with pytest.raises(TransientCommandError) as excinfo:
        run_with_retry(
            runner,
            Command("apt-get", ("install", "git")),
            attempts=3,
            backoff=2,
            sleep=sleeps.append,
            diagnostics=diagnostics,
            operation="packages",
        )

    error = excinfo.value
    assert error.code == ErrorCode.TRANSIENT.value
    assert error.returncode == 100
    assert error.exit_status == 100
    assert error.attempts == 3
    assert error.context["command"] == "apt-get install git"
    assert len(runner.calls) == 3
    assert sleeps == [2, 4]
    assert len(diagnostics.records_for_stage("packages")) == 2


def test_attempt_limit_must_be_positive(runner) -> None:
    with pytest.raises(ValidationError):
        run_with_retry(runner, Command("true"), attempts=0)

    assert runner.calls == []


def test_single_attempt_fails_without_sleeping(runner) -> None:
    runner.returncodes["apt-get"] = [1]
    sleeps: list[float] = []

    with pytest.raises(TransientCommandError) as excinfo:
        run_with_retry(runner, Command("apt-get", ("update",)), attempts=1, sleep=sleeps.append)

    assert excinfo.value.returncode == 1
    assert len(runner.calls) == 1
    assert sleeps == []
