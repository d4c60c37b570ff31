import subprocess

import pytest

from workstation_setup.errors import StepError, StepFailedError
from workstation_setup.runner import Outcome, Step, StepRunner


class Flag:
    def __init__(self, value=False):
        self.value = value
        self.applied = 0

    def check(self):
        return self.value

    def apply(self):
        self.applied += 1
        self.value = True
        return "turned on"


def test_satisfied_step_is_skipped_without_applying():
    flag = Flag(True)
    result = StepRunner().run(
        Step(name="flag", check=flag.check, apply=flag.apply, skip_message="on")
    )
    assert result.outcome is Outcome.SKIPPED
    assert result.reason == "on"
    assert flag.applied == 0


def test_unsatisfied_step_is_applied_and_verified():
    flag = Flag(False)
    result = StepRunner().run(Step(name="flag", check=flag.check, apply=flag.apply))
    assert result.outcome is Outcome.APPLIED
    assert result.reason == "turned on"
    assert flag.applied == 1


def test_step_without_checker_always_applies():
    flag = Flag(True)
    runner = StepRunner()
    runner.run(Step(name="flag", apply=flag.apply))
    runner.run(Step(name="flag", apply=flag.apply))
    assert flag.applied == 2


def test_required_failure_raises_with_result():
    def boom():
        raise StepError("key generation failed")

    runner = StepRunner()
    with pytest.raises(StepFailedError) as excinfo:
        runner.run(Step(name="key", apply=boom))
    assert excinfo.value.result.outcome is Outcome.FAILED
    assert excinfo.value.result.reason == "key generation failed"
    assert runner.results[-1] is excinfo.value.result


def test_best_effort_failure_is_reported_not_raised(capsys):
    def boom():
        raise StepError("xclip not installed")

    result = StepRunner().run(Step(name="clip", apply=boom, required=False))
    assert result.outcome is Outcome.FAILED
    assert not result.required
    assert "xclip not installed" in capsys.readouterr().out


def test_failed_subprocess_reason_names_the_command():
    def boom():
        raise subprocess.CalledProcessError(1, ["apt-get", "install"], stderr="E: nope")

    result = StepRunner().run(Step(name="apt", apply=boom, required=False))
    assert result.reason == "'apt-get install' exited with status 1: E: nope"


def test_unmet_condition_after_apply_fails():
    result = StepRunner().run(
        Step(name="stuck", check=lambda: False, apply=lambda: None, required=False)
    )
    assert result.outcome is Outcome.FAILED
    assert "still unmet" in result.reason


def test_verify_can_be_disabled():
    result = StepRunner().run(
        Step(name="agent", check=lambda: False, apply=lambda: "ok", verify=False)
    )
    assert result.outcome is Outcome.APPLIED


def test_force_bypasses_checker_only_for_forceable_steps():
    keys = Flag(True)
    config = Flag(True)
    runner = StepRunner(force=True)
    runner.run(Step(name="keys", check=keys.check, apply=keys.apply, forceable=True))
    runner.run(Step(name="config", check=config.check, apply=config.apply))
    assert keys.applied == 1
    assert config.applied == 0


def test_run_all_stops_at_first_required_failure():
    later = Flag(False)

    def boom():
        raise StepError("nope")

    runner = StepRunner()
    with pytest.raises(StepFailedError):
        runner.run_all(
            [
                Step(name="first", apply=boom),
                Step(name="second", check=later.check, apply=later.apply),
            ]
        )
    assert later.applied == 0
    assert [r.name for r in runner.results] == ["first"]


def test_raising_checker_is_a_failed_step(capsys):
    def unreadable():
        raise UnicodeDecodeError("utf-8", b"\xe9", 0, 1, "invalid continuation byte")

    flag = Flag(False)
    result = StepRunner().run(
        Step(name="config", check=unreadable, apply=flag.apply, required=False)
    )
    assert result.outcome is Outcome.FAILED
    assert "can't decode" in result.reason
    assert flag.applied == 0
    assert "can't decode" in capsys.readouterr().out


def test_raising_checker_on_required_step_raises_step_failed():
    def broken():
        raise OSError("permission denied")

    runner = StepRunner()
    with pytest.raises(StepFailedError) as excinfo:
        runner.run(Step(name="config", check=broken, apply=lambda: None))
    assert excinfo.value.result.reason == "permission denied"
    assert runner.results == [excinfo.value.result]
