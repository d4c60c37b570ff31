"""
Idempotent Step Runner
----------------------

A step pairs a checker ("is this already done?") with a mutator ("do it").
The runner evaluates the checker, applies the mutator only when needed and
reports one of three outcomes. Required steps abort the run on failure;
best-effort steps turn their failure into a warning.
"""

import logging
import subprocess
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from workstation_setup.errors import StepFailedError
from workstation_setup.ui import (
    LOGGER_NAME,
    print_error,
    print_status_report,
    print_step,
    print_success,
    print_warning,
)

logger = logging.getLogger(LOGGER_NAME)


class Outcome(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class StepResult:
    name: str
    outcome: Outcome
    reason: str = ""
    required: bool = True
    elapsed: float = 0.0


@dataclass
class Step:
    """
    Declaration of a single provisioning action.

    Attributes:
        name: Short label shown in status lines and the report
        apply: Mutator; may return a message describing what it did
        check: Returns True when the target state already holds. None means
            the mutator always runs.
        required: Failure aborts the run when True, warns otherwise
        forceable: The force flag bypasses the checker for this step
        verify: Re-run the checker after applying and fail if still unmet
        skip_message: Shown when the checker reports satisfied
    """

    name: str
    apply: Callable[[], Optional[str]]
    check: Optional[Callable[[], bool]] = None
    required: bool = True
    forceable: bool = False
    verify: bool = True
    skip_message: str = ""


def _describe_failure(exc: Exception) -> str:
    if isinstance(exc, subprocess.CalledProcessError):
        cmd = exc.cmd if isinstance(exc.cmd, str) else " ".join(exc.cmd)
        detail = (exc.stderr or "").strip() if isinstance(exc.stderr, str) else ""
        reason = f"'{cmd}' exited with status {exc.returncode}"
        return f"{reason}: {detail}" if detail else reason
    return str(exc) or exc.__class__.__name__


class StepRunner:
    def __init__(self, force: bool = False):
        self.force = force
        self.results: List[StepResult] = []

    def run(self, step: Step) -> StepResult:
        start = time.time()
        result = self._run(step)
        result.elapsed = time.time() - start
        self.results.append(result)
        logger.info(
            f"{step.name}: {result.outcome.value}"
            + (f" ({result.reason})" if result.reason else "")
        )

        if result.outcome is Outcome.APPLIED:
            print_success(result.reason or step.name)
        elif result.outcome is Outcome.SKIPPED:
            print_success(result.reason)
        elif step.required:
            print_error(f"{step.name}: {result.reason}")
            raise StepFailedError(result)
        else:
            print_warning(result.reason)
        return result

    def _run(self, step: Step) -> StepResult:
        forced = self.force and step.forceable
        try:
            if step.check is not None and not forced and step.check():
                return StepResult(
                    step.name,
                    Outcome.SKIPPED,
                    step.skip_message or f"{step.name}: already satisfied",
                    step.required,
                )

            print_step(step.name)
            message = step.apply()
            unmet = step.verify and step.check is not None and not step.check()
        except Exception as e:
            logger.debug(f"{step.name} raised", exc_info=True)
            return StepResult(
                step.name, Outcome.FAILED, _describe_failure(e), step.required
            )

        if unmet:
            return StepResult(
                step.name,
                Outcome.FAILED,
                "condition still unmet after applying",
                step.required,
            )
        return StepResult(step.name, Outcome.APPLIED, message or "", step.required)

    def run_all(self, steps: List[Step]) -> List[StepResult]:
        return [self.run(step) for step in steps]

    def report(self) -> None:
        print_status_report(self.results)
