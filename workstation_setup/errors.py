class SetupError(Exception):
    """Base class for errors that abort a provisioning run."""


class EnvironmentMismatchError(SetupError):
    """The host is not a system this tool can provision (e.g. no apt)."""


class StepError(SetupError):
    """Raised by a mutator to report why a step could not be applied."""


class StepFailedError(SetupError):
    """A required step failed; carries its StepResult."""

    def __init__(self, result):
        self.result = result
        super().__init__(f"{result.name} failed: {result.reason}")
