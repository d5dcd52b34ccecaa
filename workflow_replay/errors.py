"""Exceptions raised while recording and replaying workflows.

Everything deriving from StepError is scoped to a single step: the executor
records it into that step's result and moves on. StorageError is the one
fatal error and aborts a run before any step executes.
"""


class ReplayError(Exception):
    """Base class for all workflow replay errors."""


class StorageError(ReplayError):
    """The workflow store could not be read or written."""


class StepError(ReplayError):
    """A failure confined to one workflow step."""


class ValidationError(StepError):
    """A step is missing a value or element reference its action requires."""


class ResolutionError(StepError):
    """No selector strategy matched a live element."""


class ActionError(StepError):
    """The action itself failed (download, upload, navigation, ...)."""


class UnknownActionError(StepError):
    """The step carries an action tag the executor does not know."""

    def __init__(self, action: str):
        super().__init__(f"Unknown action type: {action}")
        self.action = action
