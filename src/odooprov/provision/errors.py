"""Exception taxonomy for the provisioning engine.

Validation and precondition failures abort before any step executes. Step
errors abort the run at the current step and always carry the step name, the
resource involved and the external error text verbatim.
"""
from __future__ import annotations

from collections.abc import Sequence

from ..exit_codes import ExitCode


class ProvisionError(RuntimeError):
    """Base class for provisioning failures."""

    exit_code: ExitCode = ExitCode.STEP_FAILURE


class ValidationError(ProvisionError):
    """Raised when operator input is missing or malformed."""

    exit_code = ExitCode.VALIDATION


class MissingParameterError(ValidationError):
    """Raised when a template kind is rendered without a field it requires."""

    def __init__(self, kind: str, fields: Sequence[str]) -> None:
        """Record the template kind and the missing field names."""
        self.kind = kind
        self.fields = tuple(fields)
        joined = ", ".join(self.fields)
        super().__init__(f"Cannot render {kind}: missing required parameter(s): {joined}.")


class PreconditionError(ProvisionError):
    """Raised when the step graph cannot be executed as declared."""

    exit_code = ExitCode.PRECONDITION


class CycleError(PreconditionError):
    """Raised when step prerequisites form a cycle."""

    def __init__(self, cycle: Sequence[str]) -> None:
        """Record the step names that form the cycle."""
        self.cycle = tuple(cycle)
        path = " -> ".join(self.cycle)
        super().__init__(f"Step prerequisites form a cycle: {path}.")


class UnknownPrerequisiteError(PreconditionError):
    """Raised when a step requires a step that was never declared."""

    def __init__(self, step: str, prerequisite: str) -> None:
        """Record the offending step and the unknown prerequisite."""
        self.step = step
        self.prerequisite = prerequisite
        super().__init__(f"Step '{step}' requires unknown step '{prerequisite}'.")


class DuplicateStepError(PreconditionError):
    """Raised when two steps share a name."""

    def __init__(self, step: str) -> None:
        """Record the duplicated step name."""
        self.step = step
        super().__init__(f"Step '{step}' is declared more than once.")


class StepError(ProvisionError):
    """Failure of a single step; halts the run."""

    kind = "step"

    def __init__(self, step: str, resource: str, detail: str) -> None:
        """Record the failing step, its resource and the external error text."""
        self.step = step
        self.resource = resource
        self.detail = detail
        super().__init__(f"Step '{step}' failed on {resource}: {detail}")


class ProbeError(StepError):
    """The read-only query for a resource could not be answered."""

    kind = "probe"


class ActionError(StepError):
    """The external action reported failure."""

    kind = "action"


class PostconditionError(StepError):
    """The action reported success but the resource did not reach its state."""

    kind = "postcondition"


class TimedOut(StepError):
    """The external action exceeded its timeout."""

    kind = "timeout"


__all__ = [
    "ActionError",
    "CycleError",
    "DuplicateStepError",
    "MissingParameterError",
    "PostconditionError",
    "PreconditionError",
    "ProbeError",
    "ProvisionError",
    "StepError",
    "TimedOut",
    "UnknownPrerequisiteError",
    "ValidationError",
]
