"""Data models for resources, steps and execution records."""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from ..exit_codes import ExitCode

if TYPE_CHECKING:
    from .actions import Action
    from .errors import StepError


class ResourceKind(str, Enum):
    """Kinds of host state the probe knows how to query."""

    PACKAGE = "package"
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    USER = "user"
    SERVICE = "service"
    DATABASE_ROLE = "database-role"
    VCS_CLONE = "vcs-clone"
    COMMAND = "command"
    CERTIFICATE = "certificate"


class ExpectedState(str, Enum):
    """State a resource must be in for its step to count as done."""

    PRESENT = "present"
    ABSENT = "absent"
    VALUE = "value"


@dataclass(slots=True, frozen=True)
class Resource:
    """Something on the host whose state is checked before and after a step."""

    kind: ResourceKind
    identifier: str
    expected: ExpectedState = ExpectedState.PRESENT
    value: str | None = None

    def __post_init__(self) -> None:
        """Reject declarations that cannot be probed."""
        if not self.identifier:
            raise ValueError(f"{self.kind.value} resource requires an identifier.")
        if self.expected is ExpectedState.VALUE and self.value is None:
            raise ValueError(f"{self} expects a specific value but none was given.")

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.identifier}"


class ProbeState(str, Enum):
    """Classification returned by a probe."""

    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class ProbeResult:
    """Observed state of a resource.

    For ``value`` expectations the probe reports ``present`` only when the
    observed value matches the expected one.
    """

    resource: Resource
    state: ProbeState
    detail: str = ""

    @property
    def is_error(self) -> bool:
        """Return ``True`` when the query itself failed."""
        return self.state is ProbeState.ERROR

    @property
    def satisfied(self) -> bool:
        """Return ``True`` when the resource is in its expected state."""
        if self.state is ProbeState.ERROR:
            return False
        if self.resource.expected is ExpectedState.ABSENT:
            return self.state is ProbeState.ABSENT
        return self.state is ProbeState.PRESENT


@dataclass(slots=True, frozen=True)
class Step:
    """Named unit of provisioning work. Pure data until the runner executes it."""

    name: str
    resource: Resource
    action: Action
    requires: tuple[str, ...] = ()
    postcondition: Resource | None = None
    network: bool = False
    description: str = ""

    @property
    def check(self) -> Resource:
        """Return the resource re-probed after the action succeeds."""
        return self.postcondition or self.resource


class StepStatus(str, Enum):
    """Per-step outcome recorded by the runner."""

    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PENDING = "pending"


@dataclass(slots=True, frozen=True)
class ExecutionRecord:
    """What happened to one step during one run."""

    step: str
    resource: str
    status: StepStatus
    started_at: datetime
    finished_at: datetime
    duration_ms: int
    output: str = ""
    error: str | None = None
    error_kind: str | None = None


class RunState(str, Enum):
    """Lifecycle of a single provisioning run."""

    PLANNED = "planned"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class TimeoutPolicy:
    """Per-action timeouts in seconds; ``None`` disables the limit."""

    default: float | None = 600.0
    network: float | None = 1800.0
    probe: float | None = 30.0

    def for_step(self, step: Step) -> float | None:
        """Return the action timeout that applies to *step*."""
        return self.network if step.network else self.default


@dataclass(slots=True, frozen=True)
class RunResult:
    """Complete outcome of a run."""

    state: RunState
    records: Sequence[ExecutionRecord]
    error: StepError | None = None
    dry_run: bool = False
    metadata: dict[str, object] = field(default_factory=dict)

    @property
    def completed_steps(self) -> list[str]:
        """Return the ordered names of steps that are done (ran or skipped)."""
        return [
            record.step
            for record in self.records
            if record.status in (StepStatus.SKIPPED, StepStatus.SUCCEEDED)
        ]

    @property
    def failed_step(self) -> str | None:
        """Return the name of the step that halted the run, if any."""
        for record in self.records:
            if record.status is StepStatus.FAILED:
                return record.step
        return None

    @property
    def exit_code(self) -> int:
        """Return the process exit code for this result."""
        if self.state is RunState.FAILED:
            return int(ExitCode.STEP_FAILURE)
        return int(ExitCode.OK)

    def status_of(self, step: str) -> StepStatus | None:
        """Return the recorded status for *step*."""
        for record in self.records:
            if record.step == step:
                return record.status
        return None


__all__ = [
    "ExecutionRecord",
    "ExpectedState",
    "ProbeResult",
    "ProbeState",
    "Resource",
    "ResourceKind",
    "RunResult",
    "RunState",
    "Step",
    "StepStatus",
    "TimeoutPolicy",
]
