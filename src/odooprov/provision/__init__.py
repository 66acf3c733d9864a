"""Declarative provisioning engine: probes, steps, planner and runner."""
from __future__ import annotations

from .errors import (
    ActionError,
    CycleError,
    DuplicateStepError,
    MissingParameterError,
    PostconditionError,
    PreconditionError,
    ProbeError,
    ProvisionError,
    StepError,
    TimedOut,
    UnknownPrerequisiteError,
    ValidationError,
)
from .models import (
    ExecutionRecord,
    ExpectedState,
    ProbeResult,
    ProbeState,
    Resource,
    ResourceKind,
    RunResult,
    RunState,
    Step,
    StepStatus,
    TimeoutPolicy,
)
from .planner import plan_steps
from .probes import Probe
from .runner import Runner

__all__ = [
    "ActionError",
    "CycleError",
    "DuplicateStepError",
    "ExecutionRecord",
    "ExpectedState",
    "MissingParameterError",
    "PostconditionError",
    "PreconditionError",
    "Probe",
    "ProbeError",
    "ProbeResult",
    "ProbeState",
    "ProvisionError",
    "Resource",
    "ResourceKind",
    "RunResult",
    "RunState",
    "Runner",
    "Step",
    "StepError",
    "StepStatus",
    "TimedOut",
    "TimeoutPolicy",
    "UnknownPrerequisiteError",
    "ValidationError",
    "plan_steps",
]
