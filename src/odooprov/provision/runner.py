"""Sequential, fail-fast execution of an ordered step list."""
from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from datetime import UTC, datetime

from ..executor import CommandExecutor, CommandTimeoutError
from ..logging import OperationScope
from .actions import ActionContext
from .errors import ActionError, PostconditionError, ProbeError, StepError, TimedOut
from .models import (
    ExecutionRecord,
    ProbeResult,
    RunResult,
    RunState,
    Step,
    StepStatus,
    TimeoutPolicy,
)
from .probes import Probe

LOGGER = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


def _duration_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class Runner:
    """Execute steps in order, skipping those whose resource is already in place.

    A runner is single use: it moves from ``planned`` to ``running`` and ends
    ``completed`` or ``failed``. Re-running means building a fresh runner;
    already-converged steps are then skipped through their preconditions.
    Nothing is retried and nothing is rolled back.
    """

    def __init__(
        self,
        probe: Probe,
        executor: CommandExecutor,
        *,
        timeouts: TimeoutPolicy | None = None,
        scope: OperationScope | None = None,
        dry_run: bool = False,
    ) -> None:
        """Bind the runner to its probe, executor and timeout policy."""
        self._probe = probe
        self._executor = executor
        self._timeouts = timeouts or TimeoutPolicy()
        self._scope = scope
        self._dry_run = dry_run
        self._records: list[ExecutionRecord] = []
        self.state = RunState.PLANNED

    @property
    def records(self) -> tuple[ExecutionRecord, ...]:
        """Return the records appended so far."""
        return tuple(self._records)

    def run(self, steps: Sequence[Step]) -> RunResult:
        """Run *steps*, which must already be in planner order."""
        if self.state is not RunState.PLANNED:
            raise RuntimeError(f"Runner already used (state={self.state.value}).")
        self.state = RunState.RUNNING
        started = time.perf_counter()

        error: StepError | None = None
        for step in steps:
            error = self._run_step(step)
            if error is not None:
                break

        self.state = RunState.FAILED if error is not None else RunState.COMPLETED
        result = RunResult(
            state=self.state,
            records=tuple(self._records),
            error=error,
            dry_run=self._dry_run,
            metadata={"duration_ms": _duration_ms(started), "requested_steps": len(steps)},
        )
        if error is not None:
            LOGGER.error(
                "Run halted at step '%s'; completed: %s",
                error.step,
                ", ".join(result.completed_steps) or "none",
            )
        return result

    # ------------------------------------------------------------------
    def _run_step(self, step: Step) -> StepError | None:
        resource = str(step.resource)
        started_at = _now()
        start = time.perf_counter()

        precheck = self._probe.check(step.resource)
        if precheck.is_error:
            if self._dry_run and self._waits_on_pending(step):
                self._record(step, StepStatus.PENDING, started_at, start, output=precheck.detail)
                return None
            return self._fail(step, ProbeError(step.name, resource, precheck.detail), started_at, start)

        if precheck.satisfied:
            self._record(step, StepStatus.SKIPPED, started_at, start, output=precheck.detail)
            return None

        if self._dry_run:
            self._record(
                step,
                StepStatus.PENDING,
                started_at,
                start,
                output=f"{precheck.detail}; would run: {step.action.describe()}",
            )
            return None

        timeout = self._timeouts.for_step(step)
        LOGGER.info("Running step '%s': %s", step.name, step.action.describe())
        try:
            output = step.action.execute(ActionContext(executor=self._executor, timeout=timeout))
        except CommandTimeoutError as exc:
            return self._fail(step, TimedOut(step.name, resource, str(exc)), started_at, start)
        except Exception as exc:
            return self._fail(step, ActionError(step.name, resource, str(exc)), started_at, start)

        postcheck = self._probe.check(step.check)
        failure = self._postcondition_failure(step, postcheck)
        if failure is not None:
            return self._fail(step, failure, started_at, start, output=output)

        self._record(step, StepStatus.SUCCEEDED, started_at, start, output=output)
        return None

    def _waits_on_pending(self, step: Step) -> bool:
        pending = {record.step for record in self._records if record.status is StepStatus.PENDING}
        return any(name in pending for name in step.requires)

    def _postcondition_failure(self, step: Step, postcheck: ProbeResult) -> StepError | None:
        resource = str(step.check)
        if postcheck.is_error:
            return ProbeError(step.name, resource, postcheck.detail)
        if not postcheck.satisfied:
            detail = postcheck.detail or f"{resource} is not {step.check.expected.value}"
            return PostconditionError(
                step.name,
                resource,
                f"action reported success but {detail}",
            )
        return None

    def _fail(
        self,
        step: Step,
        error: StepError,
        started_at: datetime,
        start: float,
        *,
        output: str = "",
    ) -> StepError:
        self._record(
            step,
            StepStatus.FAILED,
            started_at,
            start,
            output=output,
            error=error.detail,
            error_kind=error.kind,
        )
        return error

    def _record(
        self,
        step: Step,
        status: StepStatus,
        started_at: datetime,
        start: float,
        *,
        output: str = "",
        error: str | None = None,
        error_kind: str | None = None,
    ) -> None:
        record = ExecutionRecord(
            step=step.name,
            resource=str(step.resource),
            status=status,
            started_at=started_at,
            finished_at=_now(),
            duration_ms=_duration_ms(start),
            output=output,
            error=error,
            error_kind=error_kind,
        )
        self._records.append(record)
        if status is StepStatus.FAILED:
            LOGGER.error("Step '%s' failed (%s): %s", step.name, error_kind, error)
        else:
            LOGGER.info("Step '%s' %s", step.name, status.value)
        if self._scope is not None:
            detail = error if error is not None else (output.splitlines()[0] if output else None)
            self._scope.add_step(step.name, status=status.value, detail=detail)


__all__ = ["Runner"]
