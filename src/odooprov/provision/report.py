"""JSON-friendly views of plans and run results."""
from __future__ import annotations

from collections.abc import Sequence

from .models import ExecutionRecord, RunResult, Step


def serialize_record(record: ExecutionRecord) -> dict[str, object]:
    """Return a JSON-serialisable mapping for *record*."""
    return {
        "step": record.step,
        "resource": record.resource,
        "status": record.status.value,
        "started_at": record.started_at.isoformat(),
        "finished_at": record.finished_at.isoformat(),
        "duration_ms": record.duration_ms,
        "output": record.output,
        "error": record.error,
        "error_kind": record.error_kind,
    }


def serialize_run(result: RunResult) -> dict[str, object]:
    """Return a JSON-serialisable mapping for *result*."""
    payload: dict[str, object] = {
        "state": result.state.value,
        "dry_run": result.dry_run,
        "exit_code": result.exit_code,
        "completed_steps": result.completed_steps,
        "failed_step": result.failed_step,
        "records": [serialize_record(record) for record in result.records],
        "metadata": dict(result.metadata),
    }
    if result.error is not None:
        payload["error"] = {
            "kind": result.error.kind,
            "step": result.error.step,
            "resource": result.error.resource,
            "detail": result.error.detail,
        }
    return payload


def serialize_plan(steps: Sequence[Step]) -> list[dict[str, object]]:
    """Return the ordered steps with their prerequisites and actions."""
    return [
        {
            "position": index,
            "step": step.name,
            "requires": list(step.requires),
            "resource": str(step.resource),
            "expected": step.resource.expected.value,
            "network": step.network,
            "action": step.action.describe(),
            "description": step.description,
        }
        for index, step in enumerate(steps, start=1)
    ]


__all__ = ["serialize_plan", "serialize_record", "serialize_run"]
