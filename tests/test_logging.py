"""Failure-mode tests for the structured logging subsystem."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from odooprov.exit_codes import ExitCode
from odooprov.logging import StructuredLogger
from odooprov.provision.errors import ValidationError


def _records(logger: StructuredLogger) -> list[dict[str, object]]:
    path = logger.log_dir / "operations.jsonl"
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_operation_record_contains_steps_and_result(tmp_path: Path) -> None:
    """Each operation appends one JSON document with its steps."""
    logger = StructuredLogger(tmp_path / "logs")

    with logger.operation("provision", args={"domain": "erp.example.com"}) as op:
        op.add_step("install-nginx", status="skipped", detail="installed: nginx")
        op.add_step("clone-odoo", status="succeeded")
        op.success("Provisioned.", changed=1)

    (record,) = _records(logger)
    assert record["command"] == "provision"
    assert record["args"] == {"domain": "erp.example.com"}
    assert [step["id"] for step in record["steps"]] == ["install-nginx", "clone-odoo"]
    assert record["steps"][0]["detail"] == "installed: nginx"
    assert "detail" not in record["steps"][1]
    assert record["result"] == {"status": "success", "message": "Provisioned.", "changed": 1}


def test_operation_defaults_to_success(tmp_path: Path) -> None:
    """Scopes closed without a result are recorded as completed."""
    logger = StructuredLogger(tmp_path / "logs")

    with logger.operation("plan"):
        pass

    (record,) = _records(logger)
    assert record["result"]["status"] == "success"


def test_operation_records_escaping_exception(tmp_path: Path) -> None:
    """Exceptions leaving the scope are recorded as errors and re-raised."""
    logger = StructuredLogger(tmp_path / "logs")

    with pytest.raises(ValidationError):
        with logger.operation("provision"):
            raise ValidationError("A domain name is required.")

    (record,) = _records(logger)
    assert record["result"]["status"] == "error"
    assert record["result"]["errors"] == ["ValidationError: A domain name is required."]
    assert ValidationError.exit_code == ExitCode.VALIDATION


def test_operation_clean_exit_is_success(tmp_path: Path) -> None:
    """A zero exit raised through the scope is not an error."""
    logger = StructuredLogger(tmp_path / "logs")

    with pytest.raises(SystemExit):
        with logger.operation("render"):
            raise SystemExit(0)

    (record,) = _records(logger)
    assert record["result"]["status"] == "success"


def test_structured_logger_disables_when_directory_unavailable(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Logger gracefully disables itself when log directory cannot be created."""
    log_dir = tmp_path / "logs"

    original_mkdir = Path.mkdir

    def fail_mkdir(self: Path, *args: object, **kwargs: object) -> None:
        if self == log_dir:
            raise PermissionError("no access")
        original_mkdir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "mkdir", fail_mkdir)

    logger = StructuredLogger(log_dir)
    assert logger.enabled is False

    with logger.operation("provision", args={"domain": "erp.example.com"}) as op:
        op.success("done", changed=0)


def test_structured_logger_disables_after_write_failure(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Write failures mark the logger disabled so subsequent writes are skipped."""
    logger = StructuredLogger(tmp_path / "logs")
    operations_path = logger.log_dir / "operations.jsonl"

    original_open = Path.open

    def fail_once(self: Path, *args: object, **kwargs: object) -> object:
        if self == operations_path:
            raise OSError("disk full")
        return original_open(self, *args, **kwargs)

    monkeypatch.setattr(Path, "open", fail_once)

    with logger.operation("provision") as op:
        op.success("done", changed=0)

    assert logger.enabled is False

    # Subsequent operations should not raise even though logger is disabled.
    with logger.operation("plan") as op:
        op.success("done", changed=0)


def test_operation_scope_warning_sanitises_context(tmp_path: Path) -> None:
    """Warnings should be recorded with JSON-safe context values."""
    logger = StructuredLogger(tmp_path / "logs")

    class Custom:
        def __str__(self) -> str:
            return "<custom>"

    with logger.operation("provision", args={"path": Path("foo")}) as op:
        op.warning(
            "warned",
            warnings=("note",),
            errors=("err",),
            changed=1,
            context={"path": Path("/etc/odoo"), "obj": Custom()},
        )

    (record,) = _records(logger)
    assert record["args"] == {"path": "foo"}
    result = record["result"]
    assert result["status"] == "warning"
    assert result["warnings"] == ["note"]
    assert result["errors"] == ["err"]
    assert result["context"] == {"path": "/etc/odoo", "obj": "<custom>"}


def test_operation_scope_error_defaults_error_list(tmp_path: Path) -> None:
    """Errors should default to the message when not provided."""
    logger = StructuredLogger(tmp_path / "logs")

    with logger.operation("provision") as op:
        op.error("boom", errors=None, rc=4, context={"value": {1, 2}})

    (record,) = _records(logger)
    result = record["result"]
    assert result["status"] == "error"
    assert result["errors"] == ["boom"]
    assert result["rc"] == 4
    assert result["context"] == {"value": "{1, 2}"}
