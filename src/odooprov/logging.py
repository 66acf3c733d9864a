"""Structured operation logging.

Every CLI operation appends one JSON document per line to
``<logs_dir>/operations.jsonl`` describing the command, its arguments, the
steps it took and its result. Human readable messages are mirrored to the
stdlib ``odooprov`` logger, which also writes ``<logs_dir>/odooprov.log``.

Logging must never break provisioning: when the log directory cannot be
created or a write fails, the logger disables itself and carries on.
"""
from __future__ import annotations

import json
import logging
import os
import time
import uuid
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

LOGGER = logging.getLogger("odooprov")

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _json_safe(value: object) -> object:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return str(value)


def _timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class OperationScope:
    """Collects steps and the final result of one logged operation."""

    def __init__(
        self,
        logger: StructuredLogger,
        command: str,
        args: Mapping[str, object] | None,
        target: Mapping[str, object] | None,
    ) -> None:
        """Start a new scope for *command*."""
        self._logger = logger
        self.op_id = uuid.uuid4().hex
        self.command = command
        self.args = dict(args or {})
        self.target = dict(target or {})
        self.steps: list[dict[str, object]] = []
        self.result: dict[str, object] | None = None
        self._started = time.perf_counter()
        self.started_at = _timestamp()

    def add_step(self, step_id: str, *, status: str, detail: str | None = None) -> None:
        """Record an intermediate step."""
        entry: dict[str, object] = {"id": step_id, "status": status, "at": _timestamp()}
        if detail:
            entry["detail"] = detail
        self.steps.append(entry)
        LOGGER.info("[%s] %s: %s%s", self.command, step_id, status, f" ({detail})" if detail else "")

    def success(
        self,
        message: str,
        *,
        changed: int | None = None,
        warnings: Sequence[str] | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        """Mark the operation successful."""
        self._set_result("success", message, changed=changed, warnings=warnings, context=context)
        LOGGER.info("[%s] %s", self.command, message)

    def warning(
        self,
        message: str,
        *,
        warnings: Sequence[str] | None = None,
        errors: Sequence[str] | None = None,
        changed: int | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        """Mark the operation complete with warnings."""
        self._set_result(
            "warning",
            message,
            warnings=warnings,
            errors=errors,
            changed=changed,
            context=context,
        )
        LOGGER.warning("[%s] %s", self.command, message)

    def error(
        self,
        message: str,
        *,
        errors: Sequence[str] | None = None,
        warnings: Sequence[str] | None = None,
        rc: int | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        """Mark the operation failed; ``errors`` defaults to ``[message]``."""
        self._set_result(
            "error",
            message,
            errors=list(errors) if errors else [message],
            warnings=warnings,
            rc=rc,
            context=context,
        )
        LOGGER.error("[%s] %s", self.command, message)

    def _set_result(
        self,
        status: str,
        message: str,
        *,
        changed: int | None = None,
        warnings: Sequence[str] | None = None,
        errors: Sequence[str] | None = None,
        rc: int | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        result: dict[str, object] = {"status": status, "message": message}
        if changed is not None:
            result["changed"] = changed
        if warnings:
            result["warnings"] = list(warnings)
        if errors:
            result["errors"] = list(errors)
        if rc is not None:
            result["rc"] = rc
        if context:
            result["context"] = _json_safe(context)
        self.result = result

    def to_record(self) -> dict[str, object]:
        """Return the JSON document written for this operation."""
        return {
            "op_id": self.op_id,
            "ts": self.started_at,
            "command": self.command,
            "args": _json_safe(self.args),
            "target": _json_safe(self.target),
            "steps": self.steps,
            "result": self.result,
            "duration_ms": int((time.perf_counter() - self._started) * 1000),
        }


class StructuredLogger:
    """Append-only JSON-lines log of operations."""

    def __init__(
        self,
        log_dir: Path,
        *,
        level: int = logging.INFO,
        mirror_to_file: bool = False,
    ) -> None:
        """Prepare ``log_dir``; disable logging when it is not writable."""
        self.log_dir = log_dir
        self._operations_log_path = log_dir / "operations.jsonl"
        self._enabled = True
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._enabled = False
            LOGGER.debug("Structured logging disabled, cannot create %s: %s", log_dir, exc)
            return
        if mirror_to_file:
            self._attach_file_handler(level)

    @property
    def enabled(self) -> bool:
        """Return ``True`` while operation records are being written."""
        return self._enabled

    @contextmanager
    def operation(
        self,
        command: str,
        *,
        args: Mapping[str, object] | None = None,
        target: Mapping[str, object] | None = None,
    ) -> Iterator[OperationScope]:
        """Open a scope for *command* and write its record on exit."""
        scope = OperationScope(self, command, args, target)
        try:
            yield scope
        except BaseException as exc:
            if scope.result is None:
                code = getattr(exc, "exit_code", getattr(exc, "code", 1))
                if code in (0, None):
                    scope.success("Completed.")
                else:
                    scope.error(f"{exc.__class__.__name__}: {exc}")
            raise
        finally:
            if scope.result is None:
                scope.success("Completed.")
            self._write(scope.to_record())

    def _write(self, record: Mapping[str, object]) -> None:
        if not self._enabled:
            return
        line = json.dumps(record, sort_keys=False) + "\n"
        try:
            with self._operations_log_path.open("a", encoding="utf-8") as handle:
                handle.write(line)
            os.chmod(self._operations_log_path, 0o640)
        except OSError as exc:
            self._enabled = False
            LOGGER.debug("Structured logging disabled after write failure: %s", exc)

    def _attach_file_handler(self, level: int) -> None:
        path = self.log_dir / "odooprov.log"
        for handler in LOGGER.handlers:
            if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == path:
                return
        try:
            handler = logging.FileHandler(path, encoding="utf-8")
        except OSError as exc:
            LOGGER.debug("Cannot open %s: %s", path, exc)
            return
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler.setLevel(level)
        LOGGER.addHandler(handler)
        if LOGGER.level == logging.NOTSET or LOGGER.level > level:
            LOGGER.setLevel(level)


__all__ = ["OperationScope", "StructuredLogger"]
