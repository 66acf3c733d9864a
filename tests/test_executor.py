"""Tests for the command executor."""
from __future__ import annotations

import subprocess
from typing import Any

import pytest

from odooprov import executor as executor_module
from odooprov.executor import (
    CommandExecutor,
    CommandFailedError,
    CommandNotFoundError,
    CommandTimeoutError,
)


class _Recorder:
    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls: list[tuple[list[str], dict[str, Any]]] = []

    def __call__(self, command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append((command, kwargs))
        return subprocess.CompletedProcess(command, self.returncode, self.stdout, self.stderr)


def test_run_captures_output(monkeypatch: pytest.MonkeyPatch) -> None:
    """Successful commands return their output and exit status."""
    recorder = _Recorder(stdout="ok\n")
    monkeypatch.setattr(executor_module.subprocess, "run", recorder)

    result = CommandExecutor(default_timeout=15.0).run(["nginx", "-t"])

    assert result.ok
    assert result.stdout == "ok\n"
    assert result.command == "nginx -t"
    command, kwargs = recorder.calls[0]
    assert command == ["nginx", "-t"]
    assert kwargs["timeout"] == 15.0
    assert kwargs["capture_output"] is True


def test_explicit_timeout_overrides_default(monkeypatch: pytest.MonkeyPatch) -> None:
    """Per-call timeouts win over the executor default."""
    recorder = _Recorder()
    monkeypatch.setattr(executor_module.subprocess, "run", recorder)

    CommandExecutor(default_timeout=15.0).run(["true"], timeout=3.0)

    assert recorder.calls[0][1]["timeout"] == 3.0


def test_nonzero_exit_raises_when_checked(monkeypatch: pytest.MonkeyPatch) -> None:
    """Checked commands raise with the external error text."""
    monkeypatch.setattr(
        executor_module.subprocess,
        "run",
        _Recorder(returncode=1, stderr="nginx: [emerg] unknown directive\n"),
    )

    with pytest.raises(CommandFailedError) as excinfo:
        CommandExecutor().run(["nginx", "-t"])

    assert excinfo.value.result.returncode == 1
    assert "unknown directive" in str(excinfo.value)


def test_nonzero_exit_returned_when_unchecked(monkeypatch: pytest.MonkeyPatch) -> None:
    """Unchecked commands hand the failing result back to the caller."""
    monkeypatch.setattr(executor_module.subprocess, "run", _Recorder(returncode=3, stdout="inactive\n"))

    result = CommandExecutor().run(["systemctl", "is-active", "odoo"], check=False)

    assert not result.ok
    assert result.message == "inactive"


def test_missing_executable(monkeypatch: pytest.MonkeyPatch) -> None:
    """A missing binary is reported as its own error."""

    def _missing(command: list[str], **kwargs: Any) -> None:
        raise FileNotFoundError(2, "No such file or directory", command[0])

    monkeypatch.setattr(executor_module.subprocess, "run", _missing)

    with pytest.raises(CommandNotFoundError, match="certbot"):
        CommandExecutor().run(["certbot", "--version"])


def test_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Expired commands raise CommandTimeoutError with the limit."""

    def _slow(command: list[str], **kwargs: Any) -> None:
        raise subprocess.TimeoutExpired(command, kwargs["timeout"])

    monkeypatch.setattr(executor_module.subprocess, "run", _slow)

    with pytest.raises(CommandTimeoutError) as excinfo:
        CommandExecutor().run(["git", "clone", "repo"], timeout=2.0)

    assert excinfo.value.timeout == 2.0
    assert "timed out after 2s" in str(excinfo.value)


def test_run_as_other_user_uses_sudo(monkeypatch: pytest.MonkeyPatch) -> None:
    """Commands for another account go through sudo with explicit variables."""
    recorder = _Recorder()
    monkeypatch.setattr(executor_module.subprocess, "run", recorder)

    CommandExecutor().run(
        ["pip", "install", "wheel"],
        user="odoo",
        env={"PIP_NO_CACHE_DIR": "1"},
    )

    command, kwargs = recorder.calls[0]
    assert command == ["sudo", "-u", "odoo", "-H", "env", "PIP_NO_CACHE_DIR=1", "pip", "install", "wheel"]
    assert kwargs["env"]["PIP_NO_CACHE_DIR"] == "1"


def test_input_is_forwarded(monkeypatch: pytest.MonkeyPatch) -> None:
    """Standard input reaches the subprocess."""
    recorder = _Recorder()
    monkeypatch.setattr(executor_module.subprocess, "run", recorder)

    CommandExecutor().run(["psql"], input="SELECT 1;\n")

    assert recorder.calls[0][1]["input"] == "SELECT 1;\n"


def test_empty_command_rejected() -> None:
    """An empty argv is a programming error."""
    with pytest.raises(ValueError):
        CommandExecutor().run([])
