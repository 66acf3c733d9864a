"""Generic command execution used by probes, actions and providers."""
from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

LOGGER = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """Base class for command execution failures."""


class CommandNotFoundError(CommandError):
    """Raised when the executable itself is not available."""


class CommandTimeoutError(CommandError):
    """Raised when a command exceeds its timeout."""

    def __init__(self, args: Sequence[str], timeout: float) -> None:
        """Record the command and the timeout it exceeded."""
        self.args_list = list(args)
        self.timeout = timeout
        super().__init__(f"{' '.join(args)} timed out after {timeout:g}s")


class CommandFailedError(CommandError):
    """Raised when a command exits non-zero and the caller asked for a check."""

    def __init__(self, result: CommandResult) -> None:
        """Keep the completed result so callers can inspect the output."""
        self.result = result
        super().__init__(
            f"{result.command} failed (exit {result.returncode}): {result.message}"
        )


@dataclass(slots=True, frozen=True)
class CommandResult:
    """Outcome of a finished command."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        """Return ``True`` when the command exited successfully."""
        return self.returncode == 0

    @property
    def command(self) -> str:
        """Return the command line as a single string."""
        return " ".join(self.args)

    @property
    def message(self) -> str:
        """Return the most useful output line block for error reporting."""
        return (self.stderr or "").strip() or (self.stdout or "").strip() or "no output"


@dataclass(slots=True)
class CommandExecutor:
    """Run external commands with captured output and optional timeouts.

    ``user`` runs the command as another account through ``sudo -u``; the
    original environment is kept and ``env`` entries are layered on top.
    """

    default_timeout: float | None = None
    sudo_bin: str = "sudo"
    env: Mapping[str, str] = field(default_factory=dict)

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: float | None = None,
        check: bool = True,
        user: str | None = None,
        input: str | None = None,  # noqa: A002 - mirrors subprocess.run
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Run *args* and return a :class:`CommandResult`."""
        command = self._build_command(args, user=user, env=env)
        effective_timeout = timeout if timeout is not None else self.default_timeout
        process_env = dict(os.environ)
        process_env.update(self.env)
        if env:
            process_env.update(env)

        LOGGER.debug("exec: %s (timeout=%s)", " ".join(command), effective_timeout)
        start = time.perf_counter()
        try:
            completed = subprocess.run(  # noqa: S603
                command,
                capture_output=True,
                text=True,
                check=False,
                input=input,
                timeout=effective_timeout,
                env=process_env,
            )
        except FileNotFoundError as exc:
            raise CommandNotFoundError(f"{command[0]} not found: {exc}") from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(command, float(exc.timeout)) from exc

        result = CommandResult(
            args=tuple(command),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        if check and not result.ok:
            raise CommandFailedError(result)
        return result

    def _build_command(
        self,
        args: Sequence[str],
        *,
        user: str | None,
        env: Mapping[str, str] | None,
    ) -> list[str]:
        if not args:
            raise ValueError("Cannot execute an empty command.")
        if user is None:
            return [str(item) for item in args]
        # sudo resets the environment, so explicit variables travel on the command line.
        prefix = [self.sudo_bin, "-u", user, "-H"]
        if env:
            prefix.append("env")
            prefix.extend(f"{key}={value}" for key, value in env.items())
        return [*prefix, *(str(item) for item in args)]


__all__ = [
    "CommandError",
    "CommandExecutor",
    "CommandFailedError",
    "CommandNotFoundError",
    "CommandResult",
    "CommandTimeoutError",
]
