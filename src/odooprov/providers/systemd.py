"""Systemd provider for the Odoo service unit."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..executor import CommandExecutor, CommandNotFoundError, CommandResult
from ..files import write_text_atomic


class SystemdError(RuntimeError):
    """Raised when systemd operations fail."""


@dataclass(slots=True)
class SystemdProvider:
    """Install and manage systemd service units."""

    executor: CommandExecutor
    unit_dir: Path = Path("/etc/systemd/system")
    systemctl_bin: str = "systemctl"

    def unit_name(self, name: str) -> str:
        """Return the systemd unit name for *name*."""
        return name if name.endswith((".service", ".timer")) else f"{name}.service"

    def unit_path(self, name: str) -> Path:
        """Return the full path for the unit file."""
        return self.unit_dir / self.unit_name(name)

    def install_unit(self, name: str, content: str, *, timeout: float | None = None) -> bool:
        """Write the unit file and reload the daemon when it changed."""
        changed = write_text_atomic(self.unit_path(name), content, mode=0o644)
        if changed:
            self.daemon_reload(timeout=timeout)
        return changed

    def daemon_reload(self, *, timeout: float | None = None) -> CommandResult:
        """Make systemd pick up changed unit files."""
        return self._systemctl("daemon-reload", timeout=timeout)

    def enable(self, name: str, *, now: bool = True, timeout: float | None = None) -> CommandResult:
        """Enable (and by default start) the unit."""
        args = ["enable", "--now"] if now else ["enable"]
        return self._systemctl(*args, self.unit_name(name), timeout=timeout)

    def try_restart(self, name: str, *, timeout: float | None = None) -> CommandResult:
        """Restart the unit only if it is already running."""
        return self._systemctl("try-restart", self.unit_name(name), timeout=timeout)

    # ------------------------------------------------------------------
    def _systemctl(
        self,
        *args: str,
        timeout: float | None = None,
    ) -> CommandResult:
        command = [self.systemctl_bin, *args]
        try:
            result = self.executor.run(command, timeout=timeout, check=False)
        except CommandNotFoundError as exc:
            raise SystemdError(str(exc)) from exc
        if not result.ok:
            raise SystemdError(
                f"{self.systemctl_bin} {' '.join(args)} failed (exit {result.returncode}): "
                f"{result.message}"
            )
        return result


__all__ = ["SystemdError", "SystemdProvider"]
