"""Nginx provider for managing the Odoo reverse proxy site."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ..executor import CommandExecutor, CommandNotFoundError, CommandResult
from ..files import write_text_atomic

LOGGER = logging.getLogger(__name__)


class NginxError(RuntimeError):
    """Raised when nginx operations fail."""


@dataclass(slots=True)
class NginxInstallResult:
    """Outcome of installing an nginx site configuration."""

    changed: bool
    validation: CommandResult | None = None
    reload: CommandResult | None = None

    def summary(self, path: Path) -> str:
        """Return a one-line description for execution records."""
        if not self.changed:
            return f"{path} unchanged"
        return f"{path} written, configuration valid{', nginx reloaded' if self.reload else ''}"


@dataclass(slots=True)
class NginxProvider:
    """Install, validate and enable nginx site configurations."""

    executor: CommandExecutor
    sites_available: Path = Path("/etc/nginx/sites-available")
    sites_enabled: Path = Path("/etc/nginx/sites-enabled")
    nginx_bin: str = "nginx"

    def site_path(self, site: str) -> Path:
        """Return the path to the nginx site configuration file."""
        return self.sites_available / site

    def enabled_path(self, site: str) -> Path:
        """Return the path of the symlink in sites-enabled for *site*."""
        return self.sites_enabled / site

    def install_site(
        self,
        site: str,
        content: str,
        *,
        timeout: float | None = None,
        reload_on_change: bool = True,
    ) -> NginxInstallResult:
        """Write the configuration for *site*.

        When the on-disk configuration changes it is validated with
        ``nginx -t`` before nginx is reloaded. A validation failure restores
        the previous file (or removes the new one) and raises
        :class:`NginxError`, leaving nginx in a working state.
        """
        destination = self.site_path(site)
        previous: tuple[str, int] | None = None
        if destination.exists():
            previous = (
                destination.read_text(encoding="utf-8"),
                destination.stat().st_mode & 0o777,
            )

        changed = write_text_atomic(destination, content, mode=0o644)
        if not changed:
            return NginxInstallResult(changed=False)

        try:
            validation = self.test_config(timeout=timeout)
        except NginxError:
            if previous is None:
                destination.unlink(missing_ok=True)
            else:
                text, mode = previous
                write_text_atomic(destination, text, mode=mode)
            LOGGER.warning("Rolled back %s after failed validation.", destination)
            raise

        reload_result = None
        if reload_on_change and self.is_enabled(site):
            reload_result = self.reload(timeout=timeout)
        return NginxInstallResult(changed=True, validation=validation, reload=reload_result)

    def enable(self, site: str, *, timeout: float | None = None) -> NginxInstallResult:
        """Enable *site* via a sites-enabled symlink, validate and reload."""
        source = self.site_path(site)
        target = self.enabled_path(site)
        if self.is_enabled(site):
            return NginxInstallResult(changed=False)
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.exists() or target.is_symlink():
            target.unlink()
        target.symlink_to(source)
        try:
            validation = self.test_config(timeout=timeout)
        except NginxError:
            target.unlink(missing_ok=True)
            LOGGER.warning("Disabled %s after failed validation.", site)
            raise
        return NginxInstallResult(
            changed=True,
            validation=validation,
            reload=self.reload(timeout=timeout),
        )

    def is_enabled(self, site: str) -> bool:
        """Return True when the site is enabled via sites-enabled symlink."""
        target = self.enabled_path(site)
        if not target.is_symlink():
            return False
        try:
            return target.resolve(strict=True) == self.site_path(site).resolve(strict=True)
        except FileNotFoundError:
            return False

    def test_config(self, *, timeout: float | None = None) -> CommandResult:
        """Run ``nginx -t`` to validate the configuration."""
        return self._run_nginx(["-t"], timeout=timeout)

    def reload(self, *, timeout: float | None = None) -> CommandResult:
        """Reload nginx to apply configuration changes."""
        return self._run_nginx(["-s", "reload"], timeout=timeout)

    # ------------------------------------------------------------------
    def _run_nginx(self, args: Sequence[str], *, timeout: float | None) -> CommandResult:
        try:
            result = self.executor.run([self.nginx_bin, *args], timeout=timeout, check=False)
        except CommandNotFoundError as exc:
            raise NginxError(str(exc)) from exc
        if not result.ok:
            raise NginxError(
                f"{self.nginx_bin} {' '.join(args)} failed (exit {result.returncode}): {result.message}"
            )
        return result


__all__ = ["NginxError", "NginxInstallResult", "NginxProvider"]
